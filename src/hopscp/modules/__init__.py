"""hopscp modules - self-contained bricks

Each module is a self-contained component with a clear contract:
- File Transfer: Map sources to destinations and copy them in order
- Progress Display: Stage and per-file console output
"""
