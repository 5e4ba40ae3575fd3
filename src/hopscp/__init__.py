"""hopscp - copy files over SSH, optionally through a jump host

Philosophy:
- One shot: connect, copy, exit
- Host keys pinned by fingerprint, never trusted on first use
- Every failure is fatal and names the phase that failed
- A hard deadline covers the whole run

Connects to a target host (directly or tunneled through a proxy), then
uploads local files to, or downloads remote files from, a destination
directory.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
