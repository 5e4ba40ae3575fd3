"""Source to destination path mapping."""

import posixpath

from .exceptions import InvalidPathError


class PathMapper:
    """Map source paths into a flat destination directory.

    Directory components of the source are discarded: every file lands
    directly in the destination directory.
    """

    @classmethod
    def validate_source(cls, source: str) -> str:
        """Validate a source path names a file.

        Raises:
            InvalidPathError: Path is empty, contains null bytes or ends in a separator
        """
        if not source or not source.strip():
            raise InvalidPathError("Path cannot be empty")

        if "\x00" in source:
            raise InvalidPathError("Path contains null bytes")

        if not posixpath.basename(source):
            raise InvalidPathError(f"Path does not name a file: {source}")

        return source

    @classmethod
    def destination_for(cls, source: str, destination_dir: str) -> str:
        """Destination path for one source.

        Examples:
            ("/a/b/x.txt", "/out") -> "/out/x.txt"
            ("y.txt", "uploads") -> "uploads/y.txt"
        """
        filename = posixpath.basename(cls.validate_source(source))
        return posixpath.join(destination_dir, filename)

    @classmethod
    def map_sources(
        cls, sources: list[str] | tuple[str, ...], destination_dir: str
    ) -> list[tuple[str, str]]:
        """(source, destination) pairs in source order."""
        return [(source, cls.destination_for(source, destination_dir)) for source in sources]
