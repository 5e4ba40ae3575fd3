"""Unit tests for path_mapper module."""

import pytest

from hopscp.exceptions import ConfigurationError
from hopscp.modules.file_transfer import InvalidPathError, PathMapper


class TestDestinationFor:
    """Test single path mapping."""

    def test_flattens_directory_components(self):
        """Should keep only the final path component"""
        assert PathMapper.destination_for("/a/b/x.txt", "/out") == "/out/x.txt"

    def test_relative_source(self):
        """Should map relative sources the same way"""
        assert PathMapper.destination_for("y.txt", "uploads") == "uploads/y.txt"

    def test_destination_with_trailing_slash(self):
        """Should not double the separator"""
        assert PathMapper.destination_for("/c/y.txt", "/out/") == "/out/y.txt"

    def test_dot_destination(self):
        """Current directory destination"""
        assert PathMapper.destination_for("/var/log/app.log", ".") == "./app.log"

    def test_preserves_spaces_in_filename(self):
        """Filenames are used as given"""
        assert PathMapper.destination_for("/a/my file.txt", "/out") == "/out/my file.txt"


class TestValidateSource:
    """Test source path validation."""

    def test_accepts_file_path(self):
        """Should return valid path unchanged"""
        assert PathMapper.validate_source("/a/b/x.txt") == "/a/b/x.txt"

    @pytest.mark.parametrize("path", ["", "   "])
    def test_rejects_empty(self, path):
        """Should reject empty path"""
        with pytest.raises(InvalidPathError, match="Path cannot be empty"):
            PathMapper.validate_source(path)

    def test_rejects_null_bytes(self):
        """Should reject path with null bytes"""
        with pytest.raises(InvalidPathError, match="null bytes"):
            PathMapper.validate_source("/a/x\x00.txt")

    def test_rejects_directory_path(self):
        """Should reject path without a final file component"""
        with pytest.raises(InvalidPathError, match="does not name a file"):
            PathMapper.validate_source("/a/b/")

    def test_error_is_configuration_error(self):
        """Invalid paths are configuration problems"""
        with pytest.raises(ConfigurationError):
            PathMapper.validate_source("/a/b/")


class TestMapSources:
    """Test mapping of the full source list."""

    def test_maps_in_order(self):
        """Should map every source and keep order"""
        assert PathMapper.map_sources(["/a/b/x.txt", "/c/y.txt"], "/out") == [
            ("/a/b/x.txt", "/out/x.txt"),
            ("/c/y.txt", "/out/y.txt"),
        ]

    def test_same_basename_maps_to_same_destination(self):
        """Later files with the same name overwrite earlier ones"""
        pairs = PathMapper.map_sources(["/a/x.txt", "/b/x.txt"], "/out")
        assert [dst for _, dst in pairs] == ["/out/x.txt", "/out/x.txt"]

    def test_validates_every_source_before_returning(self):
        """One bad source rejects the whole list"""
        with pytest.raises(InvalidPathError):
            PathMapper.map_sources(["/a/x.txt", "/b/"], "/out")
