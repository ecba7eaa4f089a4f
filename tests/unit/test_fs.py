"""
Unit tests for filesystem queries.
"""

from datetime import datetime, timezone

import pytest

from conftest import FIXED_MTIME

from staticserver import FileMetadata, LocalFileSystem


class TestLocalFileSystem:
    """Tests for LocalFileSystem."""

    def test_regular_file(self, site_dir):
        assert LocalFileSystem().exists("./public/app.js") == (True, False)

    def test_directory(self, site_dir):
        assert LocalFileSystem().exists("./public/docs") == (True, True)

    def test_missing(self, site_dir):
        assert LocalFileSystem().exists("./public/nope.txt") == (False, False)

    def test_file_used_as_directory(self, site_dir):
        """Test that a path through a regular file counts as missing."""
        assert LocalFileSystem().exists("./public/app.js/inner") == (False, False)

    def test_metadata(self, site_dir):
        metadata = LocalFileSystem().get_metadata("./public/app.js")

        assert metadata.path == "./public/app.js"
        assert metadata.size == len("console.log('app');")
        assert metadata.modification_time == datetime.fromtimestamp(FIXED_MTIME, tz=timezone.utc)
        assert metadata.modification_time.tzinfo is not None
        assert not metadata.is_directory

    def test_metadata_for_directory(self, site_dir):
        assert LocalFileSystem().get_metadata("./public/docs").is_directory

    def test_metadata_missing_raises(self, site_dir):
        with pytest.raises(FileNotFoundError):
            LocalFileSystem().get_metadata("./public/nope.txt")

    def test_nul_byte_is_missing(self, site_dir):
        assert LocalFileSystem().exists("./public/a\x00b") == (False, False)

    def test_metadata_nul_byte_raises_os_error(self, site_dir):
        """Test that an invalid path surfaces as OSError, not ValueError."""
        with pytest.raises(OSError):
            LocalFileSystem().get_metadata("./public/a\x00b")


class TestFileMetadata:
    def test_default_mode_is_not_directory(self):
        metadata = FileMetadata("x", 1, datetime.now(timezone.utc))

        assert not metadata.is_directory
