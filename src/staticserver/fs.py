"""
Filesystem queries used by the static file handler.

The handler never calls ``os`` directly; it asks a FileSystem whether a
path exists and whether it is a directory, and for the metadata of a
file it is about to serve. LocalFileSystem answers from the real disk
relative to the process working directory. Tests substitute their own
implementation to observe or fake the lookups.
"""

import logging
import os
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMetadata:
    """
    What the handler knows about a file it is about to serve.

    Attributes:
        path:              Path as queried
        size:              Size in bytes
        modification_time: Last modification, timezone-aware UTC
        mode:              Raw st_mode bits
    """

    path: str
    size: int
    modification_time: datetime
    mode: int = 0

    @property
    def is_directory(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileMetadata":
        return cls(
            path=path,
            size=st.st_size,
            modification_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            mode=st.st_mode,
        )


class FileSystem(ABC):
    """Existence and metadata queries, the only disk access the handler makes."""

    @abstractmethod
    def exists(self, path: str) -> Tuple[bool, bool]:
        """
        Check a path.

        Returns:
            (exists, is_directory). A missing path is (False, False).
        """

    @abstractmethod
    def get_metadata(self, path: str) -> FileMetadata:
        """
        Fetch metadata for an existing path.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: For any other failure reading the metadata.
        """


class LocalFileSystem(FileSystem):
    """
    The real filesystem, following symlinks like ``os.stat``.

    Relative paths resolve against the process working directory at
    the time of the call.
    """

    def exists(self, path: str) -> Tuple[bool, bool]:
        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False, False
        except (OSError, ValueError) as e:
            # Unreadable parent, loop in symlinks, embedded NUL byte...
            logger.debug(f"stat failed for {path!r}: {e}")
            return False, False
        return True, stat.S_ISDIR(st.st_mode)

    def get_metadata(self, path: str) -> FileMetadata:
        try:
            st = os.stat(path)
        except ValueError as e:
            raise OSError(f"Invalid path {path!r}: {e}") from e
        return FileMetadata.from_stat(path, st)
