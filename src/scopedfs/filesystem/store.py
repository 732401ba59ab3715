"""
Abstract storage backend interface.

A FileStore performs the actual storage operations. It only ever receives
absolute, cleaned paths; working-directory handling lives in
:class:`scopedfs.filesystem.core.ScopedFileSystem`. Failures are reported with
the builtin ``OSError`` family so callers can handle real-disk and in-memory
backends the same way.
"""

from __future__ import annotations

import os
import stat as stat_module
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import IO, List

# Any of the owner, group or other execute bits
EXECUTE_BITS = stat_module.S_IXUSR | stat_module.S_IXGRP | stat_module.S_IXOTH

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FileInfo:
    """Metadata describing a single file or directory.

    Attributes:
        name: Base name of the entry
        path: Absolute path of the entry in its store
        size: Size in bytes
        mode: stat-style mode (type bits combined with permission bits)
        mod_time: Last modification time (timezone-aware)
        uid: Owner user id, -1 when unknown
        gid: Owner group id, -1 when unknown
    """

    name: str
    path: str
    size: int
    mode: int
    mod_time: datetime
    uid: int = -1
    gid: int = -1

    @property
    def is_dir(self) -> bool:
        return stat_module.S_ISDIR(self.mode)

    @property
    def perm(self) -> int:
        """Permission bits only."""
        return stat_module.S_IMODE(self.mode)

    @property
    def is_executable(self) -> bool:
        """True when any execute bit is set.

        This does not take the calling user's identity into account.
        """
        return self.perm & EXECUTE_BITS != 0

    @classmethod
    def from_stat(cls, path: str, result: os.stat_result) -> "FileInfo":
        """Build a FileInfo from an ``os.stat`` result."""
        return cls(
            name=os.path.basename(path) or path,
            path=path,
            size=result.st_size,
            mode=result.st_mode,
            mod_time=EPOCH + timedelta(microseconds=result.st_mtime_ns // 1000),
            uid=getattr(result, "st_uid", -1),
            gid=getattr(result, "st_gid", -1),
        )


class FileStore(ABC):
    """
    Abstract base class for storage backends.

    Every method receives absolute, cleaned paths and raises ``OSError``
    subclasses on failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier of this backend."""
        pass

    @abstractmethod
    def create(self, path: str) -> IO[bytes]:
        """
        Create or truncate the named file and open it for reading and writing.

        Args:
            path: Absolute file path

        Returns:
            A binary file object
        """
        pass

    @abstractmethod
    def open(self, path: str) -> IO[bytes]:
        """
        Open the named file for reading.

        Args:
            path: Absolute file path

        Returns:
            A read-only binary file object
        """
        pass

    @abstractmethod
    def open_file(self, path: str, flags: int, mode: int = 0o666) -> IO[bytes]:
        """
        Generalized open call.

        Args:
            path: Absolute file path
            flags: Combination of ``os.O_*`` flags
            mode: Permission bits used if the file is created

        Returns:
            A binary file object
        """
        pass

    @abstractmethod
    def mkdir(self, path: str, mode: int = 0o777) -> None:
        """Create a single directory."""
        pass

    @abstractmethod
    def makedirs(self, path: str, mode: int = 0o777) -> None:
        """
        Create a directory along with any missing parents.

        Does nothing if ``path`` is already a directory.
        """
        pass

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""
        pass

    @abstractmethod
    def remove_all(self, path: str) -> None:
        """
        Remove ``path`` and everything it contains.

        Does nothing if ``path`` does not exist.
        """
        pass

    @abstractmethod
    def rename(self, old_path: str, new_path: str) -> None:
        """Move ``old_path`` to ``new_path``, replacing a non-directory target."""
        pass

    @abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Return metadata for ``path``."""
        pass

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of ``path``."""
        pass

    @abstractmethod
    def chown(self, path: str, uid: int, gid: int) -> None:
        """Change the owner of ``path``."""
        pass

    @abstractmethod
    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        """Change the access and modification times of ``path``."""
        pass

    @abstractmethod
    def list_dir(self, path: str) -> List[FileInfo]:
        """
        List the entries of a directory.

        Args:
            path: Absolute directory path

        Returns:
            Metadata for each entry, sorted by name
        """
        pass
