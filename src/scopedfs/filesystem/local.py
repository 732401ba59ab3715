"""FileStore backed by the host operating system."""

from __future__ import annotations

import errno
import os
import shutil
from datetime import datetime
from typing import IO, List

from .store import EPOCH, FileInfo, FileStore


def _open_mode(flags: int) -> str:
    """Pick the ``open()`` mode matching a set of ``os.O_*`` flags."""
    if flags & os.O_RDWR:
        mode = "a+b" if flags & os.O_APPEND else "r+b"
    elif flags & os.O_WRONLY:
        mode = "ab" if flags & os.O_APPEND else "wb"
    else:
        mode = "rb"
    return mode


def _timestamp_ns(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    delta = moment - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


class LocalFileStore(FileStore):
    """
    FileStore that performs every operation on the host filesystem.

    Paths are expected to be absolute; this store never consults the process
    working directory.
    """

    @property
    def name(self) -> str:
        return "LocalFileStore"

    def create(self, path: str) -> IO[bytes]:
        return open(path, "w+b")

    def open(self, path: str) -> IO[bytes]:
        return open(path, "rb")

    def open_file(self, path: str, flags: int, mode: int = 0o666) -> IO[bytes]:
        def opener(file: str, _flags: int) -> int:
            # O_BINARY only exists on Windows
            return os.open(file, flags | getattr(os, "O_BINARY", 0), mode)

        # opening by path keeps it as the file object's name
        return open(path, _open_mode(flags), opener=opener)

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        os.mkdir(path, mode)

    def makedirs(self, path: str, mode: int = 0o777) -> None:
        os.makedirs(path, mode, exist_ok=True)

    def remove(self, path: str) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            os.rmdir(path)
        else:
            os.remove(path)

    def remove_all(self, path: str) -> None:
        if not os.path.lexists(path):
            return
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)

    def rename(self, old_path: str, new_path: str) -> None:
        os.replace(old_path, new_path)

    def stat(self, path: str) -> FileInfo:
        return FileInfo.from_stat(path, os.stat(path))

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def chown(self, path: str, uid: int, gid: int) -> None:
        chown = getattr(os, "chown", None)
        if chown is None:
            raise OSError(errno.ENOSYS, "chown is not supported on this platform", path)
        chown(path, uid, gid)

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        os.utime(path, ns=(_timestamp_ns(atime), _timestamp_ns(mtime)))

    def list_dir(self, path: str) -> List[FileInfo]:
        infos = []
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    result = entry.stat()
                except FileNotFoundError:
                    # dangling symlink
                    result = entry.stat(follow_symlinks=False)
                infos.append(FileInfo.from_stat(entry.path, result))
        return sorted(infos, key=lambda info: info.name)
