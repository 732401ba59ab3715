"""Working-directory scoped filesystem abstraction.

This module provides a filesystem handle that carries its own working
directory, so relative paths never depend on the process-wide one, over a
pluggable storage backend (host disk or memory).

Example:
    >>> from scopedfs.filesystem import ScopedFileSystem
    >>> fs = ScopedFileSystem.in_memory("/home")
    >>> fs.write_file("me/notes.txt", b"hi")
    >>> fs.read_file("/home/me/notes.txt")
    b'hi'
"""

from .core import ScopedFileSystem, resolves_paths
from .local import LocalFileStore
from .memory import MemoryFile, MemoryFileStore
from .paths import (
    POSIX,
    WINDOWS,
    PathFlavor,
    clean,
    get_flavor,
    is_abs,
    native_flavor,
    resolve,
    split_list,
    volume_root,
)
from .store import FileInfo, FileStore

__all__ = [
    "ScopedFileSystem",
    "resolves_paths",
    "FileStore",
    "FileInfo",
    "LocalFileStore",
    "MemoryFileStore",
    "MemoryFile",
    "PathFlavor",
    "POSIX",
    "WINDOWS",
    "clean",
    "get_flavor",
    "is_abs",
    "native_flavor",
    "resolve",
    "split_list",
    "volume_root",
]
