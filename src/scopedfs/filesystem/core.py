"""Filesystem handle with its own working directory.

Every path handed to a :class:`ScopedFileSystem` is resolved against the
handle's working directory before it reaches the underlying
:class:`~scopedfs.filesystem.store.FileStore`. The process working directory is
only consulted once, to anchor a relative base directory at construction time.
"""

from __future__ import annotations

import errno
import functools
import inspect
import logging
import os
import secrets
import tempfile
from datetime import datetime
from typing import IO, Any, Callable, Dict, List, Optional, Tuple

from . import paths
from .local import LocalFileStore
from .memory import MemoryFileStore
from .paths import PathFlavor
from .store import FileInfo, FileStore

logger = logging.getLogger(__name__)

# Attempts made to find an unused temp name before giving up
TEMP_NAME_ATTEMPTS = 10000


def resolves_paths(*arg_names: str) -> Callable:
    """
    Decorator resolving path arguments against the handle's working directory.

    The named arguments are replaced by their resolved, absolute form using the
    working directory current at call time, then the wrapped method runs with
    everything else passed through untouched.

    Args:
        *arg_names: Names of the parameters holding paths

    Usage:
        @resolves_paths("old_path", "new_path")
        def rename(self, old_path, new_path):
            return self._store.rename(old_path, new_path)
    """
    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            bound = signature.bind(self, *args, **kwargs)
            for arg_name in arg_names:
                bound.arguments[arg_name] = self.resolve(bound.arguments[arg_name])
            return func(*bound.args, **bound.kwargs)
        return wrapper
    return decorator


def _temp_name(pattern: str) -> str:
    """Build a candidate temp name, replacing the last '*' when present."""
    random_part = f"{secrets.randbelow(1_000_000_000):09d}"
    prefix, star, suffix = pattern.rpartition("*")
    if not star:
        return pattern + random_part
    return prefix + random_part + suffix


def _split_extensions(path_ext: str, flavor: PathFlavor) -> List[str]:
    items = path_ext.replace(flavor.pathsep, ";").split(";")
    return [item.lower() for item in items if item]


def _match_rank(name: str, command: str, extensions: List[str]) -> Optional[int]:
    """
    Rank how ``name`` matches ``command``.

    Returns:
        -1 for a bare-name match, the index of the matching extension for a
        suffixed match, or None when the name does not match
    """
    if name == command:
        return -1
    if not extensions:
        return None
    # extension lists follow Windows rules, so compare case-insensitively
    lowered = name.lower()
    wanted = command.lower()
    if lowered == wanted:
        return -1
    for index, ext in enumerate(extensions):
        if lowered == wanted + ext:
            return index
    return None


class ScopedFileSystem:
    """
    Filesystem handle that resolves relative paths against its own working
    directory instead of the process-wide one.

    Operations are delegated to a FileStore once their paths are resolved;
    results and errors come back from the store unmodified.

    Example:
        >>> fs = ScopedFileSystem.in_memory("/home")
        >>> fs.chdir("me")
        >>> fs.resolve("notes.txt")
        '/home/me/notes.txt'
        >>> fs.resolve("../you")
        '/home/you'
    """

    def __init__(
        self,
        store: FileStore,
        base_directory: str = "",
        flavor: Optional[PathFlavor] = None,
        temp_directory: Optional[str] = None,
    ) -> None:
        """
        Initialize the handle.

        Args:
            store: Backend performing the actual storage operations
            base_directory: Initial working directory. A relative value is
                anchored at the process working directory (native flavor) or at
                the flavor's default root (simulated flavors), once.
            flavor: Path conventions (default: the native ones)
            temp_directory: Parent used by temp_file/temp_dir when no directory
                is given (default: tempfile.gettempdir())
        """
        self._store = store
        self._flavor = flavor or paths.native_flavor()
        self._cwd = self._bootstrap(base_directory)
        self._temp_root = (
            temp_directory if temp_directory is not None else tempfile.gettempdir()
        )

    @classmethod
    def in_memory(
        cls,
        base_directory: str = "/",
        flavor: Optional[PathFlavor] = None,
        umask: int = 0o022,
        temp_directory: Optional[str] = None,
    ) -> "ScopedFileSystem":
        """
        Create a handle over a fresh MemoryFileStore.

        Args:
            base_directory: Initial working directory
            flavor: Path conventions (default: POSIX, independent of the host)
            umask: Permission bits cleared from new entries
            temp_directory: Parent for temp entries (default: '<root>tmp')

        Returns:
            A ScopedFileSystem backed by memory
        """
        flavor = flavor or paths.POSIX
        if temp_directory is None:
            temp_directory = flavor.module.join(flavor.default_root, "tmp")
        return cls(
            MemoryFileStore(flavor=flavor, umask=umask),
            base_directory=base_directory,
            flavor=flavor,
            temp_directory=temp_directory,
        )

    @classmethod
    def local(
        cls,
        base_directory: str = "",
        temp_directory: Optional[str] = None,
    ) -> "ScopedFileSystem":
        """
        Create a handle over the host filesystem.

        Args:
            base_directory: Initial working directory (default: process cwd)
            temp_directory: Parent for temp entries (default: system temp dir)

        Returns:
            A ScopedFileSystem backed by LocalFileStore
        """
        return cls(
            LocalFileStore(),
            base_directory=base_directory,
            temp_directory=temp_directory,
        )

    def _bootstrap(self, base_directory: str) -> str:
        if self._flavor.module is os.path:
            anchor = os.path.abspath(base_directory)
        else:
            anchor = paths.resolve(base_directory, self._flavor.default_root, self._flavor)
        return paths.clean(anchor, self._flavor)

    def _log_extra(self) -> Dict[str, Any]:
        return {"cwd": self._cwd}

    # -------------------------------------------------------------------------
    # Working directory
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        """The name of this filesystem type."""
        return "ScopedFileSystem"

    @property
    def store(self) -> FileStore:
        return self._store

    @property
    def flavor(self) -> PathFlavor:
        return self._flavor

    def getcwd(self) -> str:
        """Return the absolute working directory of this handle."""
        return self._cwd

    def chdir(self, path: str) -> None:
        """
        Change the working directory.

        The new directory is resolved against the current one. Its existence
        is not checked; operations under a missing directory fail later in the
        store.
        """
        new_cwd = self.resolve(path)
        logger.debug(f"chdir {path!r} -> {new_cwd}", extra=self._log_extra())
        self._cwd = new_cwd

    def resolve(self, path: str) -> str:
        """
        Return an absolute representation of ``path``.

        Relative paths are joined with the working directory; the result is
        always cleaned. An empty path resolves to the working directory.
        """
        return paths.resolve(path, self._cwd, self._flavor)

    # -------------------------------------------------------------------------
    # Store operations
    # -------------------------------------------------------------------------

    @resolves_paths("path")
    def create(self, path: str) -> IO[bytes]:
        """Create or truncate the named file, opened for reading and writing."""
        return self._store.create(path)

    @resolves_paths("path")
    def open(self, path: str) -> IO[bytes]:
        """Open the named file for reading."""
        return self._store.open(path)

    @resolves_paths("path")
    def open_file(self, path: str, flags: int, mode: int = 0o666) -> IO[bytes]:
        """
        Generalized open call.

        Opens the named file with the given ``os.O_*`` flags. If the file does
        not exist and ``os.O_CREAT`` is passed, it is created with ``mode``.
        """
        return self._store.open_file(path, flags, mode)

    @resolves_paths("path")
    def mkdir(self, path: str, mode: int = 0o777) -> None:
        return self._store.mkdir(path, mode)

    @resolves_paths("path")
    def makedirs(self, path: str, mode: int = 0o777) -> None:
        """Create a directory along with any necessary parents."""
        return self._store.makedirs(path, mode)

    @resolves_paths("path")
    def remove(self, path: str) -> None:
        """Remove the named file or (empty) directory."""
        return self._store.remove(path)

    @resolves_paths("path")
    def remove_all(self, path: str) -> None:
        """Remove path and any children it contains."""
        return self._store.remove_all(path)

    @resolves_paths("old_path", "new_path")
    def rename(self, old_path: str, new_path: str) -> None:
        return self._store.rename(old_path, new_path)

    @resolves_paths("path")
    def stat(self, path: str) -> FileInfo:
        return self._store.stat(path)

    @resolves_paths("path")
    def chmod(self, path: str, mode: int) -> None:
        return self._store.chmod(path, mode)

    @resolves_paths("path")
    def chown(self, path: str, uid: int, gid: int) -> None:
        return self._store.chown(path, uid, gid)

    @resolves_paths("path")
    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        """Change the access and modification times of the named file."""
        return self._store.chtimes(path, atime, mtime)

    @resolves_paths("path")
    def list_dir(self, path: str) -> List[FileInfo]:
        """List a directory's entries, sorted by name."""
        return self._store.list_dir(path)

    # -------------------------------------------------------------------------
    # Convenience helpers
    # -------------------------------------------------------------------------

    def read_file(self, path: str) -> bytes:
        with self.open(path) as f:
            return f.read()

    def write_file(self, path: str, data: bytes, mode: int = 0o644) -> None:
        """Write ``data`` to the named file, creating or truncating it."""
        with self.open_file(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode) as f:
            f.write(data)

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        return True

    def is_dir(self, path: str) -> bool:
        return self.stat(path).is_dir

    def temp_file(self, directory: str = "", pattern: str = "") -> IO[bytes]:
        """
        Create a new temp file opened for reading and writing.

        Args:
            directory: Parent directory; empty means the handle's temp root
            pattern: Name prefix, or a template whose last '*' is replaced by
                the random part

        Returns:
            The open file; its ``name`` is the absolute path
        """
        parent = self.resolve(directory or self._temp_root)
        last_error: Optional[FileExistsError] = None
        for _ in range(TEMP_NAME_ATTEMPTS):
            candidate = self._flavor.module.join(parent, _temp_name(pattern))
            try:
                return self.open_file(candidate, os.O_RDWR | os.O_CREAT | os.O_EXCL, 0o600)
            except FileExistsError as exc:
                last_error = exc
        raise last_error or FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), parent)

    def temp_dir(self, directory: str = "", pattern: str = "") -> str:
        """
        Create a new temp directory and return its absolute path.

        Args:
            directory: Parent directory; empty means the handle's temp root
            pattern: Name prefix, or a template whose last '*' is replaced by
                the random part
        """
        parent = self.resolve(directory or self._temp_root)
        last_error: Optional[FileExistsError] = None
        for _ in range(TEMP_NAME_ATTEMPTS):
            candidate = self._flavor.module.join(parent, _temp_name(pattern))
            try:
                self.mkdir(candidate, 0o700)
            except FileExistsError as exc:
                last_error = exc
                continue
            return candidate
        raise last_error or FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), parent)

    # -------------------------------------------------------------------------
    # Executable lookup
    # -------------------------------------------------------------------------

    def lookpath(
        self,
        command: str,
        search_path: str,
        path_ext: str = "",
    ) -> Tuple[str, bool]:
        """
        Search the directories in ``search_path`` for an executable ``command``.

        This is a simplified executable search performed through this handle's
        store. Directories are tried in order and listed through the store; a
        directory that cannot be listed is skipped. An entry matches when its
        name equals ``command``, or, if ``path_ext`` lists extensions (separated
        by ';' or the list separator), equals ``command`` plus one of them,
        compared case-insensitively. A match counts only if any execute bit is
        set; the caller's actual permissions are not evaluated.

        Within a directory, a bare-name match is returned when it is listed
        before every suffixed match. Otherwise the suffixed match whose
        extension comes first in ``path_ext`` wins.

        Args:
            command: Name of the command to find
            search_path: PATH-style list of directories
            path_ext: Optional PATHEXT-style list of extensions

        Returns:
            Tuple of (resolved path, True) for the first executable match, or
            ("", False) when there is none
        """
        extensions = _split_extensions(path_ext, self._flavor)

        for directory in paths.split_list(search_path, self._flavor):
            if not directory:
                continue
            try:
                entries = self.list_dir(directory)
            except OSError as exc:
                logger.debug(
                    f"lookpath: skipping {directory!r}: {exc}", extra=self._log_extra()
                )
                continue

            chosen: Optional[FileInfo] = None
            chosen_rank: Optional[int] = None
            for entry in entries:
                if entry.is_dir or not entry.is_executable:
                    continue
                rank = _match_rank(entry.name, command, extensions)
                if rank is None:
                    continue
                if rank < 0:
                    # a bare name only wins ahead of every suffixed match
                    if chosen is None:
                        chosen = entry
                        break
                    continue
                if chosen_rank is None or rank < chosen_rank:
                    chosen, chosen_rank = entry, rank

            if chosen is not None:
                found = self._flavor.module.join(self.resolve(directory), chosen.name)
                logger.debug(
                    f"lookpath: {command!r} found at {found}", extra=self._log_extra()
                )
                return found, True

        return "", False

    def __repr__(self) -> str:
        """String representation."""
        return f"ScopedFileSystem(cwd={self._cwd!r}, store={self._store.name})"
