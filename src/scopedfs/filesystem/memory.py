"""In-memory FileStore.

Keeps every file and directory in a dictionary keyed by absolute path, which
makes it suitable for sandboxing and for tests that must not touch the disk.
Like a mem-mapped filesystem, missing parent directories are created
implicitly when something is created beneath them.
"""

from __future__ import annotations

import errno
import io
import os
import stat as stat_module
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .paths import POSIX, PathFlavor, clean
from .store import FileInfo, FileStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _os_error(cls: type, code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


@dataclass
class _MemoryNode:
    mode: int
    data: bytes = b""
    uid: int = -1
    gid: int = -1
    atime: datetime = field(default_factory=_now)
    mtime: datetime = field(default_factory=_now)

    @property
    def is_dir(self) -> bool:
        return stat_module.S_ISDIR(self.mode)


class MemoryFile(io.BytesIO):
    """File object returned by :class:`MemoryFileStore`.

    Content is buffered in memory and written back to the store on
    ``flush()`` and ``close()``.

    Attributes:
        name: Absolute path of the file in its store
    """

    def __init__(
        self,
        store: "MemoryFileStore",
        path: str,
        data: bytes,
        readable: bool = True,
        writable: bool = False,
        append: bool = False,
    ):
        super().__init__(data)
        self.name = path
        self._store = store
        self._readable = readable
        self._writable = writable
        self._append = append
        self._dirty = False

    def readable(self) -> bool:
        return super().readable() and self._readable

    def writable(self) -> bool:
        return super().writable() and self._writable

    def _check_readable(self) -> None:
        if not self._readable:
            raise io.UnsupportedOperation("read")

    def _check_writable(self) -> None:
        if not self._writable:
            raise io.UnsupportedOperation("write")

    def read(self, size: Optional[int] = -1) -> bytes:
        self._check_readable()
        return super().read(size)

    def read1(self, size: int = -1) -> bytes:
        self._check_readable()
        return super().read1(size)

    def readinto(self, buffer) -> int:
        self._check_readable()
        return super().readinto(buffer)

    def readline(self, size: Optional[int] = -1) -> bytes:
        self._check_readable()
        return super().readline(size)

    def readlines(self, hint: Optional[int] = -1) -> List[bytes]:
        self._check_readable()
        return super().readlines(hint)

    def write(self, data) -> int:
        self._check_writable()
        if self._append:
            self.seek(0, io.SEEK_END)
        written = super().write(data)
        self._dirty = True
        return written

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    def truncate(self, size: Optional[int] = None) -> int:
        self._check_writable()
        result = super().truncate(size)
        self._dirty = True
        return result

    def flush(self) -> None:
        super().flush()
        if self._dirty:
            self._store._commit(self.name, self.getvalue())
            self._dirty = False

    def close(self) -> None:
        if not self.closed:
            self.flush()
        super().close()


class MemoryFileStore(FileStore):
    """
    FileStore holding all entries in memory.

    Example:
        >>> store = MemoryFileStore()
        >>> with store.create("/home/notes.txt") as f:
        ...     _ = f.write(b"hello")
        >>> [info.name for info in store.list_dir("/home")]
        ['notes.txt']
    """

    def __init__(self, flavor: PathFlavor = POSIX, umask: int = 0o022) -> None:
        """
        Initialize an empty store containing only the root directory.

        Args:
            flavor: Path conventions used to split paths into parent and name
            umask: Permission bits cleared from the mode of new entries
        """
        self._flavor = flavor
        self._umask = umask
        self._nodes: Dict[str, _MemoryNode] = {}
        self._nodes[flavor.default_root] = self._new_dir(0o755)

    @property
    def name(self) -> str:
        return "MemoryFileStore"

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _key(self, path: str) -> str:
        return clean(path, self._flavor)

    def _new_dir(self, mode: int) -> _MemoryNode:
        return _MemoryNode(mode=stat_module.S_IFDIR | (mode & ~self._umask & 0o777))

    def _new_file(self, mode: int) -> _MemoryNode:
        return _MemoryNode(mode=stat_module.S_IFREG | (mode & ~self._umask & 0o777))

    def _parent(self, path: str) -> str:
        return self._flavor.module.dirname(path)

    def _get(self, path: str) -> _MemoryNode:
        node = self._nodes.get(path)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        return node

    def _ensure_parents(self, path: str, mode: int = 0o777) -> None:
        parent = self._parent(path)
        if parent == path:
            return
        node = self._nodes.get(parent)
        if node is None:
            self._ensure_parents(parent, mode)
            self._nodes[parent] = self._new_dir(mode)
        elif not node.is_dir:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)

    def _descendant_prefix(self, path: str) -> str:
        sep = self._flavor.sep
        return path if path.endswith(sep) else path + sep

    def _children(self, path: str) -> List[str]:
        return sorted(
            key for key in self._nodes
            if key != path and self._parent(key) == path
        )

    def _info(self, path: str, node: _MemoryNode) -> FileInfo:
        return FileInfo(
            name=self._flavor.module.basename(path) or path,
            path=path,
            size=0 if node.is_dir else len(node.data),
            mode=node.mode,
            mod_time=node.mtime,
            uid=node.uid,
            gid=node.gid,
        )

    def _commit(self, path: str, data: bytes) -> None:
        node = self._nodes.get(path)
        if node is None:
            # removed while open
            return
        node.data = bytes(data)
        node.mtime = _now()

    # -------------------------------------------------------------------------
    # FileStore interface
    # -------------------------------------------------------------------------

    def create(self, path: str) -> MemoryFile:
        return self.open_file(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o666)

    def open(self, path: str) -> MemoryFile:
        return self.open_file(path, os.O_RDONLY)

    def open_file(self, path: str, flags: int, mode: int = 0o666) -> MemoryFile:
        path = self._key(path)
        writable = flags & (os.O_WRONLY | os.O_RDWR) != 0
        readable = flags & os.O_WRONLY == 0

        node = self._nodes.get(path)
        if node is None:
            if not flags & os.O_CREAT:
                raise _os_error(FileNotFoundError, errno.ENOENT, path)
            self._ensure_parents(path)
            node = self._new_file(mode)
            self._nodes[path] = node
        elif flags & os.O_CREAT and flags & os.O_EXCL:
            raise _os_error(FileExistsError, errno.EEXIST, path)

        if node.is_dir:
            raise _os_error(IsADirectoryError, errno.EISDIR, path)

        if flags & os.O_TRUNC and writable:
            node.data = b""
            node.mtime = _now()

        node.atime = _now()
        return MemoryFile(
            self,
            path,
            node.data,
            readable=readable,
            writable=writable,
            append=bool(flags & os.O_APPEND),
        )

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        path = self._key(path)
        if path in self._nodes:
            raise _os_error(FileExistsError, errno.EEXIST, path)
        self._ensure_parents(path)
        self._nodes[path] = self._new_dir(mode)

    def makedirs(self, path: str, mode: int = 0o777) -> None:
        path = self._key(path)
        node = self._nodes.get(path)
        if node is not None:
            if node.is_dir:
                return
            raise _os_error(FileExistsError, errno.EEXIST, path)
        self._ensure_parents(path, mode)
        self._nodes[path] = self._new_dir(mode)

    def remove(self, path: str) -> None:
        path = self._key(path)
        node = self._get(path)
        if self._parent(path) == path:
            raise _os_error(OSError, errno.EBUSY, path)
        if node.is_dir and self._children(path):
            raise _os_error(OSError, errno.ENOTEMPTY, path)
        del self._nodes[path]

    def remove_all(self, path: str) -> None:
        path = self._key(path)
        if path not in self._nodes:
            return
        prefix = self._descendant_prefix(path)
        for key in list(self._nodes):
            if key.startswith(prefix) and key != path:
                del self._nodes[key]
        if self._parent(path) != path:
            del self._nodes[path]

    def rename(self, old_path: str, new_path: str) -> None:
        old_path = self._key(old_path)
        new_path = self._key(new_path)
        node = self._get(old_path)
        if old_path == new_path:
            return

        old_prefix = self._descendant_prefix(old_path)
        if new_path.startswith(old_prefix):
            raise _os_error(OSError, errno.EINVAL, new_path)

        target = self._nodes.get(new_path)
        if target is not None:
            if target.is_dir and not node.is_dir:
                raise _os_error(IsADirectoryError, errno.EISDIR, new_path)
            if node.is_dir and not target.is_dir:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, new_path)
            if target.is_dir and self._children(new_path):
                raise _os_error(OSError, errno.ENOTEMPTY, new_path)
            del self._nodes[new_path]

        self._ensure_parents(new_path)
        for key in sorted(self._nodes):
            if key == old_path or key.startswith(old_prefix):
                self._nodes[new_path + key[len(old_path):]] = self._nodes.pop(key)

    def stat(self, path: str) -> FileInfo:
        path = self._key(path)
        return self._info(path, self._get(path))

    def chmod(self, path: str, mode: int) -> None:
        path = self._key(path)
        node = self._get(path)
        node.mode = stat_module.S_IFMT(node.mode) | (mode & 0o7777)

    def chown(self, path: str, uid: int, gid: int) -> None:
        path = self._key(path)
        node = self._get(path)
        # -1 leaves the id unchanged, as with os.chown
        if uid != -1:
            node.uid = uid
        if gid != -1:
            node.gid = gid

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        path = self._key(path)
        node = self._get(path)
        node.atime = atime
        node.mtime = mtime

    def list_dir(self, path: str) -> List[FileInfo]:
        path = self._key(path)
        node = self._get(path)
        if not node.is_dir:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        return [self._info(child, self._nodes[child]) for child in self._children(path)]
