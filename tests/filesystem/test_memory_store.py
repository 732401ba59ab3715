"""
Tests for the scopedfs.filesystem.memory module.

This module tests:
- MemoryFile read/write/append semantics and write-back to the store
- MemoryFileStore directory handling and implicit parents
- Errors raised with the builtin OSError family
"""

import errno
import io
import os
import stat
from datetime import datetime, timezone

import pytest

from scopedfs.filesystem.memory import MemoryFile, MemoryFileStore
from scopedfs.filesystem.paths import WINDOWS


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store with the default umask."""
    return MemoryFileStore()


def write(store: MemoryFileStore, path: str, data: bytes) -> None:
    """Create a file in the store holding the given bytes."""
    with store.create(path) as f:
        f.write(data)


def read(store: MemoryFileStore, path: str) -> bytes:
    with store.open(path) as f:
        return f.read()


# =============================================================================
# File Content Tests
# =============================================================================

class TestMemoryFile:
    """Tests for files opened from the store."""

    def test_create_returns_named_file(self, store):
        """Test that created files report their absolute path as name."""
        f = store.create("/home/test.txt")

        assert isinstance(f, MemoryFile)
        assert f.name == "/home/test.txt"
        f.close()

    def test_content_written_back_on_close(self, store):
        write(store, "/data.bin", b"payload")

        assert read(store, "/data.bin") == b"payload"
        assert store.stat("/data.bin").size == 7

    def test_content_visible_after_flush(self, store):
        """Test that flush commits content before the file is closed."""
        f = store.create("/data.bin")
        f.write(b"abc")
        f.flush()

        assert read(store, "/data.bin") == b"abc"
        f.close()

    def test_read_only_file_rejects_writes(self, store):
        write(store, "/data.bin", b"abc")

        with store.open("/data.bin") as f:
            assert not f.writable()
            with pytest.raises(io.UnsupportedOperation):
                f.write(b"x")

    def test_write_only_file_rejects_reads(self, store):
        with store.open_file("/data.bin", os.O_WRONLY | os.O_CREAT) as f:
            assert not f.readable()
            with pytest.raises(io.UnsupportedOperation):
                f.read()

    def test_append_writes_at_end(self, store):
        """Test that O_APPEND writes land after existing content."""
        write(store, "/log.txt", b"one\n")

        with store.open_file("/log.txt", os.O_RDWR | os.O_APPEND) as f:
            f.seek(0)
            f.write(b"two\n")

        assert read(store, "/log.txt") == b"one\ntwo\n"

    def test_truncate_on_open(self, store):
        write(store, "/data.bin", b"abcdef")

        with store.open_file("/data.bin", os.O_WRONLY | os.O_TRUNC) as f:
            f.write(b"xy")

        assert read(store, "/data.bin") == b"xy"

    def test_open_without_write_keeps_content(self, store):
        """Test that reading a file never modifies it."""
        write(store, "/data.bin", b"keep")

        with store.open("/data.bin") as f:
            f.read()

        assert read(store, "/data.bin") == b"keep"

    def test_file_removed_while_open_is_not_recreated(self, store):
        f = store.create("/gone.txt")
        store.remove("/gone.txt")
        f.write(b"late")
        f.close()

        with pytest.raises(FileNotFoundError):
            store.stat("/gone.txt")


# =============================================================================
# Open Flag Tests
# =============================================================================

class TestOpenFlags:
    """Tests for open_file flag handling."""

    def test_open_missing_file_raises(self, store):
        with pytest.raises(FileNotFoundError) as exc_info:
            store.open("/missing.txt")

        assert exc_info.value.errno == errno.ENOENT
        assert exc_info.value.filename == "/missing.txt"

    def test_exclusive_create_fails_on_existing_file(self, store):
        write(store, "/data.bin", b"")

        with pytest.raises(FileExistsError):
            store.open_file("/data.bin", os.O_RDWR | os.O_CREAT | os.O_EXCL)

    def test_open_directory_raises(self, store):
        store.mkdir("/dir")

        with pytest.raises(IsADirectoryError):
            store.open("/dir")

    def test_create_applies_umask(self, store):
        """Test that the umask clears bits from the requested mode."""
        with store.open_file("/file", os.O_CREAT | os.O_WRONLY, 0o777):
            pass

        info = store.stat("/file")
        assert info.perm == 0o755
        assert stat.S_ISREG(info.mode)

    def test_custom_umask(self):
        store = MemoryFileStore(umask=0o077)
        store.mkdir("/private", 0o777)

        assert store.stat("/private").perm == 0o700


# =============================================================================
# Directory Tests
# =============================================================================

class TestDirectories:
    """Tests for directory creation, listing and removal."""

    def test_root_exists(self, store):
        info = store.stat("/")

        assert info.is_dir
        assert info.name == "/"

    def test_parents_created_implicitly(self, store):
        """Test that creating a nested file creates its parent directories."""
        write(store, "/a/b/c.txt", b"")

        assert store.stat("/a").is_dir
        assert store.stat("/a/b").is_dir

    def test_parent_that_is_a_file_raises(self, store):
        write(store, "/a", b"")

        with pytest.raises(NotADirectoryError):
            store.create("/a/b.txt")

    def test_mkdir_existing_raises(self, store):
        store.mkdir("/dir")

        with pytest.raises(FileExistsError):
            store.mkdir("/dir")

    def test_makedirs_existing_directory_is_noop(self, store):
        store.makedirs("/a/b/c")
        store.makedirs("/a/b/c")

        assert store.stat("/a/b/c").is_dir

    def test_makedirs_over_file_raises(self, store):
        write(store, "/a", b"")

        with pytest.raises(FileExistsError):
            store.makedirs("/a")

    def test_list_dir_sorted_and_direct_children_only(self, store):
        write(store, "/dir/b.txt", b"")
        write(store, "/dir/a.txt", b"")
        write(store, "/dir/sub/deep.txt", b"")

        names = [info.name for info in store.list_dir("/dir")]

        assert names == ["a.txt", "b.txt", "sub"]

    def test_list_dir_on_file_raises(self, store):
        write(store, "/a", b"")

        with pytest.raises(NotADirectoryError):
            store.list_dir("/a")

    def test_remove_non_empty_directory_raises(self, store):
        write(store, "/dir/file", b"")

        with pytest.raises(OSError) as exc_info:
            store.remove("/dir")

        assert exc_info.value.errno == errno.ENOTEMPTY

    def test_remove_root_raises(self, store):
        with pytest.raises(OSError) as exc_info:
            store.remove("/")

        assert exc_info.value.errno == errno.EBUSY

    def test_remove_all(self, store):
        """Test that remove_all deletes a subtree and leaves siblings."""
        write(store, "/dir/a/b.txt", b"")
        write(store, "/dirx/keep.txt", b"")

        store.remove_all("/dir")

        with pytest.raises(FileNotFoundError):
            store.stat("/dir/a/b.txt")
        with pytest.raises(FileNotFoundError):
            store.stat("/dir")
        assert store.stat("/dirx/keep.txt").size == 0

    def test_remove_all_missing_is_noop(self, store):
        store.remove_all("/nothing/here")

    def test_remove_all_root_keeps_root(self, store):
        write(store, "/a/b", b"")

        store.remove_all("/")

        assert store.list_dir("/") == []


# =============================================================================
# Rename Tests
# =============================================================================

class TestRename:
    """Tests for rename()."""

    def test_rename_file(self, store):
        write(store, "/test1", b"data")

        store.rename("/test1", "/test2")

        assert store.stat("/test2").name == "test2"
        with pytest.raises(FileNotFoundError):
            store.stat("/test1")

    def test_rename_replaces_file(self, store):
        write(store, "/a", b"new")
        write(store, "/b", b"old")

        store.rename("/a", "/b")

        assert read(store, "/b") == b"new"

    def test_rename_directory_moves_descendants(self, store):
        write(store, "/src/x/y.txt", b"y")

        store.rename("/src", "/dst")

        assert read(store, "/dst/x/y.txt") == b"y"
        with pytest.raises(FileNotFoundError):
            store.stat("/src/x")

    def test_rename_into_itself_raises(self, store):
        store.makedirs("/dir")

        with pytest.raises(OSError) as exc_info:
            store.rename("/dir", "/dir/sub")

        assert exc_info.value.errno == errno.EINVAL

    def test_rename_file_onto_directory_raises(self, store):
        write(store, "/file", b"")
        store.mkdir("/dir")

        with pytest.raises(IsADirectoryError):
            store.rename("/file", "/dir")

    def test_rename_missing_raises(self, store):
        with pytest.raises(FileNotFoundError):
            store.rename("/missing", "/other")


# =============================================================================
# Metadata Tests
# =============================================================================

class TestMetadata:
    """Tests for chmod, chown and chtimes."""

    def test_chmod_keeps_type_bits(self, store):
        write(store, "/tool", b"")

        store.chmod("/tool", 0o755)

        info = store.stat("/tool")
        assert info.perm == 0o755
        assert info.is_executable
        assert not info.is_dir

    def test_chown_minus_one_leaves_id_unchanged(self, store):
        write(store, "/file", b"")

        store.chown("/file", 1000, 100)
        store.chown("/file", -1, 200)

        info = store.stat("/file")
        assert info.uid == 1000
        assert info.gid == 200

    def test_chtimes(self, store):
        write(store, "/file", b"")
        moment = datetime(2020, 5, 17, 12, 30, tzinfo=timezone.utc)

        store.chtimes("/file", moment, moment)

        assert store.stat("/file").mod_time == moment

    def test_metadata_on_missing_path_raises(self, store):
        with pytest.raises(FileNotFoundError):
            store.chmod("/missing", 0o644)
        with pytest.raises(FileNotFoundError):
            store.chown("/missing", 0, 0)


# =============================================================================
# Windows Flavor Tests
# =============================================================================

class TestWindowsFlavor:
    """Tests for a store using Windows path conventions."""

    def test_root_is_drive(self):
        store = MemoryFileStore(flavor=WINDOWS)

        assert store.stat("C:\\").is_dir

    def test_nested_create_and_list(self):
        store = MemoryFileStore(flavor=WINDOWS)
        write(store, "C:\\Tools\\git.exe", b"")

        names = [info.name for info in store.list_dir("C:\\Tools")]

        assert names == ["git.exe"]
        assert store.stat("C:\\Tools\\git.exe").path == "C:\\Tools\\git.exe"
