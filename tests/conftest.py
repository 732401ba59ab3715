"""
Shared fixtures for the scopedfs test suite.
"""

import logging

import pytest

from scopedfs.filesystem import ScopedFileSystem


# =============================================================================
# Logging isolation
# =============================================================================

@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo any handler or level changes made by init_logging."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)


# =============================================================================
# Filesystem fixtures
# =============================================================================

@pytest.fixture
def memory_fs():
    """An empty in-memory filesystem whose working directory is /home."""
    return ScopedFileSystem.in_memory("/home")


@pytest.fixture
def populated_fs(memory_fs):
    """In-memory filesystem holding a small home directory tree.

    Layout:
        /home/homefile.txt
        /home/me/mefile.txt
        /tmp/tmpfile.txt
    """
    memory_fs.write_file("/home/homefile.txt", b"home")
    memory_fs.write_file("/home/me/mefile.txt", b"me")
    memory_fs.write_file("/tmp/tmpfile.txt", b"tmp")
    return memory_fs
