"""
scopedfs - filesystem handles with their own working directory

Resolves relative paths against a per-handle working directory instead of the
process-wide one, over a pluggable storage backend (host disk or memory), and
provides a simplified executable lookup that runs through the same handle.

License: Apache-2.0
"""

__version__ = "0.1.0"

from .config import ScopedFsConfig
from .exceptions import ConfigurationError, ScopedFsError
from .filesystem import (
    FileInfo,
    FileStore,
    LocalFileStore,
    MemoryFileStore,
    PathFlavor,
    ScopedFileSystem,
)
from .utils import init_logging

__all__ = [
    # Version
    "__version__",
    # Filesystem
    "ScopedFileSystem",
    "FileStore",
    "FileInfo",
    "LocalFileStore",
    "MemoryFileStore",
    "PathFlavor",
    # Configuration
    "ScopedFsConfig",
    # Errors
    "ScopedFsError",
    "ConfigurationError",
    # Logging
    "init_logging",
]
