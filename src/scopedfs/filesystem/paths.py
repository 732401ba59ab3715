"""Lexical path resolution against a per-handle working directory.

Nothing in this module touches storage or the process working directory.
Paths are plain strings interpreted under a :class:`PathFlavor`, which is the
native convention by default and can be forced to POSIX or Windows rules to
simulate another platform.
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from dataclasses import dataclass
from types import ModuleType
from typing import List, Optional, Tuple

from scopedfs.exceptions import ConfigurationError


@dataclass(frozen=True)
class PathFlavor:
    """Path conventions used for resolution.

    Attributes:
        name: Flavor identifier ('posix' or 'windows')
        module: The ``os.path`` implementation for this flavor
        default_root: Root used when there is no working directory to anchor to
    """

    name: str
    module: ModuleType
    default_root: str

    @property
    def sep(self) -> str:
        return self.module.sep

    @property
    def altsep(self) -> Optional[str]:
        return self.module.altsep

    @property
    def pathsep(self) -> str:
        return self.module.pathsep

    @property
    def separators(self) -> Tuple[str, ...]:
        """Characters that separate path segments under this flavor."""
        if self.altsep:
            return (self.sep, self.altsep)
        return (self.sep,)


POSIX = PathFlavor(name="posix", module=posixpath, default_root="/")
WINDOWS = PathFlavor(name="windows", module=ntpath, default_root="C:\\")

_FLAVORS = {"posix": POSIX, "windows": WINDOWS}


def native_flavor() -> PathFlavor:
    """Return the flavor matching the running interpreter's ``os.path``."""
    return WINDOWS if os.path is ntpath else POSIX


def get_flavor(name: str) -> PathFlavor:
    """Look up a flavor by name.

    Args:
        name: 'native', 'posix' or 'windows'

    Returns:
        The matching PathFlavor

    Raises:
        ConfigurationError: If the name is not a known flavor
    """
    if name == "native":
        return native_flavor()
    try:
        return _FLAVORS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown path flavor: {name!r}",
            setting="path_flavor",
            value=name,
            valid_values=["native", *_FLAVORS],
        ) from None


def is_abs(path: str, flavor: PathFlavor) -> bool:
    """Report whether ``path`` is fully qualified under ``flavor``.

    On Windows a path needs a drive (or UNC share) and a root separator;
    ``\\foo`` is root-relative and ``C:foo`` is drive-relative, neither is
    absolute.
    """
    if flavor.module is posixpath:
        return path.startswith("/")

    drive, rest = ntpath.splitdrive(path)
    if not drive:
        return False
    if drive[:1] in flavor.separators:
        # UNC share, always rooted
        return True
    return rest[:1] in flavor.separators


def clean(path: str, flavor: PathFlavor) -> str:
    """Lexically normalize ``path``.

    Collapses repeated separators, drops '.' segments, resolves '..' segments
    (a '..' above the root stays at the root) and strips trailing separators
    except on a bare root. An empty path cleans to '.'.
    """
    if not path:
        return "."

    cleaned = flavor.module.normpath(path)
    if flavor.module is posixpath and cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def volume_root(working_directory: str, flavor: PathFlavor) -> str:
    """Return the root of the volume ``working_directory`` lives on."""
    if flavor.module is posixpath:
        return "/"

    drive, _ = ntpath.splitdrive(working_directory)
    if not drive:
        drive, _ = ntpath.splitdrive(flavor.default_root)
    return drive + flavor.sep


def resolve(path: str, working_directory: str, flavor: PathFlavor) -> str:
    """Turn ``path`` into a clean absolute path.

    Relative paths are joined onto ``working_directory``. A path starting with
    a separator is anchored at the root of the working directory's volume.
    An empty path resolves to the working directory itself. The result is
    always cleaned, and resolving it again returns it unchanged.

    Args:
        path: Path to resolve, relative or absolute
        working_directory: Absolute, clean directory relative paths are based on
        flavor: Path conventions to apply

    Returns:
        The resolved absolute path
    """
    mod = flavor.module

    if is_abs(path, flavor):
        return clean(path, flavor)

    if path[:1] in flavor.separators:
        return clean(mod.join(volume_root(working_directory, flavor), path), flavor)

    if flavor.module is ntpath:
        drive, rest = ntpath.splitdrive(path)
        if drive:
            wd_drive, _ = ntpath.splitdrive(working_directory)
            if drive.lower() == wd_drive.lower():
                return clean(mod.join(working_directory, rest), flavor)
            return clean(mod.join(drive + flavor.sep, rest), flavor)

    return clean(mod.join(working_directory, path), flavor)


def split_list(value: str, flavor: PathFlavor) -> List[str]:
    """Split a PATH-style list, keeping order and empty elements."""
    return value.split(flavor.pathsep)
