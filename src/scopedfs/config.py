"""
Configuration for scopedfs.

Defines the pydantic model describing how a ScopedFileSystem is built: which
backend to use, the initial working directory, the path conventions and the
defaults for executable lookup.
"""

from __future__ import annotations

import os
import tempfile
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from scopedfs.exceptions import ConfigurationError
from scopedfs.filesystem import (
    LocalFileStore,
    MemoryFileStore,
    PathFlavor,
    ScopedFileSystem,
    get_flavor,
    native_flavor,
)
from scopedfs.filesystem.store import FileStore
from scopedfs.utils import parse_log_level

ENV_PREFIX = "SCOPEDFS_"


class ScopedFsConfig(BaseModel):
    """
    Pydantic schema describing a scoped filesystem.

    Reads the executable search path and extension list from the PATH and
    PATHEXT environment variables when they are not provided directly.
    """

    base_directory: str = Field(
        "",
        description="Initial working directory; relative values are anchored once at startup",
    )
    backend: Literal["local", "memory"] = Field(
        "local", description="Storage backend: host disk or in-memory"
    )
    path_flavor: Literal["native", "posix", "windows"] = Field(
        "native",
        description=(
            "Path conventions used for resolution. 'posix' and 'windows' simulate "
            "another platform and are only meaningful with the memory backend "
            "unless they match the host."
        ),
    )
    search_path: Optional[str] = Field(
        None, description="PATH-style directory list for lookpath (reads PATH if None)"
    )
    path_ext: Optional[str] = Field(
        None, description="PATHEXT-style extension list for lookpath (reads PATHEXT if None)"
    )
    temp_directory: Optional[str] = Field(
        None,
        description=(
            "Parent for temp files and directories. Defaults to the system temp "
            "directory for the local backend and '<root>tmp' for the memory backend."
        ),
    )
    umask: int = Field(
        0o022, ge=0, le=0o777, description="Permission bits cleared from new entries (memory backend)"
    )
    log_level: str = Field("WARNING", description="Logging level name")

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        try:
            parse_log_level(value)
        except ConfigurationError as exc:
            raise ValueError(exc.developer_message) from exc
        return value.strip().upper()

    @model_validator(mode="after")
    def _fill_from_environment(self) -> "ScopedFsConfig":
        """Reads search settings from the environment and checks backend/flavor pairing."""
        if self.search_path is None:
            self.search_path = os.environ.get("PATH", "")
        if self.path_ext is None:
            self.path_ext = os.environ.get("PATHEXT", "")

        if self.backend == "local":
            if get_flavor(self.path_flavor) is not native_flavor():
                raise ValueError(
                    f"path_flavor '{self.path_flavor}' does not match the host; "
                    "use the memory backend to simulate another platform."
                )
            if self.temp_directory is None:
                self.temp_directory = tempfile.gettempdir()
        return self

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ScopedFsConfig":
        """
        Build a configuration from environment variables.

        Recognized variables (with the default prefix): SCOPEDFS_BASE_DIRECTORY,
        SCOPEDFS_BACKEND, SCOPEDFS_PATH_FLAVOR, SCOPEDFS_SEARCH_PATH,
        SCOPEDFS_PATH_EXT, SCOPEDFS_TEMP_DIRECTORY, SCOPEDFS_UMASK (octal) and
        SCOPEDFS_LOG_LEVEL.

        Args:
            prefix: Prefix of the variable names
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigurationError: If SCOPEDFS_UMASK is not an octal number
            pydantic.ValidationError: If any other value is invalid
        """
        environ = os.environ if environ is None else environ
        data = {}
        for field_name in cls.model_fields:
            value = environ.get(f"{prefix}{field_name.upper()}")
            if value is not None:
                data[field_name] = value

        if "umask" in data:
            try:
                data["umask"] = int(data["umask"], 8)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid octal umask: {data['umask']!r}",
                    setting=f"{prefix}UMASK",
                    value=data["umask"],
                    suggestion="Use an octal value such as 022",
                ) from None

        return cls(**data)

    @property
    def flavor(self) -> PathFlavor:
        return get_flavor(self.path_flavor)

    def create_store(self) -> FileStore:
        """Build the configured storage backend."""
        if self.backend == "memory":
            return MemoryFileStore(flavor=self.flavor, umask=self.umask)
        return LocalFileStore()

    def create_filesystem(self) -> ScopedFileSystem:
        """Build a ScopedFileSystem over a new instance of the configured backend."""
        flavor = self.flavor
        temp_directory = self.temp_directory
        base_directory = self.base_directory
        if self.backend == "memory":
            if temp_directory is None:
                temp_directory = flavor.module.join(flavor.default_root, "tmp")
            base_directory = base_directory or flavor.default_root
        return ScopedFileSystem(
            self.create_store(),
            base_directory=base_directory,
            flavor=flavor,
            temp_directory=temp_directory,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ScopedFsConfig(backend={self.backend}, base_dir={self.base_directory!r}, "
            f"flavor={self.path_flavor})"
        )
