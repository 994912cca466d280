"""The versioned configuration read from files and the command line."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import IO, Any

import yaml

from gpudeviceconfig.flags import Flags
from gpudeviceconfig.replicas import Sharing
from gpudeviceconfig.resources import Resources

VERSION = "v1"


@dataclass
class Config:
    """A versioned configuration."""

    version: str = VERSION
    flags: Flags = field(default_factory=Flags)
    resources: Resources = field(default_factory=Resources)
    sharing: Sharing = field(default_factory=Sharing)

    @classmethod
    def from_json(cls, data: Any) -> Config:
        """Build a config from decoded JSON; a missing version is left empty."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"config must be an object, got {data!r}")
        version = data.get("version")
        if version is None:
            version = ""
        if not isinstance(version, str):
            raise ValueError(f"'version' must be a string, got {version!r}")
        return cls(
            version=version,
            flags=Flags.from_json(data.get("flags")),
            resources=Resources.from_json(data.get("resources")),
            sharing=Sharing.from_json(data.get("sharing")),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "flags": self.flags.to_json(),
            "resources": self.resources.to_json(),
            "sharing": self.sharing.to_json(),
        }


def parse_config_from(reader: IO[Any]) -> Config:
    """Parse YAML (or JSON) from a readable object into a Config."""
    try:
        content = reader.read()
    except OSError as err:
        raise ValueError(f"read error: {err}") from err
    if isinstance(content, bytes):
        content = content.decode("utf-8")

    try:
        config = Config.from_json(yaml.safe_load(content))
    except (yaml.YAMLError, ValueError) as err:
        raise ValueError(f"unmarshal error: {err}") from err

    if not config.version:
        config.version = VERSION
    if config.version != VERSION:
        raise ValueError(f"unknown version: {config.version}")
    return config


def parse_config(config_file: str) -> Config:
    """Read and parse the config file at the given path."""
    try:
        reader = open(config_file, encoding="utf-8")
    except OSError as err:
        raise ValueError(f"error opening config file: {err}") from err
    with reader:
        try:
            return parse_config_from(reader)
        except ValueError as err:
            raise ValueError(f"error parsing config file: {err}") from err


def new_config(
    values: Mapping[str, Any],
    explicitly_set: Collection[str] = (),
    config_file: str | None = None,
) -> Config:
    """Build a config from a file and command line values.

    Command line values given explicitly win over the file; the file wins over
    command line defaults. When ``config_file`` is None, the ``config-file``
    entry of ``values`` is used.
    """
    if config_file is None:
        config_file = values.get("config-file") or ""
    config = Config()
    if config_file:
        try:
            config = parse_config(config_file)
        except ValueError as err:
            raise ValueError(f"unable to parse config file: {err}") from err
    config.flags.update_from_cli_flags(values, explicitly_set)
    return config