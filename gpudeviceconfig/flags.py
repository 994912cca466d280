"""Command line flags shared by the device plugin and feature discovery."""

from __future__ import annotations

import json
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from gpudeviceconfig.duration import Duration, parse_duration


def parse_device_list_strategy(value: Any) -> list[str]:
    """Accept a single strategy name or a list of names and return a list."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValueError(f"invalid deviceListStrategy: {json.dumps(value)}")


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    return value


def _opt_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean, got {value!r}")
    return value


def _opt_duration(data: Mapping[str, Any], key: str) -> Duration | None:
    value = data.get(key)
    if value is None:
        return None
    return Duration.from_json(value)


def _opt_strategy(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    return parse_device_list_strategy(value)


def _section(data: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be an object, got {data!r}")
    return data


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _to_bool(value: Any) -> bool:
    return bool(value) if value is not None else False


def _to_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _to_duration(value: Any) -> Duration:
    if value is None:
        return Duration(0)
    if isinstance(value, Duration):
        return value
    if isinstance(value, timedelta):
        micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
        return Duration(micros * 1_000)
    if isinstance(value, str):
        return parse_duration(value)
    return Duration(int(value))


@dataclass
class PluginCommandLineFlags:
    """Flags that only the device plugin uses."""

    pass_device_specs: bool | None = None
    device_list_strategy: list[str] | None = None
    device_id_strategy: str | None = None
    cdi_annotation_prefix: str | None = None
    nvidia_ctk_path: str | None = None
    container_driver_root: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> PluginCommandLineFlags:
        data = _section(data, "plugin")
        return cls(
            pass_device_specs=_opt_bool(data, "passDeviceSpecs"),
            device_list_strategy=_opt_strategy(data, "deviceListStrategy"),
            device_id_strategy=_opt_str(data, "deviceIDStrategy"),
            cdi_annotation_prefix=_opt_str(data, "cdiAnnotationPrefix"),
            nvidia_ctk_path=_opt_str(data, "nvidiaCTKPath"),
            container_driver_root=_opt_str(data, "containerDriverRoot"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "passDeviceSpecs": self.pass_device_specs,
            "deviceListStrategy": (
                list(self.device_list_strategy)
                if self.device_list_strategy is not None
                else None
            ),
            "deviceIDStrategy": self.device_id_strategy,
            "cdiAnnotationPrefix": self.cdi_annotation_prefix,
            "nvidiaCTKPath": self.nvidia_ctk_path,
            "containerDriverRoot": self.container_driver_root,
        }


@dataclass
class GFDCommandLineFlags:
    """Flags that only GPU feature discovery uses."""

    oneshot: bool | None = None
    no_timestamp: bool | None = None
    sleep_interval: Duration | None = None
    output_file: str | None = None
    machine_type_file: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> GFDCommandLineFlags:
        data = _section(data, "gfd")
        return cls(
            oneshot=_opt_bool(data, "oneshot"),
            no_timestamp=_opt_bool(data, "noTimestamp"),
            sleep_interval=_opt_duration(data, "sleepInterval"),
            output_file=_opt_str(data, "outputFile"),
            machine_type_file=_opt_str(data, "machineTypeFile"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "oneshot": self.oneshot,
            "noTimestamp": self.no_timestamp,
            "sleepInterval": (
                self.sleep_interval.to_json() if self.sleep_interval is not None else None
            ),
            "outputFile": self.output_file,
            "machineTypeFile": self.machine_type_file,
        }


_Converter = Callable[[Any], Any]

_COMMON_FLAGS: dict[str, tuple[str, _Converter]] = {
    "mig-strategy": ("mig_strategy", _to_str),
    "fail-on-init-error": ("fail_on_init_error", _to_bool),
    "nvidia-driver-root": ("nvidia_driver_root", _to_str),
    "gds-enabled": ("gds_enabled", _to_bool),
    "mofed-enabled": ("mofed_enabled", _to_bool),
}

_PLUGIN_FLAGS: dict[str, tuple[str, _Converter]] = {
    "pass-device-specs": ("pass_device_specs", _to_bool),
    "device-list-strategy": ("device_list_strategy", _to_string_list),
    "device-id-strategy": ("device_id_strategy", _to_str),
    "cdi-annotation-prefix": ("cdi_annotation_prefix", _to_str),
    "nvidia-ctk-path": ("nvidia_ctk_path", _to_str),
    "container-driver-root": ("container_driver_root", _to_str),
}

_GFD_FLAGS: dict[str, tuple[str, _Converter]] = {
    "oneshot": ("oneshot", _to_bool),
    "output-file": ("output_file", _to_str),
    "sleep-interval": ("sleep_interval", _to_duration),
    "no-timestamp": ("no_timestamp", _to_bool),
    "machine-type-file": ("machine_type_file", _to_str),
}


def _update(
    target: Any,
    table: Mapping[str, tuple[str, _Converter]],
    name: str,
    values: Mapping[str, Any],
    explicitly_set: Collection[str],
) -> None:
    entry = table.get(name)
    if entry is None:
        return
    attr, convert = entry
    if name in explicitly_set or getattr(target, attr) is None:
        setattr(target, attr, convert(values[name]))


@dataclass
class Flags:
    """All flags configuring the device plugin and feature discovery."""

    mig_strategy: str | None = None
    fail_on_init_error: bool | None = None
    nvidia_driver_root: str | None = None
    gds_enabled: bool | None = None
    mofed_enabled: bool | None = None
    plugin: PluginCommandLineFlags | None = None
    gfd: GFDCommandLineFlags | None = None

    @classmethod
    def from_json(cls, data: Any) -> Flags:
        if data is None:
            return cls()
        data = _section(data, "flags")
        plugin = data.get("plugin")
        gfd = data.get("gfd")
        return cls(
            mig_strategy=_opt_str(data, "migStrategy"),
            fail_on_init_error=_opt_bool(data, "failOnInitError"),
            nvidia_driver_root=_opt_str(data, "nvidiaDriverRoot"),
            gds_enabled=_opt_bool(data, "gdsEnabled"),
            mofed_enabled=_opt_bool(data, "mofedEnabled"),
            plugin=PluginCommandLineFlags.from_json(plugin) if plugin is not None else None,
            gfd=GFDCommandLineFlags.from_json(gfd) if gfd is not None else None,
        )

    @classmethod
    def loads(cls, text: str) -> Flags:
        return cls.from_json(json.loads(text))

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "migStrategy": self.mig_strategy,
            "failOnInitError": self.fail_on_init_error,
        }
        if self.nvidia_driver_root is not None:
            out["nvidiaDriverRoot"] = self.nvidia_driver_root
        out["gdsEnabled"] = self.gds_enabled
        out["mofedEnabled"] = self.mofed_enabled
        if self.plugin is not None:
            out["plugin"] = self.plugin.to_json()
        if self.gfd is not None:
            out["gfd"] = self.gfd.to_json()
        return out

    def update_from_cli_flags(
        self, values: Mapping[str, Any], explicitly_set: Collection[str] = ()
    ) -> None:
        """Fill in flags from command line values.

        ``values`` maps each known flag name to its value (its default when it
        was not given). A field is overwritten when its flag is in
        ``explicitly_set`` or when the field has no value yet.
        """
        for name in values:
            _update(self, _COMMON_FLAGS, name, values, explicitly_set)
            if self.plugin is None:
                self.plugin = PluginCommandLineFlags()
            _update(self.plugin, _PLUGIN_FLAGS, name, values, explicitly_set)
            if self.gfd is None:
                self.gfd = GFDCommandLineFlags()
            _update(self.gfd, _GFD_FLAGS, name, values, explicitly_set)