"""Replication (time-slicing) settings for sharing resources between containers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from gpudeviceconfig.resources import ResourceName, new_resource_name

_UINT_MAX = (1 << 64) - 1
_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"[0-9a-fA-F]+")
_UUID_GROUP_LENGTHS = [8, 4, 4, 4, 12]


def _is_uint(text: str) -> bool:
    return _DECIMAL.fullmatch(text) is not None and int(text) <= _UINT_MAX


def _is_uuid(text: str) -> bool:
    """Accept the standard, URN, braced and bare-hex UUID spellings."""
    if len(text) == 36 + 9:
        if text[:9].lower() != "urn:uuid:":
            return False
        text = text[9:]
    elif len(text) == 36 + 2:
        if text[0] != "{" or text[-1] != "}":
            return False
        text = text[1:-1]
    elif len(text) == 32:
        return _HEX.fullmatch(text) is not None
    if len(text) != 36:
        return False
    groups = text.split("-")
    return [len(g) for g in groups] == _UUID_GROUP_LENGTHS and all(
        _HEX.fullmatch(g) for g in groups
    )


def _is_json_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ReplicatedDeviceRef(str):
    """A reference to a device: a GPU index, a MIG index or a GPU/MIG UUID."""

    def is_gpu_index(self) -> bool:
        return _is_uint(str(self))

    def is_mig_index(self) -> bool:
        parts = str(self).split(":", 1)
        return len(parts) == 2 and all(_is_uint(p) for p in parts)

    def is_uuid(self) -> bool:
        return self.is_gpu_uuid() or self.is_mig_uuid()

    def is_gpu_uuid(self) -> bool:
        """True for the form ``GPU-<uuid>``."""
        text = str(self)
        return text.startswith("GPU-") and _is_uuid(text[len("GPU-"):])

    def is_mig_uuid(self) -> bool:
        """True for ``MIG-<uuid>`` or ``MIG-GPU-<uuid>/<gi>/<ci>``."""
        text = str(self)
        if not text.startswith("MIG-"):
            return False
        suffix = text[len("MIG-"):]
        if _is_uuid(suffix):
            return True
        parts = suffix.split("/", 2)
        if len(parts) != 3:
            return False
        if not ReplicatedDeviceRef(parts[0]).is_gpu_uuid():
            return False
        return all(_is_uint(p) for p in parts[1:])


@dataclass
class ReplicatedDevices:
    """Which devices to replicate: all of them, a count, or an explicit list.

    Only one of the three fields is meant to be set at a time.
    """

    all: bool = False
    count: int = 0
    refs: list[ReplicatedDeviceRef] | None = None

    @classmethod
    def from_json(cls, value: Any) -> ReplicatedDevices:
        if isinstance(value, str):
            if value != "all":
                raise ValueError(
                    f"devices set as '{value}' but the only valid string input is 'all'"
                )
            return cls(all=True)
        if _is_json_int(value):
            if value <= 0:
                raise ValueError(
                    f"devices set as '{value}' but a count of devices must be > 0"
                )
            return cls(count=value)
        if isinstance(value, list):
            refs: list[ReplicatedDeviceRef] = []
            for item in value:
                if _is_json_int(item) and 0 <= item <= _UINT_MAX:
                    refs.append(ReplicatedDeviceRef(str(item)))
                    continue
                if isinstance(item, str):
                    ref = ReplicatedDeviceRef(item)
                    if ref.is_gpu_index() or ref.is_mig_index() or ref.is_uuid():
                        refs.append(ref)
                        continue
                raise ValueError(f"unsupported type for device in devices list: {item!r}")
            return cls(refs=refs)
        raise ValueError(f"unrecognized type for devices spec: {value!r}")

    @classmethod
    def loads(cls, text: str) -> ReplicatedDevices:
        return cls.from_json(json.loads(text))

    def to_json(self) -> Any:
        if self.all:
            return "all"
        if self.count > 0:
            return self.count
        if self.refs is not None:
            return [str(ref) for ref in self.refs]
        raise ValueError(f"unmarshallable ReplicatedDevices struct: {self!r}")


def _resource_name(value: Any) -> ResourceName:
    if not isinstance(value, str):
        raise ValueError(f"resource name must be a string, got {value!r}")
    return new_resource_name(value)


@dataclass
class ReplicatedResource:
    """A resource to replicate, the devices it covers and how many replicas to make."""

    name: ResourceName
    devices: ReplicatedDevices
    replicas: int
    rename: ResourceName | None = None

    @classmethod
    def from_json(cls, data: Any) -> ReplicatedResource:
        if not isinstance(data, dict):
            raise ValueError(f"replicated resource must be an object, got {data!r}")
        if "name" not in data:
            raise ValueError("no resource name specified")
        name = _resource_name(data["name"])
        devices = ReplicatedDevices.from_json(data.get("devices", "all"))
        if "replicas" not in data:
            raise ValueError("no replicas specified")
        replicas = data["replicas"]
        if not _is_json_int(replicas):
            raise ValueError(f"replicas must be an integer, got {replicas!r}")
        if replicas < 2:
            raise ValueError("number of replicas must be >= 2")
        rename = _resource_name(data["rename"]) if "rename" in data else None
        return cls(name=name, devices=devices, replicas=replicas, rename=rename)

    @classmethod
    def loads(cls, text: str) -> ReplicatedResource:
        return cls.from_json(json.loads(text))

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": str(self.name)}
        if self.rename:
            out["rename"] = str(self.rename)
        out["devices"] = self.devices.to_json()
        out["replicas"] = self.replicas
        return out


def _optional_bool(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean, got {value!r}")
    return value


@dataclass
class TimeSlicing:
    """The set of resources to replicate for time-slicing."""

    rename_by_default: bool = False
    fail_requests_greater_than_one: bool = False
    resources: list[ReplicatedResource] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> TimeSlicing:
        if not isinstance(data, dict):
            raise ValueError(f"timeSlicing must be an object, got {data!r}")
        rename_by_default = _optional_bool(data, "renameByDefault")
        fail_greater = _optional_bool(data, "failRequestsGreaterThanOne")
        if "resources" not in data:
            raise ValueError("no resources specified")
        raw = data["resources"]
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ValueError(f"resources must be a list, got {raw!r}")
        resources = [ReplicatedResource.from_json(item) for item in raw]
        if not resources:
            raise ValueError("no resources specified")
        if rename_by_default:
            for resource in resources:
                if not resource.rename:
                    resource.rename = resource.name.default_shared_rename()
        return cls(
            rename_by_default=rename_by_default,
            fail_requests_greater_than_one=fail_greater,
            resources=resources,
        )

    @classmethod
    def loads(cls, text: str) -> TimeSlicing:
        return cls.from_json(json.loads(text))

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.rename_by_default:
            out["renameByDefault"] = True
        if self.fail_requests_greater_than_one:
            out["failRequestsGreaterThanOne"] = True
        if self.resources:
            out["resources"] = [r.to_json() for r in self.resources]
        return out


@dataclass
class Sharing:
    """The supported sharing strategies."""

    time_slicing: TimeSlicing = field(default_factory=TimeSlicing)

    @classmethod
    def from_json(cls, data: Any) -> Sharing:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"sharing must be an object, got {data!r}")
        raw = data.get("timeSlicing")
        if raw is None:
            return cls()
        return cls(time_slicing=TimeSlicing.from_json(raw))

    def to_json(self) -> dict[str, Any]:
        return {"timeSlicing": self.time_slicing.to_json()}