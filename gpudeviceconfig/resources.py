"""Resource names, wildcard patterns and the resource lists of a config."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from gpudeviceconfig.consts import (
    DEFAULT_SHARED_RESOURCE_NAME_SUFFIX,
    MAX_RESOURCE_NAME_LENGTH,
    RESOURCE_NAME_PREFIX,
)

_DNS1123_LABEL = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN = re.compile(rf"{_DNS1123_LABEL}(\.{_DNS1123_LABEL})*")
_DNS1123_SUBDOMAIN_MAX_LENGTH = 253


class ResourceName(str):
    """A fully qualified resource name such as ``nvidia.com/gpu``."""

    def split(self) -> tuple[str, str]:  # type: ignore[override]
        """Split into (prefix, name); the prefix is empty when there is no '/'."""
        prefix, sep, name = str.partition(self, "/")
        if not sep:
            return "", str(self)
        return prefix, name

    def default_shared_rename(self) -> ResourceName:
        """The name this resource gets when it is shared."""
        return ResourceName(str(self) + DEFAULT_SHARED_RESOURCE_NAME_SUFFIX)


class ResourcePattern(str):
    """A wildcard pattern in which ``*`` matches any run of characters."""

    def matches(self, s: str) -> bool:
        return re.search(wildcard_to_regexp(str(self)), s) is not None


def is_dns_subdomain(name: str) -> bool:
    """Return whether name is a valid lowercase RFC 1123 subdomain."""
    return (
        len(name) <= _DNS1123_SUBDOMAIN_MAX_LENGTH
        and _DNS1123_SUBDOMAIN.fullmatch(name) is not None
    )


def wildcard_to_regexp(pattern: str) -> str:
    """Convert a wildcard pattern to a regular expression."""
    return ".*".join(re.escape(literal) for literal in pattern.split("*"))


def new_resource_name(n: str) -> ResourceName:
    """Qualify n with the standard prefix and validate the result."""
    if not n.startswith(RESOURCE_NAME_PREFIX + "/"):
        n = f"{RESOURCE_NAME_PREFIX}/{n}"
    if len(n) > MAX_RESOURCE_NAME_LENGTH:
        raise ValueError(
            "fully-qualified resource name must be "
            f"{MAX_RESOURCE_NAME_LENGTH} characters or less: {n}"
        )
    _, name = ResourceName(n).split()
    if not is_dns_subdomain(name):
        raise ValueError(
            f"incorrect format for resource name '{n}': a lowercase RFC 1123 subdomain "
            "must consist of lower case alphanumeric characters, '-' or '.', and must "
            "start and end with an alphanumeric character"
        )
    return ResourceName(n)


def new_resource(pattern: str, name: str) -> Resource:
    """Build a resource from a pattern and an (unqualified or qualified) name."""
    try:
        resource_name = new_resource_name(name)
    except ValueError as err:
        raise ValueError(f"invalid resource name: {err}") from err
    return Resource(pattern=ResourcePattern(pattern), name=resource_name)


def _resource_name_from_json(value: Any) -> ResourceName:
    if not isinstance(value, str):
        raise ValueError(f"resource name must be a string, got {value!r}")
    return new_resource_name(value)


@dataclass
class Resource:
    """A pattern paired with the resource name devices matching it get."""

    pattern: ResourcePattern
    name: ResourceName

    @classmethod
    def from_json(cls, data: Any) -> Resource:
        if not isinstance(data, dict):
            raise ValueError(f"resource must be an object, got {data!r}")
        if "pattern" not in data:
            raise ValueError("resources must have a 'pattern' field set")
        if "name" not in data:
            raise ValueError("resources must have a 'name' field set")
        pattern = data["pattern"]
        if not isinstance(pattern, str):
            raise ValueError(f"resource pattern must be a string, got {pattern!r}")
        return cls(pattern=ResourcePattern(pattern), name=_resource_name_from_json(data["name"]))

    def to_json(self) -> dict[str, str]:
        return {"pattern": str(self.pattern), "name": str(self.name)}


def _resource_list_from_json(value: Any, key: str) -> list[Resource]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list, got {value!r}")
    return [Resource.from_json(item) for item in value]


@dataclass
class Resources:
    """Resources for full GPUs and for MIG devices, listed separately."""

    gpus: list[Resource] = field(default_factory=list)
    migs: list[Resource] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> Resources:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"resources must be an object, got {data!r}")
        return cls(
            gpus=_resource_list_from_json(data.get("gpus"), "gpus"),
            migs=_resource_list_from_json(data.get("mig"), "mig"),
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "gpus": [r.to_json() for r in self.gpus] if self.gpus else None
        }
        if self.migs:
            out["mig"] = [r.to_json() for r in self.migs]
        return out

    def add_gpu_resource(self, pattern: str, name: str) -> None:
        self.gpus.append(new_resource(pattern, name))

    def add_mig_resource(self, pattern: str, name: str) -> None:
        self.migs.append(new_resource(pattern, name))