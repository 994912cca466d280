"""Well-known configuration constants and the device list strategy set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

# Resource names
RESOURCE_NAME_PREFIX = "nvidia.com"
DEFAULT_SHARED_RESOURCE_NAME_SUFFIX = ".shared"
MAX_RESOURCE_NAME_LENGTH = 63

# MIG strategies
MIG_STRATEGY_NONE = "none"
MIG_STRATEGY_SINGLE = "single"
MIG_STRATEGY_MIXED = "mixed"

# Device list strategies
DEVICE_LIST_STRATEGY_ENVVAR = "envvar"
DEVICE_LIST_STRATEGY_VOLUME_MOUNTS = "volume-mounts"
DEVICE_LIST_STRATEGY_CDI_ANNOTATIONS = "cdi-annotations"

DEVICE_LIST_STRATEGIES = (
    DEVICE_LIST_STRATEGY_ENVVAR,
    DEVICE_LIST_STRATEGY_VOLUME_MOUNTS,
    DEVICE_LIST_STRATEGY_CDI_ANNOTATIONS,
)

# Device id strategies
DEVICE_ID_STRATEGY_UUID = "uuid"
DEVICE_ID_STRATEGY_INDEX = "index"

# CDI specification generation
DEFAULT_CDI_ANNOTATION_PREFIX = "cdi.k8s.io/"
DEFAULT_NVIDIA_CTK_PATH = "/usr/bin/nvidia-ctk"
DEFAULT_CONTAINER_DRIVER_ROOT = "/driver-root"


class DeviceListStrategies(Mapping):
    """Which device list strategies are enabled, keyed by strategy name."""

    def __init__(self, strategies: Iterable[str]) -> None:
        if isinstance(strategies, str):
            strategies = [strategies]
        enabled = dict.fromkeys(DEVICE_LIST_STRATEGIES, False)
        for strategy in strategies:
            if strategy not in enabled:
                raise ValueError(f"invalid strategy: {strategy}")
            enabled[strategy] = True
        self._enabled = enabled

    def __getitem__(self, key: str) -> bool:
        return self._enabled[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._enabled)

    def __len__(self) -> int:
        return len(self._enabled)

    def __repr__(self) -> str:
        return f"DeviceListStrategies({self._enabled!r})"

    def includes(self, strategy: str) -> bool:
        """Return whether the given strategy is enabled."""
        return self._enabled.get(strategy, False)

    def is_cdi_enabled(self) -> bool:
        """Return whether any enabled strategy requires CDI."""
        return any(
            name.startswith("cdi-") and enabled for name, enabled in self._enabled.items()
        )