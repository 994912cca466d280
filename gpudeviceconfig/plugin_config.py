"""Loading and checking the device plugin's configuration."""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import Any

from gpudeviceconfig.config import Config, new_config
from gpudeviceconfig.consts import (
    DEFAULT_CDI_ANNOTATION_PREFIX,
    DEFAULT_CONTAINER_DRIVER_ROOT,
    DEFAULT_NVIDIA_CTK_PATH,
    DEVICE_ID_STRATEGY_INDEX,
    DEVICE_ID_STRATEGY_UUID,
    DEVICE_LIST_STRATEGY_ENVVAR,
    MIG_STRATEGY_MIXED,
    MIG_STRATEGY_NONE,
    MIG_STRATEGY_SINGLE,
    DeviceListStrategies,
)

logger = logging.getLogger(__name__)

MIG_STRATEGIES = (MIG_STRATEGY_NONE, MIG_STRATEGY_SINGLE, MIG_STRATEGY_MIXED)

# Values the device plugin's command line flags take when not given.
PLUGIN_FLAG_DEFAULTS: dict[str, Any] = {
    "mig-strategy": MIG_STRATEGY_NONE,
    "fail-on-init-error": True,
    "nvidia-driver-root": "/",
    "pass-device-specs": False,
    "device-list-strategy": [DEVICE_LIST_STRATEGY_ENVVAR],
    "device-id-strategy": DEVICE_ID_STRATEGY_UUID,
    "gds-enabled": False,
    "mofed-enabled": False,
    "config-file": "",
    "cdi-annotation-prefix": DEFAULT_CDI_ANNOTATION_PREFIX,
    "nvidia-ctk-path": DEFAULT_NVIDIA_CTK_PATH,
    "container-driver-root": DEFAULT_CONTAINER_DRIVER_ROOT,
}


def validate_plugin_flags(config: Config) -> DeviceListStrategies:
    """Check the plugin flags of a config and return its device list strategies."""
    plugin = config.flags.plugin
    if plugin is None or plugin.device_list_strategy is None:
        raise ValueError("invalid --device-list-strategy option: not set")
    try:
        strategies = DeviceListStrategies(plugin.device_list_strategy)
    except ValueError as err:
        raise ValueError(f"invalid --device-list-strategy option: {err}") from err

    if plugin.device_id_strategy not in (DEVICE_ID_STRATEGY_UUID, DEVICE_ID_STRATEGY_INDEX):
        raise ValueError(f"invalid --device-id-strategy option: {plugin.device_id_strategy}")
    return strategies


def check_mig_strategy(strategy: str | None) -> str:
    """Return the MIG strategy if it is one of the known ones."""
    if strategy not in MIG_STRATEGIES:
        raise ValueError(f"unknown strategy: {strategy}")
    return strategy


def load_plugin_config(
    values: Mapping[str, Any] | None = None,
    explicitly_set: Collection[str] | None = None,
    config_file: str | None = None,
) -> Config:
    """Build and validate the device plugin's config.

    ``values`` holds command line values; flags missing from it take their
    defaults. When ``explicitly_set`` is None, every flag present in
    ``values`` counts as given explicitly.
    """
    given = dict(values or {})
    if explicitly_set is None:
        explicitly_set = set(given)
    merged = {**PLUGIN_FLAG_DEFAULTS, **given}
    try:
        config = new_config(merged, explicitly_set, config_file)
    except ValueError as err:
        raise ValueError(f"unable to finalize config: {err}") from err
    try:
        validate_plugin_flags(config)
    except ValueError as err:
        raise ValueError(f"unable to validate flags: {err}") from err
    config.flags.gfd = None
    return config


def disable_resource_renaming(config: Config) -> None:
    """Undo resource renaming and device selection, which are not yet supported."""
    if config.resources.gpus or config.resources.migs:
        logger.info(
            "Customizing the 'resources' field is not yet supported in the config. Ignoring..."
        )
    config.resources.gpus = []
    config.resources.migs = []

    time_slicing = config.sharing.time_slicing
    rename_by_default = time_slicing.rename_by_default
    sets_non_default_rename = False
    sets_devices = False
    for resource in time_slicing.resources:
        if not rename_by_default and resource.rename:
            sets_non_default_rename = True
            resource.rename = None
        default_rename = resource.name.default_shared_rename()
        if rename_by_default and resource.rename != default_rename:
            sets_non_default_rename = True
            resource.rename = default_rename
        if not resource.devices.all:
            sets_devices = True
            resource.devices.all = True
            resource.devices.count = 0
            resource.devices.refs = None

    if sets_non_default_rename:
        logger.warning(
            "Setting the 'rename' field in sharing.timeSlicing.resources is not yet "
            "supported in the config. Ignoring..."
        )
    if sets_devices:
        logger.warning(
            "Customizing the 'devices' field in sharing.timeSlicing.resources is not yet "
            "supported in the config. Ignoring..."
        )