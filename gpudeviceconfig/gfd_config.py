"""Loading the GPU feature discovery configuration and managing its output."""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Collection, Mapping
from typing import Any

from gpudeviceconfig.config import Config, new_config
from gpudeviceconfig.consts import MIG_STRATEGY_NONE
from gpudeviceconfig.duration import Duration

DEFAULT_OUTPUT_FILE = "/etc/kubernetes/node-feature-discovery/features.d/gfd"
DEFAULT_MACHINE_TYPE_FILE = "/sys/class/dmi/id/product_name"
DEFAULT_SLEEP_INTERVAL = Duration(60 * 1_000_000_000)
OUTPUT_TMP_DIR_NAME = "gfd-tmp"

# Values the feature discovery command line flags take when not given.
GFD_FLAG_DEFAULTS: dict[str, Any] = {
    "mig-strategy": MIG_STRATEGY_NONE,
    "fail-on-init-error": True,
    "oneshot": False,
    "no-timestamp": False,
    "sleep-interval": DEFAULT_SLEEP_INTERVAL,
    "output-file": DEFAULT_OUTPUT_FILE,
    "machine-type-file": DEFAULT_MACHINE_TYPE_FILE,
    "config-file": "",
    "use-node-feature-api": False,
}


def load_gfd_config(
    values: Mapping[str, Any] | None = None,
    explicitly_set: Collection[str] | None = None,
    config_file: str | None = None,
) -> Config:
    """Build the feature discovery config.

    ``values`` holds command line values; flags missing from it take their
    defaults. When ``explicitly_set`` is None, every flag present in
    ``values`` counts as given explicitly. Plugin-only flags are dropped.
    """
    given = dict(values or {})
    if explicitly_set is None:
        explicitly_set = set(given)
    merged = {**GFD_FLAG_DEFAULTS, **given}
    try:
        config = new_config(merged, explicitly_set, config_file)
    except ValueError as err:
        raise ValueError(f"unable to finalize config: {err}") from err
    config.flags.plugin = None
    return config


def remove_output_file(path: str) -> None:
    """Remove the labels output file and the temporary directory beside it."""
    abs_path = os.path.abspath(path)
    tmp_dir = os.path.join(os.path.dirname(abs_path), OUTPUT_TMP_DIR_NAME)
    try:
        shutil.rmtree(tmp_dir)
    except FileNotFoundError:
        pass
    except OSError as err:
        raise OSError(f"failed to remove temporary output directory: {err}") from err
    try:
        os.remove(abs_path)
    except OSError as err:
        raise OSError(f"failed to remove output file: {err}") from err


def config_to_json_text(config: Config) -> str:
    """Render a config as indented JSON for logging."""
    return json.dumps(config.to_json(), indent=2)