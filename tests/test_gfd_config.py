import json

import pytest

from gpudeviceconfig.duration import parse_duration
from gpudeviceconfig.gfd_config import (
    config_to_json_text,
    load_gfd_config,
    remove_output_file,
)


def test_defaults():
    config = load_gfd_config()
    assert config.flags.plugin is None
    assert config.flags.gfd.oneshot is False
    assert config.flags.gfd.no_timestamp is False
    assert config.flags.gfd.output_file == "/etc/kubernetes/node-feature-discovery/features.d/gfd"
    assert config.flags.gfd.machine_type_file == "/sys/class/dmi/id/product_name"
    assert str(config.flags.gfd.sleep_interval) == "1m0s"
    assert config.flags.mig_strategy == "none"
    assert config.flags.fail_on_init_error is True
    assert config.version == "v1"


def test_explicit_values_override_defaults():
    config = load_gfd_config({"oneshot": True, "sleep-interval": "5s", "mig-strategy": "mixed"})
    assert config.flags.gfd.oneshot is True
    assert config.flags.gfd.sleep_interval == parse_duration("5s")
    assert config.flags.mig_strategy == "mixed"


def test_config_file_wins_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "version: v1\nflags:\n  gfd:\n    oneshot: true\n    sleepInterval: 5s\n"
    )
    config = load_gfd_config(config_file=str(path))
    assert config.flags.gfd.oneshot is True
    assert config.flags.gfd.sleep_interval == parse_duration("5s")
    assert config.flags.mig_strategy == "none"
    assert config.flags.plugin is None


def test_explicit_value_wins_over_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: v1\nflags:\n  gfd:\n    oneshot: true\n")
    config = load_gfd_config({"oneshot": False}, config_file=str(path))
    assert config.flags.gfd.oneshot is False


def test_config_file_from_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: v1\nflags:\n  migStrategy: single\n")
    config = load_gfd_config({"config-file": str(path)}, explicitly_set=set())
    assert config.flags.mig_strategy == "single"


def test_unknown_version_fails(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: v2\n")
    with pytest.raises(ValueError, match="unable to finalize config"):
        load_gfd_config(config_file=str(path))


def test_missing_config_file_fails(tmp_path):
    with pytest.raises(ValueError, match="error opening config file"):
        load_gfd_config(config_file=str(tmp_path / "missing.yaml"))


def test_remove_output_file(tmp_path):
    out = tmp_path / "gfd"
    out.write_text("nvidia.com/gpu.count=1\n")
    tmp_dir = tmp_path / "gfd-tmp"
    tmp_dir.mkdir()
    (tmp_dir / "partial").write_text("x")
    remove_output_file(str(out))
    assert not out.exists()
    assert not tmp_dir.exists()


def test_remove_output_file_without_tmp_dir(tmp_path):
    out = tmp_path / "gfd"
    out.write_text("")
    remove_output_file(str(out))
    assert not out.exists()


def test_remove_missing_output_file_fails(tmp_path):
    with pytest.raises(OSError, match="failed to remove output file"):
        remove_output_file(str(tmp_path / "absent"))


def test_config_to_json_text_round_trip():
    config = load_gfd_config({"oneshot": True})
    text = config_to_json_text(config)
    assert json.loads(text) == config.to_json()
    assert text.startswith('{\n  "version": "v1"')
    assert json.loads(text)["flags"]["gfd"]["sleepInterval"] == "1m0s"
    assert "plugin" not in json.loads(text)["flags"]