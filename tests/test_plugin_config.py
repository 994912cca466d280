import pytest

from gpudeviceconfig.config import Config
from gpudeviceconfig.flags import Flags, PluginCommandLineFlags
from gpudeviceconfig.plugin_config import (
    check_mig_strategy,
    disable_resource_renaming,
    load_plugin_config,
    validate_plugin_flags,
)
from gpudeviceconfig.replicas import (
    ReplicatedDeviceRef,
    ReplicatedDevices,
    ReplicatedResource,
    Sharing,
    TimeSlicing,
)
from gpudeviceconfig.resources import Resources, new_resource_name


def _config(strategies, id_strategy):
    return Config(
        flags=Flags(
            plugin=PluginCommandLineFlags(
                device_list_strategy=strategies, device_id_strategy=id_strategy
            )
        )
    )


def test_validate_accepts_known_strategies():
    result = validate_plugin_flags(_config(["envvar", "cdi-annotations"], "index"))
    assert result.is_cdi_enabled() is True
    assert result.includes("envvar") is True
    assert result.includes("volume-mounts") is False


def test_validate_rejects_unknown_list_strategy():
    with pytest.raises(ValueError, match="invalid --device-list-strategy option"):
        validate_plugin_flags(_config(["bogus"], "uuid"))


def test_validate_rejects_unknown_id_strategy():
    with pytest.raises(ValueError, match="invalid --device-id-strategy option: bogus"):
        validate_plugin_flags(_config(["envvar"], "bogus"))


def test_validate_rejects_missing_plugin_flags():
    with pytest.raises(ValueError, match="device-list-strategy"):
        validate_plugin_flags(Config())


@pytest.mark.parametrize("strategy", ["none", "single", "mixed"])
def test_check_mig_strategy_known(strategy):
    assert check_mig_strategy(strategy) == strategy


def test_check_mig_strategy_unknown():
    with pytest.raises(ValueError, match="unknown strategy: bogus"):
        check_mig_strategy("bogus")


def test_load_defaults():
    config = load_plugin_config()
    assert config.flags.mig_strategy == "none"
    assert config.flags.fail_on_init_error is True
    assert config.flags.nvidia_driver_root == "/"
    assert config.flags.plugin.device_list_strategy == ["envvar"]
    assert config.flags.plugin.device_id_strategy == "uuid"
    assert config.flags.plugin.nvidia_ctk_path == "/usr/bin/nvidia-ctk"
    assert config.flags.plugin.container_driver_root == "/driver-root"
    assert config.flags.gfd is None
    assert config.version == "v1"


def test_load_explicit_values_win():
    config = load_plugin_config({"mig-strategy": "mixed", "device-id-strategy": "index"})
    assert config.flags.mig_strategy == "mixed"
    assert config.flags.plugin.device_id_strategy == "index"


def test_load_file_overrides_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "version: v1\n"
        "flags:\n"
        "  migStrategy: single\n"
        "  plugin:\n"
        "    deviceIDStrategy: index\n"
    )
    config = load_plugin_config({}, config_file=str(path))
    assert config.flags.mig_strategy == "single"
    assert config.flags.plugin.device_id_strategy == "index"
    assert config.flags.plugin.device_list_strategy == ["envvar"]


def test_load_explicit_beats_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("flags:\n  migStrategy: single\n")
    config = load_plugin_config({"mig-strategy": "mixed"}, config_file=str(path))
    assert config.flags.mig_strategy == "mixed"


def test_load_invalid_file_strategy(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("flags:\n  plugin:\n    deviceListStrategy: bogus\n")
    with pytest.raises(ValueError, match="unable to validate flags"):
        load_plugin_config({}, config_file=str(path))


def test_load_missing_file(tmp_path):
    with pytest.raises(ValueError, match="unable to finalize config"):
        load_plugin_config({}, config_file=str(tmp_path / "absent.yaml"))


def _resource(rename, devices):
    return ReplicatedResource(
        name=new_resource_name("gpu"),
        devices=devices,
        replicas=2,
        rename=rename,
    )


def test_disable_clears_resources_and_renames():
    resources = Resources()
    resources.add_gpu_resource("*", "gpu")
    resources.add_mig_resource("*", "mig")
    shared = _resource(
        new_resource_name("gpu-shared"),
        ReplicatedDevices(refs=[ReplicatedDeviceRef("0")]),
    )
    config = Config(
        resources=resources,
        sharing=Sharing(time_slicing=TimeSlicing(resources=[shared])),
    )
    disable_resource_renaming(config)
    assert config.resources.gpus == []
    assert config.resources.migs == []
    assert shared.rename is None
    assert shared.devices == ReplicatedDevices(all=True)


def test_disable_applies_default_rename():
    shared = _resource(new_resource_name("other"), ReplicatedDevices(count=3))
    config = Config(
        sharing=Sharing(
            time_slicing=TimeSlicing(rename_by_default=True, resources=[shared])
        )
    )
    disable_resource_renaming(config)
    assert shared.rename == new_resource_name("gpu").default_shared_rename()
    assert shared.devices.all is True
    assert shared.devices.count == 0


def test_disable_leaves_supported_settings():
    shared = _resource(None, ReplicatedDevices(all=True))
    config = Config(sharing=Sharing(time_slicing=TimeSlicing(resources=[shared])))
    disable_resource_renaming(config)
    assert shared.rename is None
    assert shared.devices == ReplicatedDevices(all=True)
    assert shared.replicas == 2