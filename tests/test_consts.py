import pytest

from gpudeviceconfig.consts import (
    DEVICE_LIST_STRATEGIES,
    DEVICE_LIST_STRATEGY_CDI_ANNOTATIONS,
    DEVICE_LIST_STRATEGY_ENVVAR,
    DEVICE_LIST_STRATEGY_VOLUME_MOUNTS,
    DeviceListStrategies,
)


def test_single_strategy_enabled():
    strategies = DeviceListStrategies(["envvar"])
    assert strategies.includes(DEVICE_LIST_STRATEGY_ENVVAR) is True
    assert strategies.includes(DEVICE_LIST_STRATEGY_VOLUME_MOUNTS) is False
    assert strategies.includes(DEVICE_LIST_STRATEGY_CDI_ANNOTATIONS) is False


def test_all_known_strategies_present_as_keys():
    strategies = DeviceListStrategies([])
    assert set(strategies) == set(DEVICE_LIST_STRATEGIES)
    assert len(strategies) == len(DEVICE_LIST_STRATEGIES)
    assert not any(strategies.values())


def test_unknown_strategy_not_included():
    strategies = DeviceListStrategies(["envvar"])
    assert strategies.includes("bogus") is False


def test_invalid_strategy_raises():
    with pytest.raises(ValueError, match="invalid strategy: bogus"):
        DeviceListStrategies(["envvar", "bogus"])


@pytest.mark.parametrize(
    "names, expected",
    [
        (["envvar"], False),
        (["volume-mounts"], False),
        (["cdi-annotations"], True),
        (["envvar", "cdi-annotations"], True),
        ([], False),
    ],
)
def test_is_cdi_enabled(names, expected):
    assert DeviceListStrategies(names).is_cdi_enabled() is expected


def test_mapping_access():
    strategies = DeviceListStrategies(["volume-mounts"])
    assert strategies[DEVICE_LIST_STRATEGY_VOLUME_MOUNTS] is True
    assert strategies[DEVICE_LIST_STRATEGY_ENVVAR] is False


def test_plain_string_is_one_strategy():
    strategies = DeviceListStrategies("envvar")
    assert strategies.includes("envvar") is True