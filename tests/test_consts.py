import pytest

from keplermetrics import consts
from keplermetrics.consts import MetricsConfig


def test_energy_pairs_align_name_tables():
    pairs = MetricsConfig(enabled_gpu=True).energy_pairs()
    assert len(pairs) == len(consts.ENERGY_METRIC_NAMES)
    assert [p[1] for p in pairs] == list(consts.DYN_ENERGY_METRIC_NAMES)
    assert [p[2] for p in pairs] == list(consts.IDLE_ENERGY_METRIC_NAMES)


def test_energy_pairs_pin_component_names():
    pairs = MetricsConfig(enabled_gpu=True).energy_pairs()
    assert pairs[0][0] == "package"
    assert pairs[-1][0] == "platform"


def test_energy_pairs_skip_gpu_when_disabled():
    pairs = MetricsConfig(enabled_gpu=False).energy_pairs()
    names = [name for name, _, _ in pairs]
    assert consts.GPU not in names
    assert len(pairs) == len(consts.ENERGY_METRIC_NAMES) - 1


def test_energy_pairs_include_gpu_when_enabled():
    pairs = MetricsConfig(enabled_gpu=True).energy_pairs()
    assert (consts.GPU, consts.DYN_ENERGY_IN_GPU, consts.IDLE_ENERGY_IN_GPU) in pairs
    assert [p[0] for p in pairs] == list(consts.ENERGY_METRIC_NAMES)


@pytest.mark.parametrize("enabled_gpu", [True, False])
def test_energy_pairs_keep_order_and_keys(enabled_gpu):
    pairs = MetricsConfig(enabled_gpu=enabled_gpu).energy_pairs()
    assert pairs[0] == (consts.PKG, consts.DYN_ENERGY_IN_PKG, consts.IDLE_ENERGY_IN_PKG)
    assert pairs[-1] == (consts.PLATFORM, consts.DYN_ENERGY_IN_PLATFORM, consts.IDLE_ENERGY_IN_PLATFORM)