import threading

from keplermetrics import consts
from keplermetrics.collect import VMStats
from keplermetrics.consts import MetricsConfig
from keplermetrics.vm import VMCollector


def test_disabled_has_no_descriptions():
    collector = VMCollector({}, threading.Lock(), MetricsConfig(expose_vm_stats=False))
    assert collector.describe() == []
    assert collector.collectors == {}


def test_describe_has_no_gpu_usage():
    config = MetricsConfig(enabled_gpu=True, gpu_collection_supported=True)
    collector = VMCollector({}, threading.Lock(), config)
    names = {d.fq_name for d in collector.describe()}
    assert "kepler_vm_gpu_sm_util_total" not in names
    assert "kepler_vm_gpu_joules_total" in names


def test_collect_labels_and_values():
    lock = threading.Lock()
    config = MetricsConfig()
    stats = {
        "vm-a": VMStats(
            vm_id="vm-a",
            energy_usage={consts.IDLE_ENERGY_IN_DRAM: {"0": 1500}},
            resource_usage={consts.TASK_CLOCK: {"0": 9}},
        )
    }
    collector = VMCollector(stats, lock, config)
    metrics = collector.collect()
    assert not lock.locked()
    assert all(m.labels["vm_id"] == "vm-a" for m in metrics)
    (dram,) = [
        m for m in metrics if m.desc.fq_name == "kepler_vm_dram_joules_total" and m.labels["mode"] == "idle"
    ]
    assert dram.value * consts.MILLIJOULE_TO_JOULE == 1500
    (clock,) = [m for m in metrics if m.desc.fq_name == "kepler_vm_task_clock_ms_total"]
    assert clock.value == 9.0
    assert clock.labels["source"] == "bpf"


def test_collect_count():
    config = MetricsConfig(idle_power=False)
    collector = VMCollector({"v": VMStats(vm_id="v")}, threading.Lock(), config)
    metrics = collector.collect()
    expected = (
        len(config.energy_pairs())
        + len(consts.SC_METRIC_NAMES)
        + len(consts.IRQ_METRIC_NAMES)
        + len(consts.HC_METRIC_NAMES)
    )
    assert len(metrics) == expected