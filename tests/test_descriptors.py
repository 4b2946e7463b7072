import pytest

from keplermetrics import consts
from keplermetrics.consts import MetricsConfig
from keplermetrics.descriptors import (
    Desc,
    PromCounter,
    PromGauge,
    ValueType,
    build_fq_name,
    cgroup_metrics_prom_desc,
    energy_metrics_prom_desc,
    gpu_usage_metrics_prom_desc,
    hc_metrics_prom_desc,
    irq_metrics_prom_desc,
    metrics_prom_desc,
    node_cpu_frequency_metrics_prom_desc,
    qat_metrics_prom_desc,
    sc_metrics_prom_desc,
)


def test_build_fq_name_joins_parts():
    assert build_fq_name("kepler", "node", "package_joules_total") == "kepler_node_package_joules_total"


def test_build_fq_name_skips_empty_parts_and_empty_name():
    assert build_fq_name("kepler", "", "info") == "kepler_info"
    assert build_fq_name("kepler", "node", "") == ""


def test_metrics_prom_desc_fields():
    desc = metrics_prom_desc("node", "", "info", "os", ["cpu_architecture"])
    assert desc.fq_name == "kepler_node_info"
    assert desc.const_labels == {"source": "os"}
    assert desc.variable_labels == ("cpu_architecture",)
    assert desc.help == "Aggregated value in  value from os"


def test_energy_desc_names_and_labels():
    descs = energy_metrics_prom_desc("container", MetricsConfig())
    assert set(descs) == set(consts.ENERGY_METRIC_NAMES)
    assert descs[consts.PKG].fq_name == "kepler_container_package_joules_total"
    assert descs[consts.PKG].variable_labels == consts.CONTAINER_ENERGY_LABELS


def test_energy_desc_sources_follow_config():
    model = energy_metrics_prom_desc("node", MetricsConfig())
    assert model[consts.PKG].const_labels["source"] == consts.TRAINED_POWER_MODEL_SOURCE
    assert model[consts.PLATFORM].const_labels["source"] == consts.TRAINED_POWER_MODEL_SOURCE
    assert model[consts.GPU].const_labels["source"] == consts.GPU_ENERGY_SOURCE

    real = energy_metrics_prom_desc(
        "node", MetricsConfig(components_collection_supported=True, platform_collection_supported=True)
    )
    assert real[consts.CORE].const_labels["source"] == consts.COMPONENT_ENERGY_SOURCE
    assert real[consts.PLATFORM].const_labels["source"] == consts.PLATFORM_ENERGY_SOURCE


def test_unknown_context_raises():
    with pytest.raises(ValueError):
        energy_metrics_prom_desc("pod", MetricsConfig())
    with pytest.raises(ValueError):
        sc_metrics_prom_desc("pod")


def test_switches_disable_descriptions():
    off = MetricsConfig(hc_metrics=False, irq_counter_metrics=False, cgroup_metrics=False)
    assert hc_metrics_prom_desc("process", off) == {}
    assert irq_metrics_prom_desc("process", off) == {}
    assert cgroup_metrics_prom_desc("process", off) == {}
    assert qat_metrics_prom_desc("node", off) == {}
    assert node_cpu_frequency_metrics_prom_desc("node", off) == {}
    assert gpu_usage_metrics_prom_desc("process", MetricsConfig(enabled_gpu=True)) == {}


def test_switches_enable_descriptions():
    on = MetricsConfig(cgroup_metrics=True, expose_qat_metrics=True, expose_cpu_frequency_metrics=True)
    assert set(hc_metrics_prom_desc("vm", on)) == set(consts.HC_METRIC_NAMES)
    assert set(irq_metrics_prom_desc("vm", on)) == set(consts.IRQ_METRIC_NAMES)
    cg = cgroup_metrics_prom_desc("vm", on)
    assert all(d.const_labels["source"] == "cgroup" for d in cg.values())
    qat = qat_metrics_prom_desc("node", on)[consts.QAT_UTILIZATION]
    assert qat.const_labels["source"] == "intel_qat"
    assert qat.variable_labels == consts.NODE_RES_UTIL_LABELS
    freq = node_cpu_frequency_metrics_prom_desc("node", on)
    assert list(freq) == [consts.CPU_FREQUENCY]


def test_sc_desc_uses_usage_suffix():
    descs = sc_metrics_prom_desc("process")
    for name, desc in descs.items():
        assert desc.fq_name == f"kepler_process_{name}_total"
        assert desc.variable_labels == consts.PROCESS_RES_UTIL_LABELS


def test_gpu_usage_desc_adds_gpu_label():
    cfg = MetricsConfig(enabled_gpu=True, gpu_collection_supported=True)
    descs = gpu_usage_metrics_prom_desc("container", cfg)
    assert set(descs) == set(consts.GPU_METRIC_NAMES)
    for desc in descs.values():
        assert desc.variable_labels == consts.CONTAINER_RES_UTIL_LABELS + consts.GPU_RES_UTIL_LABELS
        assert desc.const_labels["source"] == "nvidia-nvml"


def test_counter_and_gauge_metrics():
    desc = metrics_prom_desc("vm", "x", "_total", "bpf", ["vm_id"])
    counter = PromCounter(desc).must_metric(3, "vm1")
    gauge = PromGauge(desc).must_metric(2.5, "vm1")
    assert counter.value_type is ValueType.COUNTER
    assert counter.value == 3.0
    assert gauge.value_type is ValueType.GAUGE
    assert gauge.labels == {"source": "bpf", "vm_id": "vm1"}


def test_must_metric_label_count_mismatch():
    desc = metrics_prom_desc("vm", "x", "_total", "bpf", ["vm_id"])
    with pytest.raises(ValueError):
        PromCounter(desc).must_metric(1.0)
    with pytest.raises(ValueError):
        PromGauge(desc).must_metric(1.0, "a", "b")


def test_invalid_desc_rejected():
    with pytest.raises(ValueError):
        Desc("1bad", "help")
    with pytest.raises(ValueError):
        Desc("kepler_ok", "help", ("source",), {"source": "bpf"})
    with pytest.raises(ValueError):
        Desc("kepler_ok", "help", ("__reserved",))