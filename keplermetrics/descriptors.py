"""Prometheus-style metric descriptors and the factories that build them."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from . import consts
from .consts import MetricsConfig

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_ENERGY_LABELS = {
    "process": consts.PROCESS_ENERGY_LABELS,
    "container": consts.CONTAINER_ENERGY_LABELS,
    "vm": consts.VM_ENERGY_LABELS,
    "node": consts.NODE_ENERGY_LABELS,
}

_RES_UTIL_LABELS = {
    "process": consts.PROCESS_RES_UTIL_LABELS,
    "container": consts.CONTAINER_RES_UTIL_LABELS,
    "vm": consts.VM_RES_UTIL_LABELS,
    "node": consts.NODE_RES_UTIL_LABELS,
}


class ValueType(enum.Enum):
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class Desc:
    """Immutable description of a metric family."""

    fq_name: str
    help: str
    variable_labels: tuple[str, ...] = ()
    const_labels: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not _METRIC_NAME_RE.match(self.fq_name):
            raise ValueError(f"invalid metric name {self.fq_name!r}")
        object.__setattr__(self, "variable_labels", tuple(self.variable_labels))
        object.__setattr__(self, "const_labels", dict(self.const_labels))
        seen: set[str] = set()
        for label in (*self.const_labels, *self.variable_labels):
            if not _LABEL_NAME_RE.match(label) or label.startswith("__"):
                raise ValueError(f"invalid label name {label!r}")
            if label in seen:
                raise ValueError(f"duplicate label name {label!r}")
            seen.add(label)


@dataclass(frozen=True)
class Metric:
    """A single sample bound to a descriptor."""

    desc: Desc
    value_type: ValueType
    value: float
    label_values: tuple[str, ...]

    @property
    def labels(self) -> dict[str, str]:
        """All labels of the sample, constant ones first."""
        return {**self.desc.const_labels, **dict(zip(self.desc.variable_labels, self.label_values))}


class _PromMetric:
    value_type: ValueType

    def __init__(self, desc: Desc) -> None:
        self.desc = desc

    def must_metric(self, value: float, *args: str) -> Metric:
        """Build a sample; raise ValueError if the label count does not match."""
        if len(args) != len(self.desc.variable_labels):
            raise ValueError(
                f"inconsistent label cardinality for {self.desc.fq_name}: "
                f"expected {len(self.desc.variable_labels)} label values, got {len(args)}"
            )
        return Metric(self.desc, self.value_type, float(value), tuple(args))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.desc.fq_name!r})"


class PromCounter(_PromMetric):
    value_type = ValueType.COUNTER

    def must_metric(self, value: float, *args: str) -> Metric:
        return super().must_metric(value, *args)


class PromGauge(_PromMetric):
    value_type = ValueType.GAUGE

    def must_metric(self, value: float, *args: str) -> Metric:
        return super().must_metric(value, *args)


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with '_'; an empty name gives an empty result."""
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


def metrics_prom_desc(context: str, name: str, suffix: str, source: str, labels) -> Desc:
    return Desc(
        build_fq_name(consts.METRICS_NAMESPACE, context, name + suffix),
        f"Aggregated value in {name} value from {source}",
        tuple(labels),
        {"source": source},
    )


def _labels_for(table: dict[str, tuple[str, ...]], context: str) -> tuple[str, ...]:
    try:
        return table[context]
    except KeyError:
        raise ValueError(f"unexpected prometheus context: {context}") from None


def _energy_desc(context: str, name: str, source: str) -> Desc:
    labels = _labels_for(_ENERGY_LABELS, context)
    return metrics_prom_desc(context, name, consts.ENERGY_METRIC_NAME_SUFFIX, source, labels)


def _res_desc(context: str, name: str, source: str) -> Desc:
    labels = _labels_for(_RES_UTIL_LABELS, context)
    if name in consts.GPU_METRIC_NAMES:
        labels = labels + consts.GPU_RES_UTIL_LABELS
    return metrics_prom_desc(context, name, consts.USAGE_METRIC_NAME_SUFFIX, source, labels)


def energy_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    descriptions = {}
    for name in consts.ENERGY_METRIC_NAMES:
        if consts.GPU in name:
            source = consts.GPU_ENERGY_SOURCE
        elif consts.PLATFORM in name and config.platform_collection_supported:
            source = consts.PLATFORM_ENERGY_SOURCE
        elif config.components_collection_supported:
            source = consts.COMPONENT_ENERGY_SOURCE
        else:
            source = consts.TRAINED_POWER_MODEL_SOURCE
        descriptions[name] = _energy_desc(context, name, source)
    return descriptions


def hc_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not config.hc_metrics:
        return {}
    return {name: _res_desc(context, name, "bpf") for name in consts.HC_METRIC_NAMES}


def sc_metrics_prom_desc(context: str) -> dict[str, Desc]:
    return {name: _res_desc(context, name, "bpf") for name in consts.SC_METRIC_NAMES}


def irq_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not config.irq_counter_metrics:
        return {}
    return {name: _res_desc(context, name, "bpf") for name in consts.IRQ_METRIC_NAMES}


def cgroup_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not config.cgroup_metrics:
        return {}
    return {name: _res_desc(context, name, "cgroup") for name in consts.CGROUP_METRIC_NAMES}


def qat_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not config.expose_qat_metrics:
        return {}
    name = consts.QAT_UTILIZATION
    return {name: _res_desc(context, name, "intel_qat")}


def node_cpu_frequency_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not config.expose_cpu_frequency_metrics:
        return {}
    name = consts.CPU_FREQUENCY
    return {name: _res_desc(context, name, "")}


def gpu_usage_metrics_prom_desc(context: str, config: MetricsConfig) -> dict[str, Desc]:
    if not (config.enabled_gpu and config.gpu_collection_supported):
        return {}
    return {name: _res_desc(context, name, "nvidia-nvml") for name in consts.GPU_METRIC_NAMES}