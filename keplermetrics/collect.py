"""Workload statistics and the functions that turn them into metric samples."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional, Union

from . import consts
from .consts import MetricsConfig
from .descriptors import Metric, PromCounter, PromGauge

# metric name -> device id -> aggregated value
Usage = dict[str, dict[str, float]]
Collector = Union[PromCounter, PromGauge]


@dataclass
class ProcessStats:
    """Energy and resource usage of one process."""

    pid: int
    container_id: str = ""
    vm_id: str = ""
    command: str = ""
    energy_usage: Usage = field(default_factory=dict)
    resource_usage: Usage = field(default_factory=dict)


@dataclass
class ContainerStats:
    """Energy and resource usage of one container."""

    container_id: str
    pod_name: str = ""
    container_name: str = ""
    namespace: str = ""
    energy_usage: Usage = field(default_factory=dict)
    resource_usage: Usage = field(default_factory=dict)


@dataclass
class VMStats:
    """Energy and resource usage of one virtual machine."""

    vm_id: str
    energy_usage: Usage = field(default_factory=dict)
    resource_usage: Usage = field(default_factory=dict)


@dataclass
class NodeStats:
    """Per-device energy and resource usage of the whole node."""

    node_name: str = ""
    energy_usage: Usage = field(default_factory=dict)
    resource_usage: Usage = field(default_factory=dict)


Instance = Union[ProcessStats, ContainerStats, VMStats, NodeStats]


def _sum_aggr(usage: Usage, metric_name: str) -> float:
    return float(sum(usage.get(metric_name, {}).values()))


def _emit(collector: Optional[Collector], metric_name: str, value: float, labels: list[str]) -> Metric:
    if collector is None:
        raise LookupError(f"no collector registered for metric {metric_name!r}")
    return collector.must_metric(value, *labels)


def _collect_energy(
    instance: Instance, metric_name: str, mode: str, collector: Optional[Collector]
) -> Iterator[Metric]:
    if isinstance(instance, ContainerStats):
        value = _sum_aggr(instance.energy_usage, metric_name) / consts.MILLIJOULE_TO_JOULE
        labels = [instance.container_id, instance.pod_name, instance.container_name, instance.namespace, mode]
        yield _emit(collector, metric_name, value, labels)
    elif isinstance(instance, ProcessStats):
        value = _sum_aggr(instance.energy_usage, metric_name) / consts.MILLIJOULE_TO_JOULE
        labels = [str(instance.pid), instance.container_id, instance.vm_id, instance.command, mode]
        yield _emit(collector, metric_name, value, labels)
    elif isinstance(instance, VMStats):
        value = _sum_aggr(instance.energy_usage, metric_name) / consts.MILLIJOULE_TO_JOULE
        yield _emit(collector, metric_name, value, [instance.vm_id, mode])
    elif isinstance(instance, NodeStats):
        # only the node reports per device; the others report the aggregate
        for device_id, aggr in instance.energy_usage.get(metric_name, {}).items():
            value = float(aggr) / consts.MILLIJOULE_TO_JOULE
            yield _emit(collector, metric_name, value, [device_id, instance.node_name, mode])
    else:
        raise TypeError(f"type {type(instance).__name__} is not known")


def collect_energy_metrics(
    instance: Instance, collectors: Mapping[str, Collector], config: MetricsConfig
) -> Iterator[Metric]:
    """Yield dynamic, and if enabled idle, energy samples in joules."""
    for name, dyn_key, idle_key in config.energy_pairs():
        collector = collectors.get(name)
        yield from _collect_energy(instance, dyn_key, "dynamic", collector)
        # idle power is the host's and is only split among workloads when enabled
        if config.idle_power:
            yield from _collect_energy(instance, idle_key, "idle", collector)


def collect_res_utilization_metrics(
    instance: Instance, collectors: Mapping[str, Collector], config: MetricsConfig
) -> Iterator[Metric]:
    """Yield resource utilization samples for every enabled counter group."""
    names: list[str] = list(consts.SC_METRIC_NAMES)
    if config.irq_counter_metrics:
        names.extend(consts.IRQ_METRIC_NAMES)
    if config.hc_metrics:
        names.extend(consts.HC_METRIC_NAMES)
    if config.cgroup_metrics:
        names.extend(consts.CGROUP_METRIC_NAMES)
    if config.enabled_gpu and config.gpu_collection_supported:
        names.extend(consts.GPU_METRIC_NAMES)
    for name in names:
        yield from collect_res_util(instance, name, collectors.get(name))


def collect_res_util(
    instance: Instance, metric_name: str, collector: Optional[Collector]
) -> Iterator[Metric]:
    """Yield the samples of one resource utilization metric for an instance."""
    if isinstance(instance, ContainerStats):
        base = [instance.container_id, instance.pod_name, instance.container_name, instance.namespace]
        if metric_name in consts.GPU_METRIC_NAMES:
            # GPU metrics are reported per device
            for device_id, aggr in instance.resource_usage.get(metric_name, {}).items():
                yield _emit(collector, metric_name, float(aggr), [*base, device_id])
        else:
            yield _emit(collector, metric_name, _sum_aggr(instance.resource_usage, metric_name), base)
    elif isinstance(instance, ProcessStats):
        labels = [str(instance.pid), instance.container_id, instance.vm_id, instance.command]
        yield _emit(collector, metric_name, _sum_aggr(instance.resource_usage, metric_name), labels)
    elif isinstance(instance, VMStats):
        yield _emit(collector, metric_name, _sum_aggr(instance.resource_usage, metric_name), [instance.vm_id])
    elif isinstance(instance, NodeStats):
        for device_id, aggr in instance.resource_usage.get(metric_name, {}).items():
            yield _emit(collector, metric_name, float(aggr), [device_id, instance.node_name])
    else:
        raise TypeError(f"type {type(instance).__name__} is not supported")