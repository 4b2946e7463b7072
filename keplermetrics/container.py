"""Collector exposing per-container energy and resource metrics."""

from __future__ import annotations

import threading
from collections.abc import Iterator, MutableMapping
from typing import Optional

from . import consts, descriptors
from .collect import ContainerStats, collect_energy_metrics, collect_res_utilization_metrics
from .consts import MetricsConfig
from .descriptors import Desc, Metric, PromCounter

CONTEXT = "container"
TOTAL = "total"

_DYNAMIC_TOTAL_KEYS = (
    consts.DYN_ENERGY_IN_PKG,
    consts.DYN_ENERGY_IN_DRAM,
    consts.DYN_ENERGY_IN_OTHER,
    consts.DYN_ENERGY_IN_GPU,
)
_IDLE_TOTAL_KEYS = (
    consts.IDLE_ENERGY_IN_PKG,
    consts.IDLE_ENERGY_IN_DRAM,
    consts.IDLE_ENERGY_IN_OTHER,
    consts.IDLE_ENERGY_IN_GPU,
)


class ContainerCollector:
    """Reads a shared map of container statistics and produces metric samples."""

    def __init__(
        self,
        container_stats: MutableMapping[str, ContainerStats],
        lock: Optional[threading.Lock] = None,
        config: Optional[MetricsConfig] = None,
    ) -> None:
        self.container_stats = container_stats
        self.lock = lock if lock is not None else threading.Lock()
        self.config = config if config is not None else MetricsConfig()
        self.descriptions: dict[str, Desc] = {}
        self.collectors: dict[str, PromCounter] = {}
        self._init_metrics()

    def _init_metrics(self) -> None:
        config = self.config
        if not config.expose_container_stats:
            return
        groups = (
            descriptors.hc_metrics_prom_desc(CONTEXT, config),
            descriptors.sc_metrics_prom_desc(CONTEXT),
            descriptors.irq_metrics_prom_desc(CONTEXT, config),
            descriptors.cgroup_metrics_prom_desc(CONTEXT, config),
            descriptors.energy_metrics_prom_desc(CONTEXT, config),
            descriptors.gpu_usage_metrics_prom_desc(CONTEXT, config),
        )
        for group in groups:
            for name, desc in group.items():
                self.descriptions[name] = desc
                self.collectors[name] = PromCounter(desc)

        desc = descriptors.metrics_prom_desc(CONTEXT, "joules", "_total", "", consts.CONTAINER_ENERGY_LABELS)
        self.descriptions[TOTAL] = desc
        self.collectors[TOTAL] = PromCounter(desc)

    def describe(self) -> list[Desc]:
        """Return the descriptors of all metrics this collector can produce."""
        return list(self.descriptions.values())

    def collect(self) -> list[Metric]:
        """Return the current samples of every container, read under the lock."""
        with self.lock:
            samples: list[Metric] = []
            for container in self.container_stats.values():
                samples.extend(collect_energy_metrics(container, self.collectors, self.config))
                samples.extend(collect_res_utilization_metrics(container, self.collectors, self.config))
                samples.extend(self._collect_total_energy(container))
            return samples

    def _collect_total_energy(self, container: ContainerStats) -> Iterator[Metric]:
        # Same value as the platform metric; kept for existing dashboards.
        collector = self.collectors.get(TOTAL)
        if collector is None:
            raise LookupError(f"no collector registered for metric {TOTAL!r}")
        for mode, keys in (("dynamic", _DYNAMIC_TOTAL_KEYS), ("idle", _IDLE_TOTAL_KEYS)):
            millijoules = sum(int(sum(container.energy_usage.get(key, {}).values())) for key in keys)
            # the total is reported in whole joules
            joules = millijoules // consts.MILLIJOULE_TO_JOULE
            yield collector.must_metric(
                joules,
                container.container_id,
                container.pod_name,
                container.container_name,
                container.namespace,
                mode,
            )