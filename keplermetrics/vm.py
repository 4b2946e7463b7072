"""Collector exposing per-virtual-machine energy and resource metrics."""

from __future__ import annotations

import threading
from collections.abc import MutableMapping
from typing import Optional

from . import descriptors
from .collect import VMStats, collect_energy_metrics, collect_res_utilization_metrics
from .consts import MetricsConfig
from .descriptors import Desc, Metric, PromCounter

CONTEXT = "vm"


class VMCollector:
    """Reads a shared map of virtual machine statistics and produces metric samples."""

    def __init__(
        self,
        vm_stats: MutableMapping[str, VMStats],
        lock: Optional[threading.Lock] = None,
        config: Optional[MetricsConfig] = None,
    ) -> None:
        self.vm_stats = vm_stats
        self.lock = lock if lock is not None else threading.Lock()
        self.config = config if config is not None else MetricsConfig()
        self.descriptions: dict[str, Desc] = {}
        self.collectors: dict[str, PromCounter] = {}
        self._init_metrics()

    def _init_metrics(self) -> None:
        config = self.config
        if not config.expose_vm_stats:
            return
        groups = (
            descriptors.hc_metrics_prom_desc(CONTEXT, config),
            descriptors.sc_metrics_prom_desc(CONTEXT),
            descriptors.irq_metrics_prom_desc(CONTEXT, config),
            descriptors.cgroup_metrics_prom_desc(CONTEXT, config),
            descriptors.energy_metrics_prom_desc(CONTEXT, config),
        )
        for group in groups:
            for name, desc in group.items():
                self.descriptions[name] = desc
                self.collectors[name] = PromCounter(desc)

    def describe(self) -> list[Desc]:
        """Return the descriptors of all metrics this collector can produce."""
        return list(self.descriptions.values())

    def collect(self) -> list[Metric]:
        """Return the current samples of every virtual machine, read under the lock."""
        with self.lock:
            samples: list[Metric] = []
            for vm in self.vm_stats.values():
                samples.extend(collect_energy_metrics(vm, self.collectors, self.config))
                samples.extend(collect_res_utilization_metrics(vm, self.collectors, self.config))
            return samples