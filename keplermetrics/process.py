"""Collector exposing per-process energy and resource metrics."""

from __future__ import annotations

import threading
from collections.abc import MutableMapping
from typing import Optional

from . import descriptors
from .collect import ProcessStats, collect_energy_metrics, collect_res_utilization_metrics
from .consts import MetricsConfig
from .descriptors import Desc, Metric, PromCounter

CONTEXT = "process"


class ProcessCollector:
    """Reads a shared map of process statistics and produces metric samples."""

    def __init__(
        self,
        process_stats: MutableMapping[int, ProcessStats],
        lock: Optional[threading.Lock] = None,
        config: Optional[MetricsConfig] = None,
    ) -> None:
        self.process_stats = process_stats
        self.lock = lock if lock is not None else threading.Lock()
        self.config = config if config is not None else MetricsConfig()
        self.descriptions: dict[str, Desc] = {}
        self.collectors: dict[str, PromCounter] = {}
        self._init_metrics()

    def _init_metrics(self) -> None:
        config = self.config
        if not config.expose_process_stats:
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

    def describe(self) -> list[Desc]:
        """Return the descriptors of all metrics this collector can produce."""
        return list(self.descriptions.values())

    def collect(self) -> list[Metric]:
        """Return the current samples of every process, read under the lock."""
        with self.lock:
            samples: list[Metric] = []
            for process in self.process_stats.values():
                samples.extend(collect_energy_metrics(process, self.collectors, self.config))
                samples.extend(collect_res_utilization_metrics(process, self.collectors, self.config))
            return samples