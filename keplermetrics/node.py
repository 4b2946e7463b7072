"""Collector exposing node-wide energy and resource metrics."""

from __future__ import annotations

import threading
from typing import Optional

from . import consts, descriptors
from .collect import NodeStats, collect_energy_metrics, collect_res_util
from .consts import MetricsConfig
from .descriptors import Desc, Metric, PromCounter

CONTEXT = "node"
INFO = "info"
INFO_LABELS = ("cpu_architecture", "components_power_source", "platform_power_source")


class NodeCollector:
    """Reads the node statistics and produces per-device metric samples."""

    def __init__(
        self,
        node_stats: NodeStats,
        lock: Optional[threading.Lock] = None,
        config: Optional[MetricsConfig] = None,
    ) -> None:
        self.node_stats = node_stats
        self.lock = lock if lock is not None else threading.Lock()
        self.config = config if config is not None else MetricsConfig()
        self.descriptions: dict[str, Desc] = {}
        self.collectors: dict[str, PromCounter] = {}
        self._init_metrics()

    def _init_metrics(self) -> None:
        config = self.config
        # the node exports other resource metrics than processes, containers and VMs
        groups = (
            descriptors.qat_metrics_prom_desc(CONTEXT, config),
            descriptors.node_cpu_frequency_metrics_prom_desc(CONTEXT, config),
            descriptors.energy_metrics_prom_desc(CONTEXT, config),
        )
        for group in groups:
            for name, desc in group.items():
                self.descriptions[name] = desc
                self.collectors[name] = PromCounter(desc)

        desc = descriptors.metrics_prom_desc(CONTEXT, "", INFO, "os", INFO_LABELS)
        self.descriptions[INFO] = desc
        self.collectors[INFO] = PromCounter(desc)

    def describe(self) -> list[Desc]:
        """Return the descriptors of all metrics this collector can produce."""
        return list(self.descriptions.values())

    def collect(self) -> list[Metric]:
        """Return the node's energy, resource and info samples."""
        with self.lock:
            samples = list(collect_energy_metrics(self.node_stats, self.collectors, self.config))
            for name in (consts.CPU_FREQUENCY, consts.QAT_UTILIZATION):
                samples.extend(collect_res_util(self.node_stats, name, self.collectors.get(name)))

        config = self.config
        samples.append(
            self.collectors[INFO].must_metric(
                1,
                config.cpu_architecture,
                config.components_source_name,
                config.platform_source_name,
            )
        )
        return samples