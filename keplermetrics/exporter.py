"""Registry, text exposition and the exporter that wires the collectors together."""

from __future__ import annotations

import logging
import math
import platform
import threading
from decimal import Decimal
from typing import Optional

from .collect import ContainerStats, NodeStats, ProcessStats, VMStats
from .consts import MetricsConfig
from .container import ContainerCollector
from .descriptors import Desc, Metric, PromGauge
from .node import NodeCollector
from .process import ProcessCollector
from .vm import VMCollector

logger = logging.getLogger(__name__)


def _desc_id(desc: Desc) -> tuple:
    return (desc.fq_name, tuple(sorted(desc.const_labels.items())))


def _desc_dims(desc: Desc) -> tuple:
    return (desc.help, tuple(sorted((*desc.const_labels, *desc.variable_labels))))


def _sort_key(metric: Metric) -> tuple[str, ...]:
    return tuple(value for _, value in sorted(metric.labels.items()))


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _format_labels(labels: dict[str, str]) -> str:
    if not labels:
        return ""
    pairs = ",".join(f'{name}="{_escape_label_value(value)}"' for name, value in sorted(labels.items()))
    return "{" + pairs + "}"


def _format_value(value: float) -> str:
    """Shortest round-trip form, exponent notation outside 1e-4 <= |v| < 1e6."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "0"
    sign, digit_tuple, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    point = len(digits) + exponent
    exp = point - 1
    prefix = "-" if sign else ""
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return prefix + digits + "0" * (point - len(digits))
    return f"{prefix}{digits[:point]}.{digits[point:]}"


class BuildInfoCollector:
    """Exposes a constant gauge labelled with the build's version information."""

    def __init__(self, program: str, version: str = "", revision: str = "", branch: str = "") -> None:
        self.desc = Desc(
            f"{program}_build_info",
            "A metric with a constant '1' value labeled by version, revision, branch, "
            f"and python_version from which {program} was built.",
            (),
            {
                "version": version,
                "revision": revision,
                "branch": branch,
                "python_version": platform.python_version(),
            },
        )

    def describe(self) -> list[Desc]:
        return [self.desc]

    def collect(self) -> list[Metric]:
        return [PromGauge(self.desc).must_metric(1)]


class Registry:
    """Holds collectors and gathers their samples into metric families."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._collectors: list[tuple[object, frozenset]] = []
        self._desc_ids: set[tuple] = set()
        self._dims: dict[str, tuple] = {}

    def register(self, collector) -> None:
        """Add a collector; raise ValueError on a missing, repeated or conflicting one."""
        if collector is None:
            raise ValueError("cannot register a missing collector")
        with self._lock:
            if any(known is collector for known, _ in self._collectors):
                raise ValueError("collector is already registered")
            new_ids: set[tuple] = set()
            new_dims: dict[str, tuple] = {}
            for desc in collector.describe():
                desc_id = _desc_id(desc)
                if desc_id in self._desc_ids or desc_id in new_ids:
                    raise ValueError(f"descriptor {desc.fq_name} is already registered")
                dims = _desc_dims(desc)
                known = self._dims.get(desc.fq_name, new_dims.get(desc.fq_name))
                if known is not None and known != dims:
                    raise ValueError(
                        f"descriptor {desc.fq_name} has different label names or help "
                        "than a previously registered one"
                    )
                new_ids.add(desc_id)
                new_dims[desc.fq_name] = dims
            self._desc_ids |= new_ids
            self._dims.update(new_dims)
            self._collectors.append((collector, frozenset(new_ids)))

    def gather(self) -> dict[str, list[Metric]]:
        """Collect every sample, grouped by metric name, names and samples sorted."""
        with self._lock:
            collectors = list(self._collectors)
        families: dict[str, list[Metric]] = {}
        seen: set[tuple] = set()
        errors: list[str] = []
        for collector, described in collectors:
            for metric in collector.collect():
                name = metric.desc.fq_name
                if described and _desc_id(metric.desc) not in described:
                    errors.append(f"collected metric {name} was not described")
                    continue
                family = families.setdefault(name, [])
                if family and (
                    family[0].desc.help != metric.desc.help or family[0].value_type != metric.value_type
                ):
                    errors.append(f"collected metric {name} is inconsistent with its family")
                    continue
                key = (name, tuple(sorted(metric.labels.items())))
                if key in seen:
                    errors.append(f"collected metric {name} {dict(key[1])} was collected before")
                    continue
                seen.add(key)
                family.append(metric)
        if errors:
            raise ValueError("; ".join(errors))
        return {name: sorted(families[name], key=_sort_key) for name in sorted(families) if families[name]}

    def expose(self) -> str:
        """Render the gathered samples in the text exposition format."""
        lines: list[str] = []
        for name, samples in self.gather().items():
            first = samples[0]
            lines.append(f"# HELP {name} {_escape_help(first.desc.help)}")
            lines.append(f"# TYPE {name} {first.value_type.value}")
            lines.extend(f"{name}{_format_labels(m.labels)} {_format_value(m.value)}" for m in samples)
        return "\n".join(lines) + "\n" if lines else ""


_registry: Optional[Registry] = None
_registry_lock = threading.Lock()


def get_registry() -> Registry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = Registry()
        return _registry


class PrometheusExporter:
    """Owns the workload collectors and the lock they share with the stats updater."""

    def __init__(self, config: Optional[MetricsConfig] = None, version: str = "") -> None:
        self.config = config if config is not None else MetricsConfig()
        self.version = version
        self.lock = threading.Lock()
        self.process_stats_collector: Optional[ProcessCollector] = None
        self.container_stats_collector: Optional[ContainerCollector] = None
        self.vm_stats_collector: Optional[VMCollector] = None
        self.node_stats_collector: Optional[NodeCollector] = None

    def new_process_collector(self, process_metrics: dict[int, ProcessStats]) -> None:
        self.process_stats_collector = ProcessCollector(process_metrics, self.lock, self.config)

    def new_container_collector(self, container_metrics: dict[str, ContainerStats]) -> None:
        self.container_stats_collector = ContainerCollector(container_metrics, self.lock, self.config)

    def new_vm_collector(self, vm_metrics: dict[str, VMStats]) -> None:
        self.vm_stats_collector = VMCollector(vm_metrics, self.lock, self.config)

    def new_node_collector(self, node_metrics: NodeStats) -> None:
        self.node_stats_collector = NodeCollector(node_metrics, self.lock, self.config)

    def register_metrics(self, registry: Optional[Registry] = None) -> Registry:
        """Register the enabled collectors and return the registry."""
        registry = registry if registry is not None else get_registry()
        registry.register(BuildInfoCollector("kepler_exporter", version=self.version))

        if self.config.expose_process_stats:
            registry.register(self.process_stats_collector)
            logger.info("Registered Process Prometheus metrics")
        if self.config.expose_container_stats:
            registry.register(self.container_stats_collector)
            logger.info("Registered Container Prometheus metrics")
        if self.config.expose_vm_stats:
            registry.register(self.vm_stats_collector)
            logger.info("Registered VM Prometheus metrics")

        registry.register(self.node_stats_collector)
        logger.info("Registered Node Prometheus metrics")

        try:
            registry.gather()
        except (ValueError, LookupError, TypeError) as err:
            logger.error("%s", err)
        return registry