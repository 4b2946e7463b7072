"""Prometheus-style energy and resource utilization metrics for processes, containers, VMs and nodes."""

__version__ = "0.1.0"

__all__ = [
    "collect",
    "consts",
    "container",
    "descriptors",
    "exporter",
    "node",
    "process",
    "vm",
]