# keplermetrics

This package turns energy and resource-usage statistics into metrics in the
Prometheus format. It works on four levels: processes, containers, virtual
machines and the node.

It has no runtime dependencies. It builds its own metric descriptors and its
own registry, and it writes the Prometheus text exposition format itself.

## Installation

```
pip install keplermetrics
```

To install the test dependencies as well:

```
pip install "keplermetrics[test]"
```

## Modules

- **`keplermetrics.consts`** holds the metric names, the keys of the energy
  counters and the label sets. It also holds `MetricsConfig`, a dataclass of
  switches and host facts:
  - `expose_process_stats` (default off)
  - `expose_container_stats` (default on)
  - `expose_vm_stats` (default on)
  - `hc_metrics` and `irq_counter_metrics` (default on)
  - `cgroup_metrics`, `expose_qat_metrics`, `expose_cpu_frequency_metrics` and `enabled_gpu` (default off)
  - `idle_power` (default on)
  - whether GPU, component and platform power collection is supported
  - `cpu_architecture` and the names of the power sources, used in the node info metric

  `MetricsConfig.energy_pairs()` lists the energy metrics to collect. The GPU
  metric is left out unless `enabled_gpu` is set.
- **`keplermetrics.descriptors`** holds the following:
  - `Desc`: a metric descriptor. It checks metric and label names and raises `ValueError` on a bad or repeated name.
  - `Metric`: a single sample.
  - `ValueType`: whether a sample is a counter or a gauge.
  - `PromCounter` and `PromGauge`: their `must_metric(value, *label_values)` raises `ValueError` when the number of label values is wrong.
  - `build_fq_name`, `metrics_prom_desc` and the per-group factories, such as `energy_metrics_prom_desc`, `hc_metrics_prom_desc` and `gpu_usage_metrics_prom_desc`.
- **`keplermetrics.collect`** holds the statistics dataclasses `ProcessStats`,
  `ContainerStats`, `VMStats` and `NodeStats`, and the generators that turn
  them into samples:
  - `collect_energy_metrics`
  - `collect_res_utilization_metrics`
  - `collect_res_util`

  The usage maps map a metric key to device ids and their aggregated values.
  Processes, containers and VMs report the sum over all devices. The node
  reports one sample per device, and so do container GPU metrics.
- **Collectors.** There is one collector per level:
  - `keplermetrics.process.ProcessCollector`
  - `keplermetrics.vm.VMCollector`
  - `keplermetrics.container.ContainerCollector`
  - `keplermetrics.node.NodeCollector`

  Each collector has `describe()` and `collect()`, and both return lists.
  `collect()` reads the statistics under the collector's lock.
- **`keplermetrics.exporter`** holds the following:
  - `PrometheusExporter`: it creates the collectors with a shared lock and registers them with `register_metrics()`.
  - `Registry`: its methods are `register`, `gather` and `expose`.
  - `BuildInfoCollector`: the `kepler_exporter_build_info` metric.
  - `get_registry()`: returns the process-wide registry.

## Usage

```python
from keplermetrics import consts
from keplermetrics.collect import ContainerStats, NodeStats
from keplermetrics.consts import MetricsConfig
from keplermetrics.exporter import PrometheusExporter, Registry

config = MetricsConfig(cpu_architecture="x86_64")

node = NodeStats(
    node_name="node-1",
    energy_usage={consts.DYN_ENERGY_IN_PKG: {"0": 30000}},  # millijoules
)
containers = {
    "c1": ContainerStats(
        "c1",
        pod_name="web",
        container_name="app",
        namespace="default",
        energy_usage={consts.DYN_ENERGY_IN_PKG: {"0": 15000}},
    ),
}

exporter = PrometheusExporter(config, version="1.0")
exporter.new_process_collector({})
exporter.new_container_collector(containers)
exporter.new_vm_collector({})
exporter.new_node_collector(node)

registry = exporter.register_metrics(Registry())
print(registry.expose())
```

The output contains this line, among others:

```
kepler_node_package_joules_total{instance="node-1",mode="dynamic",package="0",source="trained_power_model"} 30
```

**Registering collectors.** `register_metrics()` always registers the build
info collector and the node collector. It registers the process, container
and VM collectors only if their levels are exposed in the configuration. If no
registry is passed, it uses `get_registry()`. Registering the same collector
twice raises `ValueError`, and so does registering a conflicting descriptor.

**Locking.** The exporter's `lock` guards the statistics that the collectors
read. Hold it while you update those statistics, so that a scrape never sees
a partial update.

**Units and labels.**
- Energy is stored in millijoules and exported in joules.
- Each energy metric carries a `mode` label. `dynamic` is always exported; `idle` is exported only when `idle_power` is on.
- Containers also get `kepler_container_joules_total`. It is the sum of package, DRAM, other and GPU energy, in whole joules.
- Names follow `kepler_<context>_<name>_joules_total` for energy and `kepler_<context>_<name>_total` for resource usage.

**Gathering.** `Registry.gather()` returns the samples grouped by metric name,
with names and samples sorted. It raises `ValueError` for the following:
- a sample whose descriptor was not described
- a sample that does not match its family
- a sample that repeats another one

`Registry.expose()` renders the same data in the text exposition format.

## What this package does not do

The package does not measure anything. It reads no hardware sensors, power
interfaces or kernel counters, and it does not estimate energy from a power
model. The statistics objects must be filled in by the caller.

It also runs no HTTP server and has no command line. `Registry.expose()`
returns the text, and serving it on a `/metrics` endpoint is up to the
application.