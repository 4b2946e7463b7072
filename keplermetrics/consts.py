"""Metric names, label sets and the feature switches that shape the exported metrics."""

from __future__ import annotations

from dataclasses import dataclass

METRICS_NAMESPACE = "kepler"
ENERGY_METRIC_NAME_SUFFIX = "_joules_total"
USAGE_METRIC_NAME_SUFFIX = "_total"
MILLIJOULE_TO_JOULE = 1000

# Energy components
PKG = "package"
CORE = "core"
UNCORE = "uncore"
DRAM = "dram"
OTHER = "other"
GPU = "gpu"
PLATFORM = "platform"

# Keys of the dynamic and idle energy counters kept in the stats maps
DYN_ENERGY_IN_PKG = "dyn_energy_in_pkg"
DYN_ENERGY_IN_CORE = "dyn_energy_in_core"
DYN_ENERGY_IN_UNCORE = "dyn_energy_in_uncore"
DYN_ENERGY_IN_DRAM = "dyn_energy_in_dram"
DYN_ENERGY_IN_OTHER = "dyn_energy_in_other"
DYN_ENERGY_IN_GPU = "dyn_energy_in_gpu"
DYN_ENERGY_IN_PLATFORM = "dyn_energy_in_platform"

IDLE_ENERGY_IN_PKG = "idle_energy_in_pkg"
IDLE_ENERGY_IN_CORE = "idle_energy_in_core"
IDLE_ENERGY_IN_UNCORE = "idle_energy_in_uncore"
IDLE_ENERGY_IN_DRAM = "idle_energy_in_dram"
IDLE_ENERGY_IN_OTHER = "idle_energy_in_other"
IDLE_ENERGY_IN_GPU = "idle_energy_in_gpu"
IDLE_ENERGY_IN_PLATFORM = "idle_energy_in_platform"

# Hardware counters
CPU_CYCLE = "cpu_cycles"
CPU_INSTRUCTION = "cpu_instructions"
CACHE_MISS = "cache_miss"

# Software counters
CPU_TIME = "bpf_cpu_time_ms"
TASK_CLOCK = "task_clock_ms"
PAGE_CACHE_HIT = "bpf_page_cache_hit"

# IRQ counters
IRQ_NET_TX = "bpf_net_tx_irq"
IRQ_NET_RX = "bpf_net_rx_irq"
IRQ_BLOCK = "bpf_block_irq"

# cgroup counters
CGROUPFS_CPU = "cgroupfs_cpu_usage_us"
CGROUPFS_MEMORY = "cgroupfs_memory_usage_bytes"
CGROUPFS_SYSTEM_CPU = "cgroupfs_system_cpu_usage_us"
CGROUPFS_USER_CPU = "cgroupfs_user_cpu_usage_us"

# Accelerators and node-only resources
GPU_COMPUTE_UTILIZATION = "gpu_sm_util"
GPU_MEM_UTILIZATION = "gpu_mem_util"
QAT_UTILIZATION = "qat_util"
CPU_FREQUENCY = "avg_cpu_frequency"

# Where an energy value comes from
TRAINED_POWER_MODEL_SOURCE = "trained_power_model"
GPU_ENERGY_SOURCE = "nvidia"
PLATFORM_ENERGY_SOURCE = "acpi"
COMPONENT_ENERGY_SOURCE = "rapl"

# Energy related metric labels
PROCESS_ENERGY_LABELS = ("pid", "container_id", "vm_id", "command", "mode")
CONTAINER_ENERGY_LABELS = ("container_id", "pod_name", "container_name", "container_namespace", "mode")
VM_ENERGY_LABELS = ("vm_id", "mode")
NODE_ENERGY_LABELS = ("package", "instance", "mode")

# Resource utilization related metric labels
PROCESS_RES_UTIL_LABELS = ("pid", "container_id", "vm_id", "command")
CONTAINER_RES_UTIL_LABELS = ("container_id", "pod_name", "container_name", "container_namespace")
VM_RES_UTIL_LABELS = ("vm_id",)
NODE_RES_UTIL_LABELS = ("device", "instance")
GPU_RES_UTIL_LABELS = ("gpu_id",)

ENERGY_METRIC_NAMES = (PKG, CORE, UNCORE, DRAM, OTHER, GPU, PLATFORM)
DYN_ENERGY_METRIC_NAMES = (
    DYN_ENERGY_IN_PKG,
    DYN_ENERGY_IN_CORE,
    DYN_ENERGY_IN_UNCORE,
    DYN_ENERGY_IN_DRAM,
    DYN_ENERGY_IN_OTHER,
    DYN_ENERGY_IN_GPU,
    DYN_ENERGY_IN_PLATFORM,
)
IDLE_ENERGY_METRIC_NAMES = (
    IDLE_ENERGY_IN_PKG,
    IDLE_ENERGY_IN_CORE,
    IDLE_ENERGY_IN_UNCORE,
    IDLE_ENERGY_IN_DRAM,
    IDLE_ENERGY_IN_OTHER,
    IDLE_ENERGY_IN_GPU,
    IDLE_ENERGY_IN_PLATFORM,
)
HC_METRIC_NAMES = (CPU_CYCLE, CPU_INSTRUCTION, CACHE_MISS)
SC_METRIC_NAMES = (CPU_TIME, TASK_CLOCK, PAGE_CACHE_HIT)
IRQ_METRIC_NAMES = (IRQ_NET_TX, IRQ_NET_RX, IRQ_BLOCK)
CGROUP_METRIC_NAMES = (CGROUPFS_CPU, CGROUPFS_MEMORY, CGROUPFS_SYSTEM_CPU, CGROUPFS_USER_CPU)
GPU_METRIC_NAMES = (GPU_COMPUTE_UTILIZATION, GPU_MEM_UTILIZATION)


@dataclass
class MetricsConfig:
    """Feature switches and host facts that decide which metrics are exported."""

    expose_process_stats: bool = False
    expose_container_stats: bool = True
    expose_vm_stats: bool = True
    hc_metrics: bool = True
    irq_counter_metrics: bool = True
    cgroup_metrics: bool = False
    expose_qat_metrics: bool = False
    expose_cpu_frequency_metrics: bool = False
    enabled_gpu: bool = False
    idle_power: bool = True
    gpu_collection_supported: bool = False
    components_collection_supported: bool = False
    platform_collection_supported: bool = False
    node_name: str = ""
    cpu_architecture: str = ""
    components_source_name: str = ""
    platform_source_name: str = ""

    def energy_pairs(self) -> list[tuple[str, str, str]]:
        """Return (metric name, dynamic key, idle key) for each energy metric collected."""
        return [
            (name, dyn, idle)
            for name, dyn, idle in zip(ENERGY_METRIC_NAMES, DYN_ENERGY_METRIC_NAMES, IDLE_ENERGY_METRIC_NAMES)
            if name != GPU or self.enabled_gpu
        ]