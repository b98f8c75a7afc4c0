# -*- coding: utf-8 -*-
"""
vSphere Inventory - 集群与资源池采集器
"""

from typing import Any, Dict, Iterable

from ..context import datacenter_of
from ..devices import type_name
from ..units import bytes_to_gb, normalize_limit
from .base import Collector, ContextFn, read


class ClusterCollector(Collector):
    """集群容量与 HA/DRS 配置"""

    name = "vCluster"
    source = "clusters"
    columns = (
        "Cluster", "Datacenter", "NumHosts", "NumEffectiveHosts", "NumCPUCores",
        "TotalCPUMHz", "TotalMemoryGB", "HAEnabled", "AdmissionControl",
        "DRSEnabled", "DRSBehavior", "EVCMode", "OverallStatus", "NumVMs",
    )

    def rows(self, cluster: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        hosts = read(cluster, "host", None) or []
        return [{
            "Cluster": read(cluster, "name"),
            "Datacenter": datacenter_of(cluster) or "",
            "NumHosts": read(cluster, "summary.numHosts"),
            "NumEffectiveHosts": read(cluster, "summary.numEffectiveHosts"),
            "NumCPUCores": read(cluster, "summary.numCpuCores"),
            "TotalCPUMHz": read(cluster, "summary.totalCpu"),
            "TotalMemoryGB": bytes_to_gb(read(cluster, "summary.totalMemory", None)),
            "HAEnabled": read(cluster, "configurationEx.dasConfig.enabled"),
            "AdmissionControl": read(cluster, "configurationEx.dasConfig.admissionControlEnabled"),
            "DRSEnabled": read(cluster, "configurationEx.drsConfig.enabled"),
            "DRSBehavior": read(cluster, "configurationEx.drsConfig.defaultVmBehavior"),
            "EVCMode": read(cluster, "summary.currentEVCModeKey"),
            "OverallStatus": read(cluster, "overallStatus"),
            "NumVMs": sum(len(read(host, "vm", None) or []) for host in hosts),
        }]


class ResourcePoolCollector(Collector):
    """资源池与 vApp 的资源分配，-1 (不限制) 输出为 0"""

    name = "vRP"
    source = "resource_pools"
    columns = (
        "ResourcePool", "Type", "Parent", "Cluster", "Datacenter",
        "CPUReservationMHz", "CPULimitMHz", "CPUExpandable", "CPUShares", "CPUSharesLevel",
        "MemReservationMB", "MemLimitMB", "MemExpandable", "MemShares", "MemSharesLevel",
        "NumVMs",
    )

    def rows(self, pool: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        owner = read(pool, "owner", None)
        cpu = read(pool, "config.cpuAllocation", None)
        memory = read(pool, "config.memoryAllocation", None)
        return [{
            "ResourcePool": read(pool, "name"),
            "Type": type_name(pool),
            "Parent": read(pool, "parent.name"),
            "Cluster": read(owner, "name") if type_name(owner) == "ClusterComputeResource" else "",
            "Datacenter": datacenter_of(pool) or "",
            "CPUReservationMHz": read(cpu, "reservation", 0),
            "CPULimitMHz": normalize_limit(read(cpu, "limit", None)),
            "CPUExpandable": read(cpu, "expandableReservation"),
            "CPUShares": read(cpu, "shares.shares"),
            "CPUSharesLevel": read(cpu, "shares.level"),
            "MemReservationMB": read(memory, "reservation", 0),
            "MemLimitMB": normalize_limit(read(memory, "limit", None)),
            "MemExpandable": read(memory, "expandableReservation"),
            "MemShares": read(memory, "shares.shares"),
            "MemSharesLevel": read(memory, "shares.level"),
            "NumVMs": len(read(pool, "vm", None) or []),
        }]
