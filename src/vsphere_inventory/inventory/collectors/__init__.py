# -*- coding: utf-8 -*-
"""
vSphere Inventory - 采集器包导出
"""

from .base import Collector, Row, ContextFn, read, shape_row, vm_identity
from .vm import (
    VMInfoCollector,
    VMCpuCollector,
    VMMemoryCollector,
    VMDiskCollector,
    VMPartitionCollector,
    VMNetworkCollector,
    VMCdromCollector,
    VMFloppyCollector,
    VMSnapshotCollector,
    VMToolsCollector,
)
from .scsi import ScsiTopologyCollector
from .host import (
    HostCollector,
    HostHbaCollector,
    HostNicCollector,
    HostSwitchCollector,
    HostPortGroupCollector,
    HostVmkernelCollector,
)
from .tls import TlsProfileCollector
from .cluster import ClusterCollector, ResourcePoolCollector
from .datastore import DatastoreCollector

__all__ = [
    # 基类
    "Collector",
    "Row",
    "ContextFn",
    "read",
    "shape_row",
    "vm_identity",
    # 虚拟机
    "VMInfoCollector",
    "VMCpuCollector",
    "VMMemoryCollector",
    "VMDiskCollector",
    "VMPartitionCollector",
    "VMNetworkCollector",
    "VMCdromCollector",
    "VMFloppyCollector",
    "VMSnapshotCollector",
    "VMToolsCollector",
    "ScsiTopologyCollector",
    # 主机
    "HostCollector",
    "HostHbaCollector",
    "HostNicCollector",
    "HostSwitchCollector",
    "HostPortGroupCollector",
    "HostVmkernelCollector",
    "TlsProfileCollector",
    # 集群与存储
    "ClusterCollector",
    "ResourcePoolCollector",
    "DatastoreCollector",
]
