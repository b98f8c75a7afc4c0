# -*- coding: utf-8 -*-
"""
vSphere Inventory - 数据存储采集器
"""

from typing import Any, Dict, Iterable

from ..context import datacenter_of
from ..units import bytes_to_gb, percent
from .base import Collector, ContextFn, read


class DatastoreCollector(Collector):
    """数据存储容量与访问属性"""

    name = "vDatastore"
    source = "datastores"
    columns = (
        "Datastore", "Datacenter", "Type", "CapacityGB", "FreeGB", "UsedGB", "ProvisionedGB",
        "FreePercent", "MultipleHostAccess", "Accessible", "MaintenanceMode",
        "NumHosts", "NumVMs", "URL",
    )

    def rows(self, datastore: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        capacity = read(datastore, "summary.capacity", 0)
        free = read(datastore, "summary.freeSpace", 0)
        uncommitted = read(datastore, "summary.uncommitted", 0)
        return [{
            "Datastore": read(datastore, "name"),
            "Datacenter": datacenter_of(datastore) or "",
            "Type": read(datastore, "summary.type"),
            "CapacityGB": bytes_to_gb(capacity),
            "FreeGB": bytes_to_gb(free),
            "UsedGB": bytes_to_gb(capacity - free),
            "ProvisionedGB": bytes_to_gb(capacity - free + uncommitted),
            "FreePercent": percent(free, capacity),
            "MultipleHostAccess": read(datastore, "summary.multipleHostAccess"),
            "Accessible": read(datastore, "summary.accessible"),
            "MaintenanceMode": read(datastore, "summary.maintenanceMode"),
            "NumHosts": len(read(datastore, "host", None) or []),
            "NumVMs": len(read(datastore, "vm", None) or []),
            "URL": read(datastore, "summary.url"),
        }]
