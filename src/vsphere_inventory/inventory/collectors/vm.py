# -*- coding: utf-8 -*-
"""
vSphere Inventory - 虚拟机采集器

vInfo / vCPU / vMemory / vTools 每台虚拟机一行；
vDisk / vPartition / vNetwork / vCD / vFloppy / vSnapshot 每个嵌套对象一行。
"""

from typing import Any, Dict, Iterable, Iterator

from ...models import DeviceKind
from ..devices import devices_of_kind, nic_adapter_type, type_name, vm_devices
from ..units import bytes_to_gb, bytes_to_mb, normalize_limit, percent
from .base import Collector, ContextFn, read, vm_identity


def _disk_capacity_bytes(disk: Any):
    capacity = read(disk, "capacityInBytes", None)
    if capacity is None:
        kb = read(disk, "capacityInKB", None)
        capacity = kb * 1024 if kb is not None else None
    return capacity


def _datastore_of_backing(backing: Any) -> str:
    name = read(backing, "datastore.name")
    if name:
        return name
    file_name = read(backing, "fileName")
    if file_name.startswith("[") and "]" in file_name:
        return file_name[1:].split("]", 1)[0]
    return ""


class VMInfoCollector(Collector):
    """虚拟机概要信息"""

    name = "vInfo"
    columns = (
        "VM", "UUID", "PowerState",
        "Cluster", "Datacenter", "ResourcePool", "AppGroup", "Folder", "Host",
        "ConfiguredOS", "GuestOS", "DNSName", "IPAddress",
        "NumCPU", "CoresPerSocket", "MemoryMB", "NumDisks", "NumNICs",
        "ProvisionedGB", "UsedGB", "HWVersion", "Annotation",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        devices = vm_devices(vm)
        committed = read(vm, "summary.storage.committed", 0)
        uncommitted = read(vm, "summary.storage.uncommitted", 0)

        row = vm_identity(vm)
        row.update(context_fn(vm).as_row())
        row.update({
            "PowerState": read(vm, "runtime.powerState"),
            "Host": read(vm, "runtime.host.name"),
            "ConfiguredOS": read(vm, "config.guestFullName"),
            "GuestOS": read(vm, "guest.guestFullName"),
            "DNSName": read(vm, "guest.hostName"),
            "IPAddress": read(vm, "guest.ipAddress"),
            "NumCPU": read(vm, "config.hardware.numCPU"),
            "CoresPerSocket": read(vm, "config.hardware.numCoresPerSocket"),
            "MemoryMB": read(vm, "config.hardware.memoryMB"),
            "NumDisks": len(devices_of_kind(devices, DeviceKind.DISK)),
            "NumNICs": len(devices_of_kind(devices, DeviceKind.NIC)),
            "ProvisionedGB": bytes_to_gb(committed + uncommitted),
            "UsedGB": bytes_to_gb(committed),
            "HWVersion": read(vm, "config.version"),
            "Annotation": read(vm, "config.annotation"),
        })
        return [row]


class VMCpuCollector(Collector):
    """CPU 配置与资源分配"""

    name = "vCPU"
    columns = (
        "VM", "UUID", "PowerState", "NumCPU", "CoresPerSocket", "Sockets",
        "ReservationMHz", "LimitMHz", "Shares", "SharesLevel", "HotAdd", "OverallUsageMHz",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        num_cpu = read(vm, "config.hardware.numCPU", 0)
        cores = read(vm, "config.hardware.numCoresPerSocket", 0)

        row = vm_identity(vm)
        row.update({
            "PowerState": read(vm, "runtime.powerState"),
            "NumCPU": num_cpu,
            "CoresPerSocket": cores,
            "Sockets": num_cpu // cores if num_cpu and cores else "",
            "ReservationMHz": read(vm, "config.cpuAllocation.reservation", 0),
            "LimitMHz": normalize_limit(read(vm, "config.cpuAllocation.limit", None)),
            "Shares": read(vm, "config.cpuAllocation.shares.shares"),
            "SharesLevel": read(vm, "config.cpuAllocation.shares.level"),
            "HotAdd": read(vm, "config.cpuHotAddEnabled"),
            "OverallUsageMHz": read(vm, "summary.quickStats.overallCpuUsage"),
        })
        return [row]


class VMMemoryCollector(Collector):
    """内存配置、资源分配与使用情况"""

    name = "vMemory"
    columns = (
        "VM", "UUID", "PowerState", "MemoryMB", "ReservationMB", "LimitMB",
        "Shares", "SharesLevel", "HotAdd", "ActiveMB", "ConsumedMB", "BalloonedMB", "SwappedMB",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        row = vm_identity(vm)
        row.update({
            "PowerState": read(vm, "runtime.powerState"),
            "MemoryMB": read(vm, "config.hardware.memoryMB"),
            "ReservationMB": read(vm, "config.memoryAllocation.reservation", 0),
            "LimitMB": normalize_limit(read(vm, "config.memoryAllocation.limit", None)),
            "Shares": read(vm, "config.memoryAllocation.shares.shares"),
            "SharesLevel": read(vm, "config.memoryAllocation.shares.level"),
            "HotAdd": read(vm, "config.memoryHotAddEnabled"),
            "ActiveMB": read(vm, "summary.quickStats.guestMemoryUsage"),
            "ConsumedMB": read(vm, "summary.quickStats.hostMemoryUsage"),
            "BalloonedMB": read(vm, "summary.quickStats.balloonedMemory"),
            "SwappedMB": read(vm, "summary.quickStats.swappedMemory"),
        })
        return [row]


class VMDiskCollector(Collector):
    """虚拟磁盘，每块磁盘一行"""

    name = "vDisk"
    columns = (
        "VM", "UUID", "PowerState", "Disk", "CapacityGB", "Thin", "DiskMode", "Sharing",
        "IOPSLimit", "Datastore", "File", "Controller", "ControllerKey", "UnitNumber",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        devices = vm_devices(vm)
        controllers = {read(item.device, "key"): item.device for item in devices if item.kind.is_controller}
        identity = vm_identity(vm)
        power_state = read(vm, "runtime.powerState")

        for disk in devices_of_kind(devices, DeviceKind.DISK):
            backing = read(disk, "backing", None)
            controller_key = read(disk, "controllerKey")
            row = dict(identity)
            row.update({
                "PowerState": power_state,
                "Disk": read(disk, "deviceInfo.label"),
                "CapacityGB": bytes_to_gb(_disk_capacity_bytes(disk), 2),
                "Thin": read(backing, "thinProvisioned"),
                "DiskMode": read(backing, "diskMode"),
                "Sharing": read(backing, "sharing"),
                "IOPSLimit": normalize_limit(read(disk, "storageIOAllocation.limit", None)),
                "Datastore": _datastore_of_backing(backing),
                "File": read(backing, "fileName"),
                "Controller": read(controllers.get(controller_key), "deviceInfo.label"),
                "ControllerKey": controller_key,
                "UnitNumber": read(disk, "unitNumber"),
            })
            yield row


class VMPartitionCollector(Collector):
    """客户机操作系统报告的分区，每个分区一行"""

    name = "vPartition"
    columns = ("VM", "UUID", "Disk", "CapacityMB", "FreeMB", "FreePercent")

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        identity = vm_identity(vm)
        for guest_disk in read(vm, "guest.disk", None) or []:
            capacity = read(guest_disk, "capacity", None)
            free = read(guest_disk, "freeSpace", None)
            row = dict(identity)
            row.update({
                "Disk": read(guest_disk, "diskPath"),
                "CapacityMB": bytes_to_mb(capacity),
                "FreeMB": bytes_to_mb(free),
                "FreePercent": percent(free, capacity),
            })
            yield row


class VMNetworkCollector(Collector):
    """虚拟网卡，每块网卡一行"""

    name = "vNetwork"
    columns = (
        "VM", "UUID", "PowerState", "Adapter", "AdapterType", "MACAddress",
        "Network", "Connected", "StartsConnected", "IPAddresses",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        identity = vm_identity(vm)
        power_state = read(vm, "runtime.powerState")
        guest_ips = {}
        for net in read(vm, "guest.net", None) or []:
            mac = read(net, "macAddress").lower()
            if mac:
                guest_ips[mac] = list(read(net, "ipAddress", None) or [])

        for nic in devices_of_kind(vm_devices(vm), DeviceKind.NIC):
            mac = read(nic, "macAddress")
            row = dict(identity)
            row.update({
                "PowerState": power_state,
                "Adapter": read(nic, "deviceInfo.label"),
                "AdapterType": nic_adapter_type(nic),
                "MACAddress": mac,
                "Network": self._network_name(vm, read(nic, "backing", None)),
                "Connected": read(nic, "connectable.connected"),
                "StartsConnected": read(nic, "connectable.startConnected"),
                "IPAddresses": guest_ips.get(mac.lower(), []),
            })
            yield row

    def _network_name(self, vm: Any, backing: Any) -> str:
        """标准交换机端口组直接取名称，分布式端口组通过 key 在虚拟机网络列表中查找"""
        name = read(backing, "deviceName")
        if name:
            return name
        portgroup_key = read(backing, "port.portgroupKey")
        if not portgroup_key:
            return ""
        for network in read(vm, "network", None) or []:
            if read(network, "key") == portgroup_key:
                return read(network, "name")
        return portgroup_key


class _RemovableDeviceCollector(Collector):
    """可移动设备 (CD/DVD、软驱) 的公共实现"""

    kind: DeviceKind = DeviceKind.OTHER
    columns = (
        "VM", "UUID", "PowerState", "Device", "Connected", "StartsConnected", "Backing", "BackingType",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        identity = vm_identity(vm)
        power_state = read(vm, "runtime.powerState")
        for device in devices_of_kind(vm_devices(vm), self.kind):
            backing = read(device, "backing", None)
            row = dict(identity)
            row.update({
                "PowerState": power_state,
                "Device": read(device, "deviceInfo.label"),
                "Connected": read(device, "connectable.connected"),
                "StartsConnected": read(device, "connectable.startConnected"),
                "Backing": read(backing, "fileName") or read(backing, "deviceName"),
                "BackingType": type_name(backing),
            })
            yield row


class VMCdromCollector(_RemovableDeviceCollector):
    name = "vCD"
    kind = DeviceKind.CDROM


class VMFloppyCollector(_RemovableDeviceCollector):
    name = "vFloppy"
    kind = DeviceKind.FLOPPY


class VMSnapshotCollector(Collector):
    """快照树，深度优先展开，每个快照一行"""

    name = "vSnapshot"
    columns = ("VM", "UUID", "Snapshot", "Description", "Created", "State", "Quiesced", "Parent")

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        identity = vm_identity(vm)
        for snapshot, parent in _walk_snapshots(read(vm, "snapshot.rootSnapshotList", None) or [], ""):
            row = dict(identity)
            row.update({
                "Snapshot": read(snapshot, "name"),
                "Description": read(snapshot, "description"),
                "Created": read(snapshot, "createTime"),
                "State": read(snapshot, "state"),
                "Quiesced": read(snapshot, "quiesced"),
                "Parent": parent,
            })
            yield row


def _walk_snapshots(snapshots: Iterable[Any], parent: str) -> Iterator[tuple]:
    for snapshot in snapshots:
        yield snapshot, parent
        yield from _walk_snapshots(read(snapshot, "childSnapshotList", None) or [], read(snapshot, "name"))


class VMToolsCollector(Collector):
    """VMware Tools 状态"""

    name = "vTools"
    columns = (
        "VM", "UUID", "PowerState", "ToolsStatus", "ToolsRunningStatus", "ToolsVersion",
        "ToolsVersionStatus", "GuestFamily", "UpgradePolicy", "SyncTime",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        row = vm_identity(vm)
        row.update({
            "PowerState": read(vm, "runtime.powerState"),
            "ToolsStatus": read(vm, "guest.toolsStatus"),
            "ToolsRunningStatus": read(vm, "guest.toolsRunningStatus"),
            "ToolsVersion": read(vm, "guest.toolsVersion"),
            "ToolsVersionStatus": read(vm, "guest.toolsVersionStatus2"),
            "GuestFamily": read(vm, "guest.guestFamily"),
            "UpgradePolicy": read(vm, "config.tools.toolsUpgradePolicy"),
            "SyncTime": read(vm, "config.tools.syncTimeWithHost"),
        })
        return [row]
