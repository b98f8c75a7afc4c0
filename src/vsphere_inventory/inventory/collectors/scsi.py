# -*- coding: utf-8 -*-
"""
vSphere Inventory - 客户机磁盘与 SCSI 拓扑映射 (vSCSI)

将客户机操作系统报告的每个磁盘对应到虚拟磁盘设备，再通过设备的
controllerKey 找到所属控制器，输出 "总线号:单元号" 地址。

Windows 客户机只有在启用高级设置 disk.EnableUUID 后，客户机看到的磁盘
标识才是稳定的；未启用时该虚拟机只输出一行带说明的占位行。
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ...models import DeviceKind
from ..devices import devices_of_kind, vm_devices
from ..units import bytes_to_gb
from .base import Collector, ContextFn, read, vm_identity


logger = logging.getLogger(__name__)

DISK_UUID_OPTION = "disk.EnableUUID"
DISK_UUID_REQUIRED_NOTE = (
    f"Advanced setting {DISK_UUID_OPTION}=TRUE is required to map guest disks on Windows guests"
)


def is_windows_guest(vm: Any) -> bool:
    if read(vm, "guest.guestFamily") == "windowsGuest":
        return True
    guest_id = read(vm, "config.guestId") or read(vm, "guest.guestId")
    return str(guest_id).lower().startswith("win")


def disk_uuid_enabled(vm: Any) -> bool:
    """虚拟机高级设置中 disk.EnableUUID 是否为 TRUE"""
    for option in read(vm, "config.extraConfig", None) or []:
        if str(read(option, "key")).lower() == DISK_UUID_OPTION.lower():
            return str(read(option, "value")).strip().lower() == "true"
    return False


def is_mappable(vm: Any) -> bool:
    return not is_windows_guest(vm) or disk_uuid_enabled(vm)


class ScsiTopologyCollector(Collector):
    """每个客户机磁盘一行，包含控制器、总线号、单元号和 VMDK 文件"""

    name = "vSCSI"
    columns = (
        "VM", "UUID", "GuestDisk", "CapacityGB", "FreeGB", "Controller",
        "BusNumber", "UnitNumber", "SCSIAddress", "DiskFile", "Note",
    )

    def rows(self, vm: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        identity = vm_identity(vm)

        if not is_mappable(vm):
            placeholder = dict(identity)
            placeholder["Note"] = DISK_UUID_REQUIRED_NOTE
            yield placeholder
            return

        devices = vm_devices(vm)
        disks = {read(disk, "key", None): disk for disk in devices_of_kind(devices, DeviceKind.DISK)}
        controllers = {read(item.device, "key", None): item.device for item in devices if item.kind.is_controller}

        for guest_disk in read(vm, "guest.disk", None) or []:
            disk_path = read(guest_disk, "diskPath")
            disk = self._resolve_disk(guest_disk, disks)
            if disk is None:
                logger.debug(f"虚拟机 {identity['VM']} 的客户机磁盘 {disk_path} 无法对应到虚拟磁盘，已跳过")
                continue

            controller = controllers.get(read(disk, "controllerKey", None))
            if controller is None:
                logger.debug(f"虚拟机 {identity['VM']} 的磁盘 {disk_path} 找不到所属控制器，已跳过")
                continue

            bus = read(controller, "busNumber")
            unit = read(disk, "unitNumber")
            row = dict(identity)
            row.update({
                "GuestDisk": disk_path,
                "CapacityGB": bytes_to_gb(read(guest_disk, "capacity", None), 2),
                "FreeGB": bytes_to_gb(read(guest_disk, "freeSpace", None), 2),
                "Controller": read(controller, "deviceInfo.label"),
                "BusNumber": bus,
                "UnitNumber": unit,
                "SCSIAddress": f"{bus}:{unit}" if bus != "" and unit != "" else "",
                "DiskFile": read(disk, "backing.fileName"),
            })
            yield row

    def _resolve_disk(self, guest_disk: Any, disks: Dict[Any, Any]) -> Optional[Any]:
        """客户机磁盘的 mappings 记录了虚拟磁盘设备的 key，取第一个能解析的"""
        for mapping in read(guest_disk, "mappings", None) or []:
            disk = disks.get(read(mapping, "key", None))
            if disk is not None:
                return disk
        return None
