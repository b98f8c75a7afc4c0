# -*- coding: utf-8 -*-
"""
vSphere Inventory - 设备类型标签

虚拟设备、主机 HBA 和清单层级对象统一通过 SOAP 类型名 (_wsdlName)
打上类型标签，后续逻辑只比较标签，不做 isinstance 判断。
"""

from typing import Any, Dict, Iterable, List, NamedTuple

from ..models import DeviceKind


DEVICE_KINDS: Dict[str, DeviceKind] = {
    "VirtualDisk": DeviceKind.DISK,
    # 网卡
    "VirtualE1000": DeviceKind.NIC,
    "VirtualE1000e": DeviceKind.NIC,
    "VirtualPCNet32": DeviceKind.NIC,
    "VirtualVmxnet": DeviceKind.NIC,
    "VirtualVmxnet2": DeviceKind.NIC,
    "VirtualVmxnet3": DeviceKind.NIC,
    "VirtualVmxnet3Vrdma": DeviceKind.NIC,
    "VirtualSriovEthernetCard": DeviceKind.NIC,
    # 可移动设备
    "VirtualCdrom": DeviceKind.CDROM,
    "VirtualFloppy": DeviceKind.FLOPPY,
    "VirtualUSB": DeviceKind.USB,
    # 控制器
    "ParaVirtualSCSIController": DeviceKind.SCSI_CONTROLLER,
    "VirtualLsiLogicController": DeviceKind.SCSI_CONTROLLER,
    "VirtualLsiLogicSASController": DeviceKind.SCSI_CONTROLLER,
    "VirtualBusLogicController": DeviceKind.SCSI_CONTROLLER,
    "VirtualAHCIController": DeviceKind.SATA_CONTROLLER,
    "VirtualNVMEController": DeviceKind.NVME_CONTROLLER,
    "VirtualIDEController": DeviceKind.IDE_CONTROLLER,
}

NIC_ADAPTER_TYPES: Dict[str, str] = {
    "VirtualE1000": "E1000",
    "VirtualE1000e": "E1000E",
    "VirtualPCNet32": "PCNet32",
    "VirtualVmxnet": "Vmxnet",
    "VirtualVmxnet2": "Vmxnet2",
    "VirtualVmxnet3": "Vmxnet3",
    "VirtualVmxnet3Vrdma": "Vmxnet3Vrdma",
    "VirtualSriovEthernetCard": "SR-IOV",
}

HBA_TYPES: Dict[str, str] = {
    "FibreChannelHba": "Fibre Channel",
    "FibreChannelOverEthernetHba": "FCoE",
    "InternetScsiHba": "iSCSI",
    "SerialAttachedHba": "SAS",
    "ParallelScsiHba": "Parallel SCSI",
    "BlockHba": "Block",
    "PcieHba": "PCIe",
    "TcpHba": "NVMe over TCP",
    "RdmaHba": "RDMA",
}


class TaggedDevice(NamedTuple):
    kind: DeviceKind
    device: Any


def type_name(obj: Any) -> str:
    """对象的 SOAP 类型名，如 VirtualDisk、ClusterComputeResource"""
    if obj is None:
        return ""
    return getattr(obj, "_wsdlName", None) or type(obj).__name__


def device_kind(device: Any) -> DeviceKind:
    return DEVICE_KINDS.get(type_name(device), DeviceKind.OTHER)


def tag_devices(devices: Iterable[Any]) -> List[TaggedDevice]:
    return [TaggedDevice(device_kind(device), device) for device in devices or []]


def vm_devices(vm: Any) -> List[TaggedDevice]:
    """虚拟机的全部设备，配置不可读时返回空列表"""
    config = getattr(vm, "config", None)
    hardware = getattr(config, "hardware", None) if config else None
    return tag_devices(getattr(hardware, "device", None) or [])


def devices_of_kind(tagged: Iterable[TaggedDevice], kind: DeviceKind) -> List[Any]:
    return [item.device for item in tagged if item.kind == kind]


def nic_adapter_type(device: Any) -> str:
    name = type_name(device)
    return NIC_ADAPTER_TYPES.get(name, name)


def hba_type(hba: Any) -> str:
    name = type_name(hba)
    return HBA_TYPES.get(name, name)
