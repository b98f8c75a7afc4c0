# -*- coding: utf-8 -*-
"""
vSphere Inventory - ESXi 主机采集器

vHost 每台主机一行；vHBA / vNIC / vSwitch / vPort / vSC_VMK 每个主机子对象一行。
单台主机的子对象枚举失败只影响该主机自身的行。
"""

from typing import Any, Dict, Iterable

from ..context import cluster_of_host, datacenter_of
from ..devices import hba_type
from ..units import bytes_to_gb, percent
from .base import Collector, ContextFn, read


def format_wwn(value: Any) -> str:
    """WWN 整数格式化为 20:00:00:25:b5:00:00:0f"""
    if value is None or value == "":
        return ""
    try:
        digits = f"{int(value) & 0xFFFFFFFFFFFFFFFF:016x}"
    except (TypeError, ValueError):
        return str(value)
    return ":".join(digits[i:i + 2] for i in range(0, 16, 2))


def _network(host: Any) -> Any:
    return read(host, "config.network", None)


class HostCollector(Collector):
    """主机硬件、版本与运行状态"""

    name = "vHost"
    source = "hosts"
    columns = (
        "Host", "Datacenter", "Cluster", "Vendor", "Model", "CPUModel", "CPUMHz",
        "Sockets", "Cores", "Threads", "MemoryGB",
        "CPUUsageMHz", "CPUUsagePercent", "MemoryUsageMB", "MemoryUsagePercent",
        "Version", "Build", "ConnectionState", "PowerState", "MaintenanceMode",
        "NumVMs", "UptimeSeconds",
    )

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        cores = read(host, "summary.hardware.numCpuCores", 0)
        cpu_mhz = read(host, "summary.hardware.cpuMhz", 0)
        memory_bytes = read(host, "summary.hardware.memorySize", None)
        cpu_usage = read(host, "summary.quickStats.overallCpuUsage", None)
        memory_usage = read(host, "summary.quickStats.overallMemoryUsage", None)

        return [{
            "Host": read(host, "name"),
            "Datacenter": datacenter_of(host) or "",
            "Cluster": cluster_of_host(host) or "",
            "Vendor": read(host, "summary.hardware.vendor"),
            "Model": read(host, "summary.hardware.model"),
            "CPUModel": read(host, "summary.hardware.cpuModel"),
            "CPUMHz": cpu_mhz,
            "Sockets": read(host, "summary.hardware.numCpuPkgs"),
            "Cores": cores,
            "Threads": read(host, "summary.hardware.numCpuThreads"),
            "MemoryGB": bytes_to_gb(memory_bytes),
            "CPUUsageMHz": cpu_usage,
            "CPUUsagePercent": percent(cpu_usage, cores * cpu_mhz) if cpu_usage is not None else "",
            "MemoryUsageMB": memory_usage,
            "MemoryUsagePercent": (
                percent(memory_usage * 1024 * 1024, memory_bytes) if memory_usage is not None else ""
            ),
            "Version": read(host, "summary.config.product.version"),
            "Build": read(host, "summary.config.product.build"),
            "ConnectionState": read(host, "runtime.connectionState"),
            "PowerState": read(host, "runtime.powerState"),
            "MaintenanceMode": read(host, "runtime.inMaintenanceMode"),
            "NumVMs": len(read(host, "vm", None) or []),
            "UptimeSeconds": read(host, "summary.quickStats.uptime"),
        }]


class HostHbaCollector(Collector):
    """主机存储适配器"""

    name = "vHBA"
    source = "hosts"
    columns = ("Host", "Device", "Type", "Model", "Driver", "Status", "WWNN", "WWPN", "IQN", "Bus", "PCI")

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        host_name = read(host, "name")
        # 适配器列表本身读取失败时直接抛出，由基类跳过该主机
        adapters = host.config.storageDevice.hostBusAdapter or []
        for hba in adapters:
            yield {
                "Host": host_name,
                "Device": read(hba, "device"),
                "Type": hba_type(hba),
                "Model": read(hba, "model"),
                "Driver": read(hba, "driver"),
                "Status": read(hba, "status"),
                "WWNN": format_wwn(read(hba, "nodeWorldWideName", None)),
                "WWPN": format_wwn(read(hba, "portWorldWideName", None)),
                "IQN": read(hba, "iScsiName"),
                "Bus": read(hba, "bus"),
                "PCI": read(hba, "pci"),
            }


class HostNicCollector(Collector):
    """主机物理网卡"""

    name = "vNIC"
    source = "hosts"
    columns = ("Host", "Device", "MAC", "Driver", "SpeedMbps", "Duplex", "PCI", "vSwitch")

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        host_name = read(host, "name")
        network = host.config.network
        uplink_switch = {}
        for vswitch in network.vswitch or []:
            for pnic_key in read(vswitch, "pnic", None) or []:
                uplink_switch[pnic_key] = read(vswitch, "name")

        for pnic in network.pnic or []:
            yield {
                "Host": host_name,
                "Device": read(pnic, "device"),
                "MAC": read(pnic, "mac"),
                "Driver": read(pnic, "driver"),
                "SpeedMbps": read(pnic, "linkSpeed.speedMb"),
                "Duplex": read(pnic, "linkSpeed.duplex"),
                "PCI": read(pnic, "pci"),
                "vSwitch": uplink_switch.get(read(pnic, "key"), ""),
            }


class HostSwitchCollector(Collector):
    """标准虚拟交换机"""

    name = "vSwitch"
    source = "hosts"
    columns = ("Host", "vSwitch", "NumPorts", "AvailablePorts", "MTU", "Uplinks", "PortGroups")

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        host_name = read(host, "name")
        network = host.config.network
        pnic_names = {read(pnic, "key"): read(pnic, "device") for pnic in network.pnic or []}

        for vswitch in network.vswitch or []:
            uplinks = [pnic_names.get(key, key) for key in read(vswitch, "pnic", None) or []]
            yield {
                "Host": host_name,
                "vSwitch": read(vswitch, "name"),
                "NumPorts": read(vswitch, "numPorts"),
                "AvailablePorts": read(vswitch, "numPortsAvailable"),
                "MTU": read(vswitch, "mtu"),
                "Uplinks": uplinks,
                "PortGroups": len(read(vswitch, "portgroup", None) or []),
            }


class HostPortGroupCollector(Collector):
    """标准交换机端口组"""

    name = "vPort"
    source = "hosts"
    columns = ("Host", "PortGroup", "vSwitch", "VLAN", "ActivePorts")

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        host_name = read(host, "name")
        for portgroup in _network(host).portgroup or []:
            yield {
                "Host": host_name,
                "PortGroup": read(portgroup, "spec.name"),
                "vSwitch": read(portgroup, "spec.vswitchName"),
                "VLAN": read(portgroup, "spec.vlanId"),
                "ActivePorts": len(read(portgroup, "port", None) or []),
            }


class HostVmkernelCollector(Collector):
    """VMkernel 网络适配器"""

    name = "vSC_VMK"
    source = "hosts"
    columns = ("Host", "Device", "PortGroup", "IPAddress", "SubnetMask", "DHCP", "MAC", "MTU", "IPv6Addresses")

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        host_name = read(host, "name")
        for vnic in _network(host).vnic or []:
            ipv6 = [
                f"{read(address, 'ipAddress')}/{read(address, 'prefixLength')}"
                for address in read(vnic, "spec.ip.ipV6Config.ipV6Address", None) or []
            ]
            yield {
                "Host": host_name,
                "Device": read(vnic, "device"),
                "PortGroup": read(vnic, "portgroup") or read(vnic, "spec.distributedVirtualPort.portgroupKey"),
                "IPAddress": read(vnic, "spec.ip.ipAddress"),
                "SubnetMask": read(vnic, "spec.ip.subnetMask"),
                "DHCP": read(vnic, "spec.ip.dhcp"),
                "MAC": read(vnic, "spec.mac"),
                "MTU": read(vnic, "spec.mtu"),
                "IPv6Addresses": ipv6,
            }
