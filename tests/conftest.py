# -*- coding: utf-8 -*-
"""
测试用的 vSphere 对象替身

所有托管对象都用 SimpleNamespace 构造，并通过 _wsdlName 标注 SOAP 类型名，
与 pyVmomi 对象的类型标签一致。
"""

from types import SimpleNamespace

import pytest


def mo(wsdl_name, **attrs):
    """构造带类型标签的对象"""
    return SimpleNamespace(_wsdlName=wsdl_name, **attrs)


class Exploding:
    """任何属性访问都抛出异常，模拟远程调用失败"""

    def __init__(self, message="remote call failed"):
        self.message = message

    def __getattr__(self, item):
        raise RuntimeError(self.message)


# =============================================================================
# 层级对象
# =============================================================================
def make_datacenter(name="DC1"):
    return mo("Datacenter", name=name, parent=mo("Folder", name="Datacenters", parent=None))


def make_cluster(name="Cluster1", datacenter=None, hosts=None):
    datacenter = datacenter or make_datacenter()
    host_folder = mo("Folder", name="host", parent=datacenter)
    return mo("ClusterComputeResource", name=name, parent=host_folder, host=hosts or [])


def make_host(name="esx01", cluster=None, version="8.0.3", build="24022510", **attrs):
    parent = cluster if cluster is not None else make_cluster()
    defaults = dict(
        name=name,
        parent=parent,
        vm=[],
        summary=SimpleNamespace(
            config=SimpleNamespace(product=SimpleNamespace(version=version, build=build)),
            hardware=SimpleNamespace(
                vendor="Dell Inc.",
                model="PowerEdge R650",
                cpuModel="Intel(R) Xeon(R) Gold 6338",
                cpuMhz=2000,
                numCpuPkgs=2,
                numCpuCores=64,
                numCpuThreads=128,
                memorySize=512 * 1024 ** 3,
            ),
            quickStats=SimpleNamespace(overallCpuUsage=12800, overallMemoryUsage=262144, uptime=86400),
        ),
        runtime=SimpleNamespace(connectionState="connected", powerState="poweredOn", inMaintenanceMode=False),
    )
    defaults.update(attrs)
    return mo("HostSystem", **defaults)


def make_resource_pool(name="Resources", parent=None, owner=None, wsdl_name="ResourcePool", **attrs):
    return mo(wsdl_name, name=name, parent=parent, owner=owner, **attrs)


# =============================================================================
# 虚拟设备
# =============================================================================
def make_scsi_controller(key=1000, bus=0, label="SCSI controller 0"):
    return mo(
        "ParaVirtualSCSIController",
        key=key,
        busNumber=bus,
        deviceInfo=SimpleNamespace(label=label),
    )


def make_disk(key=2000, controller_key=1000, unit=0, capacity_bytes=40 * 1024 ** 3,
              file_name="[DS1] vm1/vm1.vmdk", label="Hard disk 1", iops_limit=-1):
    return mo(
        "VirtualDisk",
        key=key,
        controllerKey=controller_key,
        unitNumber=unit,
        capacityInBytes=capacity_bytes,
        deviceInfo=SimpleNamespace(label=label),
        storageIOAllocation=SimpleNamespace(limit=iops_limit),
        backing=mo(
            "VirtualDiskFlatVer2BackingInfo",
            fileName=file_name,
            datastore=SimpleNamespace(name=file_name[1:].split("]")[0]),
            thinProvisioned=True,
            diskMode="persistent",
            sharing="sharingNone",
        ),
    )


def make_nic(mac="00:50:56:aa:bb:cc", network="VM Network", label="Network adapter 1"):
    return mo(
        "VirtualVmxnet3",
        key=4000,
        macAddress=mac,
        deviceInfo=SimpleNamespace(label=label),
        backing=mo("VirtualEthernetCardNetworkBackingInfo", deviceName=network),
        connectable=SimpleNamespace(connected=True, startConnected=True),
    )


def make_guest_disk(path="C:\\", capacity=40 * 1024 ** 3, free=10 * 1024 ** 3, keys=(2000,)):
    return SimpleNamespace(
        diskPath=path,
        capacity=capacity,
        freeSpace=free,
        mappings=[SimpleNamespace(key=key) for key in keys],
    )


# =============================================================================
# 虚拟机
# =============================================================================
def make_vm(
    name="vm1",
    uuid="4201a1b2-0000-0000-0000-000000000001",
    host=None,
    parent=None,
    resource_pool=None,
    parent_vapp=None,
    devices=None,
    guest_disks=None,
    guest_family="linuxGuest",
    guest_id="rhel8_64Guest",
    extra_config=None,
    cpu_limit=-1,
    memory_limit=-1,
    layout_files=None,
    snapshots=None,
):
    return mo(
        "VirtualMachine",
        name=name,
        parent=parent,
        parentVApp=parent_vapp,
        resourcePool=resource_pool,
        network=[],
        runtime=SimpleNamespace(powerState="poweredOn", host=host),
        config=SimpleNamespace(
            uuid=uuid,
            template=False,
            guestId=guest_id,
            guestFullName="Guest OS",
            version="vmx-19",
            annotation="",
            extraConfig=[SimpleNamespace(key=k, value=v) for k, v in (extra_config or {}).items()],
            hardware=SimpleNamespace(
                numCPU=4,
                numCoresPerSocket=2,
                memoryMB=8192,
                device=list(devices or []),
            ),
            cpuAllocation=SimpleNamespace(
                reservation=0,
                limit=cpu_limit,
                shares=SimpleNamespace(shares=4000, level="normal"),
            ),
            memoryAllocation=SimpleNamespace(
                reservation=0,
                limit=memory_limit,
                shares=SimpleNamespace(shares=81920, level="normal"),
            ),
            cpuHotAddEnabled=False,
            memoryHotAddEnabled=False,
        ),
        guest=SimpleNamespace(
            guestFamily=guest_family,
            guestFullName="Guest OS",
            hostName=name,
            ipAddress="10.0.0.10",
            toolsStatus="toolsOk",
            disk=list(guest_disks or []),
            net=[],
        ),
        summary=SimpleNamespace(
            storage=SimpleNamespace(committed=20 * 1024 ** 3, uncommitted=20 * 1024 ** 3),
            quickStats=SimpleNamespace(overallCpuUsage=100),
        ),
        layoutEx=SimpleNamespace(file=[SimpleNamespace(name=path) for path in (layout_files or [])]),
        snapshot=SimpleNamespace(rootSnapshotList=list(snapshots)) if snapshots else None,
    )


def make_datastore(name="DS1", ds_type="VMFS", multiple_host_access=True, vms=None, **attrs):
    return mo(
        "Datastore",
        name=name,
        parent=mo("Folder", name="datastore", parent=make_datacenter()),
        vm=list(vms or []),
        host=[],
        summary=SimpleNamespace(
            type=ds_type,
            multipleHostAccess=multiple_host_access,
            capacity=1000 * 1024 ** 3,
            freeSpace=400 * 1024 ** 3,
            uncommitted=100 * 1024 ** 3,
            accessible=True,
            maintenanceMode="normal",
            url=f"ds:///vmfs/volumes/{name}/",
        ),
        **attrs,
    )


# =============================================================================
# 会话替身
# =============================================================================
class FakeSession:
    """InventorySession 替身：根集合、浏览结果、esxcli 结果、高级设置均可预设"""

    def __init__(self, vms=(), hosts=(), clusters=(), resource_pools=(), datastores=(),
                 browse=None, esxcli=None, advanced_options=None, failing=()):
        self._sets = {
            "vms": list(vms),
            "hosts": list(hosts),
            "clusters": list(clusters),
            "resource_pools": list(resource_pools),
            "datastores": list(datastores),
        }
        self.browse = browse or {}
        self.esxcli_results = esxcli or {}
        self.advanced_options = advanced_options or {}
        self.failing = set(failing)
        self.browsed = []
        self.esxcli_calls = []
        self.enumerations = []

    def _root(self, name):
        self.enumerations.append(name)
        if name in self.failing:
            raise RuntimeError(f"cannot enumerate {name}")
        return self._sets[name]

    def virtual_machines(self):
        return self._root("vms")

    def hosts(self):
        return self._root("hosts")

    def clusters(self):
        return self._root("clusters")

    def resource_pools(self):
        return self._root("resource_pools")

    def datastores(self):
        return self._root("datastores")

    def _find(self, name, set_name):
        for obj in self._sets[set_name]:
            if obj.name == name:
                return obj
        return None

    def find_vm(self, name):
        return self._find(name, "vms")

    def find_host(self, name):
        return self._find(name, "hosts")

    def find_datastore(self, name):
        return self._find(name, "datastores")

    def browse_datastore(self, datastore, patterns):
        self.browsed.append(datastore.name)
        result = self.browse.get(datastore.name, [])
        if isinstance(result, Exception):
            raise result
        return result

    def esxcli(self, host, namespace, method, **arguments):
        self.esxcli_calls.append((host.name, namespace, method, arguments))
        key = (host.name, namespace, bool(arguments))
        result = self.esxcli_results.get(key, {})
        if isinstance(result, Exception):
            raise result
        return result

    def query_advanced_option(self, host, name):
        value = self.advanced_options.get((host.name, name))
        if isinstance(value, Exception):
            raise value
        return value


class FakeClient:
    def __init__(self):
        self.disconnected = False

    def disconnect(self):
        self.disconnected = True


@pytest.fixture
def datacenter():
    return make_datacenter("DC1")


@pytest.fixture
def cluster(datacenter):
    return make_cluster("Prod", datacenter)
