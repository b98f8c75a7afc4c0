# -*- coding: utf-8 -*-
"""报表采集器测试：列结构、数值归一化、逐对象失败隔离、进度与并发"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from types import SimpleNamespace

from conftest import (
    Exploding,
    make_disk,
    make_host,
    make_nic,
    make_resource_pool,
    make_scsi_controller,
    make_datastore,
    make_vm,
    mo,
)
from vsphere_inventory.inventory import CallbackProgressSink, ContextResolver
from vsphere_inventory.inventory.collectors import (
    Collector,
    ClusterCollector,
    DatastoreCollector,
    HostCollector,
    HostHbaCollector,
    HostNicCollector,
    HostSwitchCollector,
    ResourcePoolCollector,
    VMCdromCollector,
    VMCpuCollector,
    VMDiskCollector,
    VMInfoCollector,
    VMMemoryCollector,
    VMNetworkCollector,
    VMPartitionCollector,
    VMSnapshotCollector,
    read,
)
from vsphere_inventory.inventory.collectors.host import format_wwn


def _host_with_storage(name, cluster, adapters=None, storage=None):
    pnic = SimpleNamespace(
        key="key-vim.host.PhysicalNic-vmnic0",
        device="vmnic0",
        mac="b4:96:91:00:00:01",
        driver="ixgben",
        pci="0000:18:00.0",
        linkSpeed=SimpleNamespace(speedMb=10000, duplex=True),
    )
    vswitch = SimpleNamespace(
        name="vSwitch0", numPorts=128, numPortsAvailable=120, mtu=1500,
        pnic=[pnic.key], portgroup=["key-vim.host.PortGroup-VM Network"],
    )
    if storage is None:
        storage = SimpleNamespace(hostBusAdapter=list(adapters or []))
    return make_host(
        name,
        cluster,
        config=SimpleNamespace(
            storageDevice=storage,
            network=SimpleNamespace(pnic=[pnic], vswitch=[vswitch], portgroup=[], vnic=[]),
        ),
    )


def _fc_hba(device="vmhba1"):
    return mo(
        "FibreChannelHba",
        device=device,
        model="QLE2692",
        driver="qlnativefc",
        status="online",
        nodeWorldWideName=0x20000025B500000F,
        portWorldWideName=0x20000025B500001F,
        bus=59,
        pci="0000:3b:00.0",
    )


# =============================================================================
# 列结构
# =============================================================================
def test_rows_always_carry_the_full_column_set():
    rich = make_vm(devices=[make_scsi_controller(), make_disk(), make_nic()])
    bare = mo("VirtualMachine", name="bare")

    rows = list(VMInfoCollector().collect([rich, bare]))

    assert len(rows) == 2
    for row in rows:
        assert list(row) == list(VMInfoCollector.columns)
    assert rows[1]["VM"] == "bare"
    assert rows[1]["IPAddress"] == ""
    assert rows[1]["NumDisks"] == 0


def test_info_rows_include_resolved_context(cluster):
    host = make_host("esx01", cluster)
    vm = make_vm(host=host, devices=[make_scsi_controller(), make_disk(), make_nic()])

    row = list(VMInfoCollector().collect([vm], ContextResolver()))[0]

    assert row["Cluster"] == "Prod"
    assert row["Datacenter"] == "DC1"
    assert row["Host"] == "esx01"
    assert row["NumDisks"] == 1
    assert row["NumNICs"] == 1
    assert row["ProvisionedGB"] == 40
    assert row["UsedGB"] == 20


# =============================================================================
# 数值归一化
# =============================================================================
def test_unlimited_vm_limits_are_reported_as_zero():
    vm = make_vm(cpu_limit=-1, memory_limit=-1)
    limited = make_vm(name="vm2", cpu_limit=2000, memory_limit=4096)

    cpu_rows = list(VMCpuCollector().collect([vm, limited]))
    memory_rows = list(VMMemoryCollector().collect([vm, limited]))

    assert [row["LimitMHz"] for row in cpu_rows] == [0, 2000]
    assert [row["LimitMB"] for row in memory_rows] == [0, 4096]
    assert cpu_rows[0]["Sockets"] == 2


def test_unlimited_resource_pool_limits_are_reported_as_zero(cluster):
    allocation = SimpleNamespace(
        reservation=0, limit=-1, expandableReservation=True,
        shares=SimpleNamespace(shares=4000, level="normal"),
    )
    pool = make_resource_pool(
        "Tier1",
        parent=make_resource_pool("Resources", parent=cluster, owner=cluster),
        owner=cluster,
        config=SimpleNamespace(cpuAllocation=allocation, memoryAllocation=allocation),
        vm=[],
    )

    row = list(ResourcePoolCollector().collect([pool]))[0]

    assert row["CPULimitMHz"] == 0
    assert row["MemLimitMB"] == 0
    assert row["Cluster"] == "Prod"
    assert row["Datacenter"] == "DC1"
    assert row["Parent"] == "Resources"
    assert row["Type"] == "ResourcePool"


def test_disk_rows_repeat_vm_identity_and_round_capacity():
    vm = make_vm(devices=[
        make_scsi_controller(),
        make_disk(key=2000, unit=0, capacity_bytes=40 * 1024 ** 3),
        make_disk(key=2001, unit=1, capacity_bytes=int(1.5 * 1024 ** 3),
                  file_name="[DS2] vm1/vm1_1.vmdk", label="Hard disk 2", iops_limit=500),
    ])

    rows = list(VMDiskCollector().collect([vm]))

    assert [row["Disk"] for row in rows] == ["Hard disk 1", "Hard disk 2"]
    assert all(row["VM"] == "vm1" and row["UUID"] == vm.config.uuid for row in rows)
    assert [row["CapacityGB"] for row in rows] == [40.0, 1.5]
    assert [row["IOPSLimit"] for row in rows] == [0, 500]
    assert [row["Datastore"] for row in rows] == ["DS1", "DS2"]
    assert rows[0]["Controller"] == "SCSI controller 0"


def test_partition_rows_compute_free_percent():
    vm = make_vm(guest_disks=[
        SimpleNamespace(diskPath="/", capacity=100 * 1024 ** 2, freeSpace=25 * 1024 ** 2, mappings=[]),
    ])

    row = list(VMPartitionCollector().collect([vm]))[0]

    assert row["CapacityMB"] == 100
    assert row["FreeMB"] == 25
    assert row["FreePercent"] == 25


# =============================================================================
# 嵌套对象展开
# =============================================================================
def test_network_rows_join_guest_addresses_by_mac():
    vm = make_vm(devices=[make_nic(mac="00:50:56:aa:bb:cc")])
    vm.guest.net = [SimpleNamespace(macAddress="00:50:56:AA:BB:CC", ipAddress=["10.0.0.10", "fe80::1"])]

    row = list(VMNetworkCollector().collect([vm]))[0]

    assert row["AdapterType"] == "Vmxnet3"
    assert row["Network"] == "VM Network"
    assert row["IPAddresses"] == "10.0.0.10, fe80::1"


def test_network_resolves_distributed_portgroup_name():
    nic = make_nic()
    nic.backing = mo(
        "VirtualEthernetCardDistributedVirtualPortBackingInfo",
        port=SimpleNamespace(portgroupKey="dvportgroup-42"),
    )
    vm = make_vm(devices=[nic])
    vm.network = [SimpleNamespace(key="dvportgroup-42", name="DPG-App")]

    row = list(VMNetworkCollector().collect([vm]))[0]

    assert row["Network"] == "DPG-App"


def test_cdrom_rows_only_include_cdrom_devices():
    cdrom = mo(
        "VirtualCdrom",
        deviceInfo=SimpleNamespace(label="CD/DVD drive 1"),
        connectable=SimpleNamespace(connected=False, startConnected=False),
        backing=mo("VirtualCdromIsoBackingInfo", fileName="[ISO] rhel9.iso"),
    )
    vm = make_vm(devices=[make_disk(), cdrom])

    rows = list(VMCdromCollector().collect([vm]))

    assert len(rows) == 1
    assert rows[0]["Backing"] == "[ISO] rhel9.iso"
    assert rows[0]["BackingType"] == "VirtualCdromIsoBackingInfo"


def test_snapshot_tree_is_flattened_depth_first():
    created = datetime(2024, 5, 1, tzinfo=timezone.utc)
    child = SimpleNamespace(name="after-patch", description="", createTime=created,
                            state="poweredOff", quiesced=False, childSnapshotList=[])
    root = SimpleNamespace(name="base", description="clean install", createTime=created,
                           state="poweredOff", quiesced=True, childSnapshotList=[child])
    vm = make_vm(snapshots=[root])

    rows = list(VMSnapshotCollector().collect([vm, make_vm(name="vm2")]))

    assert [row["Snapshot"] for row in rows] == ["base", "after-patch"]
    assert [row["Parent"] for row in rows] == ["", "base"]
    assert rows[0]["Created"] == created


# =============================================================================
# 主机、集群、数据存储
# =============================================================================
def test_host_row_reports_usage_percentages(cluster):
    row = list(HostCollector().collect([make_host("esx01", cluster)]))[0]

    assert row["Cluster"] == "Prod"
    assert row["Datacenter"] == "DC1"
    assert row["MemoryGB"] == 512
    assert row["CPUUsagePercent"] == 10
    assert row["MemoryUsagePercent"] == 50
    assert row["Version"] == "8.0.3"


def test_hba_failure_on_one_host_leaves_other_hosts_and_collectors_intact(cluster):
    hosts = [
        _host_with_storage("esx01", cluster, adapters=[_fc_hba()]),
        _host_with_storage("esx02", cluster, storage=Exploding("storage system unavailable")),
        _host_with_storage("esx03", cluster, adapters=[_fc_hba(), _fc_hba("vmhba2")]),
    ]

    hba_rows = list(HostHbaCollector().collect(hosts))
    host_rows = list(HostCollector().collect(hosts))
    nic_rows = list(HostNicCollector().collect(hosts))

    assert [row["Host"] for row in hba_rows] == ["esx01", "esx03", "esx03"]
    assert hba_rows[0]["Type"] == "Fibre Channel"
    assert hba_rows[0]["WWNN"] == "20:00:00:25:b5:00:00:0f"
    assert hba_rows[0]["IQN"] == ""
    assert [row["Host"] for row in host_rows] == ["esx01", "esx02", "esx03"]
    assert all(row["Vendor"] == "Dell Inc." for row in host_rows)
    assert [row["Host"] for row in nic_rows] == ["esx01", "esx02", "esx03"]
    assert all(row["vSwitch"] == "vSwitch0" for row in nic_rows)


def test_switch_rows_name_uplinks_by_device(cluster):
    row = list(HostSwitchCollector().collect([_host_with_storage("esx01", cluster)]))[0]

    assert row["Uplinks"] == "vmnic0"
    assert row["PortGroups"] == 1


def test_cluster_row_counts_vms_across_hosts(cluster):
    cluster.host = [SimpleNamespace(vm=[1, 2]), SimpleNamespace(vm=[3])]
    cluster.summary = SimpleNamespace(numHosts=2, numEffectiveHosts=2, totalMemory=1024 * 1024 ** 3)

    row = list(ClusterCollector().collect([cluster]))[0]

    assert row["NumVMs"] == 3
    assert row["TotalMemoryGB"] == 1024
    assert row["HAEnabled"] == ""


def test_datastore_row_reports_capacity_in_gb():
    row = list(DatastoreCollector().collect([make_datastore("DS1")]))[0]

    assert row["Datacenter"] == "DC1"
    assert row["CapacityGB"] == 1000
    assert row["FreeGB"] == 400
    assert row["UsedGB"] == 600
    assert row["ProvisionedGB"] == 700
    assert row["FreePercent"] == 40
    assert row["MultipleHostAccess"] is True


def test_wwn_formatting():
    assert format_wwn(0x20000025B500000F) == "20:00:00:25:b5:00:00:0f"
    assert format_wwn(None) == ""


def test_read_degrades_to_default():
    obj = SimpleNamespace(a=SimpleNamespace(b=None), broken=Exploding())

    assert read(obj, "a.b") == ""
    assert read(obj, "a.missing", 0) == 0
    assert read(obj, "broken.value", None) is None


# =============================================================================
# 逐对象失败、进度与并发
# =============================================================================
class _EchoCollector(Collector):
    name = "vEcho"
    columns = ("Name",)

    def __init__(self, failing=(), delays=None):
        super().__init__()
        self.failing = set(failing)
        self.delays = delays or {}

    def label(self, entity):
        return entity

    def rows(self, entity, context_fn):
        time.sleep(self.delays.get(entity, 0))
        if entity in self.failing:
            raise RuntimeError(f"{entity} vanished")
        return [{"Name": entity}]


def test_failing_entity_is_skipped():
    rows = list(_EchoCollector(failing={"b"}).collect(["a", "b", "c"]))

    assert [row["Name"] for row in rows] == ["a", "c"]


def test_progress_is_reported_per_entity():
    calls = []
    collector = _EchoCollector(failing={"b"})

    rows = list(collector.collect(["a", "b", "c"], progress=CallbackProgressSink(lambda *args: calls.append(args))))

    assert len(rows) == 2
    assert calls == [("vEcho", 1, 3, "a"), ("vEcho", 2, 3, "b"), ("vEcho", 3, 3, "c")]


def test_broken_progress_sink_does_not_change_results():
    def explode(*args):
        raise RuntimeError("progress display closed")

    with_sink = list(_EchoCollector().collect(["a", "b"], progress=CallbackProgressSink(explode)))
    without_sink = list(_EchoCollector().collect(["a", "b"]))

    assert with_sink == without_sink


def test_parallel_collection_preserves_input_order():
    collector = _EchoCollector(delays={"a": 0.05, "b": 0.02, "c": 0})

    with ThreadPoolExecutor(max_workers=3) as executor:
        rows = list(collector.collect(["a", "b", "c"], executor=executor))

    assert [row["Name"] for row in rows] == ["a", "b", "c"]


def test_entity_exceeding_timeout_is_skipped():
    release = threading.Event()

    class _Blocking(_EchoCollector):
        def rows(self, entity, context_fn):
            if entity == "slow":
                release.wait(5)
            return [{"Name": entity}]

    with ThreadPoolExecutor(max_workers=2) as executor:
        try:
            rows = list(_Blocking().collect(["a", "slow", "b"], executor=executor, timeout=0.2))
        finally:
            release.set()

    assert [row["Name"] for row in rows] == ["a", "b"]



def test_timeout_without_shared_pool_skips_only_the_stuck_entity():
    release = threading.Event()

    class _Blocking(_EchoCollector):
        def rows(self, entity, context_fn):
            if entity == "slow":
                release.wait(5)
            return [{"Name": entity}]

    try:
        rows = list(_Blocking().collect(["a", "slow", "b", "c"], timeout=0.2))
    finally:
        release.set()

    assert [row["Name"] for row in rows] == ["a", "b", "c"]


def test_timeout_is_measured_from_entity_start():
    class _Steady(_EchoCollector):
        def rows(self, entity, context_fn):
            time.sleep(0.15)
            return [{"Name": entity}]

    with ThreadPoolExecutor(max_workers=1) as executor:
        rows = list(_Steady().collect(["a", "b", "c", "d"], executor=executor, timeout=0.5))

    assert [row["Name"] for row in rows] == ["a", "b", "c", "d"]
