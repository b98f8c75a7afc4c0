# -*- coding: utf-8 -*-
"""
vSphere Inventory - 清单采集运行器

一次运行：
1. 每个根集合 (虚拟机、主机、集群、资源池、数据存储) 最多枚举一次
2. 按固定顺序逐个运行采集器，每个采集器产出一张完整的表后交给报表接收方
3. 某个根集合无法枚举时，依赖它的表输出为空表并带错误信息，其他表照常采集

只有会话本身断开 (InventoryConnectionError) 会中止整个运行。
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Type

from ..models import InventoryOptions, ReportTable
from ..report import ReportSink
from ..utils.errors import InventoryConnectionError, enumeration_error
from .collectors import (
    Collector,
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
    ScsiTopologyCollector,
    HostCollector,
    HostHbaCollector,
    HostNicCollector,
    HostSwitchCollector,
    HostPortGroupCollector,
    HostVmkernelCollector,
    TlsProfileCollector,
    ClusterCollector,
    ResourcePoolCollector,
    DatastoreCollector,
)
from .context import ContextResolver
from .orphans import OrphanedFileCollector
from .progress import LoggingProgressSink, ProgressSink


logger = logging.getLogger(__name__)


COLLECTOR_TYPES: Sequence[Type[Collector]] = (
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
    ScsiTopologyCollector,
    ResourcePoolCollector,
    ClusterCollector,
    HostCollector,
    HostHbaCollector,
    HostNicCollector,
    HostSwitchCollector,
    HostPortGroupCollector,
    HostVmkernelCollector,
    TlsProfileCollector,
    DatastoreCollector,
    OrphanedFileCollector,
)

SHEET_NAMES: List[str] = [collector_type.name for collector_type in COLLECTOR_TYPES]


def build_collectors(session: Any, sheets: Optional[Iterable[str]] = None) -> List[Collector]:
    """按固定顺序创建采集器，sheets 为空时创建全部"""
    wanted = set(sheets) if sheets else None
    return [
        collector_type(session)
        for collector_type in COLLECTOR_TYPES
        if wanted is None or collector_type.name in wanted
    ]


class InventorySnapshot:
    """单次运行内的根集合，每个集合只枚举一次，枚举失败的结果同样保留"""

    def __init__(self, session: Any):
        self._loaders: Dict[str, Callable[[], list]] = {
            "vms": session.virtual_machines,
            "hosts": session.hosts,
            "clusters": session.clusters,
            "resource_pools": session.resource_pools,
            "datastores": session.datastores,
        }
        self._sets: Dict[str, list] = {}
        self._errors: Dict[str, Exception] = {}

    def get(self, name: str) -> list:
        if name in self._errors:
            raise self._errors[name]
        if name not in self._sets:
            try:
                self._sets[name] = list(self._loaders[name]())
            except InventoryConnectionError:
                raise
            except Exception as e:
                self._errors[name] = e
                raise
            logger.info(f"根集合 {name} 枚举完成，共 {len(self._sets[name])} 个对象")
        return self._sets[name]


class InventoryRunner:
    """按顺序运行采集器并输出到报表接收方"""

    def __init__(
        self,
        session: Any,
        options: Optional[InventoryOptions] = None,
        progress: Optional[ProgressSink] = None,
        resolver: Optional[ContextResolver] = None,
    ):
        self.session = session
        self.options = options or InventoryOptions()
        self.progress = progress if progress is not None else LoggingProgressSink()
        self.resolver = resolver or ContextResolver()

    def collect_table(
        self,
        collector: Collector,
        snapshot: InventorySnapshot,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> ReportTable:
        """运行单个采集器，实体集合无法枚举时返回带错误信息的空表"""
        try:
            entities = snapshot.get(collector.source)
        except InventoryConnectionError:
            raise
        except Exception as e:
            logger.error(f"[{collector.name}] 无法枚举 {collector.source}，输出空表: {e}")
            return ReportTable(
                name=collector.name,
                columns=list(collector.columns),
                error=enumeration_error(collector.name, e),
            )

        rows = list(collector.collect(
            entities,
            self.resolver,
            progress=self.progress,
            executor=executor,
            timeout=self.options.entity_timeout,
        ))
        return ReportTable(name=collector.name, columns=list(collector.columns), rows=rows)

    def run(
        self,
        sink: ReportSink,
        sheets: Optional[Iterable[str]] = None,
        collectors: Optional[List[Collector]] = None,
    ) -> List[ReportTable]:
        """运行全部 (或指定) 采集器，返回按顺序写出的表"""
        if collectors is None:
            collectors = build_collectors(self.session, sheets)
        snapshot = InventorySnapshot(self.session)

        executor = None
        if self.options.max_workers > 1:
            executor = ThreadPoolExecutor(
                max_workers=self.options.max_workers,
                thread_name_prefix="inventory",
            )

        tables: List[ReportTable] = []
        try:
            for collector in collectors:
                table = self.collect_table(collector, snapshot, executor)
                sink.write_table(table)
                tables.append(table)
                logger.info(f"[{collector.name}] 完成，共 {table.row_count} 行")
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        return tables
