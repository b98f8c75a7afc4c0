# -*- coding: utf-8 -*-
"""
vSphere Inventory - 孤立文件检测 (vOrphaned)

针对共享的集群文件系统数据存储：
1. 收集数据存储上所有虚拟机和模板 layoutEx 中列出的文件，作为引用集合
2. 递归浏览数据存储中的磁盘 (.vmdk) 和配置 (.vmx/.vmtx) 文件
3. 浏览结果中不在引用集合里的文件即为孤立文件候选

路径比较不区分大小写。只报告，不删除任何文件。
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Set

from ..models import BrowsedFile, OrphanCandidateFile
from .collectors.base import Collector, ContextFn, read
from .paths import reference_key, split_datastore_path
from .units import bytes_to_gb


logger = logging.getLogger(__name__)


class IncompleteReferencesError(RuntimeError):
    """数据存储上某台虚拟机的文件布局不可读，引用集合不完整"""


ORPHAN_FILE_PATTERNS: Sequence[str] = ("*.vmdk", "*.vmx", "*.vmtx")
SCANNABLE_DATASTORE_TYPES = frozenset({"VMFS", "VVOL"})


def is_scannable(datastore: Any) -> bool:
    """只扫描可被多台主机同时访问的集群文件系统数据存储"""
    ds_type = str(read(datastore, "summary.type")).upper()
    multiple_host_access = bool(read(datastore, "summary.multipleHostAccess", False))
    return ds_type in SCANNABLE_DATASTORE_TYPES and multiple_host_access


def reference_paths(datastore: Any) -> Set[str]:
    """
    数据存储上所有虚拟机和模板引用的文件，小写的相对路径

    任何一台虚拟机的 layoutEx 不可读时抛出 IncompleteReferencesError，
    该数据存储的浏览结果无法可靠比对。
    """
    datastore_name = datastore.name
    references: Set[str] = set()
    for vm in datastore.vm or []:
        layout_files = read(vm, "layoutEx.file", None)
        if layout_files is None:
            raise IncompleteReferencesError(
                f"数据存储 {datastore_name}: 虚拟机 {read(vm, 'name', '<unknown>')} 的文件布局不可读"
            )
        for layout_file in layout_files:
            path = read(layout_file, "name")
            owner, _ = split_datastore_path(path)
            if owner is not None and owner != datastore_name:
                continue
            references.add(reference_key(path))
    return references


def find_orphans(
    datastore_name: str,
    references: Iterable[str],
    browsed_files: Iterable[BrowsedFile],
) -> List[OrphanCandidateFile]:
    """浏览结果与引用集合求差集"""
    referenced = {reference_key(path) for path in references}
    return [
        OrphanCandidateFile(
            datastore=datastore_name,
            path=browsed.path,
            size_bytes=browsed.size_bytes,
            modified=browsed.modified,
        )
        for browsed in browsed_files
        if reference_key(browsed.path) not in referenced
    ]


class OrphanedArtifactDetector:
    """逐个数据存储检测孤立文件，单个数据存储失败时跳过并记录名称"""

    def __init__(self, session: Any, patterns: Sequence[str] = ORPHAN_FILE_PATTERNS):
        self.session = session
        self.patterns = tuple(patterns)
        self.skipped: List[str] = []

    def scan(self, datastore: Any) -> List[OrphanCandidateFile]:
        if not is_scannable(datastore):
            logger.debug(f"数据存储 {read(datastore, 'name')} 不是共享的集群文件系统，跳过孤立文件检测")
            return []

        references = reference_paths(datastore)
        browsed = self.session.browse_datastore(datastore, self.patterns)
        orphans = find_orphans(datastore.name, references, browsed)
        logger.info(
            f"数据存储 {datastore.name}: 引用文件 {len(references)} 个，"
            f"匹配文件 {len(browsed)} 个，孤立文件候选 {len(orphans)} 个"
        )
        return orphans

    def detect(self, datastores: Iterable[Any]) -> Iterator[OrphanCandidateFile]:
        for datastore in datastores:
            try:
                found = self.scan(datastore)
            except Exception as e:
                name = read(datastore, "name", "<unknown>")
                logger.warning(f"数据存储 {name} 孤立文件检测失败，已跳过: {e}")
                self.skipped.append(name)
                continue
            yield from found


class OrphanedFileCollector(Collector):
    """孤立文件候选，每个文件一行"""

    name = "vOrphaned"
    source = "datastores"
    columns = ("Datastore", "Path", "SizeGB", "Modified")

    def __init__(self, session: Any = None, detector: OrphanedArtifactDetector = None):
        super().__init__(session)
        self.detector = detector or OrphanedArtifactDetector(session)

    def rows(self, datastore: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        try:
            candidates = self.detector.scan(datastore)
        except Exception:
            self.detector.skipped.append(self.label(datastore))
            raise
        return [
            {
                "Datastore": candidate.datastore,
                "Path": candidate.path,
                "SizeGB": bytes_to_gb(candidate.size_bytes, 2),
                "Modified": candidate.modified,
            }
            for candidate in candidates
        ]
