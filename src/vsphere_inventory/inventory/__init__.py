# -*- coding: utf-8 -*-
"""
vSphere Inventory - 清单采集引擎包导出
"""

from .context import ContextResolver
from .progress import (
    ProgressSink,
    NullProgressSink,
    LoggingProgressSink,
    CallbackProgressSink,
)
from .orphans import (
    OrphanedArtifactDetector,
    OrphanedFileCollector,
    find_orphans,
)
from .runner import (
    COLLECTOR_TYPES,
    SHEET_NAMES,
    InventoryRunner,
    InventorySnapshot,
    build_collectors,
)

__all__ = [
    "ContextResolver",
    "ProgressSink",
    "NullProgressSink",
    "LoggingProgressSink",
    "CallbackProgressSink",
    "OrphanedArtifactDetector",
    "OrphanedFileCollector",
    "find_orphans",
    "COLLECTOR_TYPES",
    "SHEET_NAMES",
    "InventoryRunner",
    "InventorySnapshot",
    "build_collectors",
]
