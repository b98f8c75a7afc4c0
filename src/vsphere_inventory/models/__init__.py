# -*- coding: utf-8 -*-
"""
vSphere Inventory - 模型包导出
"""

from .base import (
    ErrorType,
    InventoryModel,
    ToolSuggestion,
    MCPError,
    MCPResult,
)

from .inventory import (
    CONTEXT_FIELDS,
    LookupResult,
    VMContext,
    DeviceKind,
    BrowsedFile,
    OrphanCandidateFile,
    ReportTable,
    InventoryOptions,
)

__all__ = [
    # 基础模型
    "ErrorType",
    "InventoryModel",
    "ToolSuggestion",
    "MCPError",
    "MCPResult",
    # 清单模型
    "CONTEXT_FIELDS",
    "LookupResult",
    "VMContext",
    "DeviceKind",
    "BrowsedFile",
    "OrphanCandidateFile",
    "ReportTable",
    "InventoryOptions",
]
