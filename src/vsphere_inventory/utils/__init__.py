# -*- coding: utf-8 -*-
"""
vSphere Inventory - 工具函数包导出
"""

from .errors import (
    TOOL_LIST_SHEETS,
    TOOL_COLLECT_INVENTORY,
    TOOL_FIND_ORPHANED_FILES,
    InventoryConnectionError,
    parse_vsphere_error,
    enumeration_error,
)

from .validators import (
    validate_vm_name,
    validate_host_name,
    validate_sheet_names,
)

__all__ = [
    # 错误处理
    "TOOL_LIST_SHEETS",
    "TOOL_COLLECT_INVENTORY",
    "TOOL_FIND_ORPHANED_FILES",
    "InventoryConnectionError",
    "parse_vsphere_error",
    "enumeration_error",
    # 验证函数
    "validate_vm_name",
    "validate_host_name",
    "validate_sheet_names",
]
