# -*- coding: utf-8 -*-
"""
vSphere Inventory - 参数验证模块
"""

from typing import Iterable, List, Optional

from ..models import ErrorType, MCPError
from .errors import TOOL_LIST_SHEETS


def validate_vm_name(vm_name: Optional[str]) -> Optional[MCPError]:
    """验证虚拟机名称"""
    if not vm_name or not vm_name.strip():
        return MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter="vm_name",
            message="缺少必需参数: vm_name (虚拟机名称)",
            suggestion="请提供虚拟机在 vCenter 中显示的名称，如 'web-server-01'"
        )
    return None


def validate_host_name(host_name: Optional[str]) -> Optional[MCPError]:
    """验证主机名称"""
    if not host_name or not host_name.strip():
        return MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter="host_name",
            message="缺少必需参数: host_name (ESXi 主机名称)",
            suggestion="请提供主机在 vCenter 中显示的名称，如 'esx01.example.com'"
        )
    return None


def validate_sheet_names(sheets: Optional[List[str]], known: Iterable[str]) -> Optional[MCPError]:
    """验证报表名称，未指定时表示采集全部报表"""
    if not sheets:
        return None

    known = list(known)
    unknown = [name for name in sheets if name not in known]
    if unknown:
        return MCPError(
            error_type=ErrorType.INVALID_PARAMETER,
            parameter="sheets",
            message=f"未知的报表名称: {', '.join(unknown)}",
            suggestion=f"可用报表: {', '.join(known)}",
            related_tools=[TOOL_LIST_SHEETS]
        )
    return None
