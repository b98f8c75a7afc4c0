# -*- coding: utf-8 -*-
"""
vSphere Inventory - 错误处理模块

包含工具建议常量、连接异常和 vSphere 错误解析函数
"""

import logging

from ..models import ErrorType, MCPError, ToolSuggestion


logger = logging.getLogger(__name__)


class InventoryConnectionError(RuntimeError):
    """与 vSphere 的会话不可用，整个采集无法继续"""


# =============================================================================
# 工具建议常量 - 用于错误响应中引导调用方
# =============================================================================
TOOL_LIST_SHEETS = ToolSuggestion(
    tool_name="listSheets",
    description="查询可采集的报表名称",
    example_params={}
)

TOOL_COLLECT_INVENTORY = ToolSuggestion(
    tool_name="collectInventory",
    description="采集清单并生成报表",
    example_params={"sheets": ["vInfo", "vHost"]}
)

TOOL_FIND_ORPHANED_FILES = ToolSuggestion(
    tool_name="findOrphanedFiles",
    description="不指定数据存储名称，扫描全部共享数据存储中未被引用的磁盘和配置文件",
    example_params={}
)


def parse_vsphere_error(error: Exception, operation: str) -> MCPError:
    """
    解析 vSphere API 错误，转换为结构化的 MCPError
    """
    error_msg = getattr(error, 'msg', None) or str(error) or type(error).__name__
    lowered = error_msg.lower()

    # 连接错误
    if isinstance(error, InventoryConnectionError) or 'connection' in lowered or 'timeout' in lowered:
        return MCPError(
            error_type=ErrorType.CONNECTION_ERROR,
            message=f"无法连接到 vSphere: {error_msg}",
            suggestion="请检查 vSphere 主机地址、端口和网络连接"
        )

    # 权限不足
    if 'permission' in lowered or 'access' in lowered or 'unauthorized' in lowered:
        return MCPError(
            error_type=ErrorType.PERMISSION_DENIED,
            message=f"权限不足 ({operation}): {error_msg}",
            suggestion="请确认账号至少具有只读角色，并已传播到所有子对象"
        )

    # 资源不存在
    if 'not found' in lowered or 'not exist' in lowered or 'managedobjectnotfound' in lowered:
        if 'datastore' in operation.lower():
            return MCPError(
                error_type=ErrorType.RESOURCE_NOT_FOUND,
                parameter="datastore_name",
                message="指定的数据存储不存在",
                suggestion="请使用 collectInventory 查看 vDatastore 报表中的数据存储名称",
                related_tools=[TOOL_COLLECT_INVENTORY]
            )
        if 'vm' in operation.lower():
            return MCPError(
                error_type=ErrorType.RESOURCE_NOT_FOUND,
                parameter="vm_name",
                message="指定的虚拟机不存在",
                suggestion="请检查虚拟机名称是否正确",
                related_tools=[TOOL_COLLECT_INVENTORY]
            )
        return MCPError(
            error_type=ErrorType.RESOURCE_NOT_FOUND,
            message=f"对象在采集过程中已被删除: {error_msg}",
            suggestion="清单是实时快照，请稍后重新采集"
        )

    # 默认错误处理
    return MCPError(
        error_type=ErrorType.API_ERROR,
        message=f"vSphere 操作失败 ({operation}): {error_msg}",
        suggestion="请检查参数是否正确，或稍后重试"
    )


def enumeration_error(collector: str, error: Exception) -> MCPError:
    """采集器的实体集合无法枚举时的错误，该报表输出为空表"""
    parsed = parse_vsphere_error(error, collector)
    return MCPError(
        error_type=ErrorType.ENUMERATION_FAILED,
        message=f"{collector} 的实体集合无法枚举: {parsed.message}",
        suggestion="该报表将为空，其他报表不受影响；" + parsed.suggestion
    )
