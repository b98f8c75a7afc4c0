# -*- coding: utf-8 -*-
"""
vSphere Inventory - 数据模型基础模块

工具返回值统一为 MCPResult；失败时携带 MCPError，
说明错误类别、出错参数、修复建议以及可以改用的工具。
"""

from enum import Enum
from typing import Dict, Any, Optional, List

from pydantic import Field, BaseModel, ConfigDict


# =============================================================================
# 错误类型枚举
# =============================================================================
class ErrorType(str, Enum):
    """错误类别，调用方据此决定是修正参数、重试还是检查环境"""
    # 工具参数
    MISSING_PARAMETER = "MISSING_PARAMETER"          # 必需参数缺失
    INVALID_PARAMETER = "INVALID_PARAMETER"          # 报表名称等取值无效
    # vSphere 会话与对象
    CONNECTION_ERROR = "CONNECTION_ERROR"            # 会话不可用，采集中止
    PERMISSION_DENIED = "PERMISSION_DENIED"          # 只读角色未覆盖该对象
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"        # 虚拟机、主机或数据存储不存在
    API_ERROR = "API_ERROR"                          # 其他 vSphere API 错误
    # 清单采集
    ENUMERATION_FAILED = "ENUMERATION_FAILED"        # 根集合无法枚举，对应报表为空表


# =============================================================================
# 基础模型
# =============================================================================
class InventoryModel(BaseModel):
    model_config = ConfigDict(use_enum_values=False)


class ToolSuggestion(InventoryModel):
    """可改用的工具及示例参数"""
    tool_name: str = Field(description="建议调用的工具名称")
    description: str = Field(description="调用该工具的原因说明")
    example_params: Optional[Dict[str, Any]] = Field(default=None, description="示例参数")


class MCPError(InventoryModel):
    """
    结构化错误

    error_type 用于分类，message 描述发生了什么，
    parameter 指出出错的工具参数，suggestion 与 related_tools 给出下一步操作。
    """
    error_type: ErrorType = Field(description="错误类型")
    message: str = Field(description="人类可读的错误描述")
    parameter: Optional[str] = Field(default=None, description="出错的参数名")
    suggestion: str = Field(description="解决方案建议")
    related_tools: Optional[List[ToolSuggestion]] = Field(
        default=None,
        description="相关工具推荐"
    )

    def __str__(self) -> str:
        parts = [
            f"[{self.error_type.value}] {self.message}",
            f"建议: {self.suggestion}"
        ]
        if self.related_tools:
            tools_info = ", ".join([f"{t.tool_name}({t.description})" for t in self.related_tools])
            parts.append(f"相关工具: {tools_info}")
        return "\n".join(parts)


class MCPResult(InventoryModel):
    """工具的统一返回值，成功时 data 有值，失败时 error 有值"""
    success: bool = Field(description="操作是否成功")
    data: Optional[Any] = Field(default=None, description="成功时的数据")
    error: Optional[MCPError] = Field(default=None, description="失败时的错误信息")
