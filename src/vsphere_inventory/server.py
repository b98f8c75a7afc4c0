# -*- coding: utf-8 -*-
"""
vSphere Inventory - 服务器入口模块

MCP 服务器的主入口，包含：
- ToolRegistry：工具注册类
- lifespan：生命周期管理
- mcp：FastMCP 实例
- run_server：服务器运行函数
"""

import os
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from mcp.server.fastmcp import FastMCP

from .tools import (
    list_sheets,
    collect_inventory,
    find_orphaned_files,
    describe_vm_context,
    map_guest_disks,
    describe_host_tls,
)


logger = logging.getLogger(__name__)


# =============================================================================
# 工具注册类
# =============================================================================
class ToolRegistry:
    """工具注册类 - 管理所有 MCP 工具的注册"""

    def __init__(self, mcp_instance):
        self.mcp = mcp_instance

    def register_tools(self):
        """注册所有 MCP 工具"""
        self._register_report_tools()
        self._register_query_tools()
        return self.mcp

    def _register_report_tools(self):
        """注册报表类工具"""
        self.mcp.tool(
            name="listSheets",
            description="查询可采集的报表 (工作表) 名称、数据来源和列",
            annotations={"title": "查询报表列表", "readOnlyHint": True}
        )(list_sheets)

        self.mcp.tool(
            name="collectInventory",
            description=(
                "采集 vSphere 清单并写入 xlsx 报表。"
                "可通过 sheets 指定报表，如 ['vInfo', 'vHost']；不指定时采集全部。"
                "某类对象无法枚举时对应工作表为空，其余工作表不受影响"
            ),
            annotations={"title": "采集清单", "readOnlyHint": True}
        )(collect_inventory)

        self.mcp.tool(
            name="findOrphanedFiles",
            description=(
                "扫描共享 VMFS/VVOL 数据存储中未被任何虚拟机或模板引用的 vmdk/vmx 文件。"
                "只报告候选文件，不会删除"
            ),
            annotations={"title": "检测孤立文件", "readOnlyHint": True}
        )(find_orphaned_files)

    def _register_query_tools(self):
        """注册查询类工具"""
        self.mcp.tool(
            name="describeVMContext",
            description="查询虚拟机所在的集群、数据中心、资源池、vApp 和文件夹",
            annotations={"title": "查询虚拟机位置", "readOnlyHint": True}
        )(describe_vm_context)

        self.mcp.tool(
            name="mapGuestDisks",
            description=(
                "将客户机磁盘映射到 SCSI 控制器和 总线号:单元号。"
                "Windows 客户机需要启用 disk.EnableUUID"
            ),
            annotations={"title": "映射客户机磁盘", "readOnlyHint": True}
        )(map_guest_disks)

        self.mcp.tool(
            name="describeHostTLS",
            description="查询 ESXi 主机的 TLS profile 和协议配置 (profile 需要 ESXi 8.0 U3 及以上)",
            annotations={"title": "查询主机 TLS 配置", "readOnlyHint": True}
        )(describe_host_tls)


# =============================================================================
# 生命周期管理
# =============================================================================
@asynccontextmanager
async def lifespan(app) -> AsyncGenerator[None, None]:
    """MCP 服务器生命周期管理"""
    logger.info("初始化 vSphere Inventory Server...")
    logger.info(f"vSphere 配置: {os.getenv('VSPHERE_HOST')}")

    yield

    logger.info("关闭 vSphere Inventory Server...")


# =============================================================================
# FastMCP 实例创建
# =============================================================================
mcp = FastMCP(
    "vSphereInventory",
    lifespan=lifespan,
    instructions=(
        "vSphere 清单报表助手，只读采集虚拟机、主机、集群、存储和网络信息。\n\n"
        "**工具使用指南**:\n"
        "1. listSheets 查看可用报表\n"
        "2. collectInventory 生成 xlsx 报表\n"
        "3. findOrphanedFiles 检测共享数据存储中的孤立文件\n"
        "4. describeVMContext / mapGuestDisks / describeHostTLS 查询单个对象\n\n"
        "**错误处理**: 所有工具返回统一的 MCPResult 格式，失败时包含错误类型、建议和相关工具推荐。"
    ),
    host=os.getenv("SERVER_HOST", "0.0.0.0"),
    port=int(os.getenv("SERVER_PORT", "8000"))
)

ToolRegistry(mcp).register_tools()


# =============================================================================
# 服务器运行函数
# =============================================================================
def run_server():
    """运行 MCP 服务器"""
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level_str, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info(f"启动 vSphere Inventory 服务器，日志级别: {log_level_str}")

    transport = os.getenv('SERVER_TRANSPORT', 'stdio')
    logger.info(f"使用传输协议: {transport}")

    mcp.run(transport=transport)


if __name__ == "__main__":
    run_server()
