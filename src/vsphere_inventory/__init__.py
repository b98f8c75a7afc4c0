# -*- coding: utf-8 -*-
"""
vSphere Inventory

只读采集 vSphere 清单并生成表格报表，同时以 MCP 工具的形式对外提供。
"""

from .server import mcp, run_server
from .client import VSphereClient, InventorySession, get_vsphere_client
from .inventory import ContextResolver, InventoryRunner, OrphanedArtifactDetector, SHEET_NAMES
from .models import MCPResult, MCPError, ErrorType, ReportTable, VMContext

__version__ = "0.1.0"

__all__ = [
    "mcp",
    "run_server",
    "VSphereClient",
    "InventorySession",
    "get_vsphere_client",
    "ContextResolver",
    "InventoryRunner",
    "OrphanedArtifactDetector",
    "SHEET_NAMES",
    "MCPResult",
    "MCPError",
    "ErrorType",
    "ReportTable",
    "VMContext",
]
