# -*- coding: utf-8 -*-
"""
vSphere Inventory - 客户端包导出
"""

from .vsphere import (
    VSphereClient,
    InventorySession,
    get_vsphere_client,
    parse_esxcli_response,
)

__all__ = [
    "VSphereClient",
    "InventorySession",
    "get_vsphere_client",
    "parse_esxcli_response",
]
