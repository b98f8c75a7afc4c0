# -*- coding: utf-8 -*-
"""
vSphere Inventory - 工具包导出
"""

from .query import (
    list_sheets,
    collect_inventory,
    find_orphaned_files,
    describe_vm_context,
    map_guest_disks,
    describe_host_tls,
)

__all__ = [
    "list_sheets",
    "collect_inventory",
    "find_orphaned_files",
    "describe_vm_context",
    "map_guest_disks",
    "describe_host_tls",
]
