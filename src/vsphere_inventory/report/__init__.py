# -*- coding: utf-8 -*-
"""
vSphere Inventory - 报表输出包导出
"""

from .sink import ReportSink, MemoryReportSink, XlsxReportSink

__all__ = [
    "ReportSink",
    "MemoryReportSink",
    "XlsxReportSink",
]
