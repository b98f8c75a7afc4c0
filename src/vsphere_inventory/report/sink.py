# -*- coding: utf-8 -*-
"""
vSphere Inventory - 报表输出

报表接收方按采集器顺序逐个接收完整的表，一次一张，不会交错。
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ..models import ReportTable


logger = logging.getLogger(__name__)

# Excel 工作表名称最长 31 个字符
MAX_SHEET_TITLE = 31


class ReportSink:
    """报表接收方基类"""

    def write_table(self, table: ReportTable) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class MemoryReportSink(ReportSink):
    """在内存中按顺序保存所有表"""

    def __init__(self):
        self.tables: List[ReportTable] = []

    def write_table(self, table: ReportTable) -> None:
        self.tables.append(table)

    def get(self, name: str) -> Optional[ReportTable]:
        for table in self.tables:
            if table.name == name:
                return table
        return None


def _cell_value(value: Any) -> Any:
    """Excel 不支持带时区的时间和控制字符"""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


class XlsxReportSink(ReportSink):
    """写入 xlsx 文件，每张表一个工作表，枚举失败的表只有表头"""

    def __init__(self, path: str):
        self.path = path
        self.workbook = Workbook(write_only=True)
        self.sheet_count = 0
        self._closed = False

    def write_table(self, table: ReportTable) -> None:
        sheet = self.workbook.create_sheet(title=table.name[:MAX_SHEET_TITLE])
        sheet.append(list(table.columns))
        for row in table.rows:
            sheet.append([_cell_value(row.get(column, "")) for column in table.columns])
        self.sheet_count += 1
        logger.debug(f"工作表 {table.name} 已写入 {table.row_count} 行")

    def close(self) -> None:
        if self._closed:
            return
        if self.sheet_count == 0:
            self.workbook.create_sheet(title="Empty")
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.workbook.save(self.path)
        self._closed = True
        logger.info(f"报表已保存: {self.path} (共 {self.sheet_count} 个工作表)")
