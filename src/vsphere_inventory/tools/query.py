# -*- coding: utf-8 -*-
"""
vSphere Inventory - 清单查询类工具
"""

import os
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import Field

from ..models import MCPResult, MCPError, ErrorType, InventoryOptions, ToolSuggestion, CONTEXT_FIELDS
from ..client import get_vsphere_client, InventorySession, VSphereClient
from ..inventory import (
    SHEET_NAMES,
    COLLECTOR_TYPES,
    ContextResolver,
    InventoryRunner,
    OrphanedArtifactDetector,
)
from ..inventory.collectors import ScsiTopologyCollector, TlsProfileCollector
from ..report import XlsxReportSink
from ..utils import (
    TOOL_COLLECT_INVENTORY,
    TOOL_FIND_ORPHANED_FILES,
    parse_vsphere_error,
    validate_vm_name,
    validate_host_name,
    validate_sheet_names,
)


logger = logging.getLogger(__name__)


def _open_session() -> Tuple[Optional[VSphereClient], Optional[InventorySession], Optional[MCPError]]:
    client, error = get_vsphere_client()
    if error:
        return None, None, error
    return client, InventorySession(client), None


def _not_found(
    parameter: str,
    kind: str,
    name: str,
    suggestion: Optional[str] = None,
    related_tools: Optional[List[ToolSuggestion]] = None,
) -> MCPError:
    return MCPError(
        error_type=ErrorType.RESOURCE_NOT_FOUND,
        parameter=parameter,
        message=f"{kind} '{name}' 不存在",
        suggestion=suggestion or "请使用 collectInventory 生成报表后核对名称",
        related_tools=related_tools or [TOOL_COLLECT_INVENTORY]
    )


async def list_sheets() -> MCPResult:
    """查询可采集的报表名称及其数据来源"""
    return MCPResult(
        success=True,
        data=[
            {"sheet": collector_type.name, "source": collector_type.source, "columns": list(collector_type.columns)}
            for collector_type in COLLECTOR_TYPES
        ]
    )


async def collect_inventory(
    sheets: Optional[List[str]] = Field(default=None, description="要采集的报表名称，不填则采集全部"),
    output_path: Optional[str] = Field(default=None, description="xlsx 输出路径，不填则写入 INVENTORY_OUTPUT_DIR")
) -> MCPResult:
    """采集 vSphere 清单并写入 xlsx 报表，每个采集器一个工作表"""
    if error := validate_sheet_names(sheets, SHEET_NAMES):
        return MCPResult(success=False, error=error)

    options = InventoryOptions.from_env()
    if not output_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = os.path.join(options.output_dir, f"vsphere_inventory_{timestamp}.xlsx")

    client, session, error = _open_session()
    if error:
        return MCPResult(success=False, error=error)

    try:
        runner = InventoryRunner(session, options=options)
        with XlsxReportSink(output_path) as sink:
            tables = runner.run(sink, sheets=sheets)
        return MCPResult(
            success=True,
            data={
                "output_path": output_path,
                "sheets": [
                    {
                        "name": table.name,
                        "rows": table.row_count,
                        "error": str(table.error) if table.error else None,
                    }
                    for table in tables
                ],
            }
        )
    except Exception as e:
        logger.error(f"清单采集失败: {e}")
        return MCPResult(success=False, error=parse_vsphere_error(e, "collect_inventory"))
    finally:
        client.disconnect()


async def find_orphaned_files(
    datastore_name: Optional[str] = Field(default=None, description="数据存储名称，不填则扫描全部共享数据存储")
) -> MCPResult:
    """扫描共享 VMFS/VVOL 数据存储中未被任何虚拟机或模板引用的 vmdk/vmx 文件 (只报告，不删除)"""
    client, session, error = _open_session()
    if error:
        return MCPResult(success=False, error=error)

    try:
        if datastore_name:
            datastore = session.find_datastore(datastore_name)
            if datastore is None:
                return MCPResult(success=False, error=_not_found(
                    "datastore_name", "数据存储", datastore_name,
                    suggestion="请核对数据存储名称，或不指定名称扫描全部共享数据存储",
                    related_tools=[TOOL_FIND_ORPHANED_FILES, TOOL_COLLECT_INVENTORY],
                ))
            datastores = [datastore]
        else:
            datastores = session.datastores()

        detector = OrphanedArtifactDetector(session)
        orphans = list(detector.detect(datastores))
        return MCPResult(
            success=True,
            data={
                "orphans": [orphan.model_dump() for orphan in orphans],
                "skipped_datastores": detector.skipped,
            }
        )
    except Exception as e:
        logger.error(f"孤立文件检测失败: {e}")
        return MCPResult(success=False, error=parse_vsphere_error(e, "find_orphaned_files datastore"))
    finally:
        client.disconnect()


async def describe_vm_context(
    vm_name: str = Field(description="虚拟机名称")
) -> MCPResult:
    """查询虚拟机所在的集群、数据中心、资源池、vApp 和文件夹"""
    if error := validate_vm_name(vm_name):
        return MCPResult(success=False, error=error)

    client, session, error = _open_session()
    if error:
        return MCPResult(success=False, error=error)

    try:
        vm = session.find_vm(vm_name)
        if vm is None:
            return MCPResult(success=False, error=_not_found("vm_name", "虚拟机", vm_name))

        resolver = ContextResolver()
        lookups = {field: resolver.lookup(vm, field) for field in CONTEXT_FIELDS}
        return MCPResult(
            success=True,
            data={
                "vm_name": vm_name,
                "context": {field: result.value for field, result in lookups.items()},
                "lookup_errors": {field: result.error for field, result in lookups.items() if result.error},
            }
        )
    except Exception as e:
        logger.error(f"查询虚拟机上下文失败: {e}")
        return MCPResult(success=False, error=parse_vsphere_error(e, "describe_vm_context"))
    finally:
        client.disconnect()


async def map_guest_disks(
    vm_name: str = Field(description="虚拟机名称")
) -> MCPResult:
    """将虚拟机的客户机磁盘映射到 SCSI 控制器、总线号和单元号"""
    if error := validate_vm_name(vm_name):
        return MCPResult(success=False, error=error)

    client, session, error = _open_session()
    if error:
        return MCPResult(success=False, error=error)

    try:
        vm = session.find_vm(vm_name)
        if vm is None:
            return MCPResult(success=False, error=_not_found("vm_name", "虚拟机", vm_name))

        rows = list(ScsiTopologyCollector(session).collect([vm]))
        return MCPResult(success=True, data=rows)
    except Exception as e:
        logger.error(f"映射客户机磁盘失败: {e}")
        return MCPResult(success=False, error=parse_vsphere_error(e, "map_guest_disks vm"))
    finally:
        client.disconnect()


async def describe_host_tls(
    host_name: str = Field(description="ESXi 主机名称")
) -> MCPResult:
    """查询 ESXi 主机的 TLS profile、启用的协议版本和被禁用的旧协议"""
    if error := validate_host_name(host_name):
        return MCPResult(success=False, error=error)

    client, session, error = _open_session()
    if error:
        return MCPResult(success=False, error=error)

    try:
        host = session.find_host(host_name)
        if host is None:
            return MCPResult(success=False, error=_not_found("host_name", "主机", host_name))

        rows = list(TlsProfileCollector(session).collect([host]))
        return MCPResult(success=True, data=rows[0] if rows else None)
    except Exception as e:
        logger.error(f"查询主机 TLS 配置失败: {e}")
        return MCPResult(success=False, error=parse_vsphere_error(e, "describe_host_tls"))
    finally:
        client.disconnect()
