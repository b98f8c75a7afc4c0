# -*- coding: utf-8 -*-
"""
vSphere Inventory - 清单业务数据模型
"""

import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ConfigDict, Field

from .base import MCPError, InventoryModel


# =============================================================================
# 虚拟机层级上下文
# =============================================================================
CONTEXT_FIELDS: Tuple[str, ...] = ("cluster", "datacenter", "resource_pool", "app_group", "folder")


class LookupResult(InventoryModel):
    """单个层级关系的查找结果：value 为空表示关系不存在，error 非空表示查找失败"""
    model_config = ConfigDict(frozen=True)

    value: Optional[str] = Field(default=None, description="查找到的对象名称")
    error: Optional[str] = Field(default=None, description="查找失败时的错误信息")

    @property
    def found(self) -> bool:
        return self.value is not None


class VMContext(InventoryModel):
    """虚拟机所在的集群/数据中心/资源池/vApp/文件夹，任意字段均可缺失"""
    model_config = ConfigDict(frozen=True)

    cluster: Optional[str] = Field(default=None, description="所在集群")
    datacenter: Optional[str] = Field(default=None, description="所在数据中心")
    resource_pool: Optional[str] = Field(default=None, description="所在资源池")
    app_group: Optional[str] = Field(default=None, description="所属 vApp")
    folder: Optional[str] = Field(default=None, description="所在文件夹")

    def as_row(self) -> Dict[str, str]:
        """转换为报表列，缺失字段输出空字符串"""
        return {
            "Cluster": self.cluster or "",
            "Datacenter": self.datacenter or "",
            "ResourcePool": self.resource_pool or "",
            "AppGroup": self.app_group or "",
            "Folder": self.folder or "",
        }


# =============================================================================
# 设备类型标签
# =============================================================================
class DeviceKind(str, Enum):
    """虚拟设备类型标签"""
    DISK = "disk"
    NIC = "nic"
    CDROM = "cdrom"
    FLOPPY = "floppy"
    SCSI_CONTROLLER = "scsi_controller"
    SATA_CONTROLLER = "sata_controller"
    NVME_CONTROLLER = "nvme_controller"
    IDE_CONTROLLER = "ide_controller"
    USB = "usb"
    OTHER = "other"

    @property
    def is_controller(self) -> bool:
        return self in (
            DeviceKind.SCSI_CONTROLLER,
            DeviceKind.SATA_CONTROLLER,
            DeviceKind.NVME_CONTROLLER,
            DeviceKind.IDE_CONTROLLER,
        )


# =============================================================================
# 数据存储文件
# =============================================================================
class BrowsedFile(InventoryModel):
    """数据存储浏览结果中的单个文件"""
    path: str = Field(description="相对数据存储根目录的路径，以 / 开头")
    size_bytes: int = Field(default=0, description="文件大小 (字节)")
    modified: Optional[datetime] = Field(default=None, description="最后修改时间")


class OrphanCandidateFile(InventoryModel):
    """未被任何虚拟机或模板引用的文件"""
    datastore: str = Field(description="数据存储名称")
    path: str = Field(description="相对数据存储根目录的路径")
    size_bytes: int = Field(default=0, description="文件大小 (字节)")
    modified: Optional[datetime] = Field(default=None, description="最后修改时间")


# =============================================================================
# 报表
# =============================================================================
class ReportTable(InventoryModel):
    """单个采集器的输出表，列顺序固定"""
    name: str = Field(description="表名 (工作表名称)")
    columns: List[str] = Field(description="列名，按输出顺序")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="数据行")
    error: Optional[MCPError] = Field(default=None, description="实体集合枚举失败时的错误信息")

    @property
    def row_count(self) -> int:
        return len(self.rows)


class InventoryOptions(InventoryModel):
    """清单采集运行参数"""
    max_workers: int = Field(default=1, ge=1, description="单个采集器内并发处理的实体数上限")
    entity_timeout: Optional[float] = Field(default=None, gt=0, description="单个实体的处理超时 (秒)")
    output_dir: str = Field(default="output", description="报表输出目录")

    @classmethod
    def from_env(cls) -> "InventoryOptions":
        """从环境变量读取运行参数"""
        timeout = os.getenv("INVENTORY_ENTITY_TIMEOUT")
        return cls(
            max_workers=int(os.getenv("INVENTORY_MAX_WORKERS", "1")),
            entity_timeout=float(timeout) if timeout else None,
            output_dir=os.getenv("INVENTORY_OUTPUT_DIR", "output"),
        )
