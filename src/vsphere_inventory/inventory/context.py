# -*- coding: utf-8 -*-
"""
vSphere Inventory - 虚拟机层级上下文解析

为每台虚拟机独立解析 集群 / 数据中心 / 资源池 / vApp / 文件夹 五个字段。
每个字段的查找互不影响：关系不存在时值为 None，查找出错时只记录在该字段
自己的 LookupResult 中。解析器不缓存、不修改任何状态，重复解析结果一致。
"""

import logging
from typing import Any, Callable, Dict, Iterator, Optional

from ..models import CONTEXT_FIELDS, LookupResult, VMContext
from .devices import type_name


logger = logging.getLogger(__name__)

# 向上遍历层级的最大深度，防止异常数据形成环
MAX_DEPTH = 64


def _ancestors(obj: Any) -> Iterator[Any]:
    """从 obj 自身开始沿 parent 链向上遍历"""
    depth = 0
    while obj is not None and depth < MAX_DEPTH:
        yield obj
        obj = getattr(obj, "parent", None)
        depth += 1


def _name(obj: Any) -> Optional[str]:
    return getattr(obj, "name", None) if obj is not None else None


class ContextResolver:
    """虚拟机层级上下文解析器"""

    def __init__(self):
        self._lookups: Dict[str, Callable[[Any], Optional[str]]] = {
            "cluster": self._cluster,
            "datacenter": self._datacenter,
            "resource_pool": self._resource_pool,
            "app_group": self._app_group,
            "folder": self._folder,
        }

    def __call__(self, vm: Any) -> VMContext:
        return self.resolve(vm)

    def resolve(self, vm: Any) -> VMContext:
        """解析全部字段"""
        return VMContext(**{field: self.lookup(vm, field).value for field in CONTEXT_FIELDS})

    def lookup(self, vm: Any, field: str) -> LookupResult:
        """解析单个字段"""
        if field not in self._lookups:
            raise ValueError(f"未知的上下文字段: {field}")
        try:
            return LookupResult(value=self._lookups[field](vm))
        except Exception as e:
            logger.debug(f"虚拟机 {_safe_label(vm)} 的 {field} 查找失败: {e}")
            return LookupResult(error=str(e) or type(e).__name__)

    # =========================================================================
    # 各字段查找
    # =========================================================================
    def _cluster(self, vm: Any) -> Optional[str]:
        runtime = getattr(vm, "runtime", None)
        host = getattr(runtime, "host", None) if runtime else None
        if host is not None:
            parent = getattr(host, "parent", None)
            return parent.name if type_name(parent) == "ClusterComputeResource" else None

        # 未分配主机时通过资源池的所有者判断
        pool = getattr(vm, "resourcePool", None)
        owner = getattr(pool, "owner", None) if pool is not None else None
        if type_name(owner) == "ClusterComputeResource":
            return owner.name
        return None

    def _datacenter(self, vm: Any) -> Optional[str]:
        start = (
            getattr(vm, "parent", None)
            or getattr(vm, "parentVApp", None)
            or getattr(vm, "resourcePool", None)
        )
        return datacenter_of(start)

    def _resource_pool(self, vm: Any) -> Optional[str]:
        for obj in _ancestors(getattr(vm, "resourcePool", None)):
            kind = type_name(obj)
            if kind == "ResourcePool":
                return obj.name
            if kind != "VirtualApp":
                return None
        return None

    def _app_group(self, vm: Any) -> Optional[str]:
        vapp = getattr(vm, "parentVApp", None)
        if vapp is not None:
            return _name(vapp)
        pool = getattr(vm, "resourcePool", None)
        if type_name(pool) == "VirtualApp":
            return _name(pool)
        return None

    def _folder(self, vm: Any) -> Optional[str]:
        parent = getattr(vm, "parent", None)
        if type_name(parent) == "Folder":
            return parent.name
        return None


def _safe_label(vm: Any) -> str:
    try:
        return vm.name
    except Exception:
        return "<unknown>"


# =============================================================================
# 主机、资源池等对象的位置查找
# =============================================================================
def datacenter_of(obj: Any) -> Optional[str]:
    """沿 parent 链查找所在数据中心名称"""
    for ancestor in _ancestors(obj):
        if type_name(ancestor) == "Datacenter":
            return ancestor.name
    return None


def cluster_of_host(host: Any) -> Optional[str]:
    """主机所在集群，独立主机返回 None"""
    parent = getattr(host, "parent", None)
    if type_name(parent) == "ClusterComputeResource":
        return parent.name
    return None
