# -*- coding: utf-8 -*-
"""
vSphere Inventory - 采集器基类

采集器约定：
- columns 定义固定的列顺序，每一行都通过 shape_row 生成，列集合在任何数据下都一致
- rows() 针对单个顶层对象返回零到多行，嵌套设备展开为多行并重复父对象标识
- 单个可选属性读取失败时该字段为空；单个对象采集失败时跳过该对象的全部行
- 每处理完一个顶层对象发送一次进度通知
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ...models import VMContext
from ..progress import ProgressSink, notify


logger = logging.getLogger(__name__)

Row = Dict[str, Any]
ContextFn = Callable[[Any], VMContext]


def read(obj: Any, path: str, default: Any = "") -> Any:
    """
    按属性路径读取可选字段，如 read(vm, "guest.ipAddress")

    中间对象为 None、属性不存在或远程读取出错时返回 default。
    """
    current = obj
    try:
        for part in path.split("."):
            if current is None:
                return default
            current = getattr(current, part)
    except Exception as e:
        logger.debug(f"读取属性 {path} 失败: {e}")
        return default
    return default if current is None else current


def _scalar(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (bool, int, float, datetime)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(item) for item in value)
    return str(value)


def shape_row(columns: Sequence[str], data: Dict[str, Any]) -> Row:
    """按列顺序生成一行，缺失字段为空字符串"""
    return {column: _scalar(data.get(column)) for column in columns}


def vm_identity(vm: Any) -> Dict[str, Any]:
    """虚拟机标识列，嵌套设备行重复使用"""
    return {
        "VM": read(vm, "name"),
        "UUID": read(vm, "config.uuid"),
    }


class Collector:
    """
    采集器基类

    子类定义 name (报表名)、columns (列顺序)、source (根集合名称)，
    并实现 rows() 将单个对象转换为一到多行数据。
    """

    name: str = ""
    columns: Tuple[str, ...] = ()
    source: str = "vms"

    def __init__(self, session: Any = None):
        self.session = session

    def rows(self, entity: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        raise NotImplementedError

    def label(self, entity: Any) -> str:
        return str(read(entity, "name", "<unknown>"))

    def entity_rows(self, entity: Any, context_fn: ContextFn) -> List[Row]:
        """单个对象的全部行，出错时跳过该对象"""
        try:
            return [shape_row(self.columns, data) for data in self.rows(entity, context_fn)]
        except Exception as e:
            logger.warning(f"[{self.name}] 采集 {self.label(entity)} 失败，已跳过: {e}")
            return []

    def entity_rows_within(self, entity: Any, context_fn: ContextFn, timeout: Optional[float] = None) -> List[Row]:
        """
        带超时的单对象采集

        对象在独立的工作线程中运行，timeout 从该对象开始执行时计时。
        超时后放弃等待并跳过该对象，卡住的线程不会占用共享线程池。
        """
        if not timeout:
            return self.entity_rows(entity, context_fn)

        worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"inventory-{self.name}")
        future = worker.submit(self.entity_rows, entity, context_fn)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning(f"[{self.name}] 采集 {self.label(entity)} 超时 ({timeout}s)，已跳过")
            return []
        finally:
            worker.shutdown(wait=False)

    def collect(
        self,
        entities: Iterable[Any],
        context_fn: Optional[ContextFn] = None,
        progress: Optional[ProgressSink] = None,
        executor: Optional[Executor] = None,
        timeout: Optional[float] = None,
    ) -> Iterator[Row]:
        """
        惰性生成全部行，顺序与输入对象顺序一致

        提供 executor 时每个对象作为一个独立任务并发处理，结果仍按输入顺序输出；
        执行超过 timeout 秒的对象记录日志后跳过，其余对象照常采集。
        """
        if context_fn is None:
            context_fn = _empty_context
        entities = list(entities)
        total = len(entities)

        if executor is None:
            for index, entity in enumerate(entities, 1):
                yield from self.entity_rows_within(entity, context_fn, timeout)
                notify(progress, self.name, index, total, self.label(entity))
            return

        futures = [executor.submit(self.entity_rows_within, entity, context_fn, timeout) for entity in entities]
        for index, (entity, future) in enumerate(zip(entities, futures), 1):
            yield from future.result()
            notify(progress, self.name, index, total, self.label(entity))


def _empty_context(vm: Any) -> VMContext:
    return VMContext()
