# -*- coding: utf-8 -*-
"""
vSphere Inventory - 采集进度通知

进度通知是单向的：采集逻辑只发送通知，从不读取进度接收方的状态，
接收方抛出的异常也不会影响采集结果。
"""

import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class ProgressSink:
    """进度接收方基类，默认不做任何处理"""

    def update(self, phase: str, index: int, total: int, label: str = "") -> None:
        pass


class NullProgressSink(ProgressSink):
    pass


class LoggingProgressSink(ProgressSink):
    """以日志形式输出进度：每个实体 DEBUG，阶段完成 INFO"""

    def update(self, phase: str, index: int, total: int, label: str = "") -> None:
        logger.debug(f"[{phase}] {index}/{total} {label}")
        if index == total:
            logger.info(f"[{phase}] 已处理 {total} 个对象")


class CallbackProgressSink(ProgressSink):
    """将进度转发给回调函数"""

    def __init__(self, callback: Callable[[str, int, int, str], None]):
        self.callback = callback

    def update(self, phase: str, index: int, total: int, label: str = "") -> None:
        self.callback(phase, index, total, label)


def notify(progress: Optional[ProgressSink], phase: str, index: int, total: int, label: str = "") -> None:
    """发送进度通知，接收方的异常只记录日志"""
    if progress is None:
        return
    try:
        progress.update(phase, index, total, label)
    except Exception as e:
        logger.debug(f"进度通知失败 [{phase}]: {e}")
