# -*- coding: utf-8 -*-
"""
vSphere Inventory - 数值归一化

- 资源限制中的 "不限制" (-1) 输出为 0
- 字节数换算为整数 MB / GB，单盘容量保留 2 位小数
"""

from typing import Any, Optional, Union

MB = 1024 ** 2
GB = 1024 ** 3

Number = Union[int, float]


def normalize_limit(value: Optional[Number]) -> int:
    """资源限制：-1 (不限制) 或未设置时返回 0"""
    if value is None or value < 0:
        return 0
    return int(value)


def _scaled(value: Any, divisor: int, digits: int) -> Union[int, float, str]:
    if value is None or value == "":
        return ""
    try:
        scaled = float(value) / divisor
    except (TypeError, ValueError):
        return ""
    if digits == 0:
        return int(round(scaled))
    return round(scaled, digits)


def bytes_to_mb(value: Any, digits: int = 0) -> Union[int, float, str]:
    return _scaled(value, MB, digits)


def bytes_to_gb(value: Any, digits: int = 0) -> Union[int, float, str]:
    return _scaled(value, GB, digits)


def percent(part: Any, whole: Any) -> Union[int, str]:
    """整数百分比，分母为 0 或缺失时返回空"""
    try:
        if not whole:
            return ""
        return int(round(float(part) * 100 / float(whole)))
    except (TypeError, ValueError):
        return ""
