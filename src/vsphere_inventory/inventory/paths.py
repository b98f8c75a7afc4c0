# -*- coding: utf-8 -*-
"""
vSphere Inventory - 数据存储路径处理

vSphere 中的文件路径形如 ``[datastore1] vm1/vm1.vmdk``，
本模块统一转换为相对数据存储根目录的 ``/vm1/vm1.vmdk`` 形式。
"""

from typing import Optional, Tuple


def split_datastore_path(path: str) -> Tuple[Optional[str], str]:
    """拆分 ``[ds] folder/file`` 为 (数据存储名称, 相对路径)，无方括号前缀时名称为 None"""
    path = (path or "").strip()
    if path.startswith("[") and "]" in path:
        name, rest = path[1:].split("]", 1)
        return name, rest.strip()
    return None, path


def datastore_relative_path(path: str) -> str:
    """转换为以 / 开头、不含数据存储前缀的相对路径"""
    _, rest = split_datastore_path(path)
    rest = rest.replace("\\", "/").strip("/")
    return "/" + rest if rest else "/"


def join_datastore_path(folder: str, file_name: str) -> str:
    """拼接浏览结果中的目录与文件名"""
    folder = datastore_relative_path(folder)
    if folder == "/":
        return "/" + file_name.strip("/")
    return folder + "/" + file_name.strip("/")


def reference_key(path: str) -> str:
    """引用比较使用的键：相对路径转小写"""
    return datastore_relative_path(path).lower()
