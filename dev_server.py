#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
开发调试入口 - 用于 mcp dev 命令

使用方法:
    export VSPHERE_HOST=... VSPHERE_USERNAME=... VSPHERE_PASSWORD=...
    uv run mcp dev dev_server.py:mcp
"""

import os
import sys

# 将 src 目录添加到 Python 路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

# 使用绝对导入
from vsphere_inventory.server import mcp, run_server

# 调试时默认输出详细日志，并把报表写到本地目录
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("INVENTORY_OUTPUT_DIR", os.path.join(os.path.dirname(__file__), "output"))

if __name__ == "__main__":
    run_server()
