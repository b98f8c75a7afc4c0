# -*- coding: utf-8 -*-
"""
vSphere Inventory - ESXi TLS 配置采集器 (vTLS)

ESXi 8.0 Update 3 起提供服务端/客户端 TLS profile，通过 esxcli 查询；
服务端 profile 为 MANUAL 时再查询实际启用的协议版本。更早的版本不调用
该接口，直接输出最低版本要求。高级设置 UserVars.ESXiVPsDisabledProtocols
与版本无关，始终查询。
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Tuple

from .base import Collector, ContextFn, read


logger = logging.getLogger(__name__)

MIN_TLS_PROFILE_VERSION: Tuple[int, ...] = (8, 0, 3)
TLS_PROFILE_UNSUPPORTED = "Requires ESXi 8.0 Update 3 or later"
MANUAL_PROFILE = "MANUAL"
DISABLED_PROTOCOLS_OPTION = "UserVars.ESXiVPsDisabledProtocols"


def parse_version(version: str) -> Tuple[int, ...]:
    """'8.0.3' -> (8, 0, 3)"""
    return tuple(int(part) for part in re.findall(r"\d+", version or ""))


def supports_tls_profiles(version: str) -> bool:
    parsed = parse_version(version)
    if not parsed:
        return False
    width = max(len(parsed), len(MIN_TLS_PROFILE_VERSION))
    padded = parsed + (0,) * (width - len(parsed))
    minimum = MIN_TLS_PROFILE_VERSION + (0,) * (width - len(MIN_TLS_PROFILE_VERSION))
    return padded >= minimum


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


class TlsProfileCollector(Collector):
    """每台主机一行：TLS profile、启用的协议版本和被禁用的旧协议"""

    name = "vTLS"
    source = "hosts"
    columns = (
        "Host", "Version", "Build", "ServerProfile", "ClientProfile",
        "EnabledProtocols", "DisabledProtocols",
    )

    def rows(self, host: Any, context_fn: ContextFn) -> Iterable[Dict[str, Any]]:
        version = read(host, "summary.config.product.version")
        row = {
            "Host": read(host, "name"),
            "Version": version,
            "Build": read(host, "summary.config.product.build"),
        }

        if supports_tls_profiles(version):
            row.update(self._profiles(host))
        else:
            row["ServerProfile"] = TLS_PROFILE_UNSUPPORTED
            row["ClientProfile"] = TLS_PROFILE_UNSUPPORTED

        row["DisabledProtocols"] = self._disabled_protocols(host)
        return [row]

    def _profiles(self, host: Any) -> Dict[str, Any]:
        """查询 TLS profile，查询失败时相关字段为空"""
        result: Dict[str, Any] = {}
        try:
            server = self.session.esxcli(host, "system.tls.server", "get")
            client = self.session.esxcli(host, "system.tls.client", "get")
            result["ServerProfile"] = server.get("Profile", "")
            result["ClientProfile"] = client.get("Profile", "")

            if str(result["ServerProfile"]).upper() == MANUAL_PROFILE:
                current = self.session.esxcli(
                    host, "system.tls.server", "get", showcurrentbootprofile=True
                )
                result["EnabledProtocols"] = ", ".join(_as_list(current.get("ProtocolVersions")))
        except Exception as e:
            logger.warning(f"[{self.name}] 查询主机 {read(host, 'name')} 的 TLS profile 失败: {e}")
        return result

    def _disabled_protocols(self, host: Any) -> str:
        """高级设置不存在或无法读取时返回空字符串"""
        try:
            value = self.session.query_advanced_option(host, DISABLED_PROTOCOLS_OPTION)
        except Exception as e:
            logger.debug(f"[{self.name}] 读取主机 {read(host, 'name')} 的 {DISABLED_PROTOCOLS_OPTION} 失败: {e}")
            return ""
        return value or ""
