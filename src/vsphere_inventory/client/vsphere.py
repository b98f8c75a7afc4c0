# -*- coding: utf-8 -*-
"""
vSphere Inventory - vSphere 客户端模块

封装与 vSphere/vCenter 的所有交互：
- VSphereClient：连接管理
- InventorySession：只读查询接口（根集合枚举、数据存储浏览、esxcli、高级设置）
"""

import os
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from xml.etree import ElementTree

from pyVim.connect import SmartConnect, Disconnect
from pyVim.task import WaitForTask
from pyVmomi import vim

from ..inventory.paths import join_datastore_path
from ..models import ErrorType, MCPError, BrowsedFile
from ..utils.errors import InventoryConnectionError, parse_vsphere_error


logger = logging.getLogger(__name__)

ESXCLI_VERSION = "urn:vim25/5.0"


class VSphereClient:
    """vSphere 客户端封装 - 管理连接和基本操作"""

    def __init__(self, host: str, username: str, password: str, port: int = 443):
        self.host = host
        self.username = username
        self.password = password
        self.port = port
        self._connection = None

    def connect(self) -> Optional[MCPError]:
        """连接到 vSphere"""
        try:
            self._connection = SmartConnect(
                host=self.host,
                user=self.username,
                pwd=self.password,
                port=self.port,
                disableSslCertVerification=True
            )
            return None

        except Exception as e:
            return parse_vsphere_error(e, "connect")

    def disconnect(self):
        """断开连接"""
        if self._connection:
            Disconnect(self._connection)
            self._connection = None

    def is_connected(self) -> bool:
        return self._connection is not None

    def get_content(self):
        """获取 vSphere 内容"""
        if not self._connection:
            return None
        return self._connection.RetrieveContent()

    def get_all_objects(self, vim_type) -> list:
        """获取所有指定类型的对象"""
        content = self.get_content()
        if not content:
            raise InventoryConnectionError("vSphere 会话未连接")

        container = content.viewManager.CreateContainerView(
            content.rootFolder, [vim_type], True
        )
        try:
            return list(container.view)
        finally:
            container.Destroy()

    def find_object_by_name(self, name: str, vim_type):
        """根据名称查找对象"""
        for obj in self.get_all_objects(vim_type):
            if obj.name == name:
                return obj
        return None


class InventorySession:
    """
    只读清单会话

    所有采集组件共享同一个会话，会话本身不缓存任何结果，
    每次调用都直接查询 vSphere。
    """

    def __init__(self, client: VSphereClient):
        self.client = client

    def _require_connection(self):
        if not self.client.is_connected():
            raise InventoryConnectionError("vSphere 会话未连接")

    # =========================================================================
    # 根集合枚举
    # =========================================================================
    def virtual_machines(self) -> list:
        """所有虚拟机（不含模板）"""
        self._require_connection()
        return [vm for vm in self.client.get_all_objects(vim.VirtualMachine) if not _is_template(vm)]

    def hosts(self) -> list:
        self._require_connection()
        return self.client.get_all_objects(vim.HostSystem)

    def clusters(self) -> list:
        self._require_connection()
        return self.client.get_all_objects(vim.ClusterComputeResource)

    def resource_pools(self) -> list:
        """所有资源池，包含 vApp"""
        self._require_connection()
        return self.client.get_all_objects(vim.ResourcePool)

    def datastores(self) -> list:
        self._require_connection()
        return self.client.get_all_objects(vim.Datastore)

    def find_vm(self, name: str):
        self._require_connection()
        return self.client.find_object_by_name(name, vim.VirtualMachine)

    def find_host(self, name: str):
        self._require_connection()
        return self.client.find_object_by_name(name, vim.HostSystem)

    def find_datastore(self, name: str):
        self._require_connection()
        return self.client.find_object_by_name(name, vim.Datastore)

    # =========================================================================
    # 数据存储浏览
    # =========================================================================
    def browse_datastore(self, datastore, patterns: Iterable[str]) -> List[BrowsedFile]:
        """递归浏览数据存储，返回匹配文件的相对路径、大小和修改时间"""
        self._require_connection()
        spec = vim.host.DatastoreBrowser.SearchSpec(
            matchPattern=list(patterns),
            details=vim.host.DatastoreBrowser.FileInfo.Details(
                fileSize=True,
                modification=True,
                fileType=True,
            ),
        )
        task = datastore.browser.SearchDatastoreSubFolders_Task(
            datastorePath=f"[{datastore.name}]",
            searchSpec=spec,
        )
        WaitForTask(task)

        files = []
        for result in task.info.result or []:
            for info in result.file or []:
                files.append(BrowsedFile(
                    path=join_datastore_path(result.folderPath, info.path),
                    size_bytes=info.fileSize or 0,
                    modified=info.modification,
                ))
        logger.debug(f"数据存储 {datastore.name} 浏览完成，匹配文件 {len(files)} 个")
        return files

    # =========================================================================
    # 主机查询
    # =========================================================================
    def query_advanced_option(self, host, name: str) -> Optional[str]:
        """查询主机高级设置，设置不存在时返回 None"""
        self._require_connection()
        try:
            options = host.configManager.advancedOption.QueryOptions(name)
        except vim.fault.InvalidName:
            return None
        for option in options or []:
            if option.key == name:
                return "" if option.value is None else str(option.value)
        return None

    def esxcli(self, host, namespace: str, method: str, **arguments) -> Dict[str, Any]:
        """
        通过 ManagedMethodExecuter 调用 esxcli 命令

        namespace 形如 ``system.tls.server``，返回结果的字段名与 esxcli 输出一致，
        列表字段返回字符串列表。
        """
        self._require_connection()
        executer = host.RetrieveManagedMethodExecuter()
        soap_args = [
            vim.ReflectManagedMethodExecuterSoapArgument(
                name=key,
                val=f"<{key}>{_soap_value(value)}</{key}>",
            )
            for key, value in arguments.items()
        ]
        response = executer.ExecuteSoap(
            moid=f"ha-cli-handler-{namespace.replace('.', '-')}",
            version=ESXCLI_VERSION,
            method=f"vim.EsxCLI.{namespace}.{method}",
            argument=soap_args,
        )
        if response is None or not response.response:
            return {}
        return parse_esxcli_response(response.response)


# =============================================================================
# 辅助函数
# =============================================================================
def _is_template(vm) -> bool:
    config = getattr(vm, "config", None)
    return bool(config and config.template)


def _soap_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_esxcli_response(xml_text: str) -> Dict[str, Any]:
    """解析 esxcli SOAP 响应为字典，嵌套元素解析为字符串列表"""
    root = ElementTree.fromstring(xml_text)
    # 返回值可能直接是 obj，也可能包在 returnval 里
    if len(root) == 1 and len(root[0]) and _local_name(root.tag) != "obj":
        root = root[0]

    result: Dict[str, Any] = {}
    for child in root:
        if len(child):
            result[_local_name(child.tag)] = [(item.text or "").strip() for item in child]
        else:
            result[_local_name(child.tag)] = (child.text or "").strip()
    return result


# =============================================================================
# 客户端创建
# =============================================================================
def get_vsphere_client() -> Tuple[Optional[VSphereClient], Optional[MCPError]]:
    """根据环境变量创建并连接 vSphere 客户端，调用方负责断开连接"""
    host = os.getenv("VSPHERE_HOST")
    username = os.getenv("VSPHERE_USERNAME")
    password = os.getenv("VSPHERE_PASSWORD")
    port = int(os.getenv("VSPHERE_PORT", "443"))

    if not host or not username or not password:
        return None, MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            message="vSphere 连接配置不完整",
            suggestion="请设置环境变量: VSPHERE_HOST, VSPHERE_USERNAME, VSPHERE_PASSWORD"
        )

    client = VSphereClient(host, username, password, port)
    error = client.connect()
    if error:
        return None, error

    return client, None
