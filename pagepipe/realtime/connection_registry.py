"""
实时连接注册表

管理页面渲染期间打开的 WebSocket 连接
"""

import uuid
import logging
from typing import Any, Dict, Iterator, List, Optional

from websockets.exceptions import ConnectionClosed


class ConnectionRegistry:
    """实时连接注册表

    职责：
    1. 维护 连接 ID -> WebSocket 连接 的映射
    2. 向页面的全部连接广播数据
    3. 在页面重置时清空连接
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """初始化注册表

        Args:
            logger: 日志记录器
        """
        self.logger = logger or logging.getLogger("PagePipe.connections")
        self._connections: Dict[str, Any] = {}

    def generate_id(self) -> str:
        """生成唯一的连接 ID"""
        return str(uuid.uuid4())

    def add(self, connection_id: str, websocket: Any) -> None:
        """添加连接

        Args:
            connection_id: 连接 ID
            websocket: WebSocket 连接对象
        """
        self._connections[connection_id] = websocket

        self.logger.debug(
            f"连接已添加: {connection_id}，当前连接数: {len(self._connections)}"
        )

    def remove(self, connection_id: str) -> bool:
        """移除连接

        Returns:
            bool: 是否成功移除
        """
        if connection_id not in self._connections:
            return False

        del self._connections[connection_id]
        self.logger.debug(
            f"连接已移除: {connection_id}，剩余连接数: {len(self._connections)}"
        )
        return True

    def get(self, connection_id: str) -> Optional[Any]:
        """获取连接，不存在返回 None"""
        return self._connections.get(connection_id)

    def ids(self) -> List[str]:
        """获取所有连接 ID 列表"""
        return list(self._connections.keys())

    def clear(self) -> int:
        """清除所有连接

        Returns:
            int: 清除的连接数量
        """
        count = len(self._connections)
        self._connections.clear()
        return count

    async def broadcast(self, data) -> int:
        """向所有连接广播数据

        发送失败或已关闭的连接会被移除

        Returns:
            int: 发送成功的连接数量
        """
        if not self._connections:
            return 0

        # 副本，避免迭代时修改字典
        items = list(self._connections.items())
        failed = []

        for connection_id, websocket in items:
            try:
                await websocket.send(data)
            except ConnectionClosed:
                self.logger.info(f"连接 {connection_id} 已关闭，移除")
                failed.append(connection_id)
            except Exception as e:
                self.logger.error(f"发送数据到连接 {connection_id} 失败: {e}")
                failed.append(connection_id)

        for connection_id in failed:
            self.remove(connection_id)

        if failed:
            self.logger.warning(
                f"广播完成，成功: {len(items) - len(failed)}/{len(items)}，"
                f"失败: {len(failed)}"
            )

        return len(items) - len(failed)

    async def send(self, connection_id: str, data) -> bool:
        """向指定连接发送数据

        Returns:
            bool: 发送是否成功
        """
        websocket = self.get(connection_id)
        if websocket is None:
            return False

        try:
            await websocket.send(data)
            return True
        except ConnectionClosed:
            self.logger.info(f"连接 {connection_id} 已关闭，移除")
        except Exception as e:
            self.logger.error(f"发送数据到连接 {connection_id} 失败: {e}")

        self.remove(connection_id)
        return False

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._connections))
