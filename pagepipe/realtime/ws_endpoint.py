"""
WebSocket 页面端点

将 WebSocket 连接挂到页面的连接注册表上，连接关闭时自动移除
"""

import logging
from typing import Any, Optional

import websockets


class PageSocketEndpoint:
    """WebSocket 页面端点

    连接建立时触发页面的 connection 事件，断开时触发 disconnect 事件
    """

    def __init__(self, page: Any, logger: Optional[logging.Logger] = None):
        """初始化端点

        Args:
            page: 页面实例
            logger: 日志记录器（默认使用页面的日志记录器）
        """
        self.page = page
        self.logger = logger or page.logger
        self.server: Optional[Any] = None

    async def serve(self, websocket: Any, path: str = "") -> None:
        """处理单个 WebSocket 连接，直到连接关闭

        页面在连接期间被重置时，连接属于上一个请求，断开时不再触发 disconnect

        Args:
            websocket: WebSocket 连接对象
            path: 请求路径（可选参数，兼容旧版 websockets 的处理函数签名）
        """
        connections = self.page.connections
        connection_id = connections.generate_id()
        generation = self.page.generation

        connections.add(connection_id, websocket)
        self.logger.info(f"🔗 页面连接: {connection_id}")
        self.page.emit("connection", connection_id, websocket)

        try:
            # 等待连接断开
            await websocket.wait_closed()
        except Exception as e:
            self.logger.error(f"连接 {connection_id} 错误: {e}")
        finally:
            removed = connections.remove(connection_id)

            if removed and self.page.generation == generation:
                self.logger.info(
                    f"🔌 页面连接断开: {connection_id}，剩余连接: {len(connections)}"
                )
                self.page.emit("disconnect", connection_id)
            else:
                self.logger.debug(f"上一个请求的连接已断开: {connection_id}")

    async def start(self, host: str, port: int) -> None:
        """启动 WebSocket 服务器，所有连接挂到该页面"""
        self.logger.info(f"正在启动页面 WebSocket 服务器，监听 {host}:{port}...")
        self.server = await websockets.serve(self.serve, host, port)
        self.logger.info(f"✅ 页面 WebSocket 服务器已启动，监听 {host}:{port}")

    async def stop(self) -> None:
        """关闭 WebSocket 服务器"""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            self.logger.info("页面 WebSocket 服务器已关闭")
