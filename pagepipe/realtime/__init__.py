"""
实时连接模块 (realtime)

提供页面实时连接功能，包括：
- 连接注册表 (ConnectionRegistry)
- WebSocket 页面端点 (PageSocketEndpoint)
"""

__version__ = "0.1.0"
