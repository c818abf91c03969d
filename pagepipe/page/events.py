"""
事件发射器

页面持有的发布/订阅能力，渲染器通过它监听页面生命周期事件
"""

import logging
from typing import Any, Callable, Dict, List, Optional


Listener = Callable[..., Any]


class EventEmitter:
    """事件发射器

    on/once/off/emit 订阅与触发，remove_all_listeners 清空订阅
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """初始化事件发射器

        Args:
            logger: 日志记录器
        """
        self.logger = logger or logging.getLogger("PagePipe.events")

        # 订阅表 {event: [(listener, once)]}
        self._listeners: Dict[str, List[tuple]] = {}

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        """注册监听器"""
        self._listeners.setdefault(event, []).append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        """注册只触发一次的监听器"""
        self._listeners.setdefault(event, []).append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """移除监听器（只移除最近注册的一个）"""
        entries = self._listeners.get(event)
        if not entries:
            return self

        for index in range(len(entries) - 1, -1, -1):
            if entries[index][0] == listener:
                del entries[index]
                break

        if not entries:
            del self._listeners[event]
        return self

    def emit(self, event: str, *args, **kwargs) -> bool:
        """触发事件

        监听器抛出的异常会被记录，不影响其它监听器

        Returns:
            bool: 是否存在监听器
        """
        entries = self._listeners.get(event)
        if not entries:
            return False

        # 副本，避免监听器在回调中修改订阅表
        snapshot = list(entries)

        remaining = [entry for entry in entries if not entry[1]]
        if remaining:
            self._listeners[event] = remaining
        else:
            del self._listeners[event]

        for listener, _ in snapshot:
            try:
                listener(*args, **kwargs)
            except Exception as e:
                self.logger.error(f"事件 '{event}' 的监听器执行失败: {e}", exc_info=True)

        return True

    def remove_all_listeners(self, event: Optional[str] = None) -> "EventEmitter":
        """移除全部监听器

        Args:
            event: 事件名称（可选，默认移除所有事件的监听器）
        """
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self

    def listeners(self, event: str) -> List[Listener]:
        """获取指定事件的监听器列表"""
        return [listener for listener, _ in self._listeners.get(event, [])]

    def listener_count(self, event: Optional[str] = None) -> int:
        """获取监听器数量

        Args:
            event: 事件名称（可选，默认统计全部事件）
        """
        if event is None:
            return sum(len(entries) for entries in self._listeners.values())
        return len(self._listeners.get(event, []))
