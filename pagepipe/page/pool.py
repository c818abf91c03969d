"""
对象池

页面和 pagelet 实例的有界空闲列表，用于跨请求复用实例
"""

import logging
from threading import Lock
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pagepipe.config.config_validator import ConfigValidator


T = TypeVar("T")

# 默认容量 {kind: size}，可由 configure_defaults 调整
_DEFAULT_CAPACITY: Dict[str, int] = {
    "page": ConfigValidator.DEFAULT_PAGE_POOL_SIZE,
    "pagelet": ConfigValidator.DEFAULT_PAGELET_POOL_SIZE,
}


def configure_defaults(page_size: Optional[int] = None, pagelet_size: Optional[int] = None) -> None:
    """设置之后新建对象池的默认容量

    Args:
        page_size: 页面对象池容量
        pagelet_size: pagelet 对象池容量
    """
    if page_size is not None:
        _DEFAULT_CAPACITY["page"] = page_size
    if pagelet_size is not None:
        _DEFAULT_CAPACITY["pagelet"] = pagelet_size


def default_capacity(kind: str) -> int:
    """获取指定种类对象池的默认容量"""
    return _DEFAULT_CAPACITY[kind]


class ObjectPool(Generic[T]):
    """对象池

    alloc() 优先取出空闲实例，否则调用工厂创建新实例；
    release() 归还实例，超出容量的实例直接丢弃
    """

    def __init__(
        self,
        factory: Callable[[], T],
        capacity: int,
        name: str = "",
        logger: Optional[logging.Logger] = None
    ):
        """初始化对象池

        Args:
            factory: 创建新实例的工厂函数
            capacity: 最多保留的空闲实例数
            name: 对象池名称（用于日志）
            logger: 日志记录器
        """
        self.factory = factory
        self.capacity = capacity
        self.name = name or getattr(factory, "__name__", "pool")
        self.logger = logger or logging.getLogger("PagePipe.pool")

        self._free: List[T] = []
        self._lock = Lock()

    def alloc(self) -> T:
        """分配实例

        Returns:
            T: 复用的空闲实例或新建实例
        """
        with self._lock:
            if self._free:
                return self._free.pop()

        return self.factory()

    def release(self, item: T) -> bool:
        """归还实例

        Args:
            item: 要归还的实例

        Returns:
            bool: 是否被放回池中
        """
        with self._lock:
            if len(self._free) >= self.capacity:
                return False
            if any(existing is item for existing in self._free):
                return False
            self._free.append(item)

        self.logger.debug(f"实例已归还到 {self.name} 对象池，空闲数: {len(self._free)}")
        return True

    def clear(self) -> int:
        """清空空闲实例

        Returns:
            int: 清除的实例数量
        """
        with self._lock:
            count = len(self._free)
            self._free.clear()
        return count

    def __len__(self) -> int:
        return len(self._free)
