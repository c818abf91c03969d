"""
Pagelet 基类

页面的独立子组件。页面通过以下约定使用 pagelet 类：
- alloc()：分配新的或复用的实例
- configure(page)：绑定到页面
- authorize(request)（可选）：返回 bool 或可等待的 bool
- free()：解除绑定并归还对象池
"""

from typing import Any, Optional

from pagepipe.page.pool import ObjectPool, default_capacity


class Pagelet:
    """Pagelet 基类

    子类可定义 authorize(request) 决定是否在当前请求中渲染
    """

    # pagelet 名称，未设置时使用在页面中声明的键名
    name: str = ""

    # 对象池容量（None 表示使用默认容量）
    pool_size: Optional[int] = None

    def __init__(self):
        self.page: Optional[Any] = None

    @classmethod
    def pool(cls) -> ObjectPool:
        """获取当前 pagelet 类专属的对象池"""
        pool = cls.__dict__.get("_pool")
        if pool is None:
            capacity = cls.pool_size if cls.pool_size is not None else default_capacity("pagelet")
            pool = ObjectPool(cls, capacity, name=cls.__name__)
            cls._pool = pool
        return pool

    @classmethod
    def alloc(cls) -> "Pagelet":
        """分配实例

        Returns:
            Pagelet: 复用的空闲实例或新建实例
        """
        return cls.pool().alloc()

    def configure(self, page: Any) -> "Pagelet":
        """绑定到页面

        Args:
            page: 所属页面实例

        Returns:
            Pagelet: 自身
        """
        self.page = page
        return self

    def free(self) -> bool:
        """解除页面绑定并归还对象池

        Returns:
            bool: 是否被放回池中
        """
        self.page = None
        return type(self).pool().release(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
