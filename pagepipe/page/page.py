"""
页面实例

每个请求使用的页面容器，负责：
- 发现当前请求允许渲染的 pagelet（授权过滤）
- 在请求之间重置状态，以便实例被对象池复用
- 持有实时连接注册表和事件发射器
"""

import asyncio
import inspect
import logging
from typing import Any, List, Optional, Tuple, Union

from pagepipe.config.environment import EnvironmentMode, get_default_environment
from pagepipe.exceptions import ReentrancyError, StructuralMisuseError
from pagepipe.page.definition import PageDefinition
from pagepipe.page.events import EventEmitter, Listener
from pagepipe.page.pagelet import Pagelet
from pagepipe.page.pool import ObjectPool, default_capacity
from pagepipe.realtime.connection_registry import ConnectionRegistry
from pagepipe.utils.logger import get_page_logger


# 页面实例自身的字段，开发模式下只允许设置这些字段和子类声明的 fields
_BASE_FIELDS = frozenset({
    "logger",
    "events",
    "connections",
    "conditional_pagelets",
    "enabled_pagelets",
    "disabled_pagelets",
    "request",
    "response",
    "_configuring",
    "_discovering",
    "_generation",
})

# 组成页面类型定义的类属性
_DEFINITION_ATTRS = ("path", "method", "status_code", "env", "pagelets", "parsers", "resources")


class Page:
    """页面类

    通过继承声明页面类型：

        class HomePage(Page):
            path = "/"
            pagelets = {"header": Header, "feed": Feed}

    声明时构建只读的 PageDefinition；每个请求开始时调用 configure()
    """

    # 匹配的 HTTP 路径（字符串或已编译的正则）
    path = "/"

    # 接受的 HTTP 方法（字符串、逗号分隔字符串或序列）
    method = "GET"

    # 默认响应状态码
    status_code = 200

    # 运行环境，development 模式下封闭实例字段；None 表示声明时使用默认环境
    env: Optional[Union[str, EnvironmentMode]] = None

    # 需要加载的 pagelet {名称: Pagelet 类}
    pagelets: dict = {}

    # 参数解析函数 {参数名: 解析函数}
    parsers: dict = {}

    # 供 pagelet 使用的共享资源
    resources: dict = {}

    # 子类额外允许的实例字段
    fields: tuple = ()

    # 对象池容量（None 表示使用默认容量）
    pool_size: Optional[int] = None

    definition: PageDefinition
    _schema: frozenset

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        _build_definition(cls)

    def __init__(self, logger: Optional[logging.Logger] = None):
        """初始化页面实例

        Args:
            logger: 日志记录器
        """
        self.logger = logger or get_page_logger(type(self))
        self.events = EventEmitter(self.logger)

        # 每个请求的状态
        self.connections = ConnectionRegistry(self.logger)
        self.conditional_pagelets: List[Any] = []
        self.enabled_pagelets: List[Any] = []
        self.disabled_pagelets: List[Any] = []
        self.request: Optional[Any] = None
        self.response: Optional[Any] = None

        self._configuring = False
        self._discovering = False
        self._generation = 0

    def __setattr__(self, name: str, value: Any) -> None:
        cls = type(self)
        if cls.definition.environment_mode.is_strict and name not in cls._schema:
            raise StructuralMisuseError(
                f"{cls.__name__} 不允许添加未声明的字段 '{name}'，"
                f"请在 fields 中声明"
            )
        object.__setattr__(self, name, value)

    @property
    def environment_mode(self) -> EnvironmentMode:
        """当前页面类型的运行环境"""
        return type(self).definition.environment_mode

    @property
    def pagelet_templates(self):
        """pagelet 模板映射（只读，所有实例共享）"""
        return type(self).definition.pagelets

    # ========== 对象池 ==========

    @classmethod
    def pool(cls) -> ObjectPool:
        """获取当前页面类型专属的对象池"""
        pool = cls.__dict__.get("_pool")
        if pool is None:
            capacity = cls.pool_size if cls.pool_size is not None else default_capacity("page")
            pool = ObjectPool(cls, capacity, name=cls.__name__)
            cls._pool = pool
        return pool

    @classmethod
    def alloc(cls) -> "Page":
        """分配页面实例（优先复用对象池中的空闲实例）"""
        return cls.pool().alloc()

    def free(self) -> bool:
        """重置页面并归还对象池

        Returns:
            bool: 是否被放回池中

        Raises:
            ReentrancyError: 页面正在 configure 中
        """
        if self._configuring or self._discovering:
            raise ReentrancyError(f"{type(self).__name__} 正在配置中，不能释放")

        self.reset()
        return type(self).pool().release(self)

    # ========== 事件 ==========

    def on(self, event: str, listener: Listener) -> "Page":
        self.events.on(event, listener)
        return self

    def once(self, event: str, listener: Listener) -> "Page":
        self.events.once(event, listener)
        return self

    def off(self, event: str, listener: Listener) -> "Page":
        self.events.off(event, listener)
        return self

    def emit(self, event: str, *args, **kwargs) -> bool:
        return self.events.emit(event, *args, **kwargs)

    def remove_all_listeners(self, event: Optional[str] = None) -> "Page":
        self.events.remove_all_listeners(event)
        return self

    def listener_count(self, event: Optional[str] = None) -> int:
        return self.events.listener_count(event)

    # ========== 生命周期 ==========

    @property
    def generation(self) -> int:
        """重置次数，每次 reset 加一，用于识别上一个请求遗留的连接"""
        return self._generation

    def _release_pagelets(self) -> int:
        """将当前持有的 pagelet 归还对象池并清空两个列表"""
        released = 0
        for pagelet in self.enabled_pagelets + self.disabled_pagelets:
            free = getattr(pagelet, "free", None)
            if callable(free):
                free()
                released += 1

        self.enabled_pagelets.clear()
        self.disabled_pagelets.clear()
        return released

    def reset(self) -> None:
        """清空当前请求的全部状态

        上一个请求分配的 pagelet 归还对象池，监听器全部移除
        """
        released = self._release_pagelets()
        dropped = self.connections.clear()

        self.conditional_pagelets.clear()
        self.request = None
        self.response = None
        self._generation += 1

        self.events.remove_all_listeners()

        self.logger.debug(
            f"页面已重置: 释放 pagelet {released} 个，清除连接 {dropped} 个"
        )

    async def discover(self, request: Optional[Any] = None) -> Tuple[List[Any], List[Any]]:
        """发现当前请求允许使用的 pagelet

        为每个 pagelet 模板分配实例并绑定到页面，然后并发执行全部授权检查。
        没有 authorize 的 pagelet 视为已授权；授权检查抛出异常或被取消的 pagelet
        被禁用，不影响其它 pagelet。上一次发现得到的 pagelet 先归还对象池。

        Args:
            request: 当前请求（可为 None）

        Returns:
            Tuple[List, List]: (enabled_pagelets, disabled_pagelets)

        Raises:
            ReentrancyError: 上一次 discover 尚未完成
        """
        if self._discovering:
            raise ReentrancyError(
                f"{type(self).__name__} 正在发现 pagelet，不能并发调用 discover"
            )

        self._discovering = True
        try:
            self._release_pagelets()

            pagelets = []
            for key, template in type(self).definition.pagelets.items():
                pagelet = template.alloc().configure(self)
                if isinstance(pagelet, Pagelet) and not type(pagelet).name:
                    pagelet.name = key
                pagelets.append(pagelet)

            # discover 自身被取消时 gather 仍会抛出 CancelledError
            results = await asyncio.gather(
                *(self._authorize(pagelet, request) for pagelet in pagelets),
                return_exceptions=True
            )

            allowed = [
                self._settle(pagelet, result)
                for pagelet, result in zip(pagelets, results)
            ]

            self.enabled_pagelets[:] = [
                pagelet for pagelet, ok in zip(pagelets, allowed) if ok
            ]
            self.disabled_pagelets[:] = [
                pagelet for pagelet, ok in zip(pagelets, allowed) if not ok
            ]
        finally:
            self._discovering = False

        self.logger.debug(
            f"pagelet 发现完成: 启用 {len(self.enabled_pagelets)} 个，"
            f"禁用 {len(self.disabled_pagelets)} 个"
        )

        return self.enabled_pagelets, self.disabled_pagelets

    def _settle(self, pagelet: Any, result: Any) -> bool:
        """将单个授权检查的结果转换为 bool

        检查被取消视为拒绝；KeyboardInterrupt、SystemExit 继续抛出
        """
        if isinstance(result, asyncio.CancelledError):
            self.logger.warning(f"pagelet {_pagelet_name(pagelet)} 授权检查被取消，已禁用")
            return False
        if isinstance(result, BaseException):
            raise result
        return result

    async def _authorize(self, pagelet: Any, request: Optional[Any]) -> bool:
        """执行单个 pagelet 的授权检查（同步或异步）"""
        authorize = getattr(pagelet, "authorize", None)
        if not callable(authorize):
            return True

        try:
            result = authorize(request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            self.logger.warning(
                f"pagelet {_pagelet_name(pagelet)} 授权检查失败，已禁用: {e}",
                exc_info=True
            )
            return False

        return bool(result)

    async def configure(self, request: Optional[Any] = None, response: Optional[Any] = None) -> "Page":
        """重置实例并为新请求初始化

        Args:
            request: HTTP 请求
            response: HTTP 响应

        Returns:
            Page: 自身

        Raises:
            ReentrancyError: 上一次 configure 尚未完成
        """
        if self._configuring:
            raise ReentrancyError(
                f"{type(self).__name__} 正在为其它请求配置，不能并发复用同一实例"
            )

        self._configuring = True
        try:
            # 1. 重置（同步完成后才开始发现）
            self.reset()
            self.request = request
            self.response = response

            # 2. 发现
            await self.discover(request)
        finally:
            self._configuring = False

        return self

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} path={type(self).definition.path!r} "
            f"enabled={len(self.enabled_pagelets)} disabled={len(self.disabled_pagelets)}>"
        )


def _pagelet_name(pagelet: Any) -> str:
    return getattr(pagelet, "name", "") or type(pagelet).__name__


def _build_definition(cls: type) -> None:
    """为页面类构建 PageDefinition 和字段白名单"""
    attrs = {name: getattr(cls, name) for name in _DEFINITION_ATTRS}
    if attrs["env"] is None:
        attrs["env"] = get_default_environment()

    # 合并继承链上声明的 fields
    declared = set()
    for klass in cls.__mro__:
        declared.update(klass.__dict__.get("fields", ()))
    attrs["fields"] = declared

    definition = PageDefinition.from_attrs(cls.__name__, attrs)
    cls.definition = definition
    cls._schema = _BASE_FIELDS | definition.fields


_build_definition(Page)
