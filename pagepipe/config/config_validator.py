"""
配置验证器

负责验证应用配置和页面类型声明的合法性
"""

import re
from collections.abc import Mapping
from typing import Dict, Any

from pagepipe.config.environment import EnvironmentMode
from pagepipe.exceptions import ConfigValidationError


class ConfigValidator:
    """配置验证器

    验证配置参数的类型、范围和合法性
    """

    # 默认配置常量
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_PAGE_POOL_SIZE = 32
    DEFAULT_PAGELET_POOL_SIZE = 128

    # 有效的日志级别
    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    # 有效的 HTTP 方法
    VALID_METHODS = [
        "GET", "HEAD", "POST", "PUT", "DELETE", "PATCH",
        "OPTIONS", "CONNECT", "TRACE"
    ]

    def validate(self, config: Dict[str, Any]) -> None:
        """验证应用配置字典

        Args:
            config: 配置字典

        Raises:
            ConfigValidationError: 验证失败时抛出
        """
        try:
            # 只验证存在的配置部分
            if "environment" in config:
                EnvironmentMode.parse(config["environment"])
            if "logging" in config:
                self._validate_logging_config(config)
            if "pool" in config:
                self._validate_pool_config(config)
        except (KeyError, ValueError, TypeError) as e:
            raise ConfigValidationError(f"配置验证失败: {e}")

    def _validate_logging_config(self, config: Dict[str, Any]) -> None:
        """验证日志配置

        Raises:
            ConfigValidationError: 日志配置无效
        """
        logging_config = config["logging"]

        if logging_config.get("level") is not None:
            level = logging_config["level"]
            if level not in self.VALID_LOG_LEVELS:
                raise ConfigValidationError(
                    f"不支持的日志级别: {level}，"
                    f"支持的级别: {', '.join(self.VALID_LOG_LEVELS)}"
                )

        if logging_config.get("file") is not None:
            if not isinstance(logging_config["file"], str):
                raise ConfigValidationError("日志文件路径必须是字符串")

    def _validate_pool_config(self, config: Dict[str, Any]) -> None:
        """验证对象池配置

        Raises:
            ConfigValidationError: 对象池配置无效
        """
        pool = config["pool"]

        for key in ("page_size", "pagelet_size"):
            if key in pool:
                size = pool[key]
                if not isinstance(size, int) or isinstance(size, bool):
                    raise ConfigValidationError(f"对象池大小 {key} 必须是整数")
                if size < 0:
                    raise ConfigValidationError(
                        f"对象池大小 {key} 不能为负数，当前值: {size}"
                    )

    def validate_page(self, name: str, attrs: Dict[str, Any]) -> None:
        """验证页面类型声明

        Args:
            name: 页面类名
            attrs: 页面类型配置（path, method, status_code, env, pagelets, parsers, resources）

        Raises:
            ConfigValidationError: 声明无效
        """
        self._validate_path(name, attrs["path"])
        self._validate_method(name, attrs["method"])

        status_code = attrs["status_code"]
        if not isinstance(status_code, int) or isinstance(status_code, bool):
            raise ConfigValidationError(f"{name}: 状态码必须是整数")
        if not (100 <= status_code <= 599):
            raise ConfigValidationError(
                f"{name}: 状态码必须在 100-599 之间，当前值: {status_code}"
            )

        EnvironmentMode.parse(attrs["env"])

        pagelets = attrs["pagelets"]
        if not isinstance(pagelets, Mapping):
            raise ConfigValidationError(f"{name}: pagelets 必须是 名称 -> Pagelet 类 的映射")
        for key, template in pagelets.items():
            if not callable(getattr(template, "alloc", None)):
                raise ConfigValidationError(
                    f"{name}: pagelet '{key}' 缺少 alloc() 分配方法"
                )

        parsers = attrs["parsers"]
        if not isinstance(parsers, Mapping):
            raise ConfigValidationError(f"{name}: parsers 必须是映射")
        for key, parser in parsers.items():
            if not callable(parser):
                raise ConfigValidationError(f"{name}: 参数 '{key}' 的解析器不可调用")

        if not isinstance(attrs["resources"], Mapping):
            raise ConfigValidationError(f"{name}: resources 必须是映射")

    def _validate_path(self, name: str, path: Any) -> None:
        """验证页面路径（字符串或已编译的正则）"""
        if isinstance(path, re.Pattern):
            return
        if not isinstance(path, str):
            raise ConfigValidationError(f"{name}: path 必须是字符串或正则表达式")
        if not path.startswith("/"):
            raise ConfigValidationError(f"{name}: path 必须以 / 开头，当前值: {path}")

    def _validate_method(self, name: str, method: Any) -> None:
        """验证 HTTP 方法（字符串、逗号分隔字符串或序列）"""
        if isinstance(method, str):
            methods = method.split(",")
        elif isinstance(method, (list, tuple, set, frozenset)):
            methods = list(method)
        else:
            raise ConfigValidationError(f"{name}: method 必须是字符串或字符串序列")

        if not methods:
            raise ConfigValidationError(f"{name}: method 不能为空")

        for item in methods:
            if not isinstance(item, str):
                raise ConfigValidationError(f"{name}: method 必须是字符串或字符串序列")
            if item.strip().upper() not in self.VALID_METHODS:
                raise ConfigValidationError(
                    f"{name}: 不支持的 HTTP 方法: {item.strip()}，"
                    f"支持的方法: {', '.join(self.VALID_METHODS)}"
                )
