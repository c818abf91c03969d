"""
运行环境模式

决定页面实例的严格程度（开发模式下封闭实例字段）以及默认日志级别
"""

import os
from enum import Enum
from typing import Optional, Union

from pagepipe.exceptions import ConfigValidationError


ENV_VARIABLE = "PAGEPIPE_ENV"


class EnvironmentMode(str, Enum):
    """运行环境枚举"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"
    TEST = "test"

    @classmethod
    def parse(cls, value: Union[str, "EnvironmentMode"]) -> "EnvironmentMode":
        """将字符串转换为环境模式（忽略大小写和首尾空白）

        Raises:
            ConfigValidationError: 未知的环境模式
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ConfigValidationError(f"环境模式必须是字符串，当前类型: {type(value).__name__}")

        normalized = value.strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode

        raise ConfigValidationError(
            f"不支持的环境模式: {value}，"
            f"支持的模式: {', '.join(mode.value for mode in cls)}"
        )

    @property
    def is_strict(self) -> bool:
        """是否校验实例字段（仅开发模式）"""
        return self is EnvironmentMode.DEVELOPMENT


# 应用配置设置的默认环境（bootstrap 之后生效）
_configured_default: Optional[EnvironmentMode] = None


def set_default_environment(mode: Optional[Union[str, EnvironmentMode]]) -> None:
    """设置未声明 env 的页面类型使用的默认环境

    只影响之后声明的页面类型；传入 None 恢复为读取环境变量
    """
    global _configured_default
    _configured_default = None if mode is None else EnvironmentMode.parse(mode)


def get_default_environment(environ: Optional[dict] = None) -> EnvironmentMode:
    """获取默认环境模式

    优先使用 set_default_environment 设置的值，其次读取环境变量，
    都未设置时为 development。显式传入 environ 时只读取该字典。

    Args:
        environ: 环境变量字典（可选）

    Returns:
        EnvironmentMode: 环境模式
    """
    if environ is None:
        if _configured_default is not None:
            return _configured_default
        environ = os.environ
    return EnvironmentMode.parse(environ.get(ENV_VARIABLE) or EnvironmentMode.DEVELOPMENT.value)
