"""
日志工具

按运行环境配置 pagepipe 日志：开发模式输出 DEBUG 并带调用位置，
其它模式只输出配置的级别
"""

import sys
import logging
from pathlib import Path
from typing import Optional

from pagepipe.config.config_parser import AppConfig
from pagepipe.config.config_validator import ConfigValidator
from pagepipe.config.environment import EnvironmentMode


ROOT_LOGGER_NAME = "PagePipe"

# 未显式配置日志级别时，按运行环境推导
ENVIRONMENT_LEVELS = {
    EnvironmentMode.DEVELOPMENT: logging.DEBUG,
    EnvironmentMode.TEST: logging.WARNING,
    EnvironmentMode.STAGING: logging.INFO,
    EnvironmentMode.PRODUCTION: getattr(logging, ConfigValidator.DEFAULT_LOG_LEVEL),
}

BASE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEVELOPMENT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def resolve_log_level(config: AppConfig) -> int:
    """显式配置的级别优先，否则按运行环境推导"""
    if config.log_level:
        return getattr(logging, config.log_level)
    return ENVIRONMENT_LEVELS[config.environment]


def build_formatter(environment: EnvironmentMode) -> logging.Formatter:
    """开发模式的格式带函数名和行号"""
    fmt = DEVELOPMENT_FORMAT if environment is EnvironmentMode.DEVELOPMENT else BASE_FORMAT
    return logging.Formatter(fmt=fmt, datefmt='%Y-%m-%d %H:%M:%S')


def setup_logger(config: AppConfig) -> logging.Logger:
    """配置 pagepipe 根日志记录器

    重复调用时先关闭旧的处理器，页面和连接的子日志记录器都会继承这里的配置

    Args:
        config: 应用配置对象

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolve_log_level(config))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]

    if config.log_file:
        log_file_path = Path(config.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file_path, mode='a', encoding='utf-8'))

    formatter = build_formatter(config.environment)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        f"日志已配置: 环境 {config.environment.value}，"
        f"级别 {logging.getLevelName(logger.level)}，文件 {config.log_file or '无'}"
    )
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取 pagepipe 日志记录器

    Args:
        name: 子日志记录器名称（可选）
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_page_logger(page_cls: type) -> logging.Logger:
    """获取页面类型的日志记录器（PagePipe.page.<类名>）"""
    return get_logger(f"page.{page_cls.__name__}")
