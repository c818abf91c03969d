"""
应用初始化

加载配置文件，配置日志、默认运行环境和对象池默认容量
"""

import logging
from typing import Tuple

from pagepipe.config.config_parser import AppConfig, ConfigParser
from pagepipe.config.environment import set_default_environment
from pagepipe.page import pool
from pagepipe.utils.logger import setup_logger


def bootstrap(config_path: str) -> Tuple[AppConfig, logging.Logger]:
    """初始化应用

    应在声明页面类型之前调用：未声明 env 的页面类型在声明时使用配置的运行环境

    Args:
        config_path: 配置文件路径

    Returns:
        Tuple[AppConfig, logging.Logger]: 配置对象和日志记录器

    Raises:
        FileNotFoundError: 配置文件不存在
        ConfigValidationError: 配置验证失败
    """
    # 1. 加载并验证配置
    config = ConfigParser(config_path).parse()

    # 2. 配置日志
    logger = setup_logger(config)

    # 3. 默认运行环境
    set_default_environment(config.environment)

    # 4. 对象池默认容量
    pool.configure_defaults(
        page_size=config.page_pool_size,
        pagelet_size=config.pagelet_pool_size
    )

    logger.info(
        f"pagepipe 已初始化，环境: {config.environment.value}，"
        f"页面池: {config.page_pool_size}，pagelet 池: {config.pagelet_pool_size}"
    )
    return config, logger
