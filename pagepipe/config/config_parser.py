"""
配置文件解析器

负责加载、解析和验证 JSON 应用配置文件
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from .config_validator import ConfigValidator
from .environment import EnvironmentMode, ENV_VARIABLE
from pagepipe.exceptions import ConfigValidationError


@dataclass
class AppConfig:
    """完整应用配置数据对象"""

    # 运行环境
    environment: EnvironmentMode

    # 日志配置
    log_level: Optional[str]  # None 表示按运行环境推导
    log_file: Optional[str]

    # 对象池配置
    page_pool_size: int
    pagelet_pool_size: int


class ConfigParser:
    """配置文件解析器

    负责加载 JSON 配置文件，解析并验证配置参数
    """

    def __init__(
        self,
        config_path: str,
        validator: Optional[ConfigValidator] = None,
        environ: Optional[Dict[str, str]] = None
    ):
        """初始化解析器

        Args:
            config_path: 配置文件路径
            validator: 配置验证器（可选，默认创建新实例）
            environ: 环境变量字典（可选，默认 os.environ）
        """
        self.config_path = Path(config_path)
        self.validator = validator or ConfigValidator()
        self.environ = os.environ if environ is None else environ

        # 相对路径以配置文件所在目录为基准
        self.base_dir = self.config_path.parent

    def parse(self) -> AppConfig:
        """解析配置文件

        Returns:
            AppConfig: 配置数据对象

        Raises:
            FileNotFoundError: 配置文件不存在
            json.JSONDecodeError: JSON 格式错误
            ConfigValidationError: 配置验证失败
        """
        # 1. 加载 JSON 文件
        config_dict = self._load_json()

        # 2. 应用默认值和环境变量覆盖
        config_dict = self._apply_defaults(config_dict)

        # 3. 解析相对路径为绝对路径
        config_dict = self._resolve_paths(config_dict)

        # 4. 验证配置
        self.validator.validate(config_dict)

        # 5. 转换为 AppConfig 对象
        return self._convert_to_app_config(config_dict)

    def _load_json(self) -> Dict[str, Any]:
        """加载 JSON 文件

        Raises:
            FileNotFoundError: 配置文件不存在
            json.JSONDecodeError: JSON 格式错误
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"配置文件不存在: {self.config_path.absolute()}"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"配置文件 JSON 格式错误: {e.msg}",
                e.doc,
                e.pos
            )

    def _apply_defaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """应用默认值

        环境变量 PAGEPIPE_ENV 优先于配置文件中的 environment；
        未配置日志级别时保留 None，由运行环境推导

        Raises:
            ConfigValidationError: 配置根节点或分节不是 JSON 对象
        """
        if not isinstance(config, dict):
            raise ConfigValidationError("配置文件根节点必须是 JSON 对象")
        for section in ("logging", "pool"):
            if section in config and not isinstance(config[section], dict):
                raise ConfigValidationError(
                    f"配置项 {section} 必须是 JSON 对象，当前类型: {type(config[section]).__name__}"
                )

        if self.environ.get(ENV_VARIABLE):
            config["environment"] = self.environ[ENV_VARIABLE]
        config.setdefault("environment", EnvironmentMode.DEVELOPMENT.value)

        # 日志配置默认值
        config.setdefault("logging", {})
        config["logging"].setdefault("level", None)
        config["logging"].setdefault("file", None)

        # 对象池配置默认值
        config.setdefault("pool", {})
        config["pool"].setdefault("page_size", ConfigValidator.DEFAULT_PAGE_POOL_SIZE)
        config["pool"].setdefault("pagelet_size", ConfigValidator.DEFAULT_PAGELET_POOL_SIZE)

        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """解析日志文件的相对路径"""
        log_file = config["logging"].get("file")
        if isinstance(log_file, str):
            path = Path(log_file)
            if not path.is_absolute():
                path = self.base_dir / path
            config["logging"]["file"] = str(path)

        return config

    def _convert_to_app_config(self, config: Dict[str, Any]) -> AppConfig:
        """将配置字典转换为 AppConfig 对象"""
        logging_config = config["logging"]
        pool_config = config["pool"]

        return AppConfig(
            environment=EnvironmentMode.parse(config["environment"]),
            log_level=logging_config["level"],
            log_file=logging_config["file"],
            page_pool_size=pool_config["page_size"],
            pagelet_pool_size=pool_config["pagelet_size"]
        )
