"""
配置解析、环境模式和日志测试
"""

import json
import logging

import pytest

from pagepipe.config.config_parser import ConfigParser
from pagepipe.config.config_validator import ConfigValidator
from pagepipe.config.environment import EnvironmentMode, get_default_environment, set_default_environment
from pagepipe.exceptions import ConfigValidationError
from pagepipe.utils.logger import build_formatter, get_logger, get_page_logger, resolve_log_level, setup_logger


def write_config(tmp_path, data):
    path = tmp_path / "pagepipe.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_parse_applies_defaults(tmp_path):
    config = ConfigParser(str(write_config(tmp_path, {})), environ={}).parse()

    assert config.environment is EnvironmentMode.DEVELOPMENT
    assert config.log_level is None
    assert config.log_file is None
    assert config.page_pool_size == ConfigValidator.DEFAULT_PAGE_POOL_SIZE
    assert config.pagelet_pool_size == ConfigValidator.DEFAULT_PAGELET_POOL_SIZE


def test_parse_full_config(tmp_path):
    path = write_config(tmp_path, {
        "environment": "Production",
        "logging": {"level": "DEBUG", "file": "logs/pagepipe.log"},
        "pool": {"page_size": 4, "pagelet_size": 16},
    })

    config = ConfigParser(str(path), environ={}).parse()

    assert config.environment is EnvironmentMode.PRODUCTION
    assert config.log_level == "DEBUG"
    assert config.log_file == str(tmp_path / "logs" / "pagepipe.log")
    assert (config.page_pool_size, config.pagelet_pool_size) == (4, 16)


def test_environment_variable_overrides_file(tmp_path):
    path = write_config(tmp_path, {"environment": "production"})
    config = ConfigParser(str(path), environ={"PAGEPIPE_ENV": "TEST"}).parse()
    assert config.environment is EnvironmentMode.TEST


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigParser(str(tmp_path / "missing.json")).parse()


def test_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        ConfigParser(str(path), environ={}).parse()


@pytest.mark.parametrize("data", [
    {"environment": "qa"},
    {"logging": {"level": "VERBOSE"}},
    {"logging": {"file": 12}},
    {"pool": {"page_size": -1}},
    {"pool": {"pagelet_size": "many"}},
    {"logging": "INFO"},
    {"pool": 4},
    {"pool": ["page_size"]},
])
def test_invalid_config(tmp_path, data):
    with pytest.raises(ConfigValidationError):
        ConfigParser(str(write_config(tmp_path, data)), environ={}).parse()


def test_environment_mode_parse():
    assert EnvironmentMode.parse(" Development ") is EnvironmentMode.DEVELOPMENT
    assert EnvironmentMode.parse(EnvironmentMode.STAGING) is EnvironmentMode.STAGING
    assert EnvironmentMode.DEVELOPMENT.is_strict
    assert not EnvironmentMode.PRODUCTION.is_strict
    with pytest.raises(ConfigValidationError):
        EnvironmentMode.parse(None)


def test_default_environment():
    assert get_default_environment({}) is EnvironmentMode.DEVELOPMENT
    assert get_default_environment({"PAGEPIPE_ENV": "production"}) is EnvironmentMode.PRODUCTION


@pytest.fixture
def clean_root_logger():
    logger = logging.getLogger("PagePipe")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_setup_logger_with_file(tmp_path, clean_root_logger):
    path = write_config(tmp_path, {"logging": {"level": "WARNING", "file": "logs/app.log"}})
    config = ConfigParser(str(path), environ={}).parse()

    logger = setup_logger(config)

    assert logger is clean_root_logger
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 2
    assert (tmp_path / "logs").is_dir()


def test_get_logger_names():
    assert get_logger().name == "PagePipe"
    assert get_logger("page.Home").name == "PagePipe.page.Home"


def test_non_object_root_is_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        ConfigParser(str(path), environ={}).parse()


def test_configured_default_environment():
    set_default_environment("production")
    assert get_default_environment() is EnvironmentMode.PRODUCTION
    # 显式传入的环境变量字典不受影响
    assert get_default_environment({}) is EnvironmentMode.DEVELOPMENT

    set_default_environment(None)
    assert get_default_environment({"PAGEPIPE_ENV": "staging"}) is EnvironmentMode.STAGING


@pytest.mark.parametrize("environment, expected", [
    ("development", logging.DEBUG),
    ("test", logging.WARNING),
    ("staging", logging.INFO),
    ("production", logging.INFO),
])
def test_log_level_follows_environment(tmp_path, environment, expected):
    path = write_config(tmp_path, {"environment": environment})
    config = ConfigParser(str(path), environ={}).parse()
    assert resolve_log_level(config) == expected


def test_explicit_log_level_wins(tmp_path):
    path = write_config(tmp_path, {"environment": "development", "logging": {"level": "ERROR"}})
    config = ConfigParser(str(path), environ={}).parse()
    assert resolve_log_level(config) == logging.ERROR


def test_development_format_includes_location():
    record = logging.LogRecord("PagePipe.page.Home", logging.INFO, __file__, 42, "hello", None, None, func="render")

    development = build_formatter(EnvironmentMode.DEVELOPMENT).format(record)
    production = build_formatter(EnvironmentMode.PRODUCTION).format(record)

    assert "render:42" in development
    assert "render:42" not in production
    assert production.endswith("PagePipe.page.Home - INFO - hello")


def test_setup_logger_uses_environment_level(tmp_path, clean_root_logger):
    path = write_config(tmp_path, {"environment": "development"})
    config = ConfigParser(str(path), environ={}).parse()

    logger = setup_logger(config)
    setup_logger(config)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_get_page_logger():
    class Home:
        pass

    assert get_page_logger(Home).name == "PagePipe.page.Home"
