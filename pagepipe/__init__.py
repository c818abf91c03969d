"""
pagepipe

服务端页面组合框架的页面层：按请求过滤 pagelet 授权，并在请求之间重置页面状态
"""

from pagepipe.exceptions import (
    PagePipeError,
    ConfigValidationError,
    StructuralMisuseError,
    ReentrancyError,
    ParameterParseError,
)
from pagepipe.config.environment import EnvironmentMode
from pagepipe.page.page import Page
from pagepipe.page.pagelet import Pagelet
from pagepipe.page.definition import PageDefinition

__version__ = "0.1.0"

__all__ = [
    "Page",
    "Pagelet",
    "PageDefinition",
    "EnvironmentMode",
    "PagePipeError",
    "ConfigValidationError",
    "StructuralMisuseError",
    "ReentrancyError",
    "ParameterParseError",
]
