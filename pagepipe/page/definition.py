"""
页面类型定义

每个页面类型在声明时构建一次的不可变配置，被该类型的所有实例共享且只读
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Pattern, Union

from pagepipe.config.config_validator import ConfigValidator
from pagepipe.config.environment import EnvironmentMode
from pagepipe.exceptions import ParameterParseError


def normalize_methods(method: Union[str, list, tuple, set, frozenset]) -> FrozenSet[str]:
    """将 "GET"、"GET, POST" 或 ["get", "post"] 统一为大写方法集合"""
    if isinstance(method, str):
        items = method.split(",")
    else:
        items = list(method)
    return frozenset(item.strip().upper() for item in items)


@dataclass(frozen=True)
class PageDefinition:
    """页面类型配置

    pagelets、parsers、resources 均为只读映射
    """
    name: str
    path: Union[str, Pattern]
    methods: FrozenSet[str]
    status_code: int
    environment_mode: EnvironmentMode
    pagelets: Mapping[str, Any]
    parsers: Mapping[str, Callable[[Any], Any]]
    resources: Mapping[str, Any]
    fields: FrozenSet[str]

    @classmethod
    def from_attrs(
        cls,
        name: str,
        attrs: Dict[str, Any],
        validator: Optional[ConfigValidator] = None
    ) -> "PageDefinition":
        """从页面类属性构建定义

        Args:
            name: 页面类名
            attrs: 页面类型配置
            validator: 配置验证器（可选）

        Raises:
            ConfigValidationError: 声明无效
        """
        (validator or ConfigValidator()).validate_page(name, attrs)

        return cls(
            name=name,
            path=attrs["path"],
            methods=normalize_methods(attrs["method"]),
            status_code=attrs["status_code"],
            environment_mode=EnvironmentMode.parse(attrs["env"]),
            pagelets=MappingProxyType(dict(attrs["pagelets"])),
            parsers=MappingProxyType(dict(attrs["parsers"])),
            resources=MappingProxyType(dict(attrs["resources"])),
            fields=frozenset(attrs.get("fields", ()))
        )

    def accepts(self, method: str) -> bool:
        """检查 HTTP 方法是否被该页面接受"""
        return method.strip().upper() in self.methods

    def match(self, pathname: str) -> Optional[Dict[str, str]]:
        """匹配请求路径

        字符串路径要求完全相等，正则路径使用 fullmatch

        Returns:
            Optional[Dict[str, str]]: 匹配时返回命名分组（可能为空），不匹配返回 None
        """
        if isinstance(self.path, str):
            return {} if pathname == self.path else None

        match = self.path.fullmatch(pathname)
        if match is None:
            return None
        return {key: value for key, value in match.groupdict().items() if value is not None}

    def parse_params(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """使用 parsers 解析参数，未配置解析器的参数原样保留

        Raises:
            ParameterParseError: 解析器执行失败
        """
        parsed = {}
        for key, value in params.items():
            parser = self.parsers.get(key)
            if parser is None:
                parsed[key] = value
                continue
            try:
                parsed[key] = parser(value)
            except Exception as e:
                raise ParameterParseError(key, value, e) from e
        return parsed
