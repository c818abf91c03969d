"""
自定义异常模块

定义了项目中使用的所有自定义异常类
"""


class PagePipeError(Exception):
    """基础异常类

    所有项目特定异常的基类
    """
    pass


class ConfigValidationError(PagePipeError):
    """配置验证错误

    当配置文件或页面类型声明验证失败时抛出
    """
    pass


class StructuralMisuseError(PagePipeError, AttributeError):
    """结构误用错误

    开发模式下，向已封闭的页面实例添加未声明的字段时抛出
    """
    pass


class ReentrancyError(PagePipeError, RuntimeError):
    """重入错误

    同一页面实例在上一次 configure 尚未完成时再次被 configure
    """
    pass


class ParameterParseError(PagePipeError, ValueError):
    """参数解析错误

    当页面的参数解析函数执行失败时抛出
    """

    def __init__(self, name: str, value, cause: Exception):
        self.name = name
        self.value = value
        self.cause = cause
        super().__init__(f"参数 '{name}' 解析失败: {value!r} ({cause})")
