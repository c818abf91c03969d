"""
配置模块 (config)

提供配置相关功能，包括：
- 运行环境模式 (EnvironmentMode)
- 应用配置解析 (ConfigParser, AppConfig)
- 配置与页面类型声明验证 (ConfigValidator)
"""

__version__ = "0.1.0"
