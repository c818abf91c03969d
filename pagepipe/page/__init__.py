"""
页面模块 (page)

提供页面组合功能，包括：
- 页面实例 (Page)
- 页面类型定义 (PageDefinition)
- Pagelet 基类 (Pagelet)
- 事件发射器 (EventEmitter)
- 对象池 (ObjectPool)
"""

__version__ = "0.1.0"
