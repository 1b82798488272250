"""
图纸批量打印系统 - 后端核心模块

模块结构：
- config/     运行期配置加载与日志
- models/     数据模型定义
- overrides/  临时覆盖过滤器（命名/类别集合/生命周期）
- render/     逐张打印编排与PDF合并
- host/       宿主文档与打印驱动适配（Revit）
- pipeline/   流水线编排
"""

__version__ = "0.1.0"
