"""
配置层 - 加载运行期配置与日志设置

职责：
- 加载 documents/print_runtime.yaml（运行期参数）
- 提供类型安全的配置访问接口
- 按配置初始化日志
"""

from .logging_config import configure_logging
from .runtime_config import (
    DEFAULT_MUST_INCLUDE,
    LoggingConfig,
    OutputConfig,
    OverrideConfig,
    PolicyConfig,
    PollingConfig,
    PrintSettingsConfig,
    RuntimeConfig,
    get_config,
    reload_config,
)

__all__ = [
    "DEFAULT_MUST_INCLUDE",
    "PollingConfig",
    "PrintSettingsConfig",
    "OverrideConfig",
    "OutputConfig",
    "PolicyConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "get_config",
    "reload_config",
    "configure_logging",
]
