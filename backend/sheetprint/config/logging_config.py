"""
日志配置 - 按 LoggingConfig 设置级别与文件输出

在入口处调用一次即可，重复调用不会重复挂载handler。
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime_config import RuntimeConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_MARK = "_sheetprint_handler"


def configure_logging(config: RuntimeConfig | None = None) -> logging.Logger:
    """配置 sheetprint 包日志，返回包级logger"""
    if config is None:
        from .runtime_config import get_config

        config = get_config()

    logger = logging.getLogger("sheetprint")
    logger.setLevel(config.logging.log_level.upper())

    # 清理本函数之前挂载的handler
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    setattr(stream_handler, _HANDLER_MARK, True)
    logger.addHandler(stream_handler)

    if config.logging.log_to_file:
        log_file = config.logging.log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
