"""日志模块

使用示例:
    from ycascade.log import setup_logger, get_logger

    # 打开级联过程的调试日志
    setup_logger("ycascade.orm.cascade", level="DEBUG")

    logger = get_logger()
"""

from .logger import (
    setup_logger,
    DEFAULT_LOG_FORMAT,
    orm_logger,
    cascade_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "DEFAULT_LOG_FORMAT",
    "orm_logger",
    "cascade_logger",
    "logger",
    "get_logger",
]
