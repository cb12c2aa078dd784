"""
日志工具模块

级联过程的日志写到 "ycascade.orm.cascade"，调试时单独调高该日志器级别即可。
"""

import inspect
import logging
import os
from typing import Any, Optional


# 默认日志格式
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


def setup_logger(
    name: str = None,
    level: str = "INFO",
    log_file: str = None,
    log_format: str = None,
    console: bool = True,
    propagate: bool = True,
    config: Any = None,
) -> logging.Logger:
    """设置并返回配置好的日志记录器

    重复调用会替换已有的处理器。

    Args:
        name: 日志记录器名称，默认为root logger
        level: 日志级别，可选：DEBUG, INFO, WARNING, ERROR, CRITICAL
        log_file: 日志文件路径，不指定则不写入文件
        log_format: 日志格式，不指定则使用 DEFAULT_LOG_FORMAT
        console: 是否输出到控制台
        propagate: 是否传播到父日志器
        config: LoggingSettings，提供后覆盖 level / log_file / log_format / console

    使用示例:
        from ycascade.log import setup_logger

        # 调试级联过程
        setup_logger("ycascade.orm.cascade", level="DEBUG")

        # 按配置设置根日志器
        setup_logger(config=settings.logging, propagate=False)
    """
    if config is not None:
        level = config.level
        log_file = config.file_path or None
        log_format = config.log_format
        console = config.enable_console

    target = logging.getLogger(name) if name else logging.getLogger()
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    target.propagate = propagate
    target.handlers.clear()

    formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)

    if console:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        target.addHandler(handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(formatter)
        target.addHandler(handler)

    return target


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志记录器，支持自动推断模块名

    无参数调用时使用调用方模块的 __name__；简写名称（不含点号）自动加 'ycascade.' 前缀。

    使用示例:
        logger = get_logger()            # 在 ycascade/orm/relations.py 中 -> "ycascade.orm.relations"
        logger = get_logger("orm")       # -> "ycascade.orm"
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        name = caller.f_globals.get("__name__", "ycascade") if caller is not None else "ycascade"
    elif name != "ycascade" and "." not in name:
        name = f"ycascade.{name}"

    return logging.getLogger(name)


orm_logger = get_logger("orm")
cascade_logger = get_logger("ycascade.orm.cascade")

logger = logging.getLogger("ycascade")
