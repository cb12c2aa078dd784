"""
配置模块
提供级联软删除的默认配置，业务项目可以继承并覆盖
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class CascadeSettings(BaseSettings):
    """级联软删除配置

    模型级别的 __cascade_fetch_method__ / __cascade_chunk_size__ 优先于此处的全局默认值。

    使用示例:
        from ycascade.config import CascadeSettings

        cascade_config = CascadeSettings(
            fetch_method="chunk",   # 大量子记录时分页处理
            chunk_size=200,
        )
    """
    fetch_method: Literal["get", "cursor", "lazy", "chunk"] = Field(
        default="get", description="关联记录的读取方式：get/cursor/lazy/chunk"
    )
    chunk_size: int = Field(default=500, gt=0, description="chunk 方式每页记录数")
    lazy_batch_size: int = Field(default=1000, gt=0, description="lazy 方式每批记录数")
    cursor_buffer_size: int = Field(default=100, gt=0, description="cursor 方式的行缓冲数")

    class Config:
        env_prefix = "YCASCADE_CASCADE_"


class LoggingSettings(BaseSettings):
    """日志配置

    使用示例:
        from ycascade.config import LoggingSettings
        from ycascade.log import setup_logger

        setup_logger(config=LoggingSettings(level="DEBUG"), propagate=False)
    """
    level: str = Field(default="INFO", description="日志级别")
    file_path: str = Field(default="", description="日志文件路径，为空则不写文件")
    enable_console: bool = Field(default=True, description="是否启用控制台输出")
    log_format: str = Field(default="", description="日志格式，为空则使用默认格式")

    class Config:
        env_prefix = "YCASCADE_LOG_"


class DatabaseSettings(BaseSettings):
    """数据库配置"""
    url: str = Field(default="", description="数据库连接URL")
    echo: bool = Field(default=False, description="是否打印SQL语句")

    class Config:
        env_prefix = "YCASCADE_DB_"


class AppSettings(BaseSettings):
    """应用基础配置

    将各子配置类聚合为嵌套结构。

    配置优先级（从高到低）:
        环境变量 > YAML 配置文件 > 代码中的默认值

    YAML 配置示例 (config/settings.yaml):
        database:
          url: "sqlite:///./app.db"
        cascade:
          fetch_method: "chunk"
          chunk_size: 200
        logging:
          level: "DEBUG"
    """
    database: DatabaseSettings = DatabaseSettings()
    cascade: CascadeSettings = CascadeSettings()
    logging: LoggingSettings = LoggingSettings()

    class Config:
        env_prefix = "YCASCADE_"
        env_nested_delimiter = "__"
