"""
ycascade - SQLAlchemy 记录的级联软删除与恢复

删除或恢复父记录时，按声明的关联对相关记录执行相同的操作，
支持多级级联、四种关联记录读取方式和多对多中间表记录。
"""

from .version import __version__, __author__, __description__

from .orm import (
    Base,
    CoreModel,
    SoftDeleteMixin,
    CascadeSoftDeletes,
    ModelEvent,
    register_model_hook,
    has_many,
    has_one,
    belongs_to,
    belongs_to_many,
    relation,
    init_database,
    db_session_scope,
    configure_cascade_soft_delete,
    FetchMethod,
    CascadeSoftDeleteError,
    ConfigurationError,
    NotSoftDeletableError,
    InvalidRelationshipsError,
)

from .config import AppSettings, CascadeSettings, load_yaml_config

from .log import setup_logger, get_logger

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "Base",
    "CoreModel",
    "SoftDeleteMixin",
    "CascadeSoftDeletes",
    "ModelEvent",
    "register_model_hook",
    "has_many",
    "has_one",
    "belongs_to",
    "belongs_to_many",
    "relation",
    "init_database",
    "db_session_scope",
    "configure_cascade_soft_delete",
    "FetchMethod",
    "CascadeSoftDeleteError",
    "ConfigurationError",
    "NotSoftDeletableError",
    "InvalidRelationshipsError",
    "AppSettings",
    "CascadeSettings",
    "load_yaml_config",
    "setup_logger",
    "get_logger",
]
