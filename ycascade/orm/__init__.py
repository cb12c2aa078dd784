"""ORM 模块

提供基础模型、软删除、关联查询、模型钩子和级联软删除。

快速开始:
    from ycascade.orm import (
        CoreModel, SoftDeleteMixin, CascadeSoftDeletes,
        has_many, belongs_to_many, init_database, db_session_scope,
    )

    class Post(CascadeSoftDeletes, SoftDeleteMixin, CoreModel):
        __cascade_deletes__ = ["comments"]
        comments = has_many("Comment")

    class Comment(SoftDeleteMixin, CoreModel):
        post_id: Mapped[int] = mapped_column(ForeignKey("post.id"))

    init_database("sqlite:///./app.db")
    with db_session_scope() as session:
        session.get(Post, 1).delete()
"""

from .core_model import Base, CoreModel
from .soft_delete import SoftDeleteMixin
from .events import (
    ModelEvent,
    ModelHook,
    ModelHookRegistry,
    model_hooks,
    register_model_hook,
)
from .exceptions import OrmError, DetachedRecordError, UnknownModelError
from .relations import (
    TrashedMode,
    Relation,
    HasMany,
    HasOne,
    BelongsTo,
    BelongsToMany,
    RelationDescriptor,
    relation,
    has_many,
    has_one,
    belongs_to,
    belongs_to_many,
    resolve_relation,
    is_join_record,
    join_record,
)
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    get_session,
    remove_session,
    db_session_scope,
)
from .cascade import (
    CascadeSoftDeletes,
    CascadeSoftDeleteError,
    ConfigurationError,
    NotSoftDeletableError,
    InvalidRelationshipsError,
    RelationshipValidator,
    FetchMethod,
    RecordIterator,
    CascadeDeleteEngine,
    CascadeRestoreEngine,
    configure_cascade_soft_delete,
    get_cascade_settings,
)

__all__ = [
    "Base",
    "CoreModel",
    "SoftDeleteMixin",
    "ModelEvent",
    "ModelHook",
    "ModelHookRegistry",
    "model_hooks",
    "register_model_hook",
    "OrmError",
    "DetachedRecordError",
    "UnknownModelError",
    "TrashedMode",
    "Relation",
    "HasMany",
    "HasOne",
    "BelongsTo",
    "BelongsToMany",
    "RelationDescriptor",
    "relation",
    "has_many",
    "has_one",
    "belongs_to",
    "belongs_to_many",
    "resolve_relation",
    "is_join_record",
    "join_record",
    "db_manager",
    "init_database",
    "get_engine",
    "get_session",
    "remove_session",
    "db_session_scope",
    "CascadeSoftDeletes",
    "CascadeSoftDeleteError",
    "ConfigurationError",
    "NotSoftDeletableError",
    "InvalidRelationshipsError",
    "RelationshipValidator",
    "FetchMethod",
    "RecordIterator",
    "CascadeDeleteEngine",
    "CascadeRestoreEngine",
    "configure_cascade_soft_delete",
    "get_cascade_settings",
]
