"""级联软删除

声明了 __cascade_deletes__ 的模型在删除/恢复时，自动对相关记录执行相同的操作。

- validator: 配置校验（模型支持软删除、关联名有效）
- iterators: 关联记录读取策略 get/cursor/lazy/chunk
- engine: 级联删除 / 恢复执行器
- mixin: CascadeSoftDeletes，将执行器绑定到 deleting / restoring 钩子
"""

from .exceptions import (
    CascadeSoftDeleteError,
    ConfigurationError,
    NotSoftDeletableError,
    InvalidRelationshipsError,
)
from .configure import (
    configure_cascade_soft_delete,
    get_cascade_settings,
    reset_cascade_settings,
)
from .validator import (
    RelationshipValidator,
    get_cascading_deletes,
    implements_soft_deletes,
)
from .iterators import (
    FetchMethod,
    RecordIterator,
    GetIterator,
    CursorIterator,
    LazyIterator,
    ChunkIterator,
    get_record_iterator,
    get_record_iterator_for,
)
from .engine import CascadeDeleteEngine, CascadeRestoreEngine
from .mixin import (
    CascadeSoftDeletes,
    boot_cascade_soft_deletes,
    DELETING_HOOK_KEY,
    RESTORING_HOOK_KEY,
)

__all__ = [
    "CascadeSoftDeleteError",
    "ConfigurationError",
    "NotSoftDeletableError",
    "InvalidRelationshipsError",
    "configure_cascade_soft_delete",
    "get_cascade_settings",
    "reset_cascade_settings",
    "RelationshipValidator",
    "get_cascading_deletes",
    "implements_soft_deletes",
    "FetchMethod",
    "RecordIterator",
    "GetIterator",
    "CursorIterator",
    "LazyIterator",
    "ChunkIterator",
    "get_record_iterator",
    "get_record_iterator_for",
    "CascadeDeleteEngine",
    "CascadeRestoreEngine",
    "CascadeSoftDeletes",
    "boot_cascade_soft_deletes",
    "DELETING_HOOK_KEY",
    "RESTORING_HOOK_KEY",
]
