"""级联软删除 Mixin

使用示例:
    from ycascade.orm import CoreModel, SoftDeleteMixin, CascadeSoftDeletes, has_many

    class Post(CascadeSoftDeletes, SoftDeleteMixin, CoreModel):
        __cascade_deletes__ = ["comments", "tags"]

        comments = has_many("Comment")
        tags = belongs_to_many("Tag", "PostTag")

    post.delete()         # 软删除 post 及其未删除的 comments，删除 tags 的中间表记录
    post.force_delete()   # 永久删除 post 及其 comments
    post.restore()        # 恢复 post 及其已软删除的 comments

类创建时在模型钩子注册表中注册 deleting / restoring 钩子：
钩子先校验配置，再执行级联；校验失败时抛出异常，本次删除/恢复中止。
"""

from typing import Any, ClassVar, List, Optional, Sequence, Union

from ycascade.log import cascade_logger
from ..events import ModelEvent, model_hooks
from .engine import CascadeDeleteEngine, CascadeRestoreEngine
from .validator import RelationshipValidator, get_cascading_deletes

DELETING_HOOK_KEY = "ycascade.cascade_soft_deletes.deleting"
RESTORING_HOOK_KEY = "ycascade.cascade_soft_deletes.restoring"

# 级联钩子先于普通业务钩子执行
CASCADE_HOOK_PRIORITY = 10


def _on_deleting(record: Any) -> None:
    RelationshipValidator.validate(record)
    CascadeDeleteEngine().run_deletes(record)


def _on_restoring(record: Any) -> None:
    RelationshipValidator.validate(record)
    CascadeRestoreEngine().run_restores(record)


def boot_cascade_soft_deletes(model_cls: type) -> bool:
    """为模型类注册级联钩子（重复调用安全）

    Returns:
        是否新注册
    """
    registered = model_hooks.register(
        model_cls, ModelEvent.DELETING, _on_deleting,
        key=DELETING_HOOK_KEY, priority=CASCADE_HOOK_PRIORITY,
    )
    model_hooks.register(
        model_cls, ModelEvent.RESTORING, _on_restoring,
        key=RESTORING_HOOK_KEY, priority=CASCADE_HOOK_PRIORITY,
    )
    if registered:
        cascade_logger.debug(f"{model_cls.__name__} 已注册级联软删除钩子")
    return registered


class CascadeSoftDeletes:
    """级联软删除 Mixin

    类属性:
        __cascade_deletes__: 级联关联名，字符串或字符串序列
        __cascade_fetch_method__: 关联记录读取方式 get/cursor/lazy/chunk，默认使用全局配置
        __cascade_chunk_size__: chunk 方式每页记录数，默认使用全局配置

    注意：需要与 SoftDeleteMixin 一起使用，否则删除时抛出 NotSoftDeletableError。
    """

    __cascade_deletes__: ClassVar[Union[str, Sequence[str]]] = ()
    __cascade_fetch_method__: ClassVar[Optional[str]] = None
    __cascade_chunk_size__: ClassVar[Optional[int]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        boot_cascade_soft_deletes(cls)

    def get_cascading_deletes(self) -> List[str]:
        """声明的级联关联名"""
        return get_cascading_deletes(self)

    def get_active_cascading_deletes(self) -> List[str]:
        """当前至少有一条相关记录的级联关联名"""
        return CascadeDeleteEngine().get_active_cascading_deletes(self)


__all__ = [
    "CascadeSoftDeletes",
    "boot_cascade_soft_deletes",
    "DELETING_HOOK_KEY",
    "RESTORING_HOOK_KEY",
]
