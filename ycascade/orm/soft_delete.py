"""软删除Mixin"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .events import ModelEvent


class SoftDeleteMixin:
    """软删除Mixin

    为 CoreModel 子类添加软删除能力。

    功能：
    - 添加 deleted_at 字段（软删除标记）
    - delete(): 软删除，设置 deleted_at
    - force_delete(): 永久删除，删除数据库记录
    - restore(): 恢复软删除的对象，触发 restoring / restored 钩子
    - is_deleted: 属性，检查对象是否已被软删除

    使用示例:
        class User(SoftDeleteMixin, CoreModel):
            name: Mapped[str] = mapped_column(String(50))

        user.delete(commit=True)        # deleted_at = 当前时间
        user.restore(commit=True)       # deleted_at = None
        user.force_delete(commit=True)  # 删除数据库记录

        # 查询未删除的记录
        session.scalars(select(User).where(User.active_filter()))
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        default=None,
        comment="删除时间（软删除标记）"
    )

    @classmethod
    def supports_soft_delete(cls) -> bool:
        return True

    @classmethod
    def active_filter(cls):
        """未删除记录的过滤条件"""
        return cls.deleted_at.is_(None)

    @classmethod
    def trashed_filter(cls):
        """已软删除记录的过滤条件"""
        return cls.deleted_at.isnot(None)

    @property
    def is_deleted(self) -> bool:
        """检查对象是否已被软删除"""
        return self.deleted_at is not None

    def fresh_deleted_at(self) -> datetime:
        """软删除时写入的时间，子类可覆盖"""
        return datetime.now()

    def run_soft_delete(self) -> None:
        """设置软删除标记"""
        self.deleted_at = self.fresh_deleted_at()

    def _perform_delete(self) -> None:
        if self.is_force_deleting():
            super()._perform_delete()
        else:
            self.run_soft_delete()

    def force_delete(self, commit: bool = False) -> bool:
        """永久删除对象

        删除期间 is_force_deleting() 返回 True，deleting 钩子可据此区分删除方式。
        """
        self._force_deleting = True
        try:
            return self.delete(commit=commit)
        finally:
            self._force_deleting = False

    def restore(self, commit: bool = False) -> bool:
        """恢复软删除的对象

        restoring 钩子抛出异常时恢复中止并向上抛出，返回 False 时恢复被阻止。

        Returns:
            是否执行了恢复
        """
        if not self.fire_model_event(ModelEvent.RESTORING):
            return False
        self.deleted_at = None
        self.fire_model_event(ModelEvent.RESTORED)
        self._commit(commit)
        return True


__all__ = [
    "SoftDeleteMixin",
]
