"""
ORM基础模型

提供主键、时间戳、自动表名、删除生命周期钩子和关联注册表
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Dict, Optional, TYPE_CHECKING, Union

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, Session, declarative_base, declared_attr, mapped_column

from .events import ModelEvent, model_hooks
from .utils import to_snake_case

if TYPE_CHECKING:
    from typing_extensions import Self
    from .relations import RelationDescriptor


# 声明基类
Base = declarative_base()


class CoreModel(Base):
    """ORM基础模型类

    提供功能：
    - 自增整数主键
    - 自动表名生成（驼峰转下划线）
    - save / delete / force_delete 操作，删除前后触发模型钩子
    - 关联注册表：类上声明的 has_many / belongs_to_many 等关联在类创建时收集

    使用示例:
        from ycascade.orm import CoreModel, SoftDeleteMixin, has_many

        class Post(SoftDeleteMixin, CoreModel):
            title: Mapped[str] = mapped_column(String(100))
            comments = has_many("Comment")

        post.comments.get()        # 关联查询
        post.delete(commit=True)   # 触发 deleting / deleted 钩子

    注意：Mixin 需要写在 CoreModel 之前，才能覆盖删除行为。
    """
    __abstract__ = True

    # 允许非 Mapped[] 的类型注解
    __allow_unmapped__ = True

    # 类创建时收集的关联注册表 {关联名: RelationDescriptor}
    __relation_registry__: ClassVar[Dict[str, "RelationDescriptor"]] = {}

    # 通过多对多关联读取时附带的中间表记录，其他情况为 None
    pivot = None

    # 是否处于永久删除过程中
    _force_deleting = False

    def __init_subclass__(cls, **kwargs):
        """子类初始化钩子

        收集类自身及 Mixin / 父类上声明的关联，生成关联注册表
        """
        super().__init_subclass__(**kwargs)

        # 延迟导入，避免循环依赖
        from .relations import collect_relation_descriptors

        cls.__relation_registry__ = collect_relation_descriptors(cls)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """驼峰命名转下划线"""
        return to_snake_case(cls.__name__)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        comment="创建时间"
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=func.now(),
        comment="更新时间"
    )

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """获取对象所属的 session

        对象未加入任何 session 时，使用 init_database() 配置的默认 session
        """
        from .db_session import session_for
        return session_for(self)

    # ==================== 能力声明 ====================

    @classmethod
    def supports_soft_delete(cls) -> bool:
        """模型是否支持软删除"""
        return False

    def is_force_deleting(self) -> bool:
        """当前是否处于永久删除过程中"""
        return self._force_deleting

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（新增或更新）

        Args:
            commit: 是否立即提交，默认False

        Returns:
            self: 返回自身，支持链式调用
        """
        session = self.session
        session.add(self)
        self._commit(commit, session)
        return self

    def delete(self, commit: bool = False) -> bool:
        """删除对象

        先触发 deleting 钩子：钩子抛出异常时删除中止并向上抛出，
        钩子返回 False 时删除被阻止。之后执行删除并触发 deleted 钩子。

        Args:
            commit: 是否立即提交，默认False

        Returns:
            是否执行了删除
        """
        if not self.fire_model_event(ModelEvent.DELETING):
            return False
        session = self.session
        self._perform_delete()
        self.fire_model_event(ModelEvent.DELETED)
        self._commit(commit, session)
        return True

    def force_delete(self, commit: bool = False) -> bool:
        """永久删除对象（普通模型与 delete 相同）"""
        return self.delete(commit=commit)

    def refresh(self) -> Self:
        """从数据库重新加载对象状态"""
        self.session.refresh(self)
        return self

    def _perform_delete(self) -> None:
        """执行物理删除"""
        self.session.delete(self)

    def fire_model_event(self, event: Union[ModelEvent, str]) -> bool:
        """同步触发模型钩子

        Returns:
            False 表示操作被钩子阻止
        """
        return model_hooks.dispatch(self, event)

    def _commit(self, commit: bool = False, session: Session = None) -> None:
        if commit:
            (session or self.session).commit()


__all__ = [
    "Base",
    "CoreModel",
]
