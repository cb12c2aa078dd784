"""
关联查询模块

提供按名称声明的关联（一对多、一对一、多对一、多对多），
每个关联绑定到实例后得到一个 Relation：限定在相关记录上的查询，
支持一次性读取、游标流式读取、分批读取和分页读取。

软删除作用域在 Relation 内显式处理：
- 默认只返回未删除的记录
- only_trashed() 只返回已软删除的记录
- with_trashed() 返回全部记录

使用示例:
    from ycascade.orm import CoreModel, SoftDeleteMixin, has_many, belongs_to_many

    class Post(SoftDeleteMixin, CoreModel):
        comments = has_many("Comment")                 # Comment.post_id
        tags = belongs_to_many("Tag", "PostTag")       # PostTag.post_id / PostTag.tag_id

    post.comments.get()
    post.comments.only_trashed().count()
    for page in post.comments.chunk(200):
        ...
    for tag in post.tags.cursor():
        tag.pivot   # PostTag 中间表记录
"""

import copy
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from sqlalchemy import Select, false, func, inspect, select
from sqlalchemy.orm import Session

from .db_session import session_for
from .exceptions import UnknownModelError
from .utils import default_foreign_key


ModelTarget = Union[type, str]


class TrashedMode(str, Enum):
    """软删除作用域"""
    DEFAULT = "default"
    ONLY = "only"
    WITH = "with"


def is_soft_deletable(model_cls: type) -> bool:
    """模型类是否支持软删除"""
    checker = getattr(model_cls, "supports_soft_delete", None)
    return bool(checker is not None and checker())


def resolve_model(owner: Any, target: ModelTarget) -> type:
    """解析关联目标模型

    target 为类时直接返回；为类名字符串时，在 owner 所属声明基类的注册表中查找，
    同名类优先选择与 owner 同模块的。

    Raises:
        UnknownModelError: 找不到该类名
    """
    if isinstance(target, type):
        return target
    owner_cls = owner if isinstance(owner, type) else type(owner)
    candidates = [
        mapper.class_ for mapper in owner_cls.registry.mappers
        if mapper.class_.__name__ == target
    ]
    if not candidates:
        raise UnknownModelError(target)
    for candidate in candidates:
        if candidate.__module__ == owner_cls.__module__:
            return candidate
    return candidates[0]


def _primary_key_attribute(model_cls: type) -> str:
    mapper = inspect(model_cls)
    return mapper.get_property_by_column(mapper.primary_key[0]).key


def _scope_trashed(stmt: Select, model_cls: type, mode: TrashedMode) -> Select:
    if mode == TrashedMode.WITH:
        return stmt
    if not is_soft_deletable(model_cls):
        # 不支持软删除的模型没有"已删除"的记录
        return stmt.where(false()) if mode == TrashedMode.ONLY else stmt
    if mode == TrashedMode.ONLY:
        return stmt.where(model_cls.trashed_filter())
    return stmt.where(model_cls.active_filter())


class Relation(ABC):
    """关联查询基类

    Attributes:
        parent: 关联所属的记录
        related: 相关记录的模型类
        trashed: 软删除作用域
    """

    def __init__(self, parent: Any, related: type):
        self.parent = parent
        self.related = related
        self.trashed = TrashedMode.DEFAULT

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} {type(self.parent).__name__} -> "
            f"{self.related.__name__} trashed={self.trashed.value}>"
        )

    @property
    def session(self) -> Session:
        """父记录所属的 session"""
        return session_for(self.parent)

    # ==================== 查询构建 ====================

    @abstractmethod
    def _base_select(self) -> Select:
        """不含软删除作用域的查询"""

    def _select(self) -> Select:
        return _scope_trashed(self._base_select(), self.related, self.trashed)

    def _key_column(self):
        """分页使用的键列（主键）"""
        return getattr(self.related, _primary_key_attribute(self.related))

    def _row_key(self, row: Any) -> Any:
        return getattr(row, _primary_key_attribute(self.related))

    def _execute(self, stmt: Select):
        return self.session.scalars(stmt)

    def _with_mode(self, mode: TrashedMode) -> "Relation":
        clone = copy.copy(self)
        clone.trashed = mode
        return clone

    # ==================== 作用域 ====================

    def only_trashed(self) -> "Relation":
        """只包含已软删除记录的关联（返回新对象）"""
        return self._with_mode(TrashedMode.ONLY)

    def with_trashed(self) -> "Relation":
        """包含已软删除记录的关联（返回新对象）"""
        return self._with_mode(TrashedMode.WITH)

    # ==================== 原始行 ====================
    # 原始行由 hydrate() 转为记录。多对多关联中同一目标记录可对应多条中间表记录，
    # 逐条处理时应在访问每一行之前再 hydrate，使 pivot 始终是当前行的中间表记录。

    def rows(self) -> List[Any]:
        """一次性读取全部原始行"""
        return self._execute(self._select()).all()

    def cursor_rows(self, buffer_size: int = 100) -> Iterator[Any]:
        """游标流式读取原始行

        Args:
            buffer_size: 每次从数据库游标取回的行数
        """
        if buffer_size <= 0:
            raise ValueError(f"buffer_size 必须大于 0，当前为 {buffer_size}")
        stmt = self._select().execution_options(yield_per=buffer_size)
        yield from self._execute(stmt)

    def chunk_rows(self, size: int) -> Iterator[List[Any]]:
        """按键列分页读取原始行，每次返回一页

        使用键集分页（WHERE key > 上一页最后一个 ORDER BY key），
        遍历过程中修改记录的软删除状态不会导致记录被跳过或重复。

        Args:
            size: 每页行数
        """
        if size <= 0:
            raise ValueError(f"size 必须大于 0，当前为 {size}")
        key = self._key_column()
        last = None
        while True:
            stmt = self._select().order_by(key).limit(size)
            if last is not None:
                stmt = stmt.where(key > last)
            rows = self._execute(stmt).all()
            if not rows:
                return
            last = self._row_key(rows[-1])
            yield rows
            if len(rows) < size:
                return

    def lazy_rows(self, batch_size: int = 1000) -> Iterator[Any]:
        for page in self.chunk_rows(batch_size):
            yield from page

    def hydrate(self, row: Any) -> Any:
        """将原始行转为相关记录"""
        # 身份映射中的同一实例可能之前经多对多关联读取过
        row.pivot = None
        return row

    # ==================== 读取 ====================

    def get(self) -> List[Any]:
        """一次性读取全部相关记录"""
        return [self.hydrate(row) for row in self.rows()]

    def first(self) -> Optional[Any]:
        row = self._execute(self._select().limit(1)).first()
        return None if row is None else self.hydrate(row)

    def cursor(self, buffer_size: int = 100) -> Iterator[Any]:
        """逐条流式读取，不一次性加载全部记录"""
        for row in self.cursor_rows(buffer_size):
            yield self.hydrate(row)

    def chunk(self, size: int) -> Iterator[List[Any]]:
        """按主键分页读取，每次返回一页"""
        for rows in self.chunk_rows(size):
            yield [self.hydrate(row) for row in rows]

    def lazy(self, batch_size: int = 1000) -> Iterator[Any]:
        """分批读取，以扁平序列逐条返回"""
        for row in self.lazy_rows(batch_size):
            yield self.hydrate(row)

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(self._select().subquery()))

    def exists(self) -> bool:
        """是否存在至少一条相关记录"""
        return bool(self.session.scalar(select(self._select().exists())))


class HasMany(Relation):
    """一对多：外键在相关记录表上"""

    def __init__(self, parent: Any, related: type, foreign_key: str, local_key: str = "id"):
        super().__init__(parent, related)
        self.foreign_key = foreign_key
        self.local_key = local_key

    def _base_select(self) -> Select:
        return select(self.related).where(
            getattr(self.related, self.foreign_key) == getattr(self.parent, self.local_key)
        )


class HasOne(HasMany):
    """一对一：外键在相关记录表上"""


class BelongsTo(Relation):
    """多对一：外键在父记录表上"""

    def __init__(self, parent: Any, related: type, foreign_key: str, owner_key: str = "id"):
        super().__init__(parent, related)
        self.foreign_key = foreign_key
        self.owner_key = owner_key

    def _base_select(self) -> Select:
        return select(self.related).where(
            getattr(self.related, self.owner_key) == getattr(self.parent, self.foreign_key)
        )


class BelongsToMany(Relation):
    """多对多：通过中间表模型关联

    读取到的每个相关记录的 pivot 属性为对应的中间表记录。
    中间表模型支持软删除时，已软删除的中间表记录不视为有效关联
    （with_trashed() 除外）。

    pivot 绑定在身份映射中的共享实例上：同一目标记录经多条中间表记录关联时，
    get() / chunk() 返回的列表中该实例的 pivot 为最后一行的中间表记录。
    需要逐行对应中间表记录时，使用 rows() / chunk_rows() 并在访问前 hydrate()。
    """

    def __init__(
        self,
        parent: Any,
        related: type,
        pivot_model: type,
        foreign_pivot_key: str,
        related_pivot_key: str,
        parent_key: str = "id",
        related_key: str = "id",
    ):
        super().__init__(parent, related)
        self.pivot_model = pivot_model
        self.foreign_pivot_key = foreign_pivot_key
        self.related_pivot_key = related_pivot_key
        self.parent_key = parent_key
        self.related_key = related_key

    def _base_select(self) -> Select:
        pivot = self.pivot_model
        return (
            select(self.related, pivot)
            .join(pivot, getattr(pivot, self.related_pivot_key) == getattr(self.related, self.related_key))
            .where(getattr(pivot, self.foreign_pivot_key) == getattr(self.parent, self.parent_key))
        )

    def _select(self) -> Select:
        stmt = super()._select()
        if self.trashed == TrashedMode.WITH or not is_soft_deletable(self.pivot_model):
            return stmt
        return stmt.where(self.pivot_model.active_filter())

    def _key_column(self):
        return getattr(self.pivot_model, _primary_key_attribute(self.pivot_model))

    def _row_key(self, row: Any) -> Any:
        return getattr(row[1], _primary_key_attribute(self.pivot_model))

    def _execute(self, stmt: Select):
        return self.session.execute(stmt)

    def hydrate(self, row: Any) -> Any:
        target, pivot = row
        target.pivot = pivot
        return target


# ==================== 声明 ====================

class RelationDescriptor:
    """关联描述符

    声明在模型类上，通过实例访问时调用工厂函数生成 Relation。
    类创建时被收集到模型的关联注册表 __relation_registry__。
    """

    def __init__(self, factory: Callable[[Any], Any], name: str = None):
        self.factory = factory
        self.name = name or getattr(factory, "__name__", None)
        self.__doc__ = getattr(factory, "__doc__", None)

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return self.factory(instance)

    def __repr__(self):
        return f"<RelationDescriptor {self.name}>"


def relation(func: Callable[[Any], Any]) -> RelationDescriptor:
    """将方法声明为关联

    使用示例:
        class Post(SoftDeleteMixin, CoreModel):
            @relation
            def pinned_comments(self):
                return HasMany(self, Comment, "post_id")
    """
    return RelationDescriptor(func)


def has_many(related: ModelTarget, foreign_key: str = None, local_key: str = "id") -> RelationDescriptor:
    """声明一对多关联，foreign_key 默认为 <父模型名>_id"""
    def factory(parent):
        fk = foreign_key or default_foreign_key(type(parent).__name__)
        return HasMany(parent, resolve_model(parent, related), fk, local_key)
    return RelationDescriptor(factory)


def has_one(related: ModelTarget, foreign_key: str = None, local_key: str = "id") -> RelationDescriptor:
    """声明一对一关联，foreign_key 默认为 <父模型名>_id"""
    def factory(parent):
        fk = foreign_key or default_foreign_key(type(parent).__name__)
        return HasOne(parent, resolve_model(parent, related), fk, local_key)
    return RelationDescriptor(factory)


def belongs_to(related: ModelTarget, foreign_key: str = None, owner_key: str = "id") -> RelationDescriptor:
    """声明多对一关联，foreign_key 默认为 <目标模型名>_id"""
    def factory(parent):
        related_cls = resolve_model(parent, related)
        fk = foreign_key or default_foreign_key(related_cls.__name__)
        return BelongsTo(parent, related_cls, fk, owner_key)
    return RelationDescriptor(factory)


def belongs_to_many(
    related: ModelTarget,
    pivot_model: ModelTarget,
    foreign_pivot_key: str = None,
    related_pivot_key: str = None,
    parent_key: str = "id",
    related_key: str = "id",
) -> RelationDescriptor:
    """声明多对多关联

    Args:
        related: 目标模型
        pivot_model: 中间表模型
        foreign_pivot_key: 中间表指向父记录的列，默认 <父模型名>_id
        related_pivot_key: 中间表指向目标记录的列，默认 <目标模型名>_id
    """
    def factory(parent):
        related_cls = resolve_model(parent, related)
        return BelongsToMany(
            parent,
            related_cls,
            resolve_model(parent, pivot_model),
            foreign_pivot_key or default_foreign_key(type(parent).__name__),
            related_pivot_key or default_foreign_key(related_cls.__name__),
            parent_key,
            related_key,
        )
    return RelationDescriptor(factory)


# ==================== 注册表 ====================

def collect_relation_descriptors(cls: type) -> Dict[str, RelationDescriptor]:
    """收集类及其父类上声明的关联

    子类用非关联属性覆盖同名关联时，该关联被移除。
    """
    registry: Dict[str, RelationDescriptor] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, RelationDescriptor):
                registry[name] = value
            elif name in registry:
                del registry[name]
    return registry


def resolve_relation(record: Any, name: str) -> Optional[Relation]:
    """按名称解析记录上的关联

    Returns:
        Relation；名称未注册或访问结果不是 Relation 时返回 None
    """
    descriptor = getattr(type(record), "__relation_registry__", {}).get(name)
    if descriptor is None:
        return None
    result = descriptor.__get__(record, type(record))
    return result if isinstance(result, Relation) else None


def join_record(record: Any) -> Optional[Any]:
    """经多对多关联读取的记录所附带的中间表记录"""
    return getattr(record, "pivot", None)


def is_join_record(record: Any) -> bool:
    """记录是否附带中间表记录"""
    return join_record(record) is not None


__all__ = [
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
    "collect_relation_descriptors",
    "resolve_relation",
    "resolve_model",
    "is_soft_deletable",
    "is_join_record",
    "join_record",
]
