"""级联关联校验

在任何级联删除/恢复之前校验：
1. 记录类型支持软删除
2. 每个级联关联名都已注册，且访问结果是 Relation
"""

from typing import Any, List, Sequence, Union

from ..relations import is_soft_deletable, resolve_relation
from .exceptions import InvalidRelationshipsError, NotSoftDeletableError


def get_cascading_deletes(model: Any) -> List[str]:
    """读取模型声明的级联关联名

    __cascade_deletes__ 可以是单个字符串或字符串序列。
    """
    cascades: Union[str, Sequence[str], None] = getattr(model, "__cascade_deletes__", None)
    if not cascades:
        return []
    if isinstance(cascades, str):
        return [cascades]
    return list(cascades)


def implements_soft_deletes(model: Any) -> bool:
    """记录（或模型类）是否支持软删除"""
    model_cls = model if isinstance(model, type) else type(model)
    return is_soft_deletable(model_cls)


class RelationshipValidator:
    """级联关联校验器（无副作用）"""

    @staticmethod
    def find_invalid_relationships(record: Any) -> List[str]:
        """返回无法解析为 Relation 的级联关联名（按声明顺序）"""
        return [
            name for name in get_cascading_deletes(record)
            if resolve_relation(record, name) is None
        ]

    @classmethod
    def validate(cls, record: Any) -> None:
        """校验记录可以执行级联

        Raises:
            NotSoftDeletableError: 记录类型不支持软删除
            InvalidRelationshipsError: 存在无效的级联关联名
        """
        if not implements_soft_deletes(record):
            raise NotSoftDeletableError(type(record).__name__)

        invalid = cls.find_invalid_relationships(record)
        if invalid:
            raise InvalidRelationshipsError(invalid)

    @staticmethod
    def validate_model(model_cls: type) -> None:
        """不需要实例的静态校验，适合在应用启动时调用

        只检查软删除支持和关联名是否已注册；关联访问结果的类型
        需要实例才能确定，留给 validate()。
        """
        if not implements_soft_deletes(model_cls):
            raise NotSoftDeletableError(model_cls.__name__)

        registry = getattr(model_cls, "__relation_registry__", {})
        invalid = [name for name in get_cascading_deletes(model_cls) if name not in registry]
        if invalid:
            raise InvalidRelationshipsError(invalid)


__all__ = [
    "RelationshipValidator",
    "get_cascading_deletes",
    "implements_soft_deletes",
]
