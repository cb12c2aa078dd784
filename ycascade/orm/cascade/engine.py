"""级联删除 / 恢复执行器

CascadeDeleteEngine: 对每个非空的级联关联，逐条删除相关记录
    - 父记录永久删除时，相关记录也永久删除；否则软删除
    - 经多对多关联读取的记录，删除的是中间表记录而不是目标记录

CascadeRestoreEngine: 对每个声明的级联关联（不做存在性过滤），
    只读取已软删除的相关记录并逐条恢复

相关记录自身的 delete() / restore() 会触发它自己的钩子，
因此多级级联按深度优先递归进行。执行器不开启、提交或回滚事务，
相关记录操作失败时异常立即向上传播。
"""

from typing import Any, List

from ycascade.log import cascade_logger
from ..relations import join_record, resolve_relation
from .iterators import RecordIterator, get_record_iterator_for
from .validator import get_cascading_deletes


class CascadeDeleteEngine:
    """级联删除执行器"""

    def __init__(self, iterator: RecordIterator = None):
        self.iterator = iterator

    def get_active_cascading_deletes(self, record: Any) -> List[str]:
        """返回当前至少有一条相关记录的级联关联名"""
        return [
            name for name in get_cascading_deletes(record)
            if resolve_relation(record, name).exists()
        ]

    def run_deletes(self, record: Any) -> None:
        force = record.is_force_deleting()
        iterator = self.iterator or get_record_iterator_for(record)

        def visit(related: Any) -> None:
            target = join_record(related) or related
            if force:
                target.force_delete()
            else:
                target.delete()

        for name in self.get_active_cascading_deletes(record):
            relation = resolve_relation(record, name)
            count = iterator.iterate(relation, visit)
            cascade_logger.debug(
                f"{type(record).__name__}(id={record.id}).{name}: "
                f"{'永久删除' if force else '软删除'} {count} 条关联记录"
            )


class CascadeRestoreEngine:
    """级联恢复执行器"""

    def __init__(self, iterator: RecordIterator = None):
        self.iterator = iterator

    def get_deleted_cascading_deletes(self, record: Any) -> List[str]:
        """返回需要恢复的级联关联名（全部声明的关联，不做存在性过滤）"""
        return get_cascading_deletes(record)

    def run_restores(self, record: Any) -> None:
        iterator = self.iterator or get_record_iterator_for(record)

        for name in self.get_deleted_cascading_deletes(record):
            relation = resolve_relation(record, name).only_trashed()
            count = iterator.iterate(relation, lambda related: related.restore())
            cascade_logger.debug(
                f"{type(record).__name__}(id={record.id}).{name}: 恢复 {count} 条关联记录"
            )


__all__ = [
    "CascadeDeleteEngine",
    "CascadeRestoreEngine",
]
