"""关联记录遍历策略

四种读取方式，调用方无需关心当前使用哪一种：

- get: 一次性读取全部相关记录，再逐条访问
- cursor: 游标流式逐条读取，不一次性加载全部记录
- lazy: 分批读取，以扁平序列逐条访问
- chunk: 按固定页大小分页读取（默认 500），逐页逐条访问

相同数据集上，四种方式访问到的记录集合相同，区别只在于峰值内存和读取粒度。
每一行在访问前才转为记录，多对多关联的 pivot 总是当前行的中间表记录。

使用示例:
    class Post(CascadeSoftDeletes, SoftDeleteMixin, CoreModel):
        __cascade_deletes__ = ["comments"]
        __cascade_fetch_method__ = "chunk"
        __cascade_chunk_size__ = 200
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Union

from ..relations import Relation
from .configure import get_cascade_settings

Visitor = Callable[[Any], Any]


class FetchMethod(str, Enum):
    """关联记录读取方式"""
    GET = "get"
    CURSOR = "cursor"
    LAZY = "lazy"
    CHUNK = "chunk"


class RecordIterator(ABC):
    """关联记录遍历器"""

    fetch_method: FetchMethod

    @abstractmethod
    def iterate(self, relation: Relation, visit: Visitor) -> int:
        """对关联中的每条记录调用 visit

        Returns:
            访问的记录数
        """

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


class GetIterator(RecordIterator):
    fetch_method = FetchMethod.GET

    def iterate(self, relation: Relation, visit: Visitor) -> int:
        rows = relation.rows()
        for row in rows:
            visit(relation.hydrate(row))
        return len(rows)


class CursorIterator(RecordIterator):
    fetch_method = FetchMethod.CURSOR

    def __init__(self, buffer_size: int = 100):
        self.buffer_size = buffer_size

    def iterate(self, relation: Relation, visit: Visitor) -> int:
        count = 0
        for row in relation.cursor_rows(self.buffer_size):
            visit(relation.hydrate(row))
            count += 1
        return count


class LazyIterator(RecordIterator):
    fetch_method = FetchMethod.LAZY

    def __init__(self, batch_size: int = 1000):
        self.batch_size = batch_size

    def iterate(self, relation: Relation, visit: Visitor) -> int:
        count = 0
        for row in relation.lazy_rows(self.batch_size):
            visit(relation.hydrate(row))
            count += 1
        return count


class ChunkIterator(RecordIterator):
    fetch_method = FetchMethod.CHUNK

    def __init__(self, chunk_size: int = 500):
        self.chunk_size = chunk_size

    def iterate(self, relation: Relation, visit: Visitor) -> int:
        count = 0
        for rows in relation.chunk_rows(self.chunk_size):
            for row in rows:
                visit(relation.hydrate(row))
            count += len(rows)
        return count

    def __repr__(self):
        return f"<ChunkIterator chunk_size={self.chunk_size}>"


def get_record_iterator(
    fetch_method: Union[FetchMethod, str] = None,
    chunk_size: int = None,
    batch_size: int = None,
    buffer_size: int = None,
) -> RecordIterator:
    """按读取方式创建遍历器，未指定的参数使用全局配置

    Raises:
        ValueError: 未知的读取方式
    """
    settings = get_cascade_settings()
    method = FetchMethod(fetch_method or settings.fetch_method)

    if method == FetchMethod.CURSOR:
        return CursorIterator(settings.cursor_buffer_size if buffer_size is None else buffer_size)
    if method == FetchMethod.LAZY:
        return LazyIterator(settings.lazy_batch_size if batch_size is None else batch_size)
    if method == FetchMethod.CHUNK:
        return ChunkIterator(settings.chunk_size if chunk_size is None else chunk_size)
    return GetIterator()


def get_record_iterator_for(owner: Any) -> RecordIterator:
    """按记录类型上的 __cascade_fetch_method__ / __cascade_chunk_size__ 创建遍历器"""
    return get_record_iterator(
        getattr(owner, "__cascade_fetch_method__", None),
        chunk_size=getattr(owner, "__cascade_chunk_size__", None),
    )


__all__ = [
    "FetchMethod",
    "RecordIterator",
    "GetIterator",
    "CursorIterator",
    "LazyIterator",
    "ChunkIterator",
    "get_record_iterator",
    "get_record_iterator_for",
]
