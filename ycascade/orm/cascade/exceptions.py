"""级联软删除异常定义

提供级联软删除相关的异常类。配置异常在任何记录被修改之前抛出。
"""

from typing import List


class CascadeSoftDeleteError(Exception):
    """级联软删除基础异常"""
    pass


class ConfigurationError(CascadeSoftDeleteError):
    """级联配置异常"""
    pass


class NotSoftDeletableError(ConfigurationError):
    """模型不支持软删除异常

    声明了级联关联的模型必须支持软删除。

    Attributes:
        model_name: 模型类名
    """

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"{model_name} does not implement soft delete")


class InvalidRelationshipsError(ConfigurationError):
    """级联关联无效异常

    每个级联关联名都必须存在，并且访问结果必须是 Relation。

    Attributes:
        relationships: 无效的关联名列表（按声明顺序）
    """

    def __init__(self, relationships: List[str]):
        self.relationships = list(relationships)
        label = "Relationship" if len(self.relationships) == 1 else "Relationships"
        names = ", ".join(self.relationships)
        super().__init__(f"{label} [{names}] must exist and return a Relation")


__all__ = [
    "CascadeSoftDeleteError",
    "ConfigurationError",
    "NotSoftDeletableError",
    "InvalidRelationshipsError",
]
