"""ORM 异常定义"""


class OrmError(Exception):
    """ORM 基础异常"""
    pass


class DetachedRecordError(OrmError):
    """记录未关联 Session 异常

    记录需要通过所属 Session 构建关联查询或执行删除，游离对象无法操作。

    Attributes:
        model_name: 模型类名
    """

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"{model_name} 实例未关联到 Session，且未调用 init_database() 配置默认 session")


class UnknownModelError(OrmError):
    """关联目标模型不存在异常

    关联使用类名字符串声明目标模型，但声明基类的注册表中找不到该类。

    Attributes:
        model_name: 找不到的类名
    """

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"找不到模型类 '{model_name}'，请确认该模型已定义并导入")


__all__ = [
    "OrmError",
    "DetachedRecordError",
    "UnknownModelError",
]
