"""模型生命周期钩子

为模型的删除、恢复操作提供显式的前置/后置钩子。

钩子按模型类注册，分发时沿 MRO 收集父类上注册的钩子，
同一个 key 只执行一次，因此在每个子类上重复注册是安全的。

使用示例:
    from ycascade.orm import ModelEvent, register_model_hook

    @register_model_hook(Post, ModelEvent.DELETING)
    def forbid_pinned(post):
        if post.pinned:
            return False   # 返回 False 阻止删除

    # 或直接注册函数
    register_model_hook(Post, ModelEvent.RESTORED, audit_restore, key="audit")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ycascade.log import get_logger

logger = get_logger("ycascade.orm.events")


class ModelEvent(str, Enum):
    """模型生命周期事件"""

    DELETING = "deleting"
    """删除前（抛出异常或返回 False 会阻止删除）"""

    DELETED = "deleted"
    """删除后"""

    RESTORING = "restoring"
    """恢复前（抛出异常或返回 False 会阻止恢复）"""

    RESTORED = "restored"
    """恢复后"""


HookFunc = Callable[[Any], Optional[bool]]


@dataclass(frozen=True)
class ModelHook:
    """已注册的钩子"""
    key: str
    func: HookFunc
    priority: int = 100


def _func_key(func: Callable) -> str:
    module = getattr(func, "__module__", "")
    name = getattr(func, "__qualname__", None) or repr(func)
    return f"{module}.{name}"


class ModelHookRegistry:
    """模型钩子注册表"""

    def __init__(self):
        self._hooks: Dict[type, Dict[ModelEvent, List[ModelHook]]] = {}

    def register(
        self,
        model_cls: type,
        event: Union[ModelEvent, str],
        func: HookFunc,
        key: str = None,
        priority: int = 100,
    ) -> bool:
        """注册钩子

        Args:
            model_cls: 模型类
            event: 生命周期事件
            func: 钩子函数，参数为模型实例
            key: 钩子唯一标识，默认使用函数的完整限定名
            priority: 执行优先级（数字越小越先执行）

        Returns:
            是否新注册（相同 key 已注册时返回 False）
        """
        event = ModelEvent(event)
        key = key or _func_key(func)
        hooks = self._hooks.setdefault(model_cls, {}).setdefault(event, [])
        if any(h.key == key for h in hooks):
            return False
        hooks.append(ModelHook(key=key, func=func, priority=priority))
        hooks.sort(key=lambda h: h.priority)
        return True

    def unregister(self, model_cls: type, event: Union[ModelEvent, str], key: str) -> bool:
        """取消注册钩子"""
        hooks = self._hooks.get(model_cls, {}).get(ModelEvent(event), [])
        for hook in hooks:
            if hook.key == key:
                hooks.remove(hook)
                return True
        return False

    def is_registered(self, model_cls: type, event: Union[ModelEvent, str], key: str) -> bool:
        """检查钩子是否已直接注册在该模型类上"""
        hooks = self._hooks.get(model_cls, {}).get(ModelEvent(event), [])
        return any(h.key == key for h in hooks)

    def hooks_for(self, model_cls: type, event: Union[ModelEvent, str]) -> List[ModelHook]:
        """收集模型类（含父类）在某事件上的钩子，按优先级排序"""
        event = ModelEvent(event)
        collected: Dict[str, ModelHook] = {}
        for klass in model_cls.__mro__:
            for hook in self._hooks.get(klass, {}).get(event, ()):
                collected.setdefault(hook.key, hook)
        return sorted(collected.values(), key=lambda h: h.priority)

    def dispatch(self, record: Any, event: Union[ModelEvent, str]) -> bool:
        """同步执行钩子

        钩子抛出的异常不做包装，直接向调用方传播。

        Returns:
            False 表示某个钩子阻止了本次操作，其余钩子不再执行
        """
        event = ModelEvent(event)
        for hook in self.hooks_for(type(record), event):
            try:
                result = hook.func(record)
            except Exception as e:
                logger.error(
                    f"钩子 {hook.key} 在 {type(record).__name__}.{event.value} 执行失败: {e}"
                )
                raise
            if result is False:
                logger.debug(f"钩子 {hook.key} 阻止了 {type(record).__name__}.{event.value}")
                return False
        return True

    def clear(self, model_cls: type = None) -> None:
        """清空钩子；指定 model_cls 时只清空该类上注册的钩子"""
        if model_cls is None:
            self._hooks.clear()
        else:
            self._hooks.pop(model_cls, None)


# 全局注册表
model_hooks = ModelHookRegistry()


def register_model_hook(
    model_cls: type,
    event: Union[ModelEvent, str],
    func: HookFunc = None,
    *,
    key: str = None,
    priority: int = 100,
):
    """注册模型钩子，可直接调用或作为装饰器使用"""
    if func is not None:
        model_hooks.register(model_cls, event, func, key=key, priority=priority)
        return func

    def decorator(f: HookFunc) -> HookFunc:
        model_hooks.register(model_cls, event, f, key=key, priority=priority)
        return f

    return decorator


__all__ = [
    "ModelEvent",
    "ModelHook",
    "ModelHookRegistry",
    "model_hooks",
    "register_model_hook",
]
