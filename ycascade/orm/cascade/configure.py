"""级联软删除全局配置

使用示例:
    from ycascade.orm import configure_cascade_soft_delete

    # 启动时配置（通常来自 AppSettings.cascade）
    configure_cascade_soft_delete(settings.cascade)

    # 或直接覆盖个别参数
    configure_cascade_soft_delete(fetch_method="chunk", chunk_size=200)

模型类上的 __cascade_fetch_method__ / __cascade_chunk_size__ 优先于全局配置。
"""

from typing import Optional

from ycascade.config import CascadeSettings
from ycascade.log import cascade_logger

_settings: Optional[CascadeSettings] = None


def configure_cascade_soft_delete(settings: CascadeSettings = None, **overrides) -> CascadeSettings:
    """设置全局级联配置

    Args:
        settings: 配置对象，默认使用当前配置
        **overrides: 覆盖的配置项，会重新校验

    Returns:
        生效的配置
    """
    global _settings
    base = settings or get_cascade_settings()
    values = base.model_dump()
    values.update(overrides)
    _settings = CascadeSettings(**values)
    cascade_logger.debug(
        f"级联配置: fetch_method={_settings.fetch_method}, chunk_size={_settings.chunk_size}"
    )
    return _settings


def get_cascade_settings() -> CascadeSettings:
    """获取全局级联配置，未配置时从环境变量/默认值创建"""
    global _settings
    if _settings is None:
        _settings = CascadeSettings()
    return _settings


def reset_cascade_settings() -> None:
    """清除全局级联配置（下次获取时重新创建）"""
    global _settings
    _settings = None


__all__ = [
    "configure_cascade_soft_delete",
    "get_cascade_settings",
    "reset_cascade_settings",
]
