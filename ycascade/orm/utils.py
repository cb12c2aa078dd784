"""ORM 工具函数

提供命名转换工具，用于自动表名和默认外键名。
"""
import re


def to_snake_case(name: str, remove_model_suffix: bool = False) -> str:
    """驼峰命名转下划线命名（支持连续大写缩写如 E2E、API、URL）

    Args:
        name: 类名或字符串
        remove_model_suffix: 是否移除 Model 后缀（用于推导默认外键名）

    Examples:
        >>> to_snake_case("PostComment")
        'post_comment'
        >>> to_snake_case("APIToken")
        'api_token'
        >>> to_snake_case("PostModel", remove_model_suffix=True)
        'post'
    """
    if remove_model_suffix and name.endswith('Model'):
        name = name[:-5]
    # 连续大写+数字后跟大写+小写：APIToken → API_Token
    result = re.sub(r'([A-Z\d]+)([A-Z][a-z])', r'\1_\2', name)
    # 小写字母后跟大写：postComment → post_Comment
    result = re.sub(r'([a-z])([A-Z])', r'\1_\2', result)
    return result.lower()


def default_foreign_key(model_name: str) -> str:
    """按模型类名推导默认外键列名

    Examples:
        >>> default_foreign_key("Post")
        'post_id'
        >>> default_foreign_key("BlogPostModel")
        'blog_post_id'
    """
    return f"{to_snake_case(model_name, remove_model_suffix=True)}_id"
