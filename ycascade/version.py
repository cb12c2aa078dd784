"""版本信息"""

__version__ = "0.1.0"
__author__ = "ycascade"
__description__ = "SQLAlchemy 记录的级联软删除与恢复"
