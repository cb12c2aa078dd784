"""
数据库会话管理模块

提供数据库引擎创建、会话管理等功能。

公开 API:
- db_manager: 数据库管理器单例
- init_database(): 初始化数据库连接
- get_engine(): 获取数据库引擎
- get_session(): 获取当前线程的 scoped session
- db_session_scope(): 上下文管理器，自动提交/回滚/清理
- session_for(): 获取记录所属的 session

级联删除本身不开启、提交或回滚事务。需要原子性时，
在 db_session_scope() 中调用 delete() / restore()：
任一关联记录失败都会回滚整个级联。
"""

import os
from contextlib import contextmanager
from typing import Any, Callable, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, object_session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from ycascade.log import get_logger
from .exceptions import DetachedRecordError

_logger = get_logger("ycascade.orm.session")


class DatabaseManager:
    """数据库管理器（单例）

    使用示例:
        from ycascade.orm import db_manager

        db_manager.init(database_url="sqlite:///./test.db")
        engine = db_manager.engine
        session = db_manager.get_session()
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._engine = None
        self._session_scope = None
        self._initialized = True

    # ==================== 属性访问 ====================

    @property
    def engine(self):
        """获取数据库引擎（只读）

        Raises:
            RuntimeError: 数据库未初始化时
        """
        if self._engine is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._engine

    @property
    def is_initialized(self) -> bool:
        """检查数据库是否已初始化"""
        return self._engine is not None and self._session_scope is not None

    # ==================== 核心方法 ====================

    def init(
        self,
        database_url: str = None,
        echo: bool = False,
        scopefunc: Callable = None,
        config: Any = None,
        **engine_kwargs,
    ):
        """初始化数据库连接

        Args:
            database_url: 数据库连接URL（如果提供 config 则忽略）
            echo: 是否输出SQL语句（如果提供 config 则忽略）
            scopefunc: session作用域函数，默认按线程隔离
            config: 数据库配置对象（DatabaseSettings）
            **engine_kwargs: 透传给 create_engine 的参数

        Returns:
            tuple: (engine, session_scope)

        使用示例:
            engine, session = init_database("sqlite:///./app.db")
            engine, session = init_database(config=settings.database)
        """
        if config is not None:
            database_url = getattr(config, "url", database_url) or database_url
            echo = getattr(config, "echo", echo)

        if not database_url:
            raise ValueError("database_url 是必需的，请通过参数或 config 提供")

        _logger.info(f"数据库配置URL: {database_url}")

        if database_url.startswith("sqlite:///"):
            db_path = database_url[len("sqlite:///"):]
            connect_args = engine_kwargs.pop("connect_args", {})
            connect_args.setdefault("check_same_thread", False)
            if db_path in ("", ":memory:"):
                # 内存数据库：使用 StaticPool（单连接）
                engine_kwargs.setdefault("poolclass", StaticPool)
                _logger.info("SQLite内存数据库")
            else:
                _logger.info(f"SQLite文件数据库路径: {os.path.abspath(db_path)}")
            engine_kwargs["connect_args"] = connect_args

        try:
            self._engine = create_engine(database_url, echo=echo, **engine_kwargs)
        except Exception as e:
            _logger.error(f"创建数据库引擎失败: {str(e)}")
            raise

        session_maker = sessionmaker(autocommit=False, autoflush=True, bind=self._engine)
        if self._session_scope is not None:
            self._session_scope.remove()
        self._session_scope = scoped_session(session_maker, scopefunc=scopefunc)

        _logger.info("数据库session创建成功")
        return self._engine, self._session_scope

    def get_session(self) -> Session:
        """获取 scoped session

        Raises:
            RuntimeError: 数据库未初始化时
        """
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope()

    def cleanup(self):
        """移除当前作用域的 session，归还连接（幂等）"""
        if self._session_scope is not None and self._session_scope.registry.has():
            self._session_scope.remove()
            _logger.debug("session_scope 移除完成")


# ==================== 全局单例 ====================

db_manager = DatabaseManager()


# ==================== 公开 API 函数 ====================

def init_database(database_url: str = None, **kwargs):
    """初始化数据库连接

    db_manager.init() 的便捷包装函数，参数见 DatabaseManager.init()。
    """
    return db_manager.init(database_url=database_url, **kwargs)


def get_engine():
    """获取数据库引擎"""
    return db_manager.engine


def get_session() -> Session:
    """获取当前作用域的 session"""
    return db_manager.get_session()


def remove_session():
    """移除当前作用域的 session"""
    db_manager.cleanup()


def session_for(record: Any) -> Session:
    """获取记录所属的 session

    记录已加入 session 时返回该 session；否则返回 init_database()
    配置的默认 session。

    Raises:
        DetachedRecordError: 记录不属于任何 session 且数据库未初始化
    """
    session = object_session(record)
    if session is not None:
        return session
    if db_manager.is_initialized:
        return db_manager.get_session()
    raise DetachedRecordError(type(record).__name__)


@contextmanager
def db_session_scope(auto_commit: bool = True) -> Generator[Session, None, None]:
    """session 上下文管理器

    自动提交或回滚，并在结束时清理 session。

    使用示例:
        with db_session_scope() as session:
            post = session.get(Post, 1)
            post.delete()
        # 级联中任一记录失败时整体回滚
    """
    session = db_manager.get_session()
    try:
        yield session
        if auto_commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        remove_session()


__all__ = [
    "DatabaseManager",
    "db_manager",
    "init_database",
    "get_engine",
    "get_session",
    "remove_session",
    "session_for",
    "db_session_scope",
]
