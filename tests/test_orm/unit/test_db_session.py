"""数据库会话管理测试"""

import pytest
from sqlalchemy import func, select

from ycascade.config import DatabaseSettings
from ycascade.orm import (
    Base,
    DetachedRecordError,
    db_manager,
    db_session_scope,
    get_engine,
    init_database,
    remove_session,
)
from ycascade.orm.db_session import session_for

from tests.helpers.cascade_models import CascadeComment, CascadePost


@pytest.fixture
def database():
    """初始化全局内存数据库"""
    engine, _ = init_database("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    remove_session()
    engine.dispose()


class TestInitDatabase:
    """init_database 测试"""

    def test_requires_url(self):
        with pytest.raises(ValueError):
            init_database()

    def test_from_config(self):
        engine, session_scope = init_database(config=DatabaseSettings(url="sqlite:///:memory:"))
        try:
            assert get_engine() is engine
            assert db_manager.is_initialized
        finally:
            remove_session()
            engine.dispose()


class TestSessionScope:
    """db_session_scope 测试"""

    def test_commit_on_success(self, database):
        with db_session_scope() as session:
            session.add(CascadePost(title="saved"))

        with db_session_scope() as session:
            assert session.scalar(select(func.count()).select_from(CascadePost)) == 1

    def test_cascade_rolled_back_on_error(self, database):
        """测试级联中途失败时整体回滚"""
        with db_session_scope() as session:
            post = CascadePost(title="p")
            session.add(post)
            session.flush()
            session.add_all([CascadeComment(post_id=post.id) for _ in range(2)])
            post_id = post.id

        with pytest.raises(RuntimeError):
            with db_session_scope() as session:
                session.get(CascadePost, post_id).delete()
                raise RuntimeError("abort")

        with db_session_scope() as session:
            trashed = session.scalar(
                select(func.count()).select_from(CascadeComment).where(CascadeComment.deleted_at.isnot(None))
            )
            assert trashed == 0
            assert session.get(CascadePost, post_id).deleted_at is None


class TestSessionFor:
    """session_for 测试"""

    def test_attached_record(self, db_session):
        post = CascadePost(title="x")
        db_session.add(post)
        assert session_for(post) is db_session

    def test_default_session(self, database):
        """测试游离记录使用默认 session"""
        post = CascadePost(title="x")
        assert session_for(post) is db_manager.get_session()

    def test_detached_without_database(self, monkeypatch):
        monkeypatch.setattr(db_manager, "_engine", None)

        with pytest.raises(DetachedRecordError) as exc_info:
            session_for(CascadePost(title="x"))
        assert exc_info.value.model_name == "CascadePost"
        assert "CascadePost" in str(exc_info.value)

    def test_save_uses_default_session(self, database):
        """测试 save() 使用默认 session"""
        post = CascadePost(title="saved").save(commit=True)
        assert post.id is not None
