"""级联删除测试

测试场景：
1. 软删除父记录时只软删除未删除的相关记录
2. 永久删除父记录时永久删除相关记录，空关联不读取不修改
3. 多级级联（文章 -> 评论 -> 回复）
4. 多对多关联删除中间表记录而不是目标记录
5. 四种读取方式结果一致
"""

import pytest
from sqlalchemy import event, func, select

from ycascade.orm import CascadeDeleteEngine, ModelEvent, model_hooks
from ycascade.orm.cascade import ChunkIterator

from tests.helpers.cascade_models import (
    CascadeAttachment,
    CascadeComment,
    CascadeMember,
    CascadePost,
    CascadePostTag,
    CascadeProject,
    CascadeProjectMember,
    CascadeReply,
    CascadeTag,
    make_post,
)


@pytest.fixture
def statements(memory_engine):
    """记录执行的 SQL 语句"""
    captured = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        captured.append(statement)

    event.listen(memory_engine, "before_cursor_execute", before_cursor_execute)
    yield captured
    event.remove(memory_engine, "before_cursor_execute", before_cursor_execute)


def _count(session, model, trashed=None):
    stmt = select(func.count()).select_from(model)
    if trashed is True:
        stmt = stmt.where(model.deleted_at.isnot(None))
    elif trashed is False:
        stmt = stmt.where(model.deleted_at.is_(None))
    return session.scalar(stmt)


class TestSoftCascadeDelete:
    """软删除级联"""

    def test_soft_deletes_related(self, db_session):
        """测试软删除文章时软删除其评论"""
        post = make_post(db_session, comments=3)

        assert post.delete(commit=True) is True

        assert post.is_deleted
        assert post.comments.count() == 0
        assert post.comments.only_trashed().count() == 3
        # 记录仍在数据库中
        assert _count(db_session, CascadeComment) == 3

    def test_only_active_records_touched(self, db_session):
        """测试只软删除当前未删除的相关记录，已删除的保持原删除时间"""
        post = make_post(db_session, comments=3)
        old = post.comments.first()
        old.delete(commit=True)
        old_deleted_at = old.deleted_at

        deleted_ids = []
        key = "test.collect_deleted"
        model_hooks.register(CascadeComment, ModelEvent.DELETED, lambda r: deleted_ids.append(r.id), key=key)
        try:
            post.delete(commit=True)
        finally:
            model_hooks.unregister(CascadeComment, ModelEvent.DELETED, key)

        assert len(deleted_ids) == 2
        assert old.id not in deleted_ids
        old.refresh()
        assert old.deleted_at == old_deleted_at

    def test_nested_cascade(self, db_session):
        """测试多级级联：文章 -> 评论 -> 回复"""
        post = make_post(db_session, comments=2)
        for comment in post.comments.get():
            db_session.add_all([
                CascadeReply(cascade_comment_id=comment.id, body="r1"),
                CascadeReply(cascade_comment_id=comment.id, body="r2"),
            ])
        db_session.commit()

        post.delete(commit=True)

        assert _count(db_session, CascadeComment, trashed=True) == 2
        assert _count(db_session, CascadeReply, trashed=True) == 4
        assert _count(db_session, CascadeReply, trashed=False) == 0

    def test_other_posts_untouched(self, db_session):
        """测试不影响其他文章的评论"""
        post = make_post(db_session, comments=2)
        other = make_post(db_session, comments=2, title="other")

        post.delete(commit=True)

        assert other.comments.count() == 2


class TestForceCascadeDelete:
    """永久删除级联"""

    def test_force_deletes_related(self, db_session, statements):
        """测试 {comments: 3, attachments: 0}：永久删除 3 条评论，空关联只做存在性检查"""
        post = make_post(db_session, comments=3)
        post_id = post.id
        statements.clear()

        assert post.force_delete(commit=True) is True

        assert _count(db_session, CascadeComment) == 0
        assert db_session.get(CascadePost, post_id) is None

        for table in ("test_cascade_attachments", "test_cascade_post_tags"):
            touching = [s for s in statements if table in s]
            assert len(touching) == 1
            assert "EXISTS" in touching[0].upper()
            assert not any(s.lstrip().upper().startswith(("DELETE", "UPDATE")) for s in touching)

        deletes = [s for s in statements if s.lstrip().upper().startswith("DELETE FROM TEST_CASCADE_COMMENTS")]
        assert deletes

    def test_force_delete_nested(self, db_session):
        """测试永久删除沿多级传播"""
        post = make_post(db_session, comments=1)
        comment = post.comments.first()
        db_session.add(CascadeReply(cascade_comment_id=comment.id))
        db_session.commit()

        post.force_delete(commit=True)

        assert _count(db_session, CascadeReply) == 0
        assert _count(db_session, CascadeComment) == 0

    def test_force_delete_skips_trashed_related(self, db_session):
        """测试永久删除只作用于未删除的相关记录"""
        post = make_post(db_session, comments=2)
        post.comments.first().delete(commit=True)

        post.force_delete(commit=True)

        assert _count(db_session, CascadeComment, trashed=True) == 1
        assert _count(db_session, CascadeComment, trashed=False) == 0


class TestPivotCascadeDelete:
    """多对多中间表"""

    def test_soft_deletes_pivot_not_target(self, db_session):
        """测试软删除文章时软删除中间表记录，标签保留"""
        post = make_post(db_session, tags=2)

        post.delete(commit=True)

        assert _count(db_session, CascadePostTag, trashed=True) == 2
        assert _count(db_session, CascadeTag, trashed=False) == 2
        assert post.tags.count() == 0

    def test_force_deletes_pivot_not_target(self, db_session):
        """测试永久删除文章时删除中间表记录，标签保留"""
        post = make_post(db_session, tags=2)

        post.force_delete(commit=True)

        assert _count(db_session, CascadePostTag) == 0
        assert _count(db_session, CascadeTag) == 2

    def test_plain_pivot_removed(self, db_session):
        """测试不支持软删除的中间表记录被直接删除，成员保留"""
        project = CascadeProject(name="p")
        alice = CascadeMember(name="alice")
        bob = CascadeMember(name="bob")
        db_session.add_all([project, alice, bob])
        db_session.flush()
        db_session.add_all([
            CascadeProjectMember(project_id=project.id, member_id=alice.id),
            CascadeProjectMember(project_id=project.id, member_id=bob.id, role="owner"),
        ])
        db_session.commit()

        project.delete(commit=True)

        assert project.is_deleted
        assert db_session.scalar(select(func.count()).select_from(CascadeProjectMember)) == 0
        assert _count(db_session, CascadeMember, trashed=False) == 2

    @pytest.mark.parametrize("fetch_method", ["get", "cursor", "lazy", "chunk"])
    def test_duplicate_plain_pivots_all_removed(self, db_session, monkeypatch, fetch_method):
        """测试同一成员经两条中间表记录关联时，两条中间表记录都被删除"""
        monkeypatch.setattr(CascadeProject, "__cascade_fetch_method__", fetch_method)
        monkeypatch.setattr(CascadeProject, "__cascade_chunk_size__", 2)

        project = CascadeProject(name="p")
        alice = CascadeMember(name="alice")
        db_session.add_all([project, alice])
        db_session.flush()
        db_session.add_all([
            CascadeProjectMember(project_id=project.id, member_id=alice.id),
            CascadeProjectMember(project_id=project.id, member_id=alice.id, role="owner"),
        ])
        db_session.commit()

        project.delete(commit=True)

        assert db_session.scalar(select(func.count()).select_from(CascadeProjectMember)) == 0
        assert _count(db_session, CascadeMember, trashed=False) == 1

    @pytest.mark.parametrize("fetch_method", ["get", "cursor", "lazy", "chunk"])
    def test_duplicate_soft_pivots_all_trashed(self, db_session, monkeypatch, fetch_method):
        """测试同一标签经两条中间表记录关联时，两条中间表记录都被软删除"""
        monkeypatch.setattr(CascadePost, "__cascade_fetch_method__", fetch_method)
        monkeypatch.setattr(CascadePost, "__cascade_chunk_size__", 2)

        post = make_post(db_session, tags=1)
        tag = post.tags.first()
        db_session.add(CascadePostTag(post_id=post.id, tag_id=tag.id))
        db_session.commit()

        post.delete(commit=True)

        assert _count(db_session, CascadePostTag, trashed=True) == 2
        assert _count(db_session, CascadePostTag, trashed=False) == 0
        assert _count(db_session, CascadeTag, trashed=False) == 1


class TestFetchMethods:
    """四种读取方式结果一致"""

    @pytest.mark.parametrize("fetch_method", ["get", "cursor", "lazy", "chunk"])
    def test_same_final_state(self, db_session, monkeypatch, fetch_method):
        monkeypatch.setattr(CascadePost, "__cascade_fetch_method__", fetch_method)
        monkeypatch.setattr(CascadePost, "__cascade_chunk_size__", 2)

        post = make_post(db_session, comments=5, attachments=3, tags=2)
        other = make_post(db_session, comments=1, title="other")

        post.delete(commit=True)

        assert post.comments.count() == 0
        assert post.comments.only_trashed().count() == 5
        assert post.attachments.only_trashed().count() == 3
        assert _count(db_session, CascadePostTag, trashed=True) == 2
        assert other.comments.count() == 1

    @pytest.mark.parametrize("fetch_method", ["get", "cursor", "lazy", "chunk"])
    def test_force_delete_same_final_state(self, db_session, monkeypatch, fetch_method):
        monkeypatch.setattr(CascadePost, "__cascade_fetch_method__", fetch_method)
        monkeypatch.setattr(CascadePost, "__cascade_chunk_size__", 2)

        post = make_post(db_session, comments=5, attachments=3)

        post.force_delete(commit=True)

        assert _count(db_session, CascadeComment) == 0
        assert _count(db_session, CascadeAttachment) == 0


class TestCascadeDeleteEngine:
    """执行器直接调用"""

    def test_active_cascading_deletes(self, db_session):
        """测试只返回非空的级联关联"""
        post = make_post(db_session, comments=1, tags=1)

        assert CascadeDeleteEngine().get_active_cascading_deletes(post) == ["comments", "tags"]
        assert post.get_active_cascading_deletes() == ["comments", "tags"]
        assert post.get_cascading_deletes() == ["comments", "tags", "attachments"]

    def test_explicit_iterator(self, db_session):
        """测试指定遍历器"""
        post = make_post(db_session, comments=3)
        CascadeDeleteEngine(ChunkIterator(chunk_size=1)).run_deletes(post)
        db_session.commit()

        assert post.comments.count() == 0
        # 执行器只处理相关记录，不删除父记录本身
        assert post.is_deleted is False
