"""任务存储测试用例"""

import asyncio
import uuid

import pytest

from taskboard.models.task import TaskCreate, TaskStatus, TaskUpdate
from taskboard.storage.sql_store import SqlTaskStore
from taskboard.storage.task_store import InMemoryTaskStore

from .fakes import FixedDateClock


@pytest.fixture(params=["memory", "sql"])
def make_store(request, tmp_path):
    """同时覆盖内存存储与 SQLite 存储"""
    created = []

    def factory(clock):
        if request.param == "memory":
            store = InMemoryTaskStore(clock=clock)
        else:
            database_url = f"sqlite:///{tmp_path / f'tasks-{len(created)}.db'}"
            store = SqlTaskStore(database_url, max_workers=2, clock=clock)
        created.append(store)
        return store

    yield factory

    for store in created:
        if isinstance(store, SqlTaskStore):
            asyncio.run(store.close())


class TestTaskStore:
    """测试存储的增删改查语义"""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, make_store):
        clock = FixedDateClock()
        store = make_store(clock)

        task = await store.create(TaskCreate(title="Buy milk"))

        assert uuid.UUID(task.id).version == 4
        assert task.status == TaskStatus.PENDING
        assert task.description == ""
        assert task.created_at == clock.now
        assert task.updated_at == task.created_at

    @pytest.mark.asyncio
    async def test_get_returns_created_task(self, make_store):
        store = make_store(FixedDateClock())
        task = await store.create(TaskCreate(title="t", description="d", status=TaskStatus.COMPLETED))

        assert await store.get(task.id) == task

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self, make_store):
        store = make_store(FixedDateClock())
        assert await store.get(str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, make_store):
        clock = FixedDateClock()
        store = make_store(clock)

        a = await store.create(TaskCreate(title="A"))
        clock.advance(1)
        b = await store.create(TaskCreate(title="B"))
        clock.advance(1)
        c = await store.create(TaskCreate(title="C"))

        assert [task.id for task in await store.list_all()] == [c.id, b.id, a.id]

    @pytest.mark.asyncio
    async def test_list_ties_broken_by_insertion_order(self, make_store):
        store = make_store(FixedDateClock())

        a = await store.create(TaskCreate(title="A"))
        b = await store.create(TaskCreate(title="B"))
        c = await store.create(TaskCreate(title="C"))

        assert [task.id for task in await store.list_all()] == [c.id, b.id, a.id]

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self, make_store):
        clock = FixedDateClock()
        store = make_store(clock)
        task = await store.create(TaskCreate(title="Original", description="keep me"))

        clock.advance(5)
        updated = await store.update(task.id, TaskUpdate(status=TaskStatus.COMPLETED))

        assert updated.title == "Original"
        assert updated.description == "keep me"
        assert updated.status == TaskStatus.COMPLETED
        assert updated.created_at == task.created_at
        assert updated.updated_at == clock.now
        assert await store.get(task.id) == updated

    @pytest.mark.asyncio
    async def test_update_never_precedes_creation(self, make_store):
        clock = FixedDateClock()
        store = make_store(clock)
        task = await store.create(TaskCreate(title="t"))

        # 时钟回拨
        clock.advance(-60)
        updated = await store.update(task.id, TaskUpdate(title="u"))

        assert updated.updated_at == task.created_at
        assert updated.created_at <= updated.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_returns_none(self, make_store):
        store = make_store(FixedDateClock())
        assert await store.update(str(uuid.uuid4()), TaskUpdate(title="x")) is None

    @pytest.mark.asyncio
    async def test_delete(self, make_store):
        store = make_store(FixedDateClock())
        task = await store.create(TaskCreate(title="gone"))

        assert await store.delete(task.id) is True
        assert await store.get(task.id) is None
        assert await store.delete(task.id) is False
        assert await store.list_all() == []
