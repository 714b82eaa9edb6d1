import asyncio

import pytest
from sqlalchemy import event, inspect

import services.school_directory.models  # noqa: F401  registers the schools table
from shared.config import Settings
from shared.db import Base, ConnectionProvider, ProviderState, StorageUnavailableError


@pytest.fixture
def create_calls():
    calls = []

    def on_create(target, connection, **kw):
        calls.append(connection)

    event.listen(Base.metadata, "before_create", on_create)
    yield calls
    event.remove(Base.metadata, "before_create", on_create)


def test_concurrent_first_acquire_builds_one_pool(provider, create_calls, monkeypatch):
    built = []
    original = ConnectionProvider._create_engine

    def counting_create_engine(self):
        engine = original(self)
        built.append(engine)
        return engine

    monkeypatch.setattr(ConnectionProvider, "_create_engine", counting_create_engine)

    async def scenario():
        try:
            return await asyncio.gather(*(provider.acquire() for _ in range(20)))
        finally:
            await provider.release()

    engines = asyncio.run(scenario())

    assert len(engines) == 20
    assert all(engine is engines[0] for engine in engines)
    assert len(built) == 1
    assert len(create_calls) == 1


def test_acquire_creates_schools_table(provider):
    async def scenario():
        engine = await provider.acquire()
        try:
            async with engine.connect() as conn:
                return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        finally:
            await provider.release()

    assert "schools" in asyncio.run(scenario())


def test_acquire_is_idempotent_until_released(provider, create_calls):
    async def scenario():
        first = await provider.acquire()
        second = await provider.acquire()
        await provider.release()
        third = await provider.acquire()
        await provider.release()
        return first, second, third

    first, second, third = asyncio.run(scenario())

    assert first is second
    assert third is not first
    assert len(create_calls) == 2


def test_failed_start_can_be_retried(tmp_path):
    db_dir = tmp_path / "data"
    connections = ConnectionProvider(
        Settings(database_url=f"sqlite+aiosqlite:///{db_dir / 'schools.db'}")
    )

    async def first_attempt():
        with pytest.raises(StorageUnavailableError):
            await connections.acquire()

    asyncio.run(first_attempt())
    assert connections.state is ProviderState.FAILED

    db_dir.mkdir()

    async def second_attempt():
        try:
            await connections.acquire()
            return connections.state
        finally:
            await connections.release()

    assert asyncio.run(second_attempt()) is ProviderState.READY
    assert connections.state is ProviderState.UNINITIALIZED


def test_release_without_pool_is_a_no_op(provider):
    asyncio.run(provider.release())

    assert provider.state is ProviderState.UNINITIALIZED


def test_bad_database_url_fails_cleanly():
    connections = ConnectionProvider(Settings(database_url="nosuchdialect://user@host/schools"))

    async def scenario():
        with pytest.raises(StorageUnavailableError):
            await connections.acquire()

    asyncio.run(scenario())

    assert connections.state is ProviderState.FAILED
