from typing import AsyncIterator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from table_engine.core.db import Base, get_async_session
from table_engine.main import app
from table_engine.repositories.table import table_repository
from table_engine.schemas.table import TableCreate, TableData
from table_engine.utils.enums import TableType


@pytest.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker]:
    engine = create_async_engine(
        f'sqlite+aiosqlite:///{tmp_path / "table_engine.db"}',
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def restaurant_id():
    return uuid4()


@pytest.fixture
def create_table(session, restaurant_id):
    async def _create(number: str, capacity: int, **kwargs) -> TableData:
        table = await table_repository.create(
            TableCreate(
                restaurant_id=kwargs.pop('restaurant_id', restaurant_id),
                number=number,
                capacity=capacity,
                **kwargs,
            ),
            session,
        )
        return TableData.model_validate(table)

    return _create


@pytest.fixture
async def dining_room(create_table):
    """Зал: два стола на четверых, стол на шестерых и общий стол."""
    return {
        'T1': await create_table('T1', 4, min_capacity=2),
        'T2': await create_table('T2', 4),
        'T3': await create_table('T3', 6, min_capacity=4),
        'T5': await create_table(
            'T5',
            10,
            table_type=TableType.SHARED,
            max_party_size_per_booking=6,
        ),
    }


@pytest.fixture
async def client(session_factory) -> AsyncIterator[AsyncClient]:
    async def override_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url='http://test',
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()
