"""Shared fixtures: in-memory SQLite document store and an app bound to it."""
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.api.main import create_app
from marketplace.config import Settings
from marketplace.infrastructure.database.connection import (
    create_engine,
    create_schema,
    create_session_factory,
)
from marketplace.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from marketplace.infrastructure.database.repositories.tag_repository import (
    SqlAlchemyTagRepository,
)
from marketplace.infrastructure.database.repositories.user_repository import (
    SqlAlchemyUserRepository,
)


def make_settings(**overrides) -> Settings:  # type: ignore[no-untyped-def]
    defaults = dict(
        database_url="sqlite+aiosqlite://",
        create_schema_on_startup=True,
        log_json=False,
        log_level="WARNING",
        default_page_size=2,
        max_page_size=5,
    )
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest_asyncio.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_engine("sqlite+aiosqlite://")
    await create_schema(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture()
def user_repo(session_factory: async_sessionmaker[AsyncSession]) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(session_factory)


@pytest.fixture()
def listing_repo(
    session_factory: async_sessionmaker[AsyncSession],
) -> SqlAlchemyListingRepository:
    return SqlAlchemyListingRepository(session_factory, default_page_size=2, max_page_size=5)


@pytest.fixture()
def tag_repo(session_factory: async_sessionmaker[AsyncSession]) -> SqlAlchemyTagRepository:
    return SqlAlchemyTagRepository(session_factory)


@pytest.fixture()
def app() -> FastAPI:
    return create_app(make_settings())


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    # Entering the client runs the lifespan, which builds the store
    with TestClient(app) as test_client:
        yield test_client
