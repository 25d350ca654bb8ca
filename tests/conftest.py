import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from inbox.database import Base, get_db, get_session_factory
from inbox.main import app
from inbox.models import Listing, Message, User
from inbox.services.directory_service import SqlListingDirectory, SqlUserDirectory
from inbox.services.message_store import SqlMessageStore

# Naive UTC timestamps: SQLite drops tzinfo on the way back
T0 = datetime(2026, 1, 7, 12, 0, 0)


def at(minutes: int) -> datetime:
    """Timestamp ``minutes`` after T0."""
    return T0 + timedelta(minutes=minutes)


def make_session_factory(db_path: Path) -> tuple:
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory


class InboxFactory:
    """Writes users, listings and messages straight to the test database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._user_seq = 0

    async def _save(self, obj):
        async with self._session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def user(self, full_name: str, avatar_url: str | None = None) -> User:
        self._user_seq += 1
        return await self._save(
            User(
                email=f"user{self._user_seq}@example.com",
                full_name=full_name,
                avatar_url=avatar_url,
            )
        )

    async def listing(self, seller: User, title: str) -> Listing:
        return await self._save(Listing(seller_id=seller.id, title=title))

    async def message(
        self,
        sender: User,
        recipient: User,
        created_at: datetime,
        content: str = "Hello",
        *,
        read: bool = False,
        deleted: bool = False,
        listing: Listing | None = None,
    ) -> Message:
        return await self._save(
            Message(
                sender_id=sender.id,
                recipient_id=recipient.id,
                content=content,
                created_at=created_at,
                is_read_by_recipient=read,
                is_deleted=deleted,
                listing_id=listing.id if listing else None,
            )
        )

    async def soft_delete(self, message_id: UUID) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Message).where(Message.id == message_id).values(is_deleted=True)
            )
            await session.commit()


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine, factory = make_session_factory(tmp_path / "inbox.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def factory(session_factory) -> InboxFactory:
    return InboxFactory(session_factory)


@pytest_asyncio.fixture
async def store(session_factory) -> SqlMessageStore:
    return SqlMessageStore(session_factory)


@pytest_asyncio.fixture
async def users(session_factory) -> SqlUserDirectory:
    return SqlUserDirectory(session_factory)


@pytest_asyncio.fixture
async def listings(session_factory) -> SqlListingDirectory:
    return SqlListingDirectory(session_factory)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
