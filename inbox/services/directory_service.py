"""User and listing lookups used to decorate conversation summaries."""

from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inbox.core.store_errors import store_error_handler
from inbox.models.listing import Listing
from inbox.models.user import User
from inbox.schemas.conversation import DisplayInfo

UNKNOWN_USER = DisplayInfo(name="Unknown user", avatar_url=None)


class UserDirectory(Protocol):
    async def get_display_info(self, user_id: UUID) -> DisplayInfo: ...


class ListingDirectory(Protocol):
    async def get_listing_title(self, listing_id: UUID) -> str | None: ...


class SqlUserDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_display_info(self, user_id: UUID) -> DisplayInfo:
        """Name and avatar for a user; a placeholder for unknown ids."""
        async with store_error_handler("get_display_info"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(User.full_name, User.avatar_url).where(User.id == user_id)
                )
                row = result.one_or_none()

        if row is None:
            return UNKNOWN_USER
        return DisplayInfo(name=row.full_name, avatar_url=row.avatar_url)


class SqlListingDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_listing_title(self, listing_id: UUID) -> str | None:
        """Title of a listing, or None if it no longer exists."""
        async with store_error_handler("get_listing_title"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Listing.title).where(Listing.id == listing_id)
                )
                return result.scalar_one_or_none()
