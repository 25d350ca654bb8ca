"""Read-only access to the message table."""

from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inbox.core.store_errors import store_error_handler
from inbox.models.message import Message
from inbox.schemas.message import MessageField, MessageFilter


class MessageStore(Protocol):
    """Query shapes the conversation engine needs from message storage."""

    async def find_messages(self, message_filter: MessageFilter) -> list[Message]: ...

    async def count_messages(self, message_filter: MessageFilter) -> int: ...

    async def distinct_values(
        self, field: MessageField, message_filter: MessageFilter
    ) -> set[UUID]: ...

    async def count_by(
        self, field: MessageField, message_filter: MessageFilter
    ) -> dict[UUID, int]: ...


def _conditions(message_filter: MessageFilter) -> list[Any]:
    """Translate a MessageFilter into SQLAlchemy WHERE clauses."""
    f = message_filter
    conditions: list[Any] = []

    if f.sender_id is not None:
        conditions.append(Message.sender_id == f.sender_id)
    if f.recipient_id is not None:
        conditions.append(Message.recipient_id == f.recipient_id)
    if f.sender_ids is not None:
        conditions.append(Message.sender_id.in_(sorted(f.sender_ids)))
    if f.recipient_ids is not None:
        conditions.append(Message.recipient_id.in_(sorted(f.recipient_ids)))
    if f.between is not None:
        user_a, user_b = f.between
        conditions.append(
            or_(
                and_(Message.sender_id == user_a, Message.recipient_id == user_b),
                and_(Message.sender_id == user_b, Message.recipient_id == user_a),
            )
        )
    if f.involving is not None:
        conditions.append(
            or_(Message.sender_id == f.involving, Message.recipient_id == f.involving)
        )
    if f.listing_id is not None:
        conditions.append(Message.listing_id == f.listing_id)
    if f.is_deleted is not None:
        conditions.append(Message.is_deleted == f.is_deleted)
    if f.is_read_by_recipient is not None:
        conditions.append(Message.is_read_by_recipient == f.is_read_by_recipient)

    return conditions


class SqlMessageStore:
    """
    MessageStore backed by SQLAlchemy.

    Every call opens its own session from the factory, so calls issued
    concurrently from different tasks never share a connection.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_messages(self, message_filter: MessageFilter) -> list[Message]:
        """Messages matching the filter, ordered by (created_at, id)."""
        if message_filter.newest_first:
            ordering = (Message.created_at.desc(), Message.id.desc())
        else:
            ordering = (Message.created_at.asc(), Message.id.asc())

        query = (
            select(Message)
            .where(*_conditions(message_filter))
            .order_by(*ordering)
            .offset(message_filter.offset)
        )
        if message_filter.limit is not None:
            query = query.limit(message_filter.limit)

        async with store_error_handler("find_messages"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())

    async def count_messages(self, message_filter: MessageFilter) -> int:
        """Number of messages matching the filter. Ordering and paging are ignored."""
        query = select(func.count(Message.id)).where(*_conditions(message_filter))

        async with store_error_handler("count_messages"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return result.scalar() or 0

    async def distinct_values(
        self, field: MessageField, message_filter: MessageFilter
    ) -> set[UUID]:
        """Distinct sender or recipient ids among matching messages."""
        column = getattr(Message, field)
        query = select(column).where(*_conditions(message_filter)).distinct()

        async with store_error_handler("distinct_values"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return set(result.scalars().all())

    async def count_by(
        self, field: MessageField, message_filter: MessageFilter
    ) -> dict[UUID, int]:
        """Matching message counts grouped by sender or recipient id."""
        column = getattr(Message, field)
        query = (
            select(column, func.count(Message.id))
            .where(*_conditions(message_filter))
            .group_by(column)
        )

        async with store_error_handler("count_by"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return {value: count for value, count in result.all()}
