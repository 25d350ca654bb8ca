"""
Conversation list built from the flat message table.

Storage has no conversation entity: a conversation is every non-deleted
message between two users, in either direction. The list is computed on
each request by discovering partners, selecting the latest message and
counting unread messages per partner (fanned out concurrently), then
ordering and paginating the assembled summaries.
"""

import logging
from typing import Iterable, Literal
from uuid import UUID

from inbox.config import settings
from inbox.core.concurrency import fan_out
from inbox.core.exceptions import NotFoundError, OutOfRangeError, StoreUnavailableError
from inbox.models.message import Message
from inbox.schemas.conversation import ConversationSummary
from inbox.schemas.message import MessageFilter
from inbox.services.directory_service import ListingDirectory, UserDirectory
from inbox.services.message_store import MessageStore

logger = logging.getLogger(__name__)

Strategy = Literal["per_partner", "bulk"]

DEFAULT_PAGE_SIZE = 20
DEFAULT_THREAD_PAGE_SIZE = 50


def _validate_page(limit: int, offset: int) -> None:
    """Reject bad paging arguments instead of clamping them."""
    if limit < 1:
        raise OutOfRangeError("limit must be at least 1", field="limit", minimum=1)
    if offset < 0:
        raise OutOfRangeError("offset must not be negative", field="offset", minimum=0)


def _validate_fetch_multiplier(fetch_multiplier: int) -> None:
    if fetch_multiplier < 1:
        raise OutOfRangeError(
            "fetch_multiplier must be at least 1", field="fetch_multiplier", minimum=1
        )


def _unique_partners(user_id: UUID, partner_ids: Iterable[UUID]) -> list[UUID]:
    """Deduplicate partner ids, preserving order and dropping the user."""
    return [p for p in dict.fromkeys(partner_ids) if p != user_id]


def _partner_of(message: Message, user_id: UUID) -> UUID:
    if message.sender_id == user_id:
        return message.recipient_id
    return message.sender_id


# ============== Partner discovery ==============


async def discover_partners(store: MessageStore, user_id: UUID) -> set[UUID]:
    """Everyone the user has exchanged at least one non-deleted message with."""
    received_from = await store.distinct_values(
        "sender_id", MessageFilter(recipient_id=user_id)
    )
    sent_to = await store.distinct_values(
        "recipient_id", MessageFilter(sender_id=user_id)
    )

    partners = received_from | sent_to
    partners.discard(user_id)
    return partners


# ============== Latest message ==============


async def latest_message(
    store: MessageStore,
    user_id: UUID,
    partner_id: UUID,
) -> Message | None:
    """Most recent non-deleted message between two users, by (created_at, id)."""
    if partner_id == user_id:
        return None

    messages = await store.find_messages(
        MessageFilter(between=(user_id, partner_id), limit=1)
    )
    return messages[0] if messages else None


async def _sample_latest(
    store: MessageStore,
    user_id: UUID,
    partners: list[UUID],
    fetch_multiplier: int,
) -> tuple[dict[UUID, Message], bool]:
    """
    First message per partner in the user's newest messages.

    The sample is a prefix of the user's full (created_at desc, id desc)
    stream, so a partner found in it always gets their true latest message.
    Returns the map and whether the sample covered the whole history.
    """
    wanted = set(partners)
    sample_size = len(partners) * fetch_multiplier
    sample = await store.find_messages(
        MessageFilter(involving=user_id, limit=sample_size)
    )

    latest: dict[UUID, Message] = {}
    for message in sample:
        partner_id = _partner_of(message, user_id)
        if partner_id in wanted and partner_id not in latest:
            latest[partner_id] = message
            if len(latest) == len(wanted):
                break

    complete = len(sample) < sample_size
    if not complete and len(latest) < len(wanted):
        logger.warning(
            "Bulk sample of %d messages for user %s missed %d of %d partners; "
            "falling back to per-partner queries",
            sample_size,
            user_id,
            len(wanted) - len(latest),
            len(wanted),
        )
    return latest, complete


async def latest_messages_for_partners(
    store: MessageStore,
    user_id: UUID,
    partner_ids: Iterable[UUID],
    *,
    strategy: Strategy = "per_partner",
    fetch_multiplier: int = 20,
    concurrency: int = 10,
) -> dict[UUID, Message]:
    """
    Latest message for each partner; same result as calling latest_message
    for every partner.

    per_partner: one query per partner, fanned out. Exact, O(P) round trips.
    bulk: one sampled query over the user's newest messages, then
    per-partner queries only for partners the sample missed.
    """
    partners = _unique_partners(user_id, partner_ids)
    if not partners:
        return {}

    latest: dict[UUID, Message] = {}
    if strategy == "bulk":
        _validate_fetch_multiplier(fetch_multiplier)
        latest, complete = await _sample_latest(store, user_id, partners, fetch_multiplier)
        if complete:
            return latest

    missing = [p for p in partners if p not in latest]
    if missing:
        found = await fan_out(
            missing,
            lambda partner_id: latest_message(store, user_id, partner_id),
            limit=concurrency,
        )
        latest.update({p: m for p, m in zip(missing, found) if m is not None})

    return latest


# ============== Unread counts ==============


async def unread_count(
    store: MessageStore,
    user_id: UUID,
    partner_id: UUID,
) -> int:
    """Unread, non-deleted messages the partner sent to the user."""
    if partner_id == user_id:
        return 0

    return await store.count_messages(
        MessageFilter(
            sender_id=partner_id,
            recipient_id=user_id,
            is_read_by_recipient=False,
        )
    )


async def unread_counts_for_partners(
    store: MessageStore,
    user_id: UUID,
    partner_ids: Iterable[UUID],
    *,
    strategy: Strategy = "per_partner",
    concurrency: int = 10,
) -> dict[UUID, int]:
    """Unread count per partner; partners with nothing unread map to 0."""
    partners = _unique_partners(user_id, partner_ids)
    if not partners:
        return {}

    if strategy == "bulk":
        tally = await store.count_by(
            "sender_id",
            MessageFilter(
                recipient_id=user_id,
                sender_ids=frozenset(partners),
                is_read_by_recipient=False,
            ),
        )
        return {p: tally.get(p, 0) for p in partners}

    counts = await fan_out(
        partners,
        lambda partner_id: unread_count(store, user_id, partner_id),
        limit=concurrency,
    )
    return dict(zip(partners, counts))


async def get_total_unread_count(store: MessageStore, user_id: UUID) -> int:
    """All unread, non-deleted messages addressed to the user."""
    return await store.count_messages(
        MessageFilter(recipient_id=user_id, is_read_by_recipient=False)
    )


# ============== Assembly and pagination ==============


async def assemble(
    store: MessageStore,
    users: UserDirectory,
    listings: ListingDirectory,
    user_id: UUID,
    partner_ids: Iterable[UUID],
    *,
    strategy: Strategy = "per_partner",
    fetch_multiplier: int = 20,
    concurrency: int = 10,
) -> list[ConversationSummary]:
    """
    One summary per partner, in no particular order.

    Partners whose latest message vanished since discovery are skipped.
    A failed lookup for one partner drops that partner only; a
    StoreUnavailableError aborts the whole call.
    """
    partners = _unique_partners(user_id, partner_ids)
    if not partners:
        return []

    latest_map: dict[UUID, Message] = {}
    unread_map: dict[UUID, int] = {}
    sample_complete = False
    if strategy == "bulk":
        _validate_fetch_multiplier(fetch_multiplier)
        sampled, unread_map = await fan_out(
            [
                lambda: _sample_latest(store, user_id, partners, fetch_multiplier),
                lambda: unread_counts_for_partners(store, user_id, partners, strategy="bulk"),
            ],
            lambda query: query(),
            limit=2,
        )
        latest_map, sample_complete = sampled

    async def summarize(partner_id: UUID) -> ConversationSummary | None:
        if strategy == "bulk":
            message = latest_map.get(partner_id)
            # Partners missing from an incomplete sample get their own lookup
            if message is None and not sample_complete:
                message = await latest_message(store, user_id, partner_id)
        else:
            message = await latest_message(store, user_id, partner_id)
        if message is None:
            logger.debug("No live messages left with %s for user %s", partner_id, user_id)
            return None

        if strategy == "bulk":
            count = unread_map.get(partner_id, 0)
        else:
            count = await unread_count(store, user_id, partner_id)

        info = await users.get_display_info(partner_id)

        listing_title = None
        if message.listing_id is not None:
            listing_title = await listings.get_listing_title(message.listing_id)

        return ConversationSummary(
            partner_id=partner_id,
            partner_display_name=info.name,
            partner_avatar_url=info.avatar_url,
            last_message_text=message.content,
            last_message_at=message.created_at,
            last_message_sender_id=message.sender_id,
            unread_count=count,
            listing_id=message.listing_id,
            listing_title=listing_title,
        )

    async def summarize_or_drop(partner_id: UUID) -> ConversationSummary | None:
        try:
            return await summarize(partner_id)
        except StoreUnavailableError:
            raise
        except Exception:
            logger.warning(
                "Dropping conversation with %s for user %s after failed lookup",
                partner_id,
                user_id,
                exc_info=True,
            )
            return None

    summaries = await fan_out(partners, summarize_or_drop, limit=concurrency)
    return [summary for summary in summaries if summary is not None]


def paginate(
    summaries: Iterable[ConversationSummary],
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[ConversationSummary]:
    """Order by last_message_at desc (partner_id asc on ties) and slice."""
    _validate_page(limit, offset)

    ordered = sorted(summaries, key=lambda s: s.partner_id)
    ordered.sort(key=lambda s: s.last_message_at, reverse=True)
    return ordered[offset:offset + limit]


async def get_conversation_list(
    store: MessageStore,
    users: UserDirectory,
    listings: ListingDirectory,
    user_id: UUID,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    *,
    strategy: Strategy | None = None,
    fetch_multiplier: int | None = None,
    concurrency: int | None = None,
) -> list[ConversationSummary]:
    """
    Inbox for a user: one summary per partner, most recent first.

    Grouping happens before pagination, so every page holds up to ``limit``
    distinct partners and no partner appears on two pages.
    """
    _validate_page(limit, offset)
    if strategy is None:
        strategy = settings.CONVERSATION_LATEST_STRATEGY
    if fetch_multiplier is None:
        fetch_multiplier = settings.CONVERSATION_BULK_FETCH_MULTIPLIER
    if concurrency is None:
        concurrency = settings.CONVERSATION_FANOUT_LIMIT
    if strategy == "bulk":
        _validate_fetch_multiplier(fetch_multiplier)

    partners = await discover_partners(store, user_id)
    if not partners:
        return []

    summaries = await assemble(
        store,
        users,
        listings,
        user_id,
        partners,
        strategy=strategy,
        fetch_multiplier=fetch_multiplier,
        concurrency=concurrency,
    )
    page = paginate(summaries, limit, offset)

    logger.debug(
        "Conversation list for user %s: %d partners, %d assembled, %d returned",
        user_id,
        len(partners),
        len(summaries),
        len(page),
    )
    return page


# ============== Thread ==============


async def get_conversation_messages(
    store: MessageStore,
    user_id: UUID,
    partner_id: UUID,
    limit: int = DEFAULT_THREAD_PAGE_SIZE,
    offset: int = 0,
    listing_id: UUID | None = None,
) -> list[Message]:
    """Non-deleted messages between two users, oldest first."""
    _validate_page(limit, offset)
    if partner_id == user_id:
        raise NotFoundError("Conversation not found", resource="conversation")

    messages = await store.find_messages(
        MessageFilter(
            between=(user_id, partner_id),
            listing_id=listing_id,
            newest_first=False,
            limit=limit,
            offset=offset,
        )
    )
    if not messages:
        total = await store.count_messages(MessageFilter(between=(user_id, partner_id)))
        if total == 0:
            raise NotFoundError("Conversation not found", resource="conversation")
    return messages
