"""Message schemas for store queries and API responses."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

MessageField = Literal["sender_id", "recipient_id"]


class MessageFilter(BaseModel):
    """
    Read filter understood by every message store.

    Equality/membership on participants and flags, ordering by
    (created_at, id) and limit/offset. ``between`` matches both directions
    of an unordered pair; ``involving`` matches messages sent or received
    by one user.
    """

    sender_id: UUID | None = None
    recipient_id: UUID | None = None
    sender_ids: frozenset[UUID] | None = None
    recipient_ids: frozenset[UUID] | None = None
    between: tuple[UUID, UUID] | None = None
    involving: UUID | None = None
    listing_id: UUID | None = None

    # None means "either value"
    is_deleted: bool | None = False
    is_read_by_recipient: bool | None = None

    newest_first: bool = True
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_pair(self) -> "MessageFilter":
        if self.between is not None and self.between[0] == self.between[1]:
            raise ValueError("between requires two distinct users")
        return self


class MessageResponse(BaseModel):
    """Message in a conversation thread."""
    id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    listing_id: UUID | None
    is_read_by_recipient: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageThreadResponse(BaseModel):
    """Page of a conversation thread, oldest first."""
    partner_id: UUID
    messages: list[MessageResponse]
    limit: int
    offset: int
