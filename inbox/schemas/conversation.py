"""Conversation list schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DisplayInfo(BaseModel):
    """Public name and avatar of a user."""
    name: str
    avatar_url: str | None = None


class ConversationSummary(BaseModel):
    """One entry of the inbox: a partner and the latest message exchanged."""
    partner_id: UUID
    partner_display_name: str
    partner_avatar_url: str | None
    last_message_text: str
    last_message_at: datetime
    last_message_sender_id: UUID
    unread_count: int
    # Listing referenced by the latest message
    listing_id: UUID | None = None
    listing_title: str | None = None


class ConversationListResponse(BaseModel):
    """Page of conversations, most recent first"""

    conversations: list[ConversationSummary]
    limit: int
    offset: int


class UnreadCountResponse(BaseModel):
    """Unread messages count."""
    count: int
