from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from inbox.api.deps import (
    get_current_user,
    get_listing_directory,
    get_message_store,
    get_user_directory,
)
from inbox.config import settings
from inbox.schemas.conversation import ConversationListResponse, UnreadCountResponse
from inbox.schemas.message import MessageResponse, MessageThreadResponse
from inbox.schemas.user import UserResponse
from inbox.services import conversation_service
from inbox.services.directory_service import SqlListingDirectory, SqlUserDirectory
from inbox.services.message_store import SqlMessageStore

router = APIRouter(prefix="", tags=["conversations"])

CurrentUser = Annotated[UserResponse, Depends(get_current_user)]
Store = Annotated[SqlMessageStore, Depends(get_message_store)]


@router.get("/", response_model=ConversationListResponse)
async def get_my_conversations(
    current_user: CurrentUser,
    store: Store,
    users: Annotated[SqlUserDirectory, Depends(get_user_directory)],
    listings: Annotated[SqlListingDirectory, Depends(get_listing_directory)],
    limit: int = Query(settings.CONVERSATION_PAGE_SIZE, le=settings.CONVERSATION_MAX_PAGE_SIZE),
    offset: int = Query(0),
) -> ConversationListResponse:
    """Inbox: one entry per conversation partner, most recent first."""
    conversations = await conversation_service.get_conversation_list(
        store, users, listings, current_user.id, limit, offset
    )
    return ConversationListResponse(
        conversations=conversations,
        limit=limit,
        offset=offset,
    )


# NOTE: Must be defined before /{partner_id}/messages
@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: CurrentUser,
    store: Store,
) -> UnreadCountResponse:
    """Total unread messages across all conversations."""
    count = await conversation_service.get_total_unread_count(store, current_user.id)
    return UnreadCountResponse(count=count)


@router.get("/{partner_id}/messages", response_model=MessageThreadResponse)
async def get_conversation_messages(
    partner_id: UUID,
    current_user: CurrentUser,
    store: Store,
    limit: int = Query(
        conversation_service.DEFAULT_THREAD_PAGE_SIZE,
        le=settings.CONVERSATION_MAX_PAGE_SIZE,
    ),
    offset: int = Query(0),
    listing_id: UUID | None = None,
) -> MessageThreadResponse:
    """Messages exchanged with one partner, oldest first."""
    messages = await conversation_service.get_conversation_messages(
        store, current_user.id, partner_id, limit, offset, listing_id
    )
    return MessageThreadResponse(
        partner_id=partner_id,
        messages=[MessageResponse.model_validate(m) for m in messages],
        limit=limit,
        offset=offset,
    )
