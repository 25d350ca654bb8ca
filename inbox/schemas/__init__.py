from inbox.schemas.conversation import (
    ConversationListResponse,
    ConversationSummary,
    DisplayInfo,
    UnreadCountResponse,
)
from inbox.schemas.message import (
    MessageFilter,
    MessageResponse,
    MessageThreadResponse,
)
from inbox.schemas.user import TokenPayload, UserResponse

__all__ = [
    "UserResponse",
    "TokenPayload",
    "MessageFilter",
    "MessageResponse",
    "MessageThreadResponse",
    "DisplayInfo",
    "ConversationSummary",
    "ConversationListResponse",
    "UnreadCountResponse",
]
