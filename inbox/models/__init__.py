from inbox.models.listing import Listing
from inbox.models.message import Message
from inbox.models.user import User

__all__ = [
    "User",
    "Listing",
    "Message",
]
