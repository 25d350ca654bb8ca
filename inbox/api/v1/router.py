from fastapi import APIRouter

from inbox.api.v1.endpoints import conversations

router = APIRouter()

router.include_router(conversations.router, prefix="/conversations")
