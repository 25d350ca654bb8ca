from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inbox.core.security import decode_access_token
from inbox.database import get_db, get_session_factory
from inbox.models.user import User
from inbox.schemas.user import UserResponse
from inbox.services.directory_service import SqlListingDirectory, SqlUserDirectory
from inbox.services.message_store import SqlMessageStore

# Tokens are issued by the accounts service
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exception

    return UserResponse.model_validate(user)


def get_message_store(session_factory: SessionFactory) -> SqlMessageStore:
    return SqlMessageStore(session_factory)


def get_user_directory(session_factory: SessionFactory) -> SqlUserDirectory:
    return SqlUserDirectory(session_factory)


def get_listing_directory(session_factory: SessionFactory) -> SqlListingDirectory:
    return SqlListingDirectory(session_factory)
