from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    APP_NAME: str = "Marketplace Inbox"
    CORS_ORIGINS: str = ""

    LOG_LEVEL: str = "INFO"
    SQLALCHEMY_ECHO: bool = False

    # Conversation list
    CONVERSATION_PAGE_SIZE: int = 20
    CONVERSATION_MAX_PAGE_SIZE: int = 100
    # "bulk" trades exactness of the first pass for fewer round trips
    CONVERSATION_LATEST_STRATEGY: Literal["per_partner", "bulk"] = "per_partner"
    CONVERSATION_BULK_FETCH_MULTIPLIER: int = 20
    CONVERSATION_FANOUT_LIMIT: int = 10

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
