from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "chatpresence"
    # unset -> typing events are delivered through the in-process ConnectionManager
    redis_url: Optional[str] = None
    log_level: str = "INFO"


settings = Settings()
