"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


DEFAULT_JWT_SECRET = "change-me-to-a-long-random-secret-value"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Storage: "memory" keeps everything in-process (dev/tests), "blob" uses Azure
    storage_backend: Literal["memory", "blob"] = "memory"

    # Azure Blob Storage
    azure_storage_account: str = "blogpressstorage"
    azure_storage_container: str = "blogpress"
    blog_data_blob: str = "blog-data.json"

    # Azure User-Assigned Managed Identity
    managed_identity_client_id: str = ""

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_issuer: str = "blogpress"
    jwt_algorithm: str = "HS256"
    access_token_minutes: int = 60 * 24 * 7

    # "direct" removes only immediate replies, "subtree" removes every descendant
    comment_delete_cascade: Literal["direct", "subtree"] = "direct"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
