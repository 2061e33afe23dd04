"""Document store holding every user, post and comment.

The blog is persisted as a single JSON document (``BlogData``). Reads work on a
snapshot; writes go through ``transaction()``, which saves the mutated snapshot
with a compare-and-swap against the version it was read at. A request that
loses a race gets ``ConflictError`` rather than overwriting the other write,
and an exception raised inside the transaction means nothing is saved.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential
from azure.storage.blob import ContainerClient, ContentSettings
from pydantic import BaseModel

from blogpress.config import get_settings
from blogpress.errors import ConflictError
from blogpress.models.comment import Comment
from blogpress.models.common import AuthorSummary
from blogpress.models.post import Post
from blogpress.models.user import User

logger = logging.getLogger(__name__)

JSON_CONTENT = ContentSettings(content_type="application/json")

_CONFLICT_MESSAGE = "The resource was modified by another request. Please retry."


class BlogData(BaseModel):
    """Everything the blog stores, keyed by id."""

    users: dict[str, User] = {}
    posts: dict[str, Post] = {}
    comments: dict[str, Comment] = {}

    def author_summary(self, user_id: str, with_bio: bool = False) -> AuthorSummary:
        user = self.users.get(user_id)
        if user is None:
            return AuthorSummary(id=user_id, username="[deleted]")
        return AuthorSummary(
            id=user.id,
            username=user.username,
            avatar=user.avatar,
            bio=user.bio if with_bio else None,
        )

    def find_user(self, login: str) -> User | None:
        """Look a user up by username or email (case-insensitive)."""
        login = login.strip().lower()
        for user in self.users.values():
            if user.username.lower() == login or user.email.lower() == login:
                return user
        return None


class DocumentStore(Protocol):
    async def load(self) -> tuple[BlogData, str | None]:
        """Return the current document and its version tag (None if never saved)."""
        ...

    async def save(self, data: BlogData, etag: str | None) -> str:
        """Persist ``data`` if the stored version still matches ``etag``."""
        ...

    def check_connectivity(self) -> bool: ...


class MemoryDocumentStore:
    """In-process store for local development and tests.

    Keeps the serialized document so every load hands out an independent copy.
    """

    def __init__(self) -> None:
        self._raw: str | None = None
        self._version = 0

    async def load(self) -> tuple[BlogData, str | None]:
        if self._raw is None:
            return BlogData(), None
        return BlogData.model_validate_json(self._raw), str(self._version)

    async def save(self, data: BlogData, etag: str | None) -> str:
        current = None if self._raw is None else str(self._version)
        if etag != current:
            raise ConflictError(_CONFLICT_MESSAGE)
        self._raw = data.model_dump_json()
        self._version += 1
        return str(self._version)

    def check_connectivity(self) -> bool:
        return True


class BlobDocumentStore:
    """Azure Blob Storage backend using blob ETags for conditional writes."""

    def __init__(self, container: ContainerClient, blob_name: str) -> None:
        self._container = container
        self._blob_name = blob_name

    async def load(self) -> tuple[BlogData, str | None]:
        blob = self._container.get_blob_client(self._blob_name)
        try:
            downloader = blob.download_blob()
            raw = downloader.readall()
            etag = downloader.properties.etag
        except ResourceNotFoundError:
            return BlogData(), None
        except HttpResponseError as e:
            logger.warning("Azure API error reading %s: %s", self._blob_name, e.message)
            raise
        return BlogData.model_validate_json(raw), etag

    async def save(self, data: BlogData, etag: str | None) -> str:
        blob = self._container.get_blob_client(self._blob_name)
        payload = data.model_dump_json()
        try:
            if etag is None:
                # First write: only succeeds if nobody created the blob meanwhile
                result = blob.upload_blob(
                    payload, overwrite=False, content_settings=JSON_CONTENT
                )
            else:
                result = blob.upload_blob(
                    payload,
                    overwrite=True,
                    etag=etag,
                    match_condition=MatchConditions.IfNotModified,
                    content_settings=JSON_CONTENT,
                )
        except (ResourceModifiedError, ResourceExistsError):
            logger.warning("Concurrent write detected on %s", self._blob_name)
            raise ConflictError(_CONFLICT_MESSAGE)
        except HttpResponseError as e:
            logger.warning("Azure API error writing %s: %s", self._blob_name, e.message)
            raise
        return result["etag"]

    def check_connectivity(self) -> bool:
        """Lightweight storage connectivity check: lists 1 blob."""
        try:
            next(iter(self._container.list_blobs(results_per_page=1)))
            return True
        except StopIteration:
            # Container exists but is empty, still connected
            return True
        except Exception as e:
            logger.warning("Storage connectivity check failed: %s", e)
            return False


# Lazy singleton, lives for the process lifetime
_store: DocumentStore | None = None


def _get_credential() -> ManagedIdentityCredential | DefaultAzureCredential:
    """Managed Identity when a client id is configured, else the default chain."""
    settings = get_settings()
    if settings.managed_identity_client_id:
        return ManagedIdentityCredential(client_id=settings.managed_identity_client_id)
    return DefaultAzureCredential()


def create_container_client(container_name: str) -> ContainerClient:
    """Create a ContainerClient for the given container."""
    settings = get_settings()
    account_url = f"https://{settings.azure_storage_account}.blob.core.windows.net"
    return ContainerClient(
        account_url=account_url,
        container_name=container_name,
        credential=_get_credential(),
    )


def get_store() -> DocumentStore:
    """Return the configured document store (lazy singleton)."""
    global _store
    if _store is None:
        settings = get_settings()
        if settings.storage_backend == "blob":
            _store = BlobDocumentStore(
                create_container_client(settings.azure_storage_container),
                settings.blog_data_blob,
            )
        else:
            _store = MemoryDocumentStore()
        logger.info("Using %s document store", settings.storage_backend)
    return _store


async def read_snapshot() -> BlogData:
    data, _etag = await get_store().load()
    return data


@asynccontextmanager
async def transaction() -> AsyncIterator[BlogData]:
    """Load a snapshot, let the caller mutate it, then write it back atomically.

    Nothing is written if the body raises.
    """
    store = get_store()
    data, etag = await store.load()
    yield data
    await store.save(data, etag)


def check_storage_connectivity() -> bool:
    return get_store().check_connectivity()
