"""Shared fixtures for blogpress tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from blogpress.services.store import MemoryDocumentStore


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from blogpress.config import get_settings

    get_settings.cache_clear()

    # 2. Document store singleton
    import blogpress.services.store as store_mod

    store_mod._store = None

    # 3. Health check cache
    import blogpress.main as main_mod

    main_mod._health_cache = None


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from blogpress.config import Settings, get_settings

    test_settings = Settings(
        storage_backend="memory",
        azure_storage_account="teststorage",
        azure_storage_container="test-blog",
        managed_identity_client_id="test-client-id",
        jwt_secret="test-secret-key-for-blogpress-unit-tests",
        jwt_issuer="blogpress-test",
        access_token_minutes=30,
        comment_delete_cascade="direct",
    )

    get_settings.cache_clear()
    monkeypatch.setattr("blogpress.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from blogpress.config import get_settings creates a local binding that
    # the blogpress.config monkeypatch above does not affect)
    for mod_path in [
        "blogpress.main",
        "blogpress.services.store",
        "blogpress.services.auth",
        "blogpress.services.comments",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
def store(mock_settings, monkeypatch):
    """A fresh in-memory document store installed as the active store."""
    memory_store = MemoryDocumentStore()
    monkeypatch.setattr("blogpress.services.store._store", memory_store)
    return memory_store


@pytest.fixture
async def client(store):
    from blogpress.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c


@pytest.fixture
def make_user(store):
    """Factory registering users directly through the service layer."""
    from blogpress.models.user import RegisterRequest
    from blogpress.services.auth import register_user

    async def _make(username="alice", is_admin=False):
        return await register_user(
            RegisterRequest(
                username=username,
                email=f"{username}@example.com",
                password="password123",
            ),
            is_admin=is_admin,
        )

    return _make


@pytest.fixture
def auth_headers(mock_settings):
    """Factory building a bearer Authorization header for a user."""
    from blogpress.services.auth import create_access_token

    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob")


@pytest.fixture
async def admin(make_user):
    return await make_user("root_admin", is_admin=True)
