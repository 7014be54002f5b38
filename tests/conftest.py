"""Shared test fixtures for Fellowship API tests

Everything runs against an in-memory TinyDB store and a temporary uploads
directory; nothing is mocked below the HTTP layer.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from fellowship.auth.identity import IdentityProvider
from fellowship.config import Settings
from fellowship.main import create_app
from fellowship.services.blob_service import BlobStore
from fellowship.services.database_service import Store
from fellowship.services.family_service import FamilyService
from fellowship.services.media_service import MediaService
from fellowship.services.membership_service import MembershipService
from fellowship.services.notification_service import NotificationService
from fellowship.services.post_service import PostService
from fellowship.services.request_service import RequestService
from fellowship.services.setup_service import SetupService

from tests.factories import create_family, create_user, setup_request


# =============================================================================
# Settings and Storage
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at in-memory storage and a temp uploads dir"""
    return Settings(
        secret_key="test-secret-key-for-testing-only",
        database_path=":memory:",
        uploads_dir=str(tmp_path / "uploads"),
        public_base_url="http://test",
        seed_default_families=False,
        max_upload_bytes=1024
    )


@pytest.fixture
def store() -> Store:
    store = Store(":memory:")
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def identity(store) -> IdentityProvider:
    return IdentityProvider(store)


@pytest.fixture
def blobs(settings) -> BlobStore:
    return BlobStore(settings.uploads_dir, settings.public_base_url)


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def membership(store, settings, identity) -> MembershipService:
    return MembershipService(store, settings, identity)


@pytest.fixture
def families(store) -> FamilyService:
    return FamilyService(store)


@pytest.fixture
def posts(store) -> PostService:
    return PostService(store)


@pytest.fixture
def media(store, blobs, settings) -> MediaService:
    return MediaService(store, blobs, settings.max_upload_bytes)


@pytest.fixture
def notifications(store) -> NotificationService:
    return NotificationService(store)


@pytest.fixture
def requests(store) -> RequestService:
    return RequestService(store)


@pytest.fixture
def setup_service(store, identity, settings) -> SetupService:
    return SetupService(store, identity, settings)


# =============================================================================
# Entity Fixtures
# =============================================================================

@pytest.fixture
def grace(store) -> dict:
    return create_family(store, name="Grace Family", family_id="grace")


@pytest.fixture
def hope(store) -> dict:
    return create_family(store, name="Hope Family", family_id="hope")


@pytest.fixture
def super_admin(store) -> dict:
    return create_user(store, role="super_admin", display_name="Pastor")


@pytest.fixture
def grace_admin(store, grace) -> dict:
    return create_user(store, role="admin", family_id=grace["id"], display_name="Grace Admin")


@pytest.fixture
def grace_member(store, grace) -> dict:
    return create_user(store, family_id=grace["id"], display_name="Grace Member")


@pytest.fixture
def hope_admin(store, hope) -> dict:
    return create_user(store, role="admin", family_id=hope["id"], display_name="Hope Admin")


# =============================================================================
# Application and Client Fixtures
# =============================================================================

@pytest.fixture
def app(settings):
    """A fresh application with its own in-memory store"""
    return create_app(settings)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator:
    """Create async HTTP client for testing"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_headers(test_client) -> dict:
    """Run first-time setup and return the super-admin's auth headers"""
    response = await test_client.post("/setup", json=setup_request())
    assert response.status_code == 201

    body = setup_request()["super_admin"]
    response = await test_client.post(
        "/auth/login",
        json={"email": body["email"], "password": body["password"]}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}

