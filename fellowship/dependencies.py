"""FastAPI dependencies that build services from ``app.state``"""

from fastapi import Request

from fellowship.auth.identity import IdentityProvider
from fellowship.config import Settings
from fellowship.services.account_service import AccountService
from fellowship.services.blob_service import BlobStore
from fellowship.services.database_service import Store
from fellowship.services.family_service import FamilyService
from fellowship.services.media_service import MediaService
from fellowship.services.membership_service import MembershipService
from fellowship.services.notification_service import NotificationService
from fellowship.services.post_service import PostService
from fellowship.services.request_service import RequestService
from fellowship.services.setup_service import SetupService


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_blobs(request: Request) -> BlobStore:
    return request.app.state.blobs


def get_setup_service(request: Request) -> SetupService:
    return SetupService(get_store(request), get_identity(request), get_app_settings(request))


def get_account_service(request: Request) -> AccountService:
    return AccountService(get_store(request), get_identity(request), get_app_settings(request))


def get_membership_service(request: Request) -> MembershipService:
    return MembershipService(get_store(request), get_app_settings(request), get_identity(request))


def get_family_service(request: Request) -> FamilyService:
    return FamilyService(get_store(request))


def get_post_service(request: Request) -> PostService:
    return PostService(get_store(request))


def get_media_service(request: Request) -> MediaService:
    return MediaService(
        get_store(request),
        get_blobs(request),
        get_app_settings(request).max_upload_bytes
    )


def get_notification_service(request: Request) -> NotificationService:
    return NotificationService(get_store(request))


def get_request_service(request: Request) -> RequestService:
    return RequestService(get_store(request))
