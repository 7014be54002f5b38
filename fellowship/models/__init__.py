"""Models package - Pydantic models for API request/response"""

from fellowship.models.user import (
    Role,
    User,
    SignupRequest,
    LoginRequest,
    TokenResponse,
    UserUpdateRequest,
    JoinFamilyRequest,
    JoinResult,
)
from fellowship.models.family import (
    Family,
    FamilyCreateRequest,
    FamilyUpdateRequest,
    FamilyStats,
    AdminLimitStatus,
    OverviewStats,
)
from fellowship.models.post import (
    PostType,
    Comment,
    Post,
    PostCreateRequest,
    PostUpdateRequest,
    CommentCreateRequest,
)
from fellowship.models.media import MediaType, Media
from fellowship.models.notification import NotificationType, Notification, AnnouncementRequest
from fellowship.models.requests import (
    RequestStatus,
    ReviewDecision,
    FamilyRequest,
    FamilyRequestCreate,
    FamilyRequestApprove,
    AdminRequest,
    AdminRequestCreate,
    AdminRequestReview,
)
from fellowship.models.setup import SuperAdminSetup, SetupRequest, SetupStatus

__all__ = [
    # User
    "Role",
    "User",
    "SignupRequest",
    "LoginRequest",
    "TokenResponse",
    "UserUpdateRequest",
    "JoinFamilyRequest",
    "JoinResult",
    # Family
    "Family",
    "FamilyCreateRequest",
    "FamilyUpdateRequest",
    "FamilyStats",
    "AdminLimitStatus",
    "OverviewStats",
    # Post
    "PostType",
    "Comment",
    "Post",
    "PostCreateRequest",
    "PostUpdateRequest",
    "CommentCreateRequest",
    # Media
    "MediaType",
    "Media",
    # Notification
    "NotificationType",
    "Notification",
    "AnnouncementRequest",
    # Requests
    "RequestStatus",
    "ReviewDecision",
    "FamilyRequest",
    "FamilyRequestCreate",
    "FamilyRequestApprove",
    "AdminRequest",
    "AdminRequestCreate",
    "AdminRequestReview",
    # Setup
    "SuperAdminSetup",
    "SetupRequest",
    "SetupStatus",
]
