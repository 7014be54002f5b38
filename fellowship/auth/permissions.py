"""
Role-based authorization policy

Every access decision in the service goes through these functions. They are
pure: each takes the acting user's profile document plus the fields of the
target resource and returns True/False. Routes use them to deny requests,
and ``role_permissions`` exposes the same answers so a client can hide
actions it would not be allowed to perform.

These checks mirror, and do not replace, access rules enforced by the
storage backend in a hosted deployment.
"""
from typing import Optional

from fellowship.errors import PermissionDeniedError

MEMBER = "member"
ADMIN = "admin"
SUPER_ADMIN = "super_admin"

ROLES = {
    SUPER_ADMIN: {
        "description": "Global moderation across all families and request review",
        "level": 100
    },
    ADMIN: {
        "description": "Moderates their own family: members, posts, media and announcements",
        "level": 50
    },
    MEMBER: {
        "description": "Shares posts, comments and media in their own family",
        "level": 10
    }
}


def role_level(role: Optional[str]) -> int:
    return ROLES.get(role, {}).get("level", 0)


def is_super_admin(actor: dict) -> bool:
    return actor.get("role") == SUPER_ADMIN


def is_family_admin(actor: dict, family_id: Optional[str]) -> bool:
    return (
        actor.get("role") == ADMIN
        and family_id is not None
        and actor.get("family_id") == family_id
    )


def is_family_member(actor: dict, family_id: Optional[str]) -> bool:
    return family_id is not None and actor.get("family_id") == family_id


def can_moderate_family(actor: dict, family_id: Optional[str]) -> bool:
    """Super-admin anywhere, or an admin inside their own family"""
    return is_super_admin(actor) or is_family_admin(actor, family_id)


def can_view_family(actor: dict, family_id: Optional[str]) -> bool:
    return is_super_admin(actor) or is_family_member(actor, family_id)


def can_post_to_family(actor: dict, family_id: Optional[str]) -> bool:
    return can_view_family(actor, family_id)


def can_modify_post(actor: dict, post_family_id: str, post_author_id: str) -> bool:
    """Moderators of the post's family, or its author"""
    if can_moderate_family(actor, post_family_id):
        return True
    return actor.get("id") == post_author_id


def can_delete_comment(actor: dict, post: dict, comment: dict) -> bool:
    if actor.get("id") == comment.get("author_id"):
        return True
    return can_modify_post(actor, post.get("family_id"), post.get("author_id"))


def can_delete_media(actor: dict, media: dict) -> bool:
    if can_moderate_family(actor, media.get("family_id")):
        return True
    return actor.get("id") == media.get("uploaded_by")


def can_manage_member(actor: dict, target: dict) -> bool:
    """Promote, demote or remove ``target`` from their family.

    Nobody acts on themselves through this path and only a super-admin may
    touch another super-admin.
    """
    if actor.get("id") == target.get("id"):
        return False
    if is_super_admin(actor):
        return True
    if is_super_admin(target):
        return False
    return is_family_admin(actor, target.get("family_id"))


def can_delete_user(actor: dict, target: dict) -> bool:
    return is_super_admin(actor) and actor.get("id") != target.get("id")


def can_assign_family(actor: dict, user_id: str) -> bool:
    """Users move themselves; a super-admin may place anyone"""
    return is_super_admin(actor) or actor.get("id") == user_id


def can_update_family(actor: dict, family_id: str) -> bool:
    return can_moderate_family(actor, family_id)


def role_permissions(actor: dict, family_id: Optional[str]) -> dict:
    """Capability map for ``actor`` within ``family_id``"""
    moderate = can_moderate_family(actor, family_id)
    view = can_view_family(actor, family_id)
    return {
        "role": actor.get("role"),
        "role_description": ROLES.get(actor.get("role"), {}).get("description"),
        "can_view": view,
        "can_post": can_post_to_family(actor, family_id),
        "can_upload_media": view,
        "can_moderate_posts": moderate,
        "can_moderate_media": moderate,
        "can_announce": moderate,
        "can_manage_members": moderate,
        "can_update_family": can_update_family(actor, family_id),
        "can_review_requests": is_super_admin(actor),
        "can_manage_families": is_super_admin(actor),
    }


def require(allowed: bool, message: str = "Insufficient permissions"):
    """Raise ``PermissionDeniedError`` unless ``allowed``"""
    if not allowed:
        raise PermissionDeniedError(message)
