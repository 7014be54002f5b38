"""Authorization policy tests"""

import pytest

from fellowship.auth import permissions
from fellowship.errors import PermissionDeniedError


def actor(user_id, role="member", family_id=None):
    return {"id": user_id, "role": role, "family_id": family_id}


SUPER = actor("root", "super_admin")
GRACE_ADMIN = actor("ga", "admin", "grace")
GRACE_MEMBER = actor("gm", "member", "grace")
HOPE_ADMIN = actor("ha", "admin", "hope")
UNASSIGNED = actor("nobody")


class TestModeration:
    """Who may moderate a family's content"""

    @pytest.mark.parametrize("who,allowed", [
        (SUPER, True),
        (GRACE_ADMIN, True),
        (HOPE_ADMIN, False),
        (GRACE_MEMBER, False),
        (UNASSIGNED, False),
    ])
    def test_can_moderate_grace(self, who, allowed):
        assert permissions.can_moderate_family(who, "grace") is allowed

    def test_unassigned_admin_moderates_nothing(self):
        assert permissions.can_moderate_family(actor("x", "admin"), None) is False


class TestPosts:
    """Post modification rules"""

    def test_grace_scenario(self):
        """A cross-family admin may not delete a Grace post; Grace's admin and the super-admin may"""
        author = actor("a", "admin", "grace")

        assert permissions.can_modify_post(HOPE_ADMIN, "grace", author["id"]) is False
        assert permissions.can_modify_post(GRACE_ADMIN, "grace", author["id"]) is True
        assert permissions.can_modify_post(SUPER, "grace", author["id"]) is True

    def test_author_may_modify_own_post(self):
        assert permissions.can_modify_post(GRACE_MEMBER, "grace", GRACE_MEMBER["id"]) is True

    def test_member_may_not_modify_others_post(self):
        assert permissions.can_modify_post(GRACE_MEMBER, "grace", "someone-else") is False

    def test_comment_author_may_delete_comment(self):
        post = {"family_id": "grace", "author_id": "other"}
        comment = {"author_id": GRACE_MEMBER["id"]}

        assert permissions.can_delete_comment(GRACE_MEMBER, post, comment) is True
        assert permissions.can_delete_comment(HOPE_ADMIN, post, comment) is False


class TestMemberManagement:
    """Promotion, demotion and removal"""

    def test_admin_manages_own_family_member(self):
        assert permissions.can_manage_member(GRACE_ADMIN, GRACE_MEMBER) is True

    def test_admin_cannot_manage_other_family(self):
        assert permissions.can_manage_member(HOPE_ADMIN, GRACE_MEMBER) is False

    def test_nobody_manages_themselves(self):
        assert permissions.can_manage_member(GRACE_ADMIN, GRACE_ADMIN) is False
        assert permissions.can_manage_member(SUPER, SUPER) is False

    def test_only_super_admin_touches_super_admin(self):
        other_super = actor("root2", "super_admin", "grace")

        assert permissions.can_manage_member(GRACE_ADMIN, other_super) is False
        assert permissions.can_manage_member(SUPER, other_super) is True

    def test_delete_user(self):
        assert permissions.can_delete_user(SUPER, GRACE_MEMBER) is True
        assert permissions.can_delete_user(SUPER, SUPER) is False
        assert permissions.can_delete_user(GRACE_ADMIN, GRACE_MEMBER) is False

    def test_assign_family(self):
        assert permissions.can_assign_family(GRACE_MEMBER, GRACE_MEMBER["id"]) is True
        assert permissions.can_assign_family(GRACE_ADMIN, GRACE_MEMBER["id"]) is False
        assert permissions.can_assign_family(SUPER, GRACE_MEMBER["id"]) is True


class TestRolePermissions:
    """Capability map"""

    def test_member_view(self):
        caps = permissions.role_permissions(GRACE_MEMBER, "grace")

        assert caps["can_view"] is True
        assert caps["can_post"] is True
        assert caps["can_moderate_posts"] is False
        assert caps["can_review_requests"] is False

    def test_admin_outside_family(self):
        caps = permissions.role_permissions(HOPE_ADMIN, "grace")

        assert caps["can_view"] is False
        assert caps["can_announce"] is False

    def test_super_admin(self):
        caps = permissions.role_permissions(SUPER, "grace")

        assert all(caps[k] for k in caps if k.startswith("can_"))


def test_require_raises():
    with pytest.raises(PermissionDeniedError):
        permissions.require(False, "nope")

    permissions.require(True)
