"""Family management, statistics and notification tests"""

import pytest

from fellowship.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from fellowship.services.database_service import FAMILIES, NOTIFICATIONS, USERS
from fellowship.services.family_service import DEFAULT_FAMILIES

from tests.factories import create_post, create_user


class TestFamilies:
    """Creating and editing families"""

    def test_create_family(self, store, families, super_admin):
        family = families.create_family(super_admin, "Joy Family", "Joyful")

        assert store.get(FAMILIES, family["id"])["member_count"] == 0

    def test_only_super_admin_creates(self, families, grace_admin):
        with pytest.raises(PermissionDeniedError):
            families.create_family(grace_admin, "Joy Family")

    def test_family_admin_updates_own_family(self, families, grace_admin):
        updated = families.update_family(grace_admin, "grace", {"description": "New words", "member_count": 99})

        assert updated["description"] == "New words"
        assert updated["member_count"] == 1

    def test_other_admin_cannot_update(self, families, hope_admin, grace):
        with pytest.raises(PermissionDeniedError):
            families.update_family(hope_admin, "grace", {"name": "Taken"})

    def test_empty_update(self, families, grace_admin):
        with pytest.raises(ValidationFailedError):
            families.update_family(grace_admin, "grace", {})

    def test_delete_family_does_not_cascade(self, store, families, super_admin, grace_member):
        families.delete_family(super_admin, "grace")

        assert store.get(FAMILIES, "grace") is None
        assert store.get(USERS, grace_member["id"])["family_id"] == "grace"

    def test_get_missing_family(self, families):
        with pytest.raises(NotFoundError):
            families.get_family("nowhere")

    def test_list_sorted_by_name(self, families, grace, hope):
        assert [f["name"] for f in families.list_families()] == ["Grace Family", "Hope Family"]


class TestSeeding:
    """Default families"""

    def test_seed_creates_defaults_once(self, store, families):
        created = families.seed_default_families()

        assert created == [f["id"] for f in DEFAULT_FAMILIES]
        assert families.seed_default_families() == []
        assert len(store.all(FAMILIES)) == 5

    def test_seed_keeps_existing_counts(self, store, families, grace_member):
        families.seed_default_families()

        assert store.get(FAMILIES, "grace")["member_count"] == 1
        assert store.get(FAMILIES, "grace")["name"] == "Grace Family"


class TestStats:
    """Per-family and overview statistics"""

    def test_family_stats(self, store, families, notifications, grace_admin, grace_member):
        create_post(store, "grace", grace_member)
        notifications.announce(grace_admin, "grace", "Picnic", "Saturday")

        stats = families.get_family_stats(grace_member, "grace")

        assert stats["member_count"] == 2
        assert stats["admin_count"] == 1
        assert stats["post_count"] == 1
        assert stats["media_count"] == 0
        assert stats["unread_notification_count"] == 1

    def test_recount_repairs_drift(self, store, families, super_admin, grace_member):
        store.update(FAMILIES, "grace", {"member_count": 7})

        family = families.recount_members(super_admin, "grace")

        assert family["member_count"] == 1
        assert store.get(FAMILIES, "grace")["member_count"] == 1

    def test_recount_requires_super_admin(self, families, grace_admin):
        with pytest.raises(PermissionDeniedError):
            families.recount_members(grace_admin, "grace")

    def test_overview(self, store, families, requests, super_admin, grace_member):
        requests.create_family_request(grace_member, "Joy Family")
        requests.create_admin_request(grace_member)

        overview = families.get_overview_stats(super_admin)

        assert overview == {
            "total_families": 1,
            "total_users": 2,
            "total_posts": 0,
            "pending_family_requests": 1,
            "pending_admin_requests": 1,
        }


class TestNotifications:
    """Family-wide notifications"""

    def test_announce(self, notifications, grace_admin):
        note = notifications.announce(grace_admin, "grace", "  ", "Service moved to 10am")

        assert note["type"] == "announcement"
        assert note["title"] == "Announcement"

    def test_member_cannot_announce(self, notifications, grace_member):
        with pytest.raises(PermissionDeniedError):
            notifications.announce(grace_member, "grace", "Hi", "All")

    def test_read_flag_is_shared(self, store, notifications, grace_admin, grace_member):
        note = notifications.announce(grace_admin, "grace", "Picnic", "Saturday")

        notifications.mark_notification_read(grace_member, note["id"])

        seen_by_admin = notifications.list_family_notifications(grace_admin, "grace")
        assert seen_by_admin[0]["is_read"] is True

    def test_outsider_cannot_read(self, notifications, grace_admin, hope_admin):
        note = notifications.announce(grace_admin, "grace", "Picnic", "Saturday")

        with pytest.raises(PermissionDeniedError):
            notifications.mark_notification_read(hope_admin, note["id"])
        with pytest.raises(PermissionDeniedError):
            notifications.list_family_notifications(hope_admin, "grace")

    def test_delete_requires_moderator(self, store, notifications, grace_admin, grace_member):
        note = notifications.announce(grace_admin, "grace", "Picnic", "Saturday")

        with pytest.raises(PermissionDeniedError):
            notifications.delete_notification(grace_member, note["id"])

        notifications.delete_notification(grace_admin, note["id"])
        assert store.get(NOTIFICATIONS, note["id"]) is None

    def test_newest_first(self, store, notifications, grace_admin):
        notifications.announce(grace_admin, "grace", "First", "")
        notifications.announce(grace_admin, "grace", "Second", "")

        titles = [n["title"] for n in notifications.list_family_notifications(grace_admin, "grace")]
        assert titles == ["Second", "First"]


def test_unassigned_user_sees_no_family_data(store, families, grace):
    user = create_user(store)

    with pytest.raises(PermissionDeniedError):
        families.get_family_stats(user, "grace")
