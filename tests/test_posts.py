"""Post, like and comment tests"""

import pytest

from fellowship.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from fellowship.services.database_service import POSTS, USERS

from tests.factories import create_post, create_user


class TestPosts:
    """Creating, listing and moderating posts"""

    def test_create_post_snapshots_author_name(self, store, posts, membership, grace_member):
        post = posts.create_post(grace_member, "grace", "Praise report", "announcement")
        membership.update_user_profile(grace_member, grace_member["id"], {"display_name": "Renamed"})

        assert store.get(POSTS, post["id"])["author_name"] == "Grace Member"
        assert store.get(USERS, grace_member["id"])["display_name"] == "Renamed"

    def test_non_member_cannot_post(self, posts, hope_admin, grace):
        with pytest.raises(PermissionDeniedError):
            posts.create_post(hope_admin, "grace", "Hello")

    def test_post_to_missing_family(self, posts, super_admin):
        with pytest.raises(NotFoundError):
            posts.create_post(super_admin, "nowhere", "Hello")

    def test_list_family_posts_newest_first(self, store, posts, grace_member):
        first = posts.create_post(grace_member, "grace", "first")
        second = posts.create_post(grace_member, "grace", "second")

        listed = posts.list_family_posts(grace_member, "grace")

        assert [p["id"] for p in listed] == [second["id"], first["id"]]

    def test_list_all_posts_degrades_for_non_super_admin(self, store, posts, grace_member, super_admin):
        create_post(store, "grace", grace_member)

        assert posts.list_all_posts(grace_member) == []
        assert len(posts.list_all_posts(super_admin)) == 1

    def test_update_own_post(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        updated = posts.update_post(grace_member, post["id"], {"content": "Edited"})

        assert updated["content"] == "Edited"
        assert updated["updated_at"] is not None

    def test_empty_update(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        with pytest.raises(ValidationFailedError):
            posts.update_post(grace_member, post["id"], {"content": None})


class TestGraceScenario:
    """Cross-family admins have no authority over another family's posts"""

    @pytest.fixture
    def grace_post(self, store, membership, super_admin, grace):
        author = create_user(store, display_name="A")
        membership.join_family(author, author["id"], "grace")
        author = membership.promote(super_admin, author["id"])
        assert author["role"] == "admin"
        return create_post(store, "grace", author)

    def test_cross_family_admin_denied(self, store, posts, hope_admin, grace_post):
        with pytest.raises(PermissionDeniedError):
            posts.delete_post(hope_admin, grace_post["id"])

        assert store.get(POSTS, grace_post["id"]) is not None

    def test_grace_admin_allowed(self, store, posts, grace_admin, grace_post):
        posts.delete_post(grace_admin, grace_post["id"])

        assert store.get(POSTS, grace_post["id"]) is None

    def test_super_admin_allowed(self, store, posts, super_admin, grace_post):
        posts.delete_post(super_admin, grace_post["id"])

        assert store.get(POSTS, grace_post["id"]) is None


class TestLikes:
    """Likes behave like a set"""

    def test_like_twice(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        posts.like_post(grace_member, post["id"])
        result = posts.like_post(grace_member, post["id"])

        assert result["likes"] == [grace_member["id"]]

    def test_unlike_twice(self, store, posts, grace_member, grace_admin):
        post = create_post(store, "grace", grace_member)
        posts.like_post(grace_member, post["id"])
        posts.like_post(grace_admin, post["id"])

        posts.unlike_post(grace_member, post["id"])
        result = posts.unlike_post(grace_member, post["id"])

        assert result["likes"] == [grace_admin["id"]]

    def test_outsider_cannot_like(self, store, posts, grace_member, hope_admin):
        post = create_post(store, "grace", grace_member)

        with pytest.raises(PermissionDeniedError):
            posts.like_post(hope_admin, post["id"])


class TestComments:
    """Embedded comments"""

    def test_comments_keep_order_and_unique_ids(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        first = posts.add_comment(grace_member, post["id"], "Amen")
        second = posts.add_comment(grace_member, post["id"], "Amen")

        stored = store.get(POSTS, post["id"])["comments"]
        assert [c["id"] for c in stored] == [first["id"], second["id"]]
        assert first["id"] != second["id"]

    def test_blank_comment(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        with pytest.raises(ValidationFailedError):
            posts.add_comment(grace_member, post["id"], "   ")

    def test_delete_own_comment(self, store, posts, grace_member, grace_admin):
        post = create_post(store, "grace", grace_admin)
        comment = posts.add_comment(grace_member, post["id"], "Amen")

        result = posts.delete_comment(grace_member, post["id"], comment["id"])

        assert result["comments"] == []

    def test_post_author_deletes_comment(self, store, posts, grace_member, grace_admin):
        post = create_post(store, "grace", grace_member)
        comment = posts.add_comment(grace_admin, post["id"], "Welcome")

        result = posts.delete_comment(grace_member, post["id"], comment["id"])

        assert result["comments"] == []

    def test_other_member_cannot_delete_comment(self, store, posts, grace_member, grace_admin):
        post = create_post(store, "grace", grace_admin)
        comment = posts.add_comment(grace_admin, post["id"], "Hello")
        other = create_user(store, family_id="grace")

        with pytest.raises(PermissionDeniedError):
            posts.delete_comment(other, post["id"], comment["id"])

    def test_delete_missing_comment(self, store, posts, grace_member):
        post = create_post(store, "grace", grace_member)

        with pytest.raises(NotFoundError):
            posts.delete_comment(grace_member, post["id"], "missing")
