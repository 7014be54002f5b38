"""Posts, comments and likes

``likes`` and ``comments`` are embedded in the post document and changed
through ``Store.mutate`` so concurrent likes within the process cannot
overwrite each other.
"""

import logging
from typing import List, Optional

from fellowship.auth import permissions
from fellowship.errors import NotFoundError, ValidationFailedError
from fellowship.services.database_service import FAMILIES, POSTS, Store, generate_id, timestamp
from fellowship.services.notification_service import newest_first

logger = logging.getLogger(__name__)

POST_FIELDS = ("content", "type")


def author_name(actor: dict) -> str:
    return actor.get("display_name") or actor.get("email") or "Unknown"


class PostService:
    """Family posts with embedded likes and comments"""

    def __init__(self, store: Store):
        self.store = store

    def get_post(self, post_id: str) -> dict:
        post = self.store.get(POSTS, post_id)
        if not post:
            raise NotFoundError("Post", post_id)
        return post

    def create_post(self, actor: dict, family_id: str, content: str, type: str = "discussion") -> dict:
        if not self.store.get(FAMILIES, family_id):
            raise NotFoundError("Family", family_id)
        permissions.require(
            permissions.can_post_to_family(actor, family_id),
            "Only family members can post here"
        )

        post = {
            "family_id": family_id,
            "author_id": actor["id"],
            "author_name": author_name(actor),
            "content": content,
            "type": type,
            "created_at": timestamp(),
            "likes": [],
            "comments": []
        }
        post["id"] = self.store.create(POSTS, post)
        logger.info(f"Post {post['id']} created in family {family_id} by {actor['id']}")
        return post

    def list_family_posts(self, actor: dict, family_id: str) -> List[dict]:
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Not a member of this family"
        )
        return newest_first(self.store.query(POSTS, "family_id", family_id))

    def list_all_posts(self, actor: dict) -> List[dict]:
        """Every post, for the super-admin dashboard.

        Other callers get an empty list rather than an error.
        """
        if not permissions.is_super_admin(actor):
            logger.warning(f"User {actor.get('id')} is not allowed to list all posts; returning none")
            return []
        return newest_first(self.store.all(POSTS))

    def update_post(self, actor: dict, post_id: str, updates: dict) -> dict:
        post = self.get_post(post_id)
        permissions.require(
            permissions.can_modify_post(actor, post["family_id"], post["author_id"]),
            "You can only edit your own posts"
        )

        changes = {k: v for k, v in updates.items() if k in POST_FIELDS and v is not None}
        if not changes:
            raise ValidationFailedError("No updates provided")

        changes["updated_at"] = timestamp()
        self.store.update(POSTS, post_id, changes)
        return {**post, **changes}

    def delete_post(self, actor: dict, post_id: str):
        post = self.get_post(post_id)
        permissions.require(
            permissions.can_modify_post(actor, post["family_id"], post["author_id"]),
            "Insufficient permissions to delete this post"
        )

        self.store.delete(POSTS, post_id)
        logger.info(f"Post {post_id} deleted by {actor['id']}")

    def get_visible_post(self, actor: dict, post_id: str) -> dict:
        post = self.get_post(post_id)
        permissions.require(
            permissions.can_view_family(actor, post["family_id"]),
            "Not a member of this family"
        )
        return post

    # =========================================================================
    # Likes
    # =========================================================================

    def like_post(self, actor: dict, post_id: str) -> dict:
        self.get_visible_post(actor, post_id)
        user_id = actor["id"]

        def add_like(doc):
            likes = doc.setdefault("likes", [])
            if user_id not in likes:
                likes.append(user_id)

        return self.store.mutate(POSTS, post_id, add_like)

    def unlike_post(self, actor: dict, post_id: str) -> dict:
        self.get_visible_post(actor, post_id)
        user_id = actor["id"]

        def remove_like(doc):
            doc["likes"] = [uid for uid in doc.get("likes", []) if uid != user_id]

        return self.store.mutate(POSTS, post_id, remove_like)

    # =========================================================================
    # Comments
    # =========================================================================

    def add_comment(self, actor: dict, post_id: str, content: str) -> dict:
        self.get_visible_post(actor, post_id)
        if not content.strip():
            raise ValidationFailedError("Comment cannot be empty")

        comment = {
            "id": generate_id(),
            "author_id": actor["id"],
            "author_name": author_name(actor),
            "content": content,
            "created_at": timestamp()
        }

        def append(doc):
            doc.setdefault("comments", []).append(comment)

        self.store.mutate(POSTS, post_id, append)
        return comment

    def _find_comment(self, post: dict, comment_id: str) -> Optional[dict]:
        for comment in post.get("comments", []):
            if comment["id"] == comment_id:
                return comment
        return None

    def delete_comment(self, actor: dict, post_id: str, comment_id: str) -> dict:
        post = self.get_post(post_id)
        comment = self._find_comment(post, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        permissions.require(
            permissions.can_delete_comment(actor, post, comment),
            "Insufficient permissions to delete this comment"
        )

        def remove(doc):
            doc["comments"] = [c for c in doc.get("comments", []) if c["id"] != comment_id]

        updated = self.store.mutate(POSTS, post_id, remove)
        logger.info(f"Comment {comment_id} on post {post_id} deleted by {actor['id']}")
        return updated
