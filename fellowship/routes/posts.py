"""Post, like and comment routes"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_post_service
from fellowship.models import (
    Comment,
    CommentCreateRequest,
    Post,
    PostCreateRequest,
    PostUpdateRequest,
)
from fellowship.services.post_service import PostService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/families/{family_id}/posts", response_model=List[Post])
async def list_family_posts(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """List a family's posts, newest first"""
    return posts.list_family_posts(current_user, family_id)


@router.post("/families/{family_id}/posts", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    family_id: str,
    request: PostCreateRequest,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Create a post in a family"""
    return posts.create_post(current_user, family_id, request.content, request.type)


@router.get("/posts", response_model=List[Post])
async def list_all_posts(
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """
    List posts across all families.
    Only the super-admin gets results; anyone else gets an empty list.
    """
    return posts.list_all_posts(current_user)


@router.get("/posts/{post_id}", response_model=Post)
async def get_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Get a single post"""
    return posts.get_visible_post(current_user, post_id)


@router.put("/posts/{post_id}", response_model=Post)
async def update_post(
    post_id: str,
    updates: PostUpdateRequest,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Edit a post (author or family moderator)"""
    return posts.update_post(current_user, post_id, updates.model_dump(exclude_unset=True))


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Delete a post (author or family moderator)"""
    posts.delete_post(current_user, post_id)
    return {"message": "Post deleted successfully"}


@router.post("/posts/{post_id}/like", response_model=Post)
async def like_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Like a post; liking twice counts once"""
    return posts.like_post(current_user, post_id)


@router.delete("/posts/{post_id}/like", response_model=Post)
async def unlike_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Remove the current user's like"""
    return posts.unlike_post(current_user, post_id)


@router.post("/posts/{post_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    request: CommentCreateRequest,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Comment on a post"""
    return posts.add_comment(current_user, post_id, request.content)


@router.delete("/posts/{post_id}/comments/{comment_id}", response_model=Post)
async def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: dict = Depends(get_current_user),
    posts: PostService = Depends(get_post_service)
):
    """Delete a comment (comment author, post author or family moderator)"""
    return posts.delete_comment(current_user, post_id, comment_id)
