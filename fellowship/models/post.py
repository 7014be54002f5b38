"""Post and comment models"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

PostType = Literal["announcement", "discussion", "prayer-request"]


class Comment(BaseModel):
    id: str
    author_id: str
    author_name: str
    content: str
    created_at: str


class Post(BaseModel):
    id: str
    family_id: str
    author_id: str
    author_name: str
    content: str
    type: PostType = "discussion"
    created_at: str
    updated_at: Optional[str] = None
    likes: List[str] = []
    comments: List[Comment] = []


class PostCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    type: PostType = "discussion"


class PostUpdateRequest(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    type: Optional[PostType] = None


class CommentCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
