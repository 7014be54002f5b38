"""Media routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_media_service
from fellowship.models import Media, MediaType
from fellowship.services.media_service import MediaService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/families/{family_id}/media", response_model=List[Media])
async def list_media(
    family_id: str,
    type: Optional[MediaType] = Query(None, description="Filter by media type"),
    current_user: dict = Depends(get_current_user),
    media: MediaService = Depends(get_media_service)
):
    """List a family's media, newest first"""
    return media.list_family_media(current_user, family_id, type)


@router.post("/families/{family_id}/media", response_model=Media, status_code=status.HTTP_201_CREATED)
async def upload_media(
    family_id: str,
    file: UploadFile = File(...),
    type: MediaType = Form("photo"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="Comma-separated tags"),
    current_user: dict = Depends(get_current_user),
    media: MediaService = Depends(get_media_service)
):
    """Upload a photo or audio file to a family"""
    content = await file.read()
    return media.upload_media(
        current_user,
        family_id,
        filename=file.filename or "",
        content=content,
        content_type=file.content_type,
        type=type,
        title=title,
        description=description,
        tags=tags.split(",") if tags else []
    )


@router.delete("/media/{media_id}")
async def delete_media(
    media_id: str,
    current_user: dict = Depends(get_current_user),
    media: MediaService = Depends(get_media_service)
):
    """Delete a media item and its file (uploader or family moderator)"""
    media.delete_media(current_user, media_id)
    return {"message": "Media deleted successfully"}
