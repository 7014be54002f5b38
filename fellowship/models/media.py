"""Media models"""

from typing import List, Literal, Optional

from pydantic import BaseModel

MediaType = Literal["photo", "audio"]


class Media(BaseModel):
    id: str
    family_id: str
    type: MediaType
    title: str
    description: Optional[str] = None
    url: str
    download_url: str
    file_name: str
    size: int
    content_type: str
    uploaded_by: str
    uploaded_at: str
    tags: List[str] = []
