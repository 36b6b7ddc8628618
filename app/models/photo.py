# app/models/photo.py
from datetime import datetime
from typing import Optional

from app.models.common import CamelModel


class Photo(CamelModel):
    id: str
    user_id: Optional[str] = None
    filename: str
    original_name: Optional[str] = None
    capture_date: datetime
    notes: Optional[str] = None
    file_size: int
    mime_type: str
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PhotoUpdate(CamelModel):
    notes: Optional[str] = None
