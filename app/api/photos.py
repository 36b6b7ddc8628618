# app/api/photos.py

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_db
from app.db.models import Photo as DBPhoto
from app.models.common import BaseResponse, DataResponse
from app.models.photo import Photo, PhotoUpdate
from app.services import photo_storage
from app.services.photo_storage import PhotoValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["Photos"])


def _parse_capture_date(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        # Accept the trailing "Z" browsers send
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid captureDate: {value}")


@router.get("", response_model=DataResponse[List[Photo]])
def list_photos(db: Session = Depends(get_db)):
    """All photos, newest capture first."""
    photos = db.query(DBPhoto).order_by(DBPhoto.capture_date.desc()).all()
    return DataResponse(
        success=True,
        message=f"{len(photos)} photos",
        data=[Photo.model_validate(p) for p in photos],
    )


@router.post("", response_model=DataResponse[Photo], status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    notes: Optional[str] = Form(None),
    captureDate: Optional[str] = Form(None),
    userId: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    content = await file.read()
    user_id = userId or None
    try:
        photo_storage.validate_photo(len(content), file.content_type)
        photo_storage.validate_user_id(user_id)
    except PhotoValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    capture_date = _parse_capture_date(captureDate)
    filename = photo_storage.generate_photo_filename(file.filename or "", user_id)

    try:
        photo_storage.save_photo_file(content, filename, user_id)
    except (OSError, PhotoValidationError) as e:
        logger.error(f"Error saving photo file {filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save photo file")

    dimensions = photo_storage.get_image_dimensions(content)
    width, height = dimensions if dimensions else (None, None)

    photo = DBPhoto(
        user_id=user_id,
        filename=filename,
        original_name=file.filename,
        capture_date=capture_date,
        notes=notes or None,
        file_size=len(content),
        mime_type=file.content_type,
        width=width,
        height=height,
    )
    db.add(photo)
    try:
        db.commit()
        db.refresh(photo)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving photo metadata for {filename}: {e}")
        photo_storage.delete_photo_file(filename, user_id)
        raise HTTPException(status_code=500, detail="Failed to upload photo")

    logger.info(f"Uploaded photo {photo.id} as {filename}")
    return DataResponse(success=True, message="Photo uploaded", data=Photo.model_validate(photo))


@router.get("/{photo_id}")
def get_photo(photo_id: str, db: Session = Depends(get_db)):
    """Photo metadata, or the image itself when a filename is requested."""
    if "." in photo_id:
        photo = db.query(DBPhoto).filter(DBPhoto.filename == photo_id).first()
        try:
            path = photo_storage.get_photo_path(photo_id, photo.user_id if photo else None)
        except PhotoValidationError:
            raise HTTPException(status_code=404, detail="Photo not found")
        if not os.path.isfile(path):
            raise HTTPException(status_code=404, detail="Photo not found")
        return FileResponse(
            path,
            media_type=photo_storage.content_type_for(photo_id),
            headers={"Cache-Control": "public, max-age=31536000"},
        )

    photo = db.query(DBPhoto).filter(DBPhoto.id == photo_id).first()
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")
    return DataResponse[Photo](success=True, message="Photo found", data=Photo.model_validate(photo))


@router.put("/{photo_id}", response_model=DataResponse[Photo])
def update_photo(photo_id: str, payload: PhotoUpdate, db: Session = Depends(get_db)):
    photo = db.query(DBPhoto).filter(DBPhoto.id == photo_id).first()
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")

    photo.notes = payload.notes
    try:
        db.commit()
        db.refresh(photo)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating photo {photo_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update photo")

    return DataResponse(success=True, message="Photo updated", data=Photo.model_validate(photo))


@router.delete("/{photo_id}", response_model=BaseResponse)
def delete_photo(photo_id: str, db: Session = Depends(get_db)):
    photo = db.query(DBPhoto).filter(DBPhoto.id == photo_id).first()
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")

    # Row goes even if the file is already gone
    photo_storage.delete_photo_file(photo.filename, photo.user_id)

    try:
        db.delete(photo)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting photo {photo_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete photo")

    return BaseResponse(success=True, message="Photo deleted")
