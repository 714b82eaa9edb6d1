import logging
import os
import tempfile
from typing import Optional

import cloudinary
import cloudinary.uploader
from fastapi import APIRouter, File, HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from services.school_directory.schemas.schools import UploadOut
from shared.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])

cloudinary.config(
    cloud_name=settings.cloudinary_cloud_name,
    api_key=settings.cloudinary_api_key,
    api_secret=settings.cloudinary_api_secret,
    secure=True,
)

CHUNK_SIZE = 64 * 1024

# Bounded to 800x600, automatic quality and format
IMAGE_TRANSFORMATION = [
    {"width": 800, "height": 600, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]


class UploadTooLarge(Exception):
    pass


async def _save_to_temp(image: UploadFile, max_bytes: int) -> str:
    """Stream the upload into a named temp file and return its path."""
    suffix = os.path.splitext(image.filename or "")[1]
    tmp = await run_in_threadpool(tempfile.NamedTemporaryFile, delete=False, suffix=suffix)
    written = 0
    try:
        while True:
            chunk = await image.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise UploadTooLarge()
            await run_in_threadpool(tmp.write, chunk)
    except BaseException:
        await run_in_threadpool(tmp.close)
        os.unlink(tmp.name)
        raise
    await run_in_threadpool(tmp.close)
    return tmp.name


def push_to_media_host(file_path: str) -> dict:
    return cloudinary.uploader.upload(
        file_path,
        folder=settings.upload_folder,
        transformation=IMAGE_TRANSFORMATION,
    )


# --- UPLOAD SCHOOL IMAGE ---
@router.post("/upload", response_model=UploadOut)
async def upload_image(image: Optional[UploadFile] = File(None)):
    if image is None or not image.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image file uploaded"
        )

    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please select an image file (JPEG, PNG, GIF)"
        )

    try:
        file_path = await _save_to_temp(image, settings.upload_max_bytes)
    except UploadTooLarge:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image size should be less than 5MB"
        )

    try:
        logger.info(f"Uploading {image.filename} to image host")
        result = await run_in_threadpool(push_to_media_host, file_path)
    except Exception as e:
        logger.error(f"Upload error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Upload failed"
        )
    finally:
        os.unlink(file_path)

    return UploadOut(
        message="File uploaded successfully",
        path=result["secure_url"],
        public_id=result["public_id"],
    )
