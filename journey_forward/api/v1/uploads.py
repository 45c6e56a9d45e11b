"""Item photo uploads."""

from fastapi import APIRouter, Depends, File, UploadFile

from journey_forward.dependencies import get_image_storage
from journey_forward.uploads.storage import ImageStorage

router = APIRouter(prefix="/api/v1", tags=["uploads"])


@router.post("/uploads")
async def upload_image(
    file: UploadFile = File(...),
    storage: ImageStorage = Depends(get_image_storage),
):
    uploaded = await storage.upload(file.file, file.filename or "", file.content_type or "")
    return {"url": uploaded.url, "key": uploaded.key}
