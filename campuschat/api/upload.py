# FILE: campuschat/api/upload.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from campuschat.api.deps import get_current_user
from campuschat.services import upload_service

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("")
async def upload_meme(
        request: Request,
        meme: Optional[UploadFile] = File(None),
        user=Depends(get_current_user),
):
    name = await upload_service.save_image(meme)
    file_url = f"{str(request.base_url).rstrip('/')}/uploads/{name}"
    return {"success": True, "fileUrl": file_url}
