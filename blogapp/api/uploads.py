from fastapi import APIRouter, Depends, File, UploadFile

from blogapp.dependencies import get_upload_store
from blogapp.services.uploads import UploadStore

router = APIRouter(prefix="/file", tags=["uploads"])


@router.post("/upload")
async def file_upload(upload: UploadFile = File(...), store: UploadStore = Depends(get_upload_store)):
    """Store an image and return its URL in the shape rich-text editors expect"""
    content = await upload.read()
    url = store.store(content, upload.filename or "")
    return {"uploaded": True, "url": url}
