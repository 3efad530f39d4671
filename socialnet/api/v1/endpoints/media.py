"""Media upload endpoint."""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from socialnet.api.deps import get_current_active_user
from socialnet.models.user import User
from socialnet.schemas.media import MediaUploadResponse
from socialnet.services.media_service import media_service
from socialnet.utils.file_handler import read_upload_file

router = APIRouter(
    prefix="/media",
    tags=["Media"],
)


@router.post(
    "/upload",
    response_model=MediaUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image or video",
    description="""
    Validates extension, size and file signature, then stores the file on the
    media host. Returns the public URL and detected type (`image` or `video`)
    for use in posts, comments or stories.
    """,
)
def upload_media(
    file: UploadFile = File(...),
    kind: str = Query("publication", pattern="^(publication|story)$"),
    current_user: User = Depends(get_current_active_user),
) -> MediaUploadResponse:
    content, _ = read_upload_file(file)
    uploaded = media_service.upload(content, current_user.id, kind)
    return MediaUploadResponse(url=uploaded["url"], type=uploaded["type"])
