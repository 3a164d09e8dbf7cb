"""
Photo upload and signed download routes.

Photos are uploaded inline as base64, stored in the private bucket under
the uploader's id, and read back only through signed URLs.
"""
import logging
import posixpath
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from .. import API_PREFIX
from ...auth.dependencies import get_current_user, CurrentUser
from ...database.connection import get_db
from ...errors import Forbidden, NotFound, UpstreamError, ValidationFailed
from ...schemas.timesheet import PhotoUploadRequest, PhotoUploadResponse
from ...storage.object_storage import ObjectStorage, StorageError, decode_photo_data
from ...utils import epoch_millis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Photos"])


# PUBLIC_INTERFACE
def get_object_storage(db: Session = Depends(get_db)) -> ObjectStorage:
    """Photo bucket bound to the request's session; signed URLs point at this API."""
    return ObjectStorage(db, url_prefix=API_PREFIX)


def _object_name(file_name: str) -> str:
    return posixpath.basename(file_name.replace("\\", "/")).strip()


# PUBLIC_INTERFACE
@router.post("/upload-photo", response_model=PhotoUploadResponse,
            summary="Upload photo",
            description="Store a base64 photo and return a signed URL valid for one year.")
async def upload_photo(
    request: PhotoUploadRequest,
    current_user: CurrentUser = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_object_storage)
):
    """
    Upload a timesheet photo.

    The object path is ``{userId}/{epoch-ms}_{fileName}``; existing objects
    are never overwritten.
    """
    name = _object_name(request.file_name)
    if not name:
        raise ValidationFailed("Invalid file name")
    try:
        photo = decode_photo_data(request.photo_data)
    except ValueError as exc:
        raise ValidationFailed(str(exc))

    if not storage.can_sign:
        logger.error("Photo upload refused: STORAGE_SIGNING_KEY and SECRET_KEY are unset")
        raise UpstreamError("Failed to create photo URL")

    path = f"{current_user.user_id}/{epoch_millis()}_{name}"
    try:
        storage.upload(path, photo.data, photo.content_type)
    except StorageError as exc:
        logger.error(f"Photo upload to {path} failed: {exc}")
        raise UpstreamError("Failed to upload photo")

    try:
        url = storage.create_signed_url(path)
    except StorageError as exc:
        logger.error(f"Signing {path} failed: {exc}")
        raise UpstreamError("Failed to create photo URL")

    logger.info(f"Photo {path} uploaded ({len(photo.data)} bytes)")
    return PhotoUploadResponse(url=url, path=path)


# PUBLIC_INTERFACE
@router.get("/storage/{bucket}/{path:path}",
           summary="Download photo",
           description="Serve a stored object to the holder of a signed URL.",
           response_class=Response)
async def download_object(
    bucket: str,
    path: str,
    token: str = Query("", description="Signature from the signed URL"),
    storage: ObjectStorage = Depends(get_object_storage)
):
    if bucket != storage.bucket:
        raise NotFound("Object not found")
    if not storage.can_read(path, token):
        raise Forbidden("Invalid or expired signature")
    stored = storage.get(path)
    if stored is None:
        raise NotFound("Object not found")
    return Response(content=stored.data, media_type=stored.content_type)
