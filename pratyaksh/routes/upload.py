"""
upload.py — Media upload endpoint.

Routes:
  POST /api/v1/upload — store base64 media in memory, return a file id

The file id is then passed to POST /api/v1/analyze. Stored files expire
after settings.file_ttl_seconds.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status

from pratyaksh.core.rate_limit import limiter
from pratyaksh.models.upload import FileMetadata, UploadRequest, UploadResponse
from pratyaksh.services.file_storage import file_store
from pratyaksh.services.media import ACCEPTED_TYPES, decode_b64, max_size_for, mime_from_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["upload"])


@router.post("/upload", response_model=UploadResponse, status_code=200)
@limiter.limit("30/minute")
async def upload_file(request: Request, payload: UploadRequest):
    """
    Validate and store an uploaded file.

    Returns 400 for undecodable data or unsupported types, 413 when the file
    exceeds the limit for its category (image 10 MB, audio 25 MB, other 50 MB).
    """
    media_type = (payload.content_type or mime_from_filename(payload.filename)).lower()

    try:
        data = decode_b64(payload.file_b64)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    max_size = max_size_for(media_type)
    if len(data) > max_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds {max_size // (1024 * 1024)} MB limit for {media_type.split('/')[0]} files",
        )

    if media_type not in ACCEPTED_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type. Please upload JPG, PNG, MP4, MOV, MP3, WAV, or M4A files.",
        )

    file_id = str(time.time_ns())
    metadata = FileMetadata(
        original_name=payload.filename,
        filename=f"{file_id}-{payload.filename}",
        size=len(data),
        type=media_type,
        uploaded_at=datetime.now(tz=timezone.utc).isoformat(),
    )
    file_store.store(file_id, data, metadata)

    logger.info("File stored: %s, %d bytes, type %s", payload.filename, len(data), media_type)
    return UploadResponse(file_id=file_id, metadata=metadata)
