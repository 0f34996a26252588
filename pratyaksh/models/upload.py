"""
upload.py — Pydantic models for the media upload endpoint.

The front-end reads the file with FileReader.readAsDataURL(), strips the
"data:...;base64," prefix and posts the raw base64 string here.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    file_b64: str = Field(..., min_length=1, description="Base64-encoded media data")
    filename: str = Field(..., min_length=1, max_length=255, description="Original filename")
    content_type: Optional[str] = Field(default=None, description="MIME type; derived from filename if omitted")


class FileMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_name: str = Field(..., alias="originalName")
    filename: str
    size: int
    type: str
    uploaded_at: str = Field(..., alias="uploadedAt")


class UploadResponse(BaseModel):
    success: bool = True
    file_id: str
    metadata: FileMetadata
    message: str = "File uploaded successfully"
