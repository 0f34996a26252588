"""
admin.py — Pydantic models for the API-key administration endpoints.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class KeysResponse(BaseModel):
    """Masked view of the credential pool."""

    keys: dict[str, str]   # key id → masked secret
    total_keys: int
    working_keys: int      # keys with a non-blank secret


class KeysUpdateRequest(BaseModel):
    """
    Keys to overwrite, by id. Non-string values are ignored; an empty string
    blanks a key without removing it.
    """

    keys: dict[str, Any] = Field(..., description="Mapping of key id to new secret")


class KeysUpdateResponse(BaseModel):
    success: bool = True
    total_keys: int
    working_keys: int


class KeyTestRequest(BaseModel):
    key_id: Optional[str] = None
    key: str = ""


class KeyTestResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class KeyCheckResult(BaseModel):
    key_id: str
    working: bool
    error: Optional[str] = None


class FallbackTestResponse(BaseModel):
    """Diagnostics from POST /api/v1/admin/test-fallback."""

    success: bool
    message: str
    total_keys: int
    working_keys: int
    fallback_used: bool
    keys: list[KeyCheckResult] = Field(default_factory=list)
    details: list[str] = Field(default_factory=list)
    final_result: Optional[dict] = None
