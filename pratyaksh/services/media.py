"""
media.py — MIME detection and upload limits.
"""

import base64
import binascii

_MIME_MAP = {
    ".jpg":  "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png":  "image/png",
    ".webp": "image/webp",
    ".mp3":  "audio/mpeg",
    ".wav":  "audio/wav",
    ".m4a":  "audio/mp4",
    ".mp4":  "video/mp4",
    ".mov":  "video/quicktime",
}

ACCEPTED_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "video/mp4",
    "video/quicktime",
    "audio/mpeg",
    "audio/wav",
    "audio/mp4",
})

MAX_FILE_SIZE = 50 * 1024 * 1024   # videos and anything else
MAX_IMAGE_SIZE = 10 * 1024 * 1024
MAX_AUDIO_SIZE = 25 * 1024 * 1024


def mime_from_filename(filename: str) -> str:
    """Derive a MIME type from a filename extension."""
    ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return _MIME_MAP.get(ext, "application/octet-stream")


def max_size_for(media_type: str) -> int:
    if media_type.startswith("image/"):
        return MAX_IMAGE_SIZE
    if media_type.startswith("audio/"):
        return MAX_AUDIO_SIZE
    return MAX_FILE_SIZE


def decode_b64(data: str) -> bytes:
    """
    Decode base64, tolerating a leading data: URL prefix.

    Raises:
        ValueError: not valid base64.
    """
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid base64 media data") from exc
