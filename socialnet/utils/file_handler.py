"""Upload validation for media sent to the media store"""
import logging
from pathlib import Path
from typing import Optional, Set, Tuple

from fastapi import UploadFile

from socialnet.config import settings
from socialnet.core.exceptions import ValidationError

# Setup logging
logger = logging.getLogger(__name__)

# ============================================
# FILE TYPE DEFINITIONS WITH MIME VALIDATION
# ============================================

# Magic bytes signatures checked at offset 0
MAGIC_BYTES = {
    # JPEG: FFD8FF
    "jpeg": [b"\xff\xd8\xff"],
    # PNG: 89504E47
    "png": [b"\x89PNG\r\n\x1a\n"],
    # GIF: GIF87a or GIF89a
    "gif": [b"GIF87a", b"GIF89a"],
    # WebM / Matroska: EBML header
    "webm": [b"\x1a\x45\xdf\xa3"],
}

# Extension to magic type mapping
EXTENSION_TO_TYPE = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".gif": "gif",
    ".webp": "webp",
    ".mp4": "mp4",
    ".mov": "mp4",
    ".webm": "webm",
}

# Allowed file types per resource kind
ALLOWED_IMAGES: Set[str] = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_VIDEOS: Set[str] = {".mp4", ".mov", ".webm"}

MAX_UPLOAD_SIZE = settings.MAX_UPLOAD_SIZE


# ============================================
# SECURITY VALIDATION FUNCTIONS
# ============================================

def validate_magic_bytes(file_content: bytes, expected_type: str) -> bool:
    """
    Validate file content by checking magic bytes (file signature).

    Args:
        file_content: File bytes (only the header is inspected)
        expected_type: Expected file type (jpeg, png, gif, webp, mp4, webm)

    Returns:
        True if magic bytes match expected type
    """
    # Container formats carry their signature past offset 0
    if expected_type == "webp":
        return file_content[:4] == b"RIFF" and file_content[8:12] == b"WEBP"
    if expected_type == "mp4":
        return file_content[4:8] == b"ftyp"

    signatures = MAGIC_BYTES.get(expected_type)
    if not signatures:
        return False
    return any(file_content.startswith(signature) for signature in signatures)


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal and other attacks.

    Args:
        filename: Original filename from upload

    Returns:
        Sanitized filename (only alphanumeric, dash, underscore, and dot)
    """
    if not filename:
        return "unnamed"

    # Get only the basename (remove any path components)
    basename = Path(filename).name

    safe_chars = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.")
    sanitized = "".join(c if c in safe_chars else "_" for c in basename)

    # Ensure it doesn't start with a dot (hidden file)
    while sanitized.startswith("."):
        sanitized = sanitized[1:]

    return sanitized if sanitized else "unnamed"


def get_file_extension(filename: str) -> str:
    """Safely get file extension in lowercase."""
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def resource_kind_for(file_ext: str) -> Optional[str]:
    """Map an extension to the media store resource kind ("image" or "video")."""
    if file_ext in ALLOWED_IMAGES:
        return "image"
    if file_ext in ALLOWED_VIDEOS:
        return "video"
    return None


# ============================================
# MAIN VALIDATION FUNCTION
# ============================================

def validate_media_content(
    file_content: bytes,
    filename: str,
    max_size_bytes: Optional[int] = None,
) -> Tuple[str, str]:
    """
    Validate raw media bytes against their declared filename.

    Returns:
        Tuple of (file_extension, resource_kind)

    Raises:
        ValidationError: If extension, size or content signature is invalid
    """
    original_filename = sanitize_filename(filename)
    file_ext = get_file_extension(original_filename)

    kind = resource_kind_for(file_ext)
    if kind is None:
        allowed = sorted(ALLOWED_IMAGES | ALLOWED_VIDEOS)
        raise ValidationError(f"File type not allowed. Accepted formats: {', '.join(allowed)}")

    if len(file_content) == 0:
        raise ValidationError("Empty files are not allowed")

    max_size = max_size_bytes or MAX_UPLOAD_SIZE
    if len(file_content) > max_size:
        size_mb = max_size / (1024 * 1024)
        raise ValidationError(f"File too large. Maximum: {size_mb:.1f}MB")

    expected_type = EXTENSION_TO_TYPE[file_ext]
    if not validate_magic_bytes(file_content, expected_type):
        logger.warning(
            f"Magic bytes mismatch - filename: {original_filename}, "
            f"expected_type: {expected_type}"
        )
        raise ValidationError("File content does not match its extension")

    logger.info(f"Media validated: kind={kind}, ext={file_ext}, size={len(file_content)} bytes")
    return file_ext, kind


def read_upload_file(upload_file: UploadFile, max_size_bytes: Optional[int] = None) -> Tuple[bytes, str]:
    """
    Read and validate a multipart upload.

    Returns:
        Tuple of (file_content, resource_kind)
    """
    if not upload_file or not upload_file.filename:
        raise ValidationError("Invalid or missing file")

    upload_file.file.seek(0)
    file_content = upload_file.file.read()
    upload_file.file.seek(0)

    _, kind = validate_media_content(file_content, upload_file.filename, max_size_bytes)
    return file_content, kind
