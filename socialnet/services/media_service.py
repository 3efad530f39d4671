"""Cloudinary media store adapter for post and story assets."""

import io
import logging
import re
import uuid
from typing import Dict, Optional
from urllib.parse import urlsplit

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from socialnet.config import settings
from socialnet.core.exceptions import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

UPLOAD_KINDS = ("publication", "story")
RESOURCE_KINDS = ("image", "video")

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class MediaService:
    """
    Upload and delete binary assets on Cloudinary.

    Assets are stored under ``CLOUDINARY_FOLDER`` with a random public id and
    the owner and upload kind as tags, so a hosted URL is enough to find the
    asset again for deletion.
    """

    def __init__(self):
        self._configured: bool = False

    def _configure(self) -> None:
        if self._configured:
            return
        if not settings.CLOUDINARY_CLOUD_NAME:
            raise UpstreamError("Media store is not configured")
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )
        self._configured = True
        logger.info(f"Cloudinary configured for cloud: {settings.CLOUDINARY_CLOUD_NAME}")

    def upload(self, data: bytes, owner_id: int, kind: str = "publication") -> Dict[str, str]:
        """
        Upload raw bytes and return the hosted ``{url, type}`` pair.

        Args:
            data: File content.
            owner_id: User the asset belongs to.
            kind: "publication" or "story".

        Returns:
            Dict with the secure URL and the detected resource type ("image" or "video").

        Raises:
            ValidationError: Unknown upload kind or empty payload.
            UpstreamError: Cloudinary rejected the upload or is unreachable.
        """
        if kind not in UPLOAD_KINDS:
            raise ValidationError(f"Invalid upload kind. Must be one of: {', '.join(UPLOAD_KINDS)}")
        if not data:
            raise ValidationError("Empty upload")

        self._configure()

        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                resource_type="auto",
                folder=settings.CLOUDINARY_FOLDER,
                public_id=str(uuid.uuid4()),
                tags=[kind, f"user_{owner_id}"],
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload failed for user_id={owner_id}: {e}")
            raise UpstreamError("Media upload failed") from e

        url = result.get("secure_url")
        if not url:
            logger.error(f"Cloudinary upload returned no URL for user_id={owner_id}: {result}")
            raise UpstreamError("Media upload failed")

        logger.info(f"Media uploaded: user_id={owner_id}, kind={kind}, public_id={result.get('public_id')}")
        return {"url": url, "type": result.get("resource_type", "image")}

    def delete(self, public_id: str, kind: str = "image") -> bool:
        """
        Destroy an asset by public id.

        Returns:
            True if the asset was removed, False if it did not exist.

        Raises:
            UpstreamError: Cloudinary could not be reached or refused the call.
        """
        if kind not in RESOURCE_KINDS:
            raise ValidationError(f"Invalid resource kind: {kind}")

        self._configure()

        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=kind, invalidate=True)
        except CloudinaryError as e:
            raise UpstreamError(f"Media delete failed for {public_id}") from e

        outcome = result.get("result")
        if outcome == "ok":
            logger.info(f"Media deleted: {kind} {public_id}")
            return True
        if outcome == "not found":
            logger.info(f"Media already gone: {kind} {public_id}")
            return False
        raise UpstreamError(f"Unexpected media delete result for {public_id}: {outcome}")

    @staticmethod
    def extract_public_id(url: str) -> Optional[str]:
        """
        Derive the Cloudinary public id from a hosted URL.

        ``https://res.cloudinary.com/demo/video/upload/v17/reseau-social/abc.mp4``
        becomes ``reseau-social/abc``. Returns None when the URL has no
        ``upload`` segment or no filename.
        """
        if not url:
            return None

        path = urlsplit(url).path
        segments = [segment for segment in path.split("/") if segment]
        if "upload" not in segments:
            return None

        remaining = segments[segments.index("upload") + 1:]
        if remaining and _VERSION_SEGMENT.match(remaining[0]):
            remaining = remaining[1:]
        if not remaining:
            return None

        filename = remaining[-1].split(".")[0]
        if not filename:
            return None
        return "/".join(remaining[:-1] + [filename])


# Singleton instance
media_service = MediaService()
