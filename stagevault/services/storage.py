"""Cloudflare R2 image storage service."""

from __future__ import annotations

import asyncio
import io
import logging
import secrets
import string
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from stagevault.config import settings
from stagevault.exceptions import StorageFailure, UploadFailure
from stagevault.models.storage import StoragePath, UploadProgress

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
)

_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class ImageFile:
    """An image received from the client, held in memory until uploaded."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def generate_unique_filename(original_name: str) -> str:
    """
    Build a collision-resistant object name that keeps the original extension.

    Returns:
        "<epoch millis>-<6 random chars>.<ext>"
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    extension = original_name.rsplit(".", 1)[-1]
    return f"{millis}-{suffix}.{extension}"


def validate_image_file(content_type: str, size: int, max_size_mb: int | None = None) -> str | None:
    """
    Check an image against the allowed types and size limit.

    Args:
        content_type: MIME type reported for the file
        size: File size in bytes
        max_size_mb: Limit in megabytes, defaults to settings.IMAGE_MAX_SIZE_MB

    Returns:
        None if valid, otherwise a message for the user
    """
    limit_mb = max_size_mb if max_size_mb is not None else settings.IMAGE_MAX_SIZE_MB
    if content_type not in ALLOWED_IMAGE_TYPES:
        return f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}"
    if size > limit_mb * 1024 * 1024:
        return f"File size exceeds {limit_mb}MB limit"
    return None


class BlobStorage:
    """Cloudflare R2 image storage using the S3-compatible API."""

    def __init__(self) -> None:
        """Initialize storage with credentials from settings."""
        self.session = aioboto3.Session()
        self.endpoint = settings.R2_ENDPOINT
        self.access_key = settings.R2_ACCESS_KEY
        self.secret_key = settings.R2_SECRET_KEY
        self.bucket = settings.R2_IMAGES_BUCKET
        self.public_url = settings.R2_PUBLIC_URL.rstrip("/")

    def _client(self):
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
        )

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def is_storage_url(self, url: str) -> bool:
        """True only for URLs served from our own image host."""
        return self.key_for_url(url) is not None

    def key_for_url(self, url: str) -> str | None:
        prefix = self.public_url + "/"
        if not url.startswith(prefix):
            return None
        key = unquote(urlparse(url).path.lstrip("/"))
        # Public URL may itself carry a path prefix
        base_path = urlparse(self.public_url).path.strip("/")
        if base_path and key.startswith(base_path + "/"):
            key = key[len(base_path) + 1 :]
        return key or None

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        recording_id: str,
        storage_path: StoragePath = "main",
        on_progress: Callable[[float], None] | None = None,
    ) -> str:
        """
        Upload one image under recordings/<recording_id>/<storage_path>/.

        Args:
            data: File contents
            filename: Original filename, used for the extension only
            content_type: MIME type stored with the object
            recording_id: Recording the image belongs to
            storage_path: "main" for the cover image, "gallery" otherwise
            on_progress: Called with percent transferred (0-100)

        Returns:
            Public URL of the uploaded image

        Raises:
            UploadFailure: If the object store rejects the upload
        """
        key = f"recordings/{recording_id}/{storage_path}/{generate_unique_filename(filename)}"
        total = len(data) or 1
        transferred = 0

        def callback(chunk: int) -> None:
            nonlocal transferred
            transferred += chunk
            if on_progress is not None:
                on_progress(min(100.0, transferred * 100 / total))

        try:
            async with self._client() as s3:
                await s3.upload_fileobj(
                    io.BytesIO(data),
                    self.bucket,
                    key,
                    ExtraArgs={"ContentType": content_type},
                    Callback=callback,
                )
        except (ClientError, BotoCoreError) as e:
            logger.warning("upload of %s failed: %s", filename, e)
            raise UploadFailure(filename, str(e) or "Upload failed") from e

        logger.info("uploaded %s to %s", filename, key)
        return self.url_for(key)

    async def upload_many(
        self,
        files: list[ImageFile],
        recording_id: str,
        storage_path: StoragePath = "gallery",
        on_progress: Callable[[int, UploadProgress], None] | None = None,
    ) -> list[UploadProgress]:
        """
        Upload files concurrently. A failed file is reported and the rest
        carry on.

        Args:
            files: Images to upload
            recording_id: Recording the images belong to
            storage_path: "main" or "gallery"
            on_progress: Called with (file index, snapshot of its progress)
                on every transferred chunk and once more when the file
                finishes or fails

        Returns:
            One UploadProgress per file, in input order
        """
        uploads = [UploadProgress(filename=f.filename) for f in files]

        def report(index: int) -> None:
            if on_progress is not None:
                on_progress(index, uploads[index].model_copy())

        async def run(index: int, image: ImageFile) -> None:
            progress = uploads[index]

            def on_chunk(percent: float) -> None:
                progress.progress = percent
                report(index)

            try:
                url = await self.upload(
                    image.data,
                    image.filename,
                    image.content_type,
                    recording_id,
                    storage_path,
                    on_chunk,
                )
            except UploadFailure as e:
                progress.status = "error"
                progress.error = e.message
                progress.progress = 0.0
            else:
                progress.status = "success"
                progress.url = url
                progress.progress = 100.0
            report(index)

        await asyncio.gather(*(run(i, f) for i, f in enumerate(files)))
        return uploads

    async def delete(self, url: str) -> bool:
        """
        Delete an image by its public URL.

        URLs that are not on our image host are left alone, so callers can
        drop external links from a recording without touching storage.

        Args:
            url: Public URL of the image

        Returns:
            True if an object delete was issued, False for external URLs

        Raises:
            StorageFailure: If the object store rejects the delete
        """
        key = self.key_for_url(url)
        if key is None:
            return False
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.warning("delete of %s failed: %s", key, e)
            raise StorageFailure("delete", key, str(e) or "Delete failed") from e
        logger.info("deleted image %s", key)
        return True


# Singleton instance
blob_storage = BlobStorage()
