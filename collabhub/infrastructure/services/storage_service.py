"""
Storage Service for CollabHub

Uploads resumes, portfolios and project files to Supabase Storage and
returns their public URLs.
"""

import logging
import time
from typing import Optional
from uuid import UUID

from supabase import Client

from collabhub.config.settings import Settings, get_settings
from collabhub.infrastructure.exceptions import StorageError


logger = logging.getLogger(__name__)


def _extension(filename: str) -> str:
    if "." not in filename:
        return "bin"
    return filename.rsplit(".", 1)[-1].lower() or "bin"


class StorageService:
    """Thin wrapper over Supabase Storage buckets."""

    def __init__(self, client: Client, settings: Optional[Settings] = None):
        self._client = client
        self._settings = settings or get_settings()

    async def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload `content` and return its public URL.

        Raises:
            StorageError: If the upload fails
        """
        file_options = {"upsert": "true"}
        if content_type:
            file_options["content-type"] = content_type
        try:
            self._client.storage.from_(bucket).upload(path, content, file_options)
            url = self._client.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise StorageError(
                f"Error uploading file: {str(e)}",
                bucket=bucket,
                path=path,
                original_error=e,
            )
        logger.info(f"Uploaded {bucket}/{path}")
        return url

    async def delete_file(self, bucket: str, path: str) -> None:
        try:
            self._client.storage.from_(bucket).remove([path])
        except Exception as e:
            raise StorageError(
                f"Error deleting file: {str(e)}",
                bucket=bucket,
                path=path,
                original_error=e,
            )

    async def upload_resume(
        self, user_id: UUID, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        bucket = self._settings.resume_bucket
        path = f"resumes/{user_id}-resume.{_extension(filename)}"
        return await self.upload_file(bucket, path, content, content_type)

    async def upload_portfolio(
        self, user_id: UUID, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        bucket = self._settings.portfolio_bucket
        path = f"portfolios/{user_id}-portfolio.{_extension(filename)}"
        return await self.upload_file(bucket, path, content, content_type)

    async def upload_project_file(
        self, project_id: UUID, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> str:
        bucket = self._settings.project_files_bucket
        stamp = int(time.time() * 1000)
        path = f"projects/{project_id}/{project_id}-{stamp}.{_extension(filename)}"
        return await self.upload_file(bucket, path, content, content_type)
