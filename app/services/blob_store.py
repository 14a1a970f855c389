import asyncio
import os
import uuid
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from io import BytesIO
from typing import Optional, Protocol
from urllib.parse import quote

from minio import Minio
from minio.error import S3Error

from app.configs.settings import settings
from app.core.exceptions import UploadError
from app.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Result of a blob write: opaque handle plus public reference"""
    handle: str
    url: str


class BlobStore(Protocol):
    async def put(
        self, data: bytes, *, owner_id: str, file_name: str, content_type: Optional[str] = None
    ) -> StoredObject: ...

    async def delete(self, handle: str) -> bool: ...

    async def presigned_url(self, handle: str, download_name: Optional[str] = None) -> str: ...


class MinIOBlobStore:
    """Blob store backed by a single MinIO bucket, objects keyed `<owner_id>/<random><ext>`"""

    def __init__(self, bucket_name: Optional[str] = None, client: Optional[Minio] = None):
        self.bucket_name = bucket_name or settings.MINIO_BUCKET
        self.client = client or Minio(
            endpoint=settings.MINIO_URL.replace(
                "http://", "").replace("https://", ""),
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SSL
        )

    async def async_ensure_bucket(self) -> bool:
        """Create the bucket if it does not exist yet"""
        try:
            exists = await asyncio.to_thread(self.client.bucket_exists, self.bucket_name)
            if not exists:
                await asyncio.to_thread(self.client.make_bucket, self.bucket_name)
                logger.info(f"Created bucket {self.bucket_name}")
            return True
        except Exception as e:
            logger.error(f"Error ensuring bucket {self.bucket_name}: {e}")
            return False

    def _object_name(self, owner_id: str, file_name: str) -> str:
        _, ext = os.path.splitext(file_name or "")
        return f"{owner_id}/{uuid.uuid4().hex}{ext.lower()}"

    def _public_url(self, object_name: str) -> str:
        base_url = (settings.MINIO_PUBLIC_URL or settings.MINIO_URL).rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            base_url = f"{'https' if settings.MINIO_SSL else 'http'}://{base_url}"
        return f"{base_url}/{self.bucket_name}/{quote(object_name)}"

    async def put(
        self, data: bytes, *, owner_id: str, file_name: str, content_type: Optional[str] = None
    ) -> StoredObject:
        """Upload bytes, raises UploadError when the write fails"""
        object_name = self._object_name(owner_id, file_name)

        def _upload():
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream"
            )

        try:
            await asyncio.to_thread(_upload)
        except Exception as e:
            logger.error(f"Error uploading bytes to {self.bucket_name}/{object_name}: {e}")
            raise UploadError("Error while uploading the file to storage") from e

        logger.info(f"Uploaded {len(data)} bytes to {self.bucket_name}/{object_name}")
        return StoredObject(handle=object_name, url=self._public_url(object_name))

    async def delete(self, handle: str) -> bool:
        """Remove an object; a missing object counts as deleted"""
        if not handle:
            return True
        try:
            await asyncio.to_thread(self.client.remove_object, self.bucket_name, handle)
            return True
        except S3Error as e:
            if e.code == "NoSuchKey":
                return True
            logger.error(f"Error removing object {handle} from {self.bucket_name}: {e}")
            return False
        except Exception as e:
            logger.error(f"Error removing object {handle} from {self.bucket_name}: {e}")
            return False

    async def presigned_url(self, handle: str, download_name: Optional[str] = None) -> str:
        """Presigned GET url forcing download under `download_name`, empty string on failure"""
        response_headers = {}
        if download_name:
            response_headers["response-content-disposition"] = f'attachment; filename="{download_name}"'

        def _get_url():
            return self.client.presigned_get_object(
                bucket_name=self.bucket_name,
                object_name=handle,
                expires=timedelta(minutes=settings.MINIO_URL_EXPIRES_MINUTES),
                response_headers=response_headers
            )

        try:
            return await asyncio.to_thread(_get_url)
        except Exception as e:
            logger.error(f"Error getting URL for {self.bucket_name}/{handle}: {e}")
            return ""


@lru_cache(maxsize=1)
def get_blob_store() -> MinIOBlobStore:
    return MinIOBlobStore()
