"""
S3 client for job input/output objects.

Wraps an S3-compatible bucket (AWS S3 or MinIO): object put/get/delete,
existence checks, and presigned URLs so clients upload and download directly
without routing bytes through the API. Download URLs are cached per key and
reissued before they expire.

Every failure surfaces as StorageError carrying the key and the operation,
except a missing object on exists(), which is a plain False.

Dependencies: boto3, botocore
System role: Object storage gateway for the API and conversion workers
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from vecta.configs.storage import StorageSettings
from vecta.core.exceptions import StorageError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_DELETE_BATCH_SIZE = 1000
_STREAM_CHUNK_SIZE = 64 * 1024


@dataclass
class _CachedUrl:
    url: str
    refresh_at: float


class ObjectStorage:
    """S3 client for job objects with a short-lived download URL cache."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        presigned_url_expiry: int = 3600,
        cache_margin: int = 300,
        client=None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize S3 client for the job bucket.

        Args:
            bucket: S3 bucket name
            region: AWS region for the bucket
            presigned_url_expiry: Default presigned URL lifetime in seconds
            cache_margin: Seconds before expiry at which cached URLs are reissued
            client: Preconfigured boto3 S3 client (created from region if None)
            clock: Monotonic clock used for cache expiry
        """
        self._bucket = bucket
        self._region = region
        self._expiry = presigned_url_expiry
        self._cache_margin = cache_margin
        self._s3_client = client or boto3.client("s3", region_name=region)
        self._clock = clock
        self._url_cache: dict[str, _CachedUrl] = {}
        self._lock = threading.Lock()

    @property
    def bucket(self) -> str:
        return self._bucket

    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Upload bytes to key."""
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError("upload", key, e) from e

    def get(self, key: str) -> bytes:
        """Download the full object body."""
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise StorageError("download", key, e) from e

    def get_stream(self, key: str, chunk_size: int = _STREAM_CHUNK_SIZE) -> Iterator[bytes]:
        """
        Stream an object body in chunks.

        The GET request is issued before the first chunk is yielded, so a
        missing object fails on the first next() call.
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError("stream", key, e) from e

        body = response["Body"]
        try:
            for chunk in body.iter_chunks(chunk_size):
                yield chunk
        except (ClientError, BotoCoreError) as e:
            raise StorageError("stream", key, e) from e
        finally:
            body.close()

    def delete(self, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError("delete", key, e) from e
        self._evict(key)

    def delete_many(self, keys: list[str]) -> None:
        """
        Delete keys in batches of 1000 (the S3 DeleteObjects limit).

        Per-key errors reported in the response are raised as StorageError.
        """
        if not keys:
            return
        for start in range(0, len(keys), _DELETE_BATCH_SIZE):
            batch = keys[start:start + _DELETE_BATCH_SIZE]
            joined = ", ".join(batch)
            try:
                response = self._s3_client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                raise StorageError("bulk delete", joined, e) from e

            errors = response.get("Errors") or []
            if errors:
                failed = ", ".join(err.get("Key", "?") for err in errors)
                raise StorageError("bulk delete", failed, errors[0].get("Message", "unknown error"))
        for key in keys:
            self._evict(key)

    def exists(self, key: str) -> bool:
        """
        Check if an object exists.

        Returns:
            bool: True if the object exists, False if S3 reports it missing
        """
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if code in _NOT_FOUND_CODES or status == 404:
                return False
            raise StorageError("check existence of", key, e) from e
        except BotoCoreError as e:
            raise StorageError("check existence of", key, e) from e

    def presign_upload(
        self,
        key: str,
        content_type: str,
        expires_in: int | None = None,
    ) -> tuple[str, datetime]:
        """
        Generate presigned URL for uploading an object.

        Args:
            key: Object key
            content_type: MIME type the client must send
            expires_in: URL lifetime in seconds (defaults to configured expiry)

        Returns:
            tuple[str, datetime]: (presigned_url, expires_at)
        """
        expires_in = expires_in or self._expiry
        try:
            url = self._s3_client.generate_presigned_url(
                ClientMethod="put_object",
                Params={"Bucket": self._bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError("generate upload URL for", key, e) from e
        return url, datetime.now(timezone.utc) + timedelta(seconds=expires_in)

    def presign_download(self, key: str, expires_in: int | None = None) -> str:
        """
        Get a presigned GET URL, reusing a cached one while it is fresh.

        Stale cache entries are evicted lazily on read.
        """
        expires_in = expires_in or self._expiry
        now = self._clock()
        with self._lock:
            cached = self._url_cache.get(key)
            if cached is not None:
                if now < cached.refresh_at:
                    return cached.url
                del self._url_cache[key]

        try:
            url = self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError("generate download URL for", key, e) from e

        refresh_at = now + max(expires_in - self._cache_margin, 0)
        with self._lock:
            self._url_cache[key] = _CachedUrl(url=url, refresh_at=refresh_at)
        return url

    def check_bucket(self) -> bool:
        """Health check: True if the bucket is reachable."""
        try:
            self._s3_client.head_bucket(Bucket=self._bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning("Bucket health check failed", extra={"bucket": self._bucket, "error": str(e)})
            return False

    def _evict(self, key: str) -> None:
        with self._lock:
            self._url_cache.pop(key, None)


def build_object_storage(settings: StorageSettings) -> ObjectStorage:
    """Create an ObjectStorage from settings (AWS or MinIO endpoint)."""
    client = boto3.client(
        "s3",
        region_name=settings.region,
        endpoint_url=settings.endpoint_url,
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if settings.force_path_style else "auto"},
        ),
    )
    return ObjectStorage(
        bucket=settings.bucket,
        region=settings.region,
        presigned_url_expiry=settings.presigned_url_expiry,
        cache_margin=settings.download_url_cache_margin,
        client=client,
    )
