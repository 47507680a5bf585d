"""S3-backed blob store.

boto3 is synchronous, so every call is pushed to a worker thread with
``asyncio.to_thread`` to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from toolbench.interfaces.blob_store import IBlobStore
from toolbench.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3BlobStore(IBlobStore):
    """JSON documents as objects in one S3 bucket.

    Parameters
    ----------
    bucket:
        Target bucket name.
    region:
        AWS region for the client.
    client:
        Pre-built boto3 S3 client.  Built from *region* when omitted.
    """

    def __init__(self, bucket: str, region: str = "us-east-1", client: Any | None = None) -> None:
        self._bucket = bucket
        self._client = client or boto3.client("s3", region_name=region)

    async def get_json(self, key: str) -> Any | None:
        try:
            response = await asyncio.to_thread(self._client.get_object, Bucket=self._bucket, Key=key)
            body = await asyncio.to_thread(response["Body"].read)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return None
            raise StorageError(message=f"Failed to read blob {key}: {exc}", provider_name="s3") from exc
        except BotoCoreError as exc:
            raise StorageError(message=f"Failed to read blob {key}: {exc}", provider_name="s3") from exc

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(message=f"Blob {key} is not valid JSON", provider_name="s3") from exc

    async def put_json(self, key: str, value: Any) -> None:
        payload = json.dumps(value).encode("utf-8")
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=payload,
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(message=f"Failed to write blob {key}: {exc}", provider_name="s3") from exc
        logger.debug("blob_written", key=key, bucket=self._bucket)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(message=f"Failed to delete blob {key}: {exc}", provider_name="s3") from exc

    async def list(self, prefix: str = "") -> list[str]:
        keys: list[str] = []
        token: str | None = None
        try:
            while True:
                kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
                if token:
                    kwargs["ContinuationToken"] = token
                page = await asyncio.to_thread(self._client.list_objects_v2, **kwargs)
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
                if not page.get("IsTruncated"):
                    break
                token = page.get("NextContinuationToken")
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(message=f"Failed to list blobs: {exc}", provider_name="s3") from exc
        return sorted(keys)

    def get_provider_name(self) -> str:
        return "s3"
