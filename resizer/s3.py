"""
AWS S3 object store gateway.

The resize pipeline only needs two operations: read a whole object and write a
whole object. ``put_object`` uploads the body in a single request, so a derived
image is either fully present or absent; there is no partially written state
for a reader to observe.

A missing key is reported as ``ObjectNotFound`` (the expected cache-miss path);
every other failure is ``StoreError``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from resizer.exceptions import ObjectNotFound, StoreError

if TYPE_CHECKING:
    from resizer.config import Settings

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class StoredObject:
    body: bytes
    content_type: str


class ObjectStore(Protocol):
    def get(self, bucket: str, key: str) -> StoredObject: ...

    def put(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        cache_control: str | None = None,
    ) -> None: ...


class S3ObjectStore:
    """``ObjectStore`` backed by a blocking boto3 S3 client."""

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> S3ObjectStore:
        kwargs = {"region_name": settings.aws_region}
        if settings.aws_access_key_id:
            kwargs["aws_access_key_id"] = settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        if settings.s3_endpoint_url:
            kwargs["endpoint_url"] = settings.s3_endpoint_url
        return cls(boto3.client("s3", **kwargs))

    def get(self, bucket: str, key: str) -> StoredObject:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            if error_code in _NOT_FOUND_CODES:
                raise ObjectNotFound(bucket, key) from exc
            raise StoreError(bucket, key, error_code or str(exc)) from exc
        except BotoCoreError as exc:
            raise StoreError(bucket, key, str(exc)) from exc
        return StoredObject(
            body=body,
            content_type=response.get("ContentType") or "application/octet-stream",
        )

    def put(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        cache_control: str | None = None,
    ) -> None:
        params = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if cache_control:
            params["CacheControl"] = cache_control
        try:
            self._client.put_object(**params)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            raise StoreError(bucket, key, error_code or str(exc)) from exc
        except BotoCoreError as exc:
            raise StoreError(bucket, key, str(exc)) from exc
        logger.debug("Stored s3://%s/%s (%d bytes)", bucket, key, len(body))
