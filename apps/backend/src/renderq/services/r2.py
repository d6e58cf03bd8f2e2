"""Cloudflare R2 object storage (fallback storage provider)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)


class R2Storage:
    """S3-compatible client for a public R2 bucket."""

    def __init__(
        self,
        endpoint_url: str,
        access_key_id: str,
        secret_access_key: str,
        public_base_url: str,
        client: Any | None = None,
    ):
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/")
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._client = client

    @classmethod
    def from_settings(cls, settings: Any) -> R2Storage:
        return cls(
            endpoint_url=settings.r2_endpoint_url,
            access_key_id=settings.r2_access_key_id,
            secret_access_key=settings.r2_secret_access_key,
            public_base_url=settings.r2_public_base_url,
        )

    @property
    def client(self) -> Any:
        """Lazily created boto3 S3 client."""
        if self._client is None:
            if not all([self.endpoint_url, self._access_key_id, self._secret_access_key]):
                raise RuntimeError(
                    "R2 configuration is incomplete; set CLOUDFLARE_ACCOUNT_ID, "
                    "R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY."
                )
            session = boto3.session.Session(
                aws_access_key_id=self._access_key_id,
                aws_secret_access_key=self._secret_access_key,
            )
            self._client = session.client(
                "s3",
                endpoint_url=self.endpoint_url,
                config=Config(region_name="auto", retries={"max_attempts": 1}),
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    async def put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> str:
        """Store ``body`` under ``key`` and return its public URL."""
        logger.info("Putting %s/%s (%d bytes)", bucket, key, len(body))
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        return self.public_url(key)

    async def upload_hex(self, bucket: str, key: str, hex_data: str, content_type: str) -> str:
        """Decode hex-encoded bytes and store them."""
        return await self.put_object(bucket, key, bytes.fromhex(hex_data), content_type)
