import logging
from urllib.parse import quote
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from profolia.platform.ports.object_storage import ObjectStoragePort
from profolia.core.config import settings
from profolia.core.errors import StorageError

log = logging.getLogger("storage.s3")

class S3Storage(ObjectStoragePort):
    def __init__(
        self,
        *,
        bucket: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        public_read: bool | None = None,
        public_base_url: str | None = None,
    ):
        session = boto3.session.Session(
            aws_access_key_id=access_key or settings.S3_ACCESS_KEY,
            aws_secret_access_key=secret_key or settings.S3_SECRET_KEY,
            region_name=region or settings.S3_REGION,
        )
        self.s3 = session.client(
            "s3",
            endpoint_url=endpoint_url or settings.S3_ENDPOINT_URL,
            config=Config(signature_version="s3v4"),
        )
        self.bucket = bucket or settings.S3_BUCKET
        self.public_read = settings.S3_PUBLIC_READ if public_read is None else public_read
        self.public_base_url = public_base_url or settings.S3_PUBLIC_BASE_URL

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quote(key)}"
        return f"https://{self.bucket}.s3.amazonaws.com/{quote(key)}"

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        params = {"Bucket": self.bucket, "Key": key, "Body": data, "ContentType": content_type}
        if self.public_read:
            params["ACL"] = "public-read"
        try:
            self.s3.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            log.error(f"put_object failed key={key}: {e}")
            raise StorageError(f"Upload failed for {key}: {e}")
        log.debug(f"put_object key={key} bytes={len(data)} content_type={content_type}")
        return self.public_url(key)

    def delete(self, key: str) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            log.error(f"delete_object failed key={key}: {e}")
            raise StorageError(f"Delete failed for {key}: {e}")

    def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self.s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Listing {prefix} failed: {e}")
        return keys

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 900) -> dict:
        try:
            url = self.s3.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Presign failed for {key}: {e}")
        return {"strategy": "s3-presigned-put", "url": url, "key": key, "content_type": content_type}
