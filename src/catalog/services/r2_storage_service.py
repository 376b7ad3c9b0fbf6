import logging
import mimetypes
import os
import re
import uuid
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from catalog.core.config import StorageConfig, config
from catalog.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

# Keys are `{folder}/{uuid}-{name}`; a single folder segment keeps them two segments deep
FOLDER_PATTERN = r"^[A-Za-z0-9_-]+$"


class R2StorageService:
    """
    Media storage on Cloudflare R2 through its S3-compatible API

    Objects are addressed path-style (`{endpoint}/{bucket}/{key}`), which is
    also the form of the public URLs stored in the catalog tables.
    """

    def __init__(self, settings: Optional[StorageConfig] = None, client: Any = None):
        self.settings = settings or config.storage
        self.bucket_name = self.settings.bucket_name
        self.client = client or self._create_client()

    def _create_client(self):
        if not self.settings.endpoint:
            raise StorageError("R2_ENDPOINT is not configured", "CONNECT")
        return boto3.client(
            "s3",
            endpoint_url=self.settings.endpoint,
            aws_access_key_id=self.settings.access_key,
            aws_secret_access_key=self.settings.secret_key,
            region_name=self.settings.region,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    def build_object_key(self, file_name: str, folder: Optional[str] = None) -> str:
        """Unique key of the form `{folder}/{uuid4}-{file_name}`"""
        base_name = os.path.basename(file_name or "").strip()
        if not base_name:
            raise ValidationError("File name is required")
        folder = folder or self.settings.default_folder
        if not re.fullmatch(FOLDER_PATTERN, folder):
            raise ValidationError(f"Invalid folder '{folder}': use one segment of letters, digits, _ or -")
        return f"{folder}/{uuid.uuid4()}-{base_name}"

    def public_url(self, key: str) -> str:
        return f"{self.settings.endpoint.rstrip('/')}/{self.bucket_name}/{key}"

    @staticmethod
    def key_from_url(url_or_key: str) -> str:
        """Object key from a public URL: its last two path segments"""
        path = urlparse(url_or_key).path if "://" in url_or_key else url_or_key
        segments = [s for s in path.split("/") if s]
        return "/".join(segments[-2:])

    def list_buckets(self) -> List[Dict[str, Any]]:
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing buckets: {e}")
            raise StorageError(f"Failed to list buckets: {e}", "LIST_BUCKETS")
        return [
            {"name": bucket["Name"], "created": bucket.get("CreationDate")}
            for bucket in response.get("Buckets", [])
        ]

    def list_objects(self, prefix: str = "", max_keys: int = 1000) -> List[Dict[str, Any]]:
        try:
            response = self.client.list_objects_v2(
                Bucket=self.bucket_name, Prefix=prefix, MaxKeys=max_keys
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing objects under '{prefix}': {e}")
            raise StorageError(f"Failed to list objects: {e}", "LIST_OBJECTS")
        return [
            {
                "key": obj["Key"],
                "size": obj.get("Size", 0),
                "last_modified": obj.get("LastModified"),
                "url": self.public_url(obj["Key"]),
            }
            for obj in response.get("Contents", [])
        ]

    def get_presigned_download_url(self, key: str, expires_in: Optional[int] = None) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in or self.settings.presign_expiration,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating download URL for {key}: {e}")
            raise StorageError(f"Failed to presign download: {e}", "PRESIGN_GET")

    def get_presigned_upload_url(self, key: str, content_type: str = "image/jpeg",
                                 expires_in: Optional[int] = None) -> str:
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket_name, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_in or self.settings.presign_expiration,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating upload URL for {key}: {e}")
            raise StorageError(f"Failed to presign upload: {e}", "PRESIGN_PUT")

    def create_upload(self, file_name: str, content_type: str = "image/jpeg",
                      folder: Optional[str] = None) -> Dict[str, str]:
        """Presigned PUT for a new object plus the URL it will be served from"""
        key = self.build_object_key(file_name, folder)
        return {
            "key": key,
            "presigned_url": self.get_presigned_upload_url(key, content_type),
            "public_url": self.public_url(key),
        }

    def upload_bytes(self, data: bytes, file_name: str, content_type: str = "image/jpeg",
                     folder: Optional[str] = None) -> str:
        """Store the bytes under a new key and return the public URL"""
        key = self.build_object_key(file_name, folder)
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {file_name}: {e}")
            raise StorageError(f"Failed to upload {file_name}: {e}", "UPLOAD")

        logger.info(f"Uploaded {len(data)} bytes to {key}")
        return self.public_url(key)

    def upload_file(self, path: str, folder: Optional[str] = None,
                    content_type: Optional[str] = None) -> str:
        content_type = content_type or mimetypes.guess_type(path)[0] or "image/jpeg"
        with open(path, "rb") as f:
            data = f.read()
        return self.upload_bytes(data, os.path.basename(path), content_type, folder)

    def download_object(self, key: str, path: str) -> str:
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            body = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error downloading {key}: {e}")
            raise StorageError(f"Failed to download {key}: {e}", "DOWNLOAD")

        with open(path, "wb") as f:
            f.write(body)
        return path

    def delete_object(self, url_or_key: str) -> bool:
        """Delete by public URL or key; returns False when the delete failed"""
        key = self.key_from_url(url_or_key)
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting {key}: {e}")
            return False
        logger.info(f"Deleted {key}")
        return True
