import os
import random
import time
from pathlib import Path
from typing import Optional, Tuple

import boto3
from botocore.exceptions import ClientError
from fastapi import UploadFile
from gear_exchange.config.roles_config import ALLOWED_IMAGE_CONTENT_TYPES, ALLOWED_IMAGE_EXTENSIONS
from gear_exchange.config.settings import settings
from gear_exchange.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


def build_image_name(original_filename: str) -> str:
    """listing-<epoch ms>-<random><ext>"""
    ext = os.path.splitext(original_filename)[1].lower()
    return f"listing-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


async def read_image_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[Tuple[bytes, str, str]]:
    """
    Read and validate one uploaded image.
    Returns (content, original filename, content type), or None when the field was left empty.
    """
    if upload is None or not upload.filename:
        return None
    ext = os.path.splitext(upload.filename)[1].lower()
    content_type = (upload.content_type or "").lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS or content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise ValidationError("Only image files are allowed (jpeg, jpg, png, gif)")
    # Read one byte past the limit so oversized files are detected without loading them fully
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError(f"Image exceeds the {max_bytes // (1024 * 1024)}MB limit")
    return content, upload.filename, content_type


class LocalImageStorage:
    """Stores images on local disk; references are URL paths served as static files."""

    def __init__(self, directory: str, url_prefix: str):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def upload_file(self, file_content: bytes, original_filename: str, content_type: str = "image/jpeg") -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        name = build_image_name(original_filename)
        (self.directory / name).write_bytes(file_content)
        return f"{self.url_prefix}/{name}"

    def delete_file(self, reference: str) -> bool:
        if not reference or not reference.startswith(self.url_prefix + "/"):
            return False
        name = reference[len(self.url_prefix) + 1:]
        # Never follow references outside the upload directory
        if not name or "/" in name or name in (".", ".."):
            return False
        try:
            (self.directory / name).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete image {reference}: {str(e)}")
            return False


class S3ImageStorage:
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, file_content: bytes, original_filename: str, content_type: str = "image/jpeg") -> str:
        """Upload image to S3 and return the S3 URL"""
        key = f"listings/{build_image_name(original_filename)}"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return f"s3://{self.bucket_name}/{key}"
        except ClientError as e:
            logger.error(f"Failed to upload image to S3: {str(e)}")
            raise

    def delete_file(self, reference: str) -> bool:
        """Delete image from S3"""
        prefix = f"s3://{self.bucket_name}/"
        if not reference or not reference.startswith(prefix):
            return False
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=reference[len(prefix):])
            return True
        except ClientError as e:
            logger.error(f"Failed to delete image from S3: {str(e)}")
            return False


_storage = None


def get_image_storage():
    global _storage
    if _storage is None:
        if settings.image_storage_backend == "s3":
            _storage = S3ImageStorage()
            logger.info("S3 image storage initialized")
        else:
            _storage = LocalImageStorage(settings.upload_dir, settings.upload_url_prefix)
    return _storage
