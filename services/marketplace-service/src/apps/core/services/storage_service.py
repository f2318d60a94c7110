# services/marketplace-service/src/apps/core/services/storage_service.py
"""
Storage Service

S3 object storage for business photos.
Handles presigned upload and download URLs, key generation and deletion.
"""

import time
import uuid
import logging
from typing import Optional, Dict, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from apps.core.policies import get_owned_business, user_uuid

logger = logging.getLogger(__name__)

S3_HOST_MARKER = '.amazonaws.com/'


class StorageService:
    """
    S3 storage service for business media.

    Provides:
    - Presigned PUT URLs for direct browser uploads
    - Presigned GET URLs for private image delivery
    - Public URL and key derivation
    - Object deletion
    """

    def __init__(self):
        self.client = boto3.client(
            's3',
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_S3_REGION,
        )
        self.bucket_name = settings.AWS_S3_BUCKET_NAME
        self.region = settings.AWS_S3_REGION
        self.cloudfront_domain = settings.AWS_CLOUDFRONT_DOMAIN

    # =========================================================================
    # UPLOADS
    # =========================================================================

    def create_presigned_upload(
        self,
        user,
        business_id,
        filename: str,
        content_type: str,
        file_size,
        photo_type: str = 'GALLERY'
    ) -> Dict[str, Any]:
        """
        Presigned PUT for a new business photo.

        The caller uploads straight to S3 and then records the photo with
        the returned public URL.
        """
        from . import InvalidRequestError

        user_uuid(user)

        if not business_id or not filename or not content_type or not file_size:
            raise InvalidRequestError('Missing required fields')

        if not self.is_valid_image_type(content_type):
            raise InvalidRequestError(
                'Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.'
            )

        if not self.is_valid_file_size(file_size):
            max_mb = settings.UPLOAD_MAX_FILE_SIZE // (1024 * 1024)
            raise InvalidRequestError(f'File too large. Maximum size is {max_mb}MB.')

        business = get_owned_business(user, business_id)

        key = self.generate_key(business.id, (photo_type or 'GALLERY').lower(), filename)
        upload_url = self.get_presigned_upload_url(key, content_type)

        logger.info(f"Issued upload URL for {key}")

        return {
            'uploadUrl': upload_url,
            'publicUrl': self.public_url(key),
            'key': key,
        }

    def get_presigned_upload_url(
        self,
        key: str,
        content_type: str,
        expires_in: int = 300,
    ) -> str:
        """Presigned PUT URL bound to the expected Content-Type."""
        from . import StorageError

        try:
            url = self.client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                },
                ExpiresIn=expires_in
            )
            logger.debug(f"Generated presigned upload URL for {key}")
            return url

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned upload URL for {key}: {e}")
            raise StorageError('Failed to generate upload URL')

    # =========================================================================
    # DOWNLOADS
    # =========================================================================

    def resolve_image(self, key: Optional[str] = None, url: Optional[str] = None) -> str:
        """
        Presigned GET URL for an image addressed by key or by its public URL.
        """
        from . import InvalidRequestError

        if url:
            key = self.key_from_url(url)
        if not key:
            raise InvalidRequestError('URL parameter is required')

        return self.get_presigned_url(key)

    def get_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        """
        Generate a presigned URL for secure file access.

        Args:
            key: Storage path/key
            expires_in: URL validity in seconds (default 1 hour)
        """
        from . import StorageError

        try:
            url = self.client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                },
                ExpiresIn=expires_in
            )
            logger.debug(f"Generated presigned URL for {key}")
            return url

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            raise StorageError('Failed to retrieve image')

    # =========================================================================
    # FILE MANAGEMENT
    # =========================================================================

    def delete_object(self, url: str) -> None:
        """Delete the object behind a stored photo URL."""
        from . import StorageError

        key = self.key_from_url(url)
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info(f"Deleted object: {key}")

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Delete failed for {key}: {e}")
            raise StorageError('Failed to delete image')

    # =========================================================================
    # KEYS AND URLS
    # =========================================================================

    def public_url(self, key: str) -> str:
        if self.cloudfront_domain:
            return f"https://{self.cloudfront_domain}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def key_from_url(self, url: str) -> str:
        """
        Object key of a public S3 or CloudFront URL.

        Raises InvalidRequestError for anything else.
        """
        from . import InvalidRequestError

        if self.cloudfront_domain:
            prefix = f"https://{self.cloudfront_domain}/"
            if url.startswith(prefix):
                return url[len(prefix):]

        parts = url.split(S3_HOST_MARKER)
        if len(parts) != 2 or not parts[1]:
            raise InvalidRequestError('Invalid S3 URL')
        return parts[1]

    @staticmethod
    def generate_key(business_id, photo_type: str, filename: str) -> str:
        """
        Storage key for an upload.

        Format: businesses/{business_id}/{type}/{millis}-{random}.{ext}
        """
        timestamp = int(time.time() * 1000)
        random_part = uuid.uuid4().hex[:13]
        extension = filename.rsplit('.', 1)[-1].lower()
        return f"businesses/{business_id}/{photo_type}/{timestamp}-{random_part}.{extension}"

    @staticmethod
    def is_valid_image_type(content_type: str) -> bool:
        return content_type.lower() in settings.UPLOAD_ALLOWED_CONTENT_TYPES

    @staticmethod
    def is_valid_file_size(size_in_bytes) -> bool:
        try:
            size = int(size_in_bytes)
        except (TypeError, ValueError):
            return False
        return 0 < size <= settings.UPLOAD_MAX_FILE_SIZE
