# services/marketplace-service/src/tests/unit/test_storage_service.py
"""
Unit Tests for StorageService

boto3 is patched; no request leaves the process.
"""

import re
import uuid
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from apps.core.services import InvalidRequestError, NotFoundError, StorageError, StorageService


@pytest.fixture
def s3_client():
    with patch('apps.core.services.storage_service.boto3.client') as mock_client:
        client = mock_client.return_value
        client.generate_presigned_url.return_value = 'https://signed.example/object?sig=abc'
        yield client


class TestKeysAndUrls:

    def test_generate_key(self):
        key = StorageService.generate_key('b1', 'gallery', 'Front.Desk.PNG')

        assert re.fullmatch(r'businesses/b1/gallery/\d{13}-[0-9a-f]{13}\.png', key)

    def test_public_url(self, s3_client):
        service = StorageService()

        assert service.public_url('businesses/b1/hero/x.jpg') == (
            'https://test-bucket.s3.us-east-1.amazonaws.com/businesses/b1/hero/x.jpg'
        )

    def test_public_url_via_cloudfront(self, s3_client, settings):
        settings.AWS_CLOUDFRONT_DOMAIN = 'cdn.example.com'
        service = StorageService()

        assert service.public_url('k.jpg') == 'https://cdn.example.com/k.jpg'
        assert service.key_from_url('https://cdn.example.com/k.jpg') == 'k.jpg'

    def test_key_from_url(self, s3_client):
        service = StorageService()

        key = service.key_from_url('https://test-bucket.s3.us-east-1.amazonaws.com/businesses/b1/x.jpg')

        assert key == 'businesses/b1/x.jpg'

    @pytest.mark.parametrize('url', ['https://example.com/x.jpg', 'https://bucket.s3.amazonaws.com/'])
    def test_key_from_foreign_url(self, s3_client, url):
        with pytest.raises(InvalidRequestError) as exc:
            StorageService().key_from_url(url)
        assert str(exc.value) == 'Invalid S3 URL'

    @pytest.mark.parametrize('content_type,valid', [
        ('image/jpeg', True),
        ('IMAGE/PNG', True),
        ('image/webp', True),
        ('image/svg+xml', False),
        ('application/pdf', False),
    ])
    def test_is_valid_image_type(self, content_type, valid):
        assert StorageService.is_valid_image_type(content_type) is valid

    @pytest.mark.parametrize('size,valid', [
        (1, True),
        (4 * 1024 * 1024, True),
        (4 * 1024 * 1024 + 1, False),
        (0, False),
        ('abc', False),
    ])
    def test_is_valid_file_size(self, size, valid):
        assert StorageService.is_valid_file_size(size) is valid


@pytest.mark.django_db
class TestPresignedUpload:

    def test_create_presigned_upload(self, s3_client, owner_user, create_business):
        business = create_business()

        result = StorageService().create_presigned_upload(
            owner_user, str(business.id), 'salon.jpg', 'image/jpeg', 1024, photo_type='HERO'
        )

        assert result['uploadUrl'] == 'https://signed.example/object?sig=abc'
        assert result['key'].startswith(f'businesses/{business.id}/hero/')
        assert result['publicUrl'].endswith(result['key'])
        s3_client.generate_presigned_url.assert_called_once_with(
            'put_object',
            Params={'Bucket': 'test-bucket', 'Key': result['key'], 'ContentType': 'image/jpeg'},
            ExpiresIn=300,
        )

    def test_rejects_wrong_type(self, s3_client, owner_user, create_business):
        business = create_business()

        with pytest.raises(InvalidRequestError) as exc:
            StorageService().create_presigned_upload(owner_user, str(business.id), 'a.pdf', 'application/pdf', 10)
        assert str(exc.value).startswith('Invalid file type')

    def test_rejects_large_file(self, s3_client, owner_user, create_business):
        business = create_business()

        with pytest.raises(InvalidRequestError) as exc:
            StorageService().create_presigned_upload(
                owner_user, str(business.id), 'a.jpg', 'image/jpeg', 5 * 1024 * 1024
            )
        assert str(exc.value) == 'File too large. Maximum size is 4MB.'

    def test_missing_fields(self, s3_client, owner_user):
        with pytest.raises(InvalidRequestError) as exc:
            StorageService().create_presigned_upload(owner_user, None, 'a.jpg', 'image/jpeg', 10)
        assert str(exc.value) == 'Missing required fields'

    def test_foreign_business(self, s3_client, owner_user, create_business):
        other = create_business(business_name='Other', owner_id=uuid.uuid4())

        with pytest.raises(NotFoundError):
            StorageService().create_presigned_upload(owner_user, str(other.id), 'a.jpg', 'image/jpeg', 10)
        s3_client.generate_presigned_url.assert_not_called()


class TestDownloadsAndDeletes:

    def test_resolve_image_by_url(self, s3_client):
        url = StorageService().resolve_image(
            url='https://test-bucket.s3.us-east-1.amazonaws.com/businesses/b1/x.jpg'
        )

        assert url == 'https://signed.example/object?sig=abc'
        s3_client.generate_presigned_url.assert_called_once_with(
            'get_object',
            Params={'Bucket': 'test-bucket', 'Key': 'businesses/b1/x.jpg'},
            ExpiresIn=3600,
        )

    def test_resolve_image_requires_target(self, s3_client):
        with pytest.raises(InvalidRequestError):
            StorageService().resolve_image()

    def test_signing_failure(self, s3_client):
        s3_client.generate_presigned_url.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'denied'}}, 'GeneratePresignedUrl'
        )

        with pytest.raises(StorageError):
            StorageService().resolve_image(key='businesses/b1/x.jpg')

    def test_delete_object(self, s3_client):
        StorageService().delete_object('https://test-bucket.s3.us-east-1.amazonaws.com/businesses/b1/x.jpg')

        s3_client.delete_object.assert_called_once_with(Bucket='test-bucket', Key='businesses/b1/x.jpg')
