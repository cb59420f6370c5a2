"""Object storage service using Apache Libcloud."""

import logging
import os
from threading import Lock
from libcloud.common.types import LibcloudError
from libcloud.storage.types import Provider, ContainerDoesNotExistError, ObjectDoesNotExistError
from libcloud.storage.providers import get_driver
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    retry_if_not_exception_type,
    before_sleep_log,
    after_log
)


logger = logging.getLogger(__name__)

# Transient driver failures worth another attempt; missing objects are not
RETRYABLE_ERRORS = (LibcloudError, ConnectionError, TimeoutError)
MISSING_ERRORS = (ObjectDoesNotExistError, ContainerDoesNotExistError)

storage_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=30),
    retry=retry_if_exception_type(RETRYABLE_ERRORS) & retry_if_not_exception_type(MISSING_ERRORS),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    after=after_log(logger, logging.DEBUG),
    reraise=True,
)


class CloudStorageService:
    """Bucket/key object store over a libcloud storage driver.

    Each bucket maps to a libcloud container, created on first use.
    """

    def __init__(self):
        """Initialize from CLOUD_STORAGE_* environment variables."""
        self.provider_name = os.getenv('CLOUD_STORAGE_PROVIDER', 's3')
        self.access_key = os.getenv('CLOUD_STORAGE_ACCESS_KEY')
        self.secret_key = os.getenv('CLOUD_STORAGE_SECRET_KEY')
        self.region = os.getenv('CLOUD_STORAGE_REGION', 'ap-southeast-2')
        self.host = os.getenv('CLOUD_STORAGE_HOST')
        self.port = os.getenv('CLOUD_STORAGE_PORT')
        self.secure = os.getenv('CLOUD_STORAGE_SECURE', 'true').lower() != 'false'
        # Public URLs are built from this base when set, e.g. a CDN in front of the buckets
        self.public_base_url = (os.getenv('CLOUD_STORAGE_PUBLIC_URL') or '').rstrip('/')

        if not all([self.access_key, self.secret_key]):
            raise ValueError("Cloud storage configuration incomplete. Check environment variables.")

        self.driver = self._get_driver()
        self._containers = {}
        self._containers_lock = Lock()

        logger.info(f"Cloud storage initialized with provider: {self.provider_name}")

    def _get_driver(self):
        """Get the appropriate libcloud driver based on provider."""
        provider_map = {
            's3': Provider.S3,
            'gcs': Provider.GOOGLE_STORAGE,
            'azure': Provider.AZURE_BLOBS,
            'minio': Provider.MINIO,
        }

        if self.provider_name not in provider_map:
            raise ValueError(f"Unsupported provider: {self.provider_name}")

        kwargs = {
            'key': self.access_key,
            'secret': self.secret_key,
        }

        if self.provider_name == 's3':
            kwargs['region'] = self.region
        elif self.provider_name == 'minio':
            kwargs['host'] = self.host or 'localhost'
            kwargs['port'] = int(self.port or 9000)
            kwargs['secure'] = self.secure

        return get_driver(provider_map[self.provider_name])(**kwargs)

    def _get_container(self, bucket):
        """Get or create the container for a bucket."""
        with self._containers_lock:
            container = self._containers.get(bucket)
            if container is None:
                try:
                    container = self.driver.get_container(container_name=bucket)
                except ContainerDoesNotExistError:
                    logger.info(f"Creating container: {bucket}")
                    container = self.driver.create_container(container_name=bucket)
                self._containers[bucket] = container
            return container

    @storage_retry
    def upload(self, bucket, key, data: bytes, content_type=None):
        """
        Store bytes under bucket/key, replacing any existing object.

        Args:
            bucket: Bucket name
            key: Object key within the bucket
            data: Object content
            content_type: MIME type recorded with the object (optional)

        Returns:
            str: Public URL of the stored object

        Raises:
            LibcloudError: If the upload still fails after retries
        """
        container = self._get_container(bucket)
        extra = {'content_type': content_type} if content_type else None

        logger.info(f"Uploading {len(data)} bytes to {bucket}/{key}")
        obj = self.driver.upload_object_via_stream(
            iterator=iter([data]),
            container=container,
            object_name=key,
            extra=extra,
        )
        return self._object_url(bucket, key, obj)

    @storage_retry
    def get_public_url(self, bucket, key):
        """
        Public URL for an object.

        Raises:
            ObjectDoesNotExistError: If the object does not exist
        """
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/{key}"
        obj = self.driver.get_object(bucket, key)
        return self._object_url(bucket, key, obj)

    def remove(self, bucket, keys):
        """
        Delete objects from a bucket, one driver call per key.

        Returns:
            tuple: (removed keys, failed keys)
        """
        removed, failed = [], []
        for key in keys:
            try:
                self._delete_object(bucket, key)
                removed.append(key)
            except ObjectDoesNotExistError:
                logger.warning(f"Object {bucket}/{key} does not exist")
                failed.append(key)
            except RETRYABLE_ERRORS as e:
                logger.error(f"Failed to delete {bucket}/{key}: {e}")
                failed.append(key)
        return removed, failed

    @storage_retry
    def _delete_object(self, bucket, key):
        obj = self.driver.get_object(bucket, key)
        if not self.driver.delete_object(obj):
            raise LibcloudError(f"Driver refused to delete {bucket}/{key}", driver=self.driver)

    def _object_url(self, bucket, key, obj):
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/{key}"
        try:
            return obj.get_cdn_url()
        except (NotImplementedError, LibcloudError):
            return f"{self.driver.connection.host}/{bucket}/{key}"


# Global instance
_cloud_storage = None
_cloud_storage_lock = Lock()


def get_cloud_storage():
    """Get or create cloud storage service instance (thread-safe)."""
    global _cloud_storage
    if _cloud_storage is None:
        with _cloud_storage_lock:
            if _cloud_storage is None:
                try:
                    _cloud_storage = CloudStorageService()
                except Exception as e:
                    logger.error(f"Failed to initialize cloud storage: {e}")
                    raise
    return _cloud_storage


def reset_cloud_storage():
    """Drop the cached service so the next call re-reads the environment."""
    global _cloud_storage
    with _cloud_storage_lock:
        _cloud_storage = None
