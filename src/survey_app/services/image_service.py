"""Image service for photo ingestion."""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from shared.schemas import Photo
from shared.utils import (
    generate_thumbnail, verify_image, photo_object_key, to_data_uri, CorruptedImageError,
)


class PhotoTooLargeError(Exception):
    """Raised when a photo file is bigger than the configured limit."""
    pass


@dataclass
class IngestedPhoto:
    photo: Photo
    thumbnail: Optional[bytes] = None


class ImageService:
    """Turns a photo file into a Photo entry for the survey record.

    With uploads enabled the file goes to the object store and the entry
    references its public URL; otherwise the bytes are embedded as a data
    URI.
    """

    def __init__(self, api, config):
        self.api = api
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    def read_photo_file(self, path):
        """Read a photo from disk, enforcing the size limit.

        Raises:
            OSError: If the file cannot be read
            PhotoTooLargeError: If the file exceeds max_photo_bytes
        """
        size = os.path.getsize(path)
        if size > self.config.max_photo_bytes:
            raise PhotoTooLargeError(
                f"{os.path.basename(path)} is {size} bytes, the limit is {self.config.max_photo_bytes}"
            )
        with open(path, 'rb') as f:
            return f.read()

    def ingest(self, path, description="") -> IngestedPhoto:
        """Read, check and store one photo file.

        Raises:
            OSError: If the file cannot be read
            PhotoTooLargeError: If the file is over the size limit
            CorruptedImageError: If the file is not a readable image
            TransportError: If the upload fails
        """
        image_data = self.read_photo_file(path)
        content_type = verify_image(image_data=image_data)

        if self.config.upload_photos:
            key = photo_object_key(image_data, os.path.basename(path))
            result = self.api.upload(self.config.photo_bucket, key, image_data, content_type)
            file_path = result['url']
            self.logger.info(f"Uploaded {path} as {key}")
        else:
            file_path = to_data_uri(image_data, content_type)
            self.logger.debug(f"Embedded {path} as a data URI ({len(image_data)} bytes)")

        thumbnail = None
        try:
            thumbnail = generate_thumbnail(image_data=image_data, max_size=self.config.thumbnail_max_size)
        except CorruptedImageError as e:
            # verify() passed, so only the preview is lost
            self.logger.warning(f"Could not create a preview for {path}: {e}")

        return IngestedPhoto(photo=Photo.create(file_path, description), thumbnail=thumbnail)
