"""Photo ingestion handlers for the survey form."""
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from shared.form_state import AddPhoto, RemovePhoto, SetPhotoDescription
from shared.schemas import Photo
from shared.utils import CorruptedImageError
from ..services.api_service import TransportError
from ..services.image_service import PhotoTooLargeError

# Failures that only affect the photo being ingested
PHOTO_ERRORS = (OSError, CorruptedImageError, PhotoTooLargeError, TransportError)


def stored_object_key(file_path) -> Optional[str]:
    """Object key of an uploaded photo URL; None for embedded data URIs."""
    if not file_path or file_path.startswith('data:'):
        return None
    return file_path.rstrip('/').split('/')[-1] or None


@dataclass
class AddPhotosResult:
    added: List[Photo] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)


class PhotoHandler:
    """Adds, removes and describes photos on the record being edited."""

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger(self.__class__.__name__)
        # Preview thumbnails keyed by photo file_path
        self.thumbnails: Dict[str, bytes] = {}

    def add_photos(self, paths) -> AddPhotosResult:
        """Ingest several files concurrently.

        Each file is independent: photos are appended to the record in the
        order they finish, and a failing file raises an alert without
        undoing the others.
        """
        paths = list(paths)
        result = AddPhotosResult()
        if not paths:
            return result

        state = self.app.state
        image_service = self.app.image_service
        workers = min(self.app.config.photo_workers, len(paths))
        state.photos_in_progress += len(paths)
        unprocessed = len(paths)

        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='photo') as executor:
                futures = {executor.submit(image_service.ingest, path): path for path in paths}
                # Record updates happen here, on the calling thread
                for future in as_completed(futures):
                    path = futures[future]
                    unprocessed -= 1
                    state.photos_in_progress -= 1
                    try:
                        ingested = future.result()
                    except PHOTO_ERRORS as e:
                        self._photo_failed(result, path, getattr(e, 'message', None) or str(e))
                        continue
                    except Exception as e:
                        self.logger.error(f"Unexpected error adding photo {path}: {e}", exc_info=True)
                        self._photo_failed(result, path, str(e) or e.__class__.__name__)
                        continue

                    state.store.dispatch(AddPhoto(ingested.photo))
                    if ingested.thumbnail:
                        self.thumbnails[ingested.photo.file_path] = ingested.thumbnail
                    result.added.append(ingested.photo)
        finally:
            state.photos_in_progress = max(0, state.photos_in_progress - unprocessed)

        self.logger.info(f"Added {len(result.added)} of {len(paths)} photos")
        return result

    def _photo_failed(self, result, path, message):
        self.logger.error(f"Failed to add photo {path}: {message}")
        result.failed.append((path, message))
        self.app.alert("Photo upload failed", f"{os.path.basename(path)}: {message}")

    def remove_photo(self, index):
        """Drop a photo from the record and delete its uploaded object.

        The record change stands even when the object store removal fails.
        """
        photos = self.app.state.store.state.photos
        if not 0 <= index < len(photos):
            raise IndexError(f"No photo at index {index}")
        photo = photos[index]
        self.app.state.store.dispatch(RemovePhoto(index))
        self.thumbnails.pop(photo.file_path, None)

        key = stored_object_key(photo.file_path)
        if key is None:
            return
        try:
            outcome = self.app.api_service.remove(self.app.config.photo_bucket, [key])
            if outcome.get('failed'):
                self.logger.warning(f"Object store kept {key}")
        except TransportError as e:
            self.logger.warning(f"Could not remove stored photo {key}: {e}")

    def set_description(self, index, text):
        self.app.state.store.dispatch(SetPhotoDescription(index, text))
