"""Photo helpers shared by the backend object store and the client.

Photos of a door are checked with Pillow before they are accepted, hashed to
build stable object keys, and either uploaded or embedded as data URIs.
"""

import base64
import hashlib
import io
import logging
import mimetypes
from functools import wraps
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PHOTO_HASH_ALGO = 'sha256'

# Pillow format name -> MIME type for formats a camera or phone produces
IMAGE_CONTENT_TYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'WEBP': 'image/webp',
    'GIF': 'image/gif',
    'HEIF': 'image/heif',
    'BMP': 'image/bmp',
    'TIFF': 'image/tiff',
}


class CorruptedImageError(Exception):
    """Raised when image data is corrupted and cannot be processed."""
    pass


def handle_image_errors(func):
    """Decorator turning Pillow failures into CorruptedImageError.

    The decorated function should take image_path and/or image_data as
    keyword arguments so the log line can name the source.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        image_path = kwargs.get('image_path')
        image_data = kwargs.get('image_data')
        source = f"file '{image_path}'" if image_path else f"image data ({len(image_data or b'')} bytes)"

        try:
            return func(*args, **kwargs)
        except UnidentifiedImageError as e:
            logger.error(f"Corrupted or unsupported image format - {source}: {e}")
            raise CorruptedImageError(f"Corrupted or unsupported image format: {e}") from e
        except Image.DecompressionBombError as e:
            logger.error(f"Image too large to decode - {source}: {e}")
            raise CorruptedImageError(f"Image too large to decode: {e}") from e
        except FileNotFoundError:
            raise
        except OSError as e:
            if "truncated" in str(e).lower() or "cannot identify image file" in str(e).lower():
                logger.error(f"Corrupted image file - {source}: {e}")
                raise CorruptedImageError(f"Corrupted image file: {e}") from e
            raise
        except (SyntaxError, ValueError) as e:
            logger.error(f"Error processing image - {source}: {e}")
            raise CorruptedImageError(f"Error processing image: {e}") from e

    return wrapper


def compute_photo_hash(image_data_or_path):
    """Hex SHA256 digest of raw bytes, a file path or a file-like object.

    Raises:
        TypeError: If input type is invalid
        FileNotFoundError: If a path is given and the file doesn't exist
    """
    hasher = hashlib.new(PHOTO_HASH_ALGO)

    if isinstance(image_data_or_path, str):
        try:
            with open(image_data_or_path, 'rb') as f:
                while chunk := f.read(8192):
                    hasher.update(chunk)
        except FileNotFoundError:
            logger.error(f"Photo file not found: {image_data_or_path}")
            raise
    elif isinstance(image_data_or_path, bytes):
        hasher.update(image_data_or_path)
    elif hasattr(image_data_or_path, 'read'):
        while chunk := image_data_or_path.read(8192):
            hasher.update(chunk)
    else:
        raise TypeError(
            f"compute_photo_hash expected bytes, str (path), or file-like object, "
            f"got {type(image_data_or_path).__name__}"
        )

    return hasher.hexdigest()


@handle_image_errors
def verify_image(image_data=None, image_path=None):
    """Check that the bytes decode as an image and return its MIME type.

    Raises:
        CorruptedImageError: When the data is not a readable image
    """
    source = image_path if image_path else io.BytesIO(image_data)
    with Image.open(source) as img:
        img.verify()
        image_format = img.format
    return IMAGE_CONTENT_TYPES.get(image_format, 'application/octet-stream')


@handle_image_errors
def generate_thumbnail(image_data=None, image_path=None, max_size=200):
    """Generate a thumbnail from image data or file path keeping aspect ratio.

    PNG and WEBP keep their format for transparency, everything else is
    saved as JPEG.

    Returns:
        bytes or None: Thumbnail data, or None when no input was given

    Raises:
        CorruptedImageError: When image data is corrupted and cannot be processed.
    """
    if not image_data and not image_path:
        logger.warning("generate_thumbnail called without image_data or image_path")
        return None

    img = Image.open(image_path) if image_path else Image.open(io.BytesIO(image_data))
    img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    original_format = img.format
    save_format = original_format if original_format in ('PNG', 'WEBP') else 'JPEG'
    if save_format == 'JPEG' and img.mode in ('RGBA', 'P', 'LA'):
        img = img.convert('RGB')

    thumb_buffer = io.BytesIO()
    img.save(thumb_buffer, format=save_format, quality=85)
    return thumb_buffer.getvalue()


def guess_content_type(file_name, default='application/octet-stream'):
    content_type, _ = mimetypes.guess_type(file_name or '')
    return content_type or default


def to_data_uri(data: bytes, content_type: str) -> str:
    """Embed bytes as a base64 data URI."""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def photo_object_key(data: bytes, file_name: str) -> str:
    """Object key for a photo: content hash plus the original extension."""
    extension = ''
    if '.' in (file_name or ''):
        extension = '.' + file_name.rsplit('.', 1)[1].lower()
    return f"{compute_photo_hash(data)}{extension}"
