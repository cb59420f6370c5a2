"""Object store blueprint: photo upload, public URLs and removal."""
from flask import Blueprint, current_app, jsonify, request
from ..services.cloud_storage import get_cloud_storage
from ..utils import api_error, handle_api_exception
from shared.utils import guess_content_type, photo_object_key
from shared.validation import ValidationError
import logging

logger = logging.getLogger(__name__)
bp = Blueprint('storage', __name__, url_prefix='/api/storage')


def _check_bucket(bucket):
    allowed = current_app.config.get('STORAGE_ALLOWED_BUCKETS', ())
    if bucket not in allowed:
        raise ValidationError(f"Unknown bucket '{bucket}'")


def _check_key(key):
    if not key or key.startswith('/') or '..' in key.split('/') or len(key) > 512:
        raise ValidationError(f"Invalid object key '{key}'")
    return key


@bp.route('/<bucket>', methods=['POST'])
def upload_object(bucket):
    """Store an uploaded file; the key defaults to its content hash."""
    try:
        _check_bucket(bucket)
        upload = request.files.get('file')
        if upload is None:
            raise ValidationError("Missing 'file' in multipart upload")
        data = upload.read()
        if not data:
            raise ValidationError("Uploaded file is empty")
        key = _check_key(request.form.get('key') or photo_object_key(data, upload.filename))
        content_type = upload.mimetype or guess_content_type(upload.filename)
    except ValidationError as e:
        return api_error(str(e), 400)

    try:
        url = get_cloud_storage().upload(bucket, key, data, content_type)
    except Exception as e:
        return handle_api_exception(e, f"upload object to {bucket}", 502)

    logger.info(f"Stored {bucket}/{key} ({len(data)} bytes)")
    return jsonify({'key': key, 'url': url}), 201


@bp.route('/<bucket>/url', methods=['GET'])
def public_url(bucket):
    try:
        _check_bucket(bucket)
        key = _check_key(request.args.get('key'))
    except ValidationError as e:
        return api_error(str(e), 400)

    try:
        return jsonify({'url': get_cloud_storage().get_public_url(bucket, key)})
    except Exception as e:
        return handle_api_exception(e, f"get public URL for {bucket}/{key}", 502)


@bp.route('/<bucket>', methods=['DELETE'])
def remove_objects(bucket):
    """Remove a list of keys; reports which were removed and which failed."""
    try:
        _check_bucket(bucket)
        data = request.get_json(silent=True)
        keys = data.get('keys') if isinstance(data, dict) else None
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise ValidationError("Request body must be {'keys': [<key>, ...]}")
        for key in keys:
            _check_key(key)
    except ValidationError as e:
        return api_error(str(e), 400)

    try:
        removed, failed = get_cloud_storage().remove(bucket, keys)
    except Exception as e:
        return handle_api_exception(e, f"remove objects from {bucket}", 502)

    return jsonify({'removed': removed, 'failed': failed})
