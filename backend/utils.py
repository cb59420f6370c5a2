"""Backend utility functions for the Fire Door Survey API."""
from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from shared.validation import ValidationError
import logging


logger = logging.getLogger(__name__)


def api_error(message, status_code=400, log_level='warning', details=None):
    """
    Standardized API error response with consistent logging.

    Args:
        message (str): Error message for the client
        status_code (int): HTTP status code
        log_level (str): Logging level ('debug', 'info', 'warning', 'error', 'critical')
        details (dict, optional): Additional details for logging

    Returns:
        Flask response: JSON error response
    """
    log_func = getattr(logger, log_level, logger.warning)
    if details:
        log_func(f"API Error ({status_code}): {message} - Details: {details}")
    else:
        log_func(f"API Error ({status_code}): {message}")

    return jsonify({'error': message}), status_code


def handle_api_exception(e, operation="operation", status_code=500):
    """
    Handle exceptions in API endpoints with consistent logging and responses.

    Args:
        e (Exception): The exception that occurred
        operation (str): Description of the operation being performed
        status_code (int): HTTP status code to return

    Returns:
        Flask response: JSON error response
    """
    logger.error(f"Exception during {operation}: {str(e)}", exc_info=True)
    return api_error(f"Failed to {operation}", status_code, 'error')


def pydantic_to_validation_error(e: PydanticValidationError) -> ValidationError:
    """Flatten pydantic errors into one ValidationError message."""
    errors = []
    for error in e.errors():
        field = '.'.join(str(x) for x in error['loc'])
        errors.append(f"{field}: {error['msg']}" if field else error['msg'])
    return ValidationError('; '.join(errors))


def parse_csv_arg(value):
    """Split a comma separated query argument into a list of names."""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


def parse_bool_arg(value):
    """Read 'true'/'false' query arguments; anything else is a ValidationError."""
    lowered = str(value).strip().lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    raise ValidationError(f"Expected a boolean, got '{value}'")
