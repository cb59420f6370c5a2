"""Conversion between the nested survey record and the flat stored row."""
import json
import logging
import re
from typing import Any, Dict, Optional
from shared.schemas import FALLBACK_LATITUDE, FALLBACK_LONGITUDE, ROW_JSON_COLUMNS
from shared.status import get_survey_status
from shared.validation import is_blank

logger = logging.getLogger(__name__)

POINT_PATTERN = re.compile(r'^POINT\(\s*(-?\d+(?:\.\d+)?)\s+(-?\d+(?:\.\d+)?)\s*\)$')


def format_date_manufactured(date_manufactured) -> Optional[str]:
    """YYYY-MM-01 when both month and year are set, otherwise None."""
    month = (date_manufactured.month or "").strip()
    year = (date_manufactured.year or "").strip()
    if not month or not year:
        return None
    return f"{year}-{month.zfill(2)}-01"


def format_fire_rating(fire_rating) -> Optional[str]:
    """'<integrity>/<insulation>' plus ' sm' for smoke control, or None."""
    if is_blank(fire_rating.integrity) or is_blank(fire_rating.insulation):
        return None
    rating = f"{fire_rating.integrity.strip()}/{fire_rating.insulation.strip()}"
    if not is_blank(fire_rating.smoke_control):
        rating += " sm"
    return rating


def format_location(coordinates) -> str:
    """Geometry literal POINT(<lng> <lat>), using the fallback for missing parts."""
    lat, lng = coordinates.resolved()
    return f"POINT({lng} {lat})"


def _encode(section) -> str:
    return json.dumps(section.model_dump(mode='json', by_alias=True))


def map_survey_to_row(record, status=None) -> Dict[str, Any]:
    """Flatten a survey record into the columns of the survey table.

    Nested sections are JSON encoded since the store has no nested columns.
    The second leaf is only stored for double doors. pass_fail is taken
    from status, computed with get_survey_status when not given.

    Args:
        record: SurveyRecord to flatten
        status: Optional SurveyStatusResult already computed for the record

    Returns:
        dict: column name -> value
    """
    if status is None:
        status = get_survey_status(record)

    return {
        'location_name': record.location_name,
        'location': format_location(record.coordinates),
        'door_type': record.door_type,
        'installation_type': record.installation_type,
        'manufacturer': record.manufacturer,
        'doorset_number': record.doorset_number,
        'date_manufactured': format_date_manufactured(record.date_manufactured),
        'fire_rating': format_fire_rating(record.fire_rating),
        'door_closer': _encode(record.door_closer),
        'hinges': _encode(record.hinges),
        'hardware': _encode(record.hardware),
        'leaf_dimensions': _encode(record.leaf_dimensions),
        'second_leaf_dimensions': _encode(record.second_leaf_dimensions) if record.is_double else None,
        'gaps': _encode(record.gaps),
        'building_features': _encode(record.building_features),
        'inspection_results': _encode(record.inspection),
        'photos': json.dumps([photo.model_dump(mode='json') for photo in record.photos]),
        'additional_notes': record.additional_notes,
        'pass_fail': status.passed,
    }


def parse_location(location) -> Dict[str, Optional[float]]:
    """Read a POINT(<lng> <lat>) literal back into {'lat', 'lng'}."""
    match = POINT_PATTERN.match(location or "")
    if not match:
        return {'lat': FALLBACK_LATITUDE, 'lng': FALLBACK_LONGITUDE}
    lng, lat = match.groups()
    return {'lat': float(lat), 'lng': float(lng)}


def decode_survey_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Expand a stored row for the detail view.

    JSON columns are parsed back into nested structures and the location
    literal into coordinates. Columns that fail to parse are kept as stored.
    """
    decoded = dict(row)
    for column in ROW_JSON_COLUMNS:
        value = decoded.get(column)
        if isinstance(value, str):
            try:
                decoded[column] = json.loads(value)
            except json.JSONDecodeError as e:
                logger.warning(f"Could not decode column '{column}' of survey {row.get('id')}: {e}")
    if 'location' in decoded:
        decoded['coordinates'] = parse_location(decoded['location'])
    return decoded
