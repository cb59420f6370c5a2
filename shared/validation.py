"""Input validation utilities and the required-field check for survey records."""
from dataclasses import dataclass, field
from typing import Any, List, Optional
import bleach
from shared.enums import DoorType


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


def validate_string_length(value: str, field_name: str, min_length: int = 0, max_length: Optional[int] = None) -> str:
    """Validate string length constraints."""
    if not isinstance(value, str):
        raise ValidationError(f"Validation failed: {field_name} must be a string")
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"Validation failed: {field_name} must be at least {min_length} characters")
    if max_length and len(value) > max_length:
        raise ValidationError(f"Validation failed: {field_name} must be no more than {max_length} characters")
    return value


def validate_choice(value: Any, field_name: str, valid_choices) -> Any:
    """Validate that value is in list of valid choices."""
    if value not in valid_choices:
        raise ValidationError(f"Validation failed: {field_name} must be one of: {', '.join(str(c) for c in valid_choices)}")
    return value


def sanitize_html(text: str) -> str:
    """Strip unsafe markup from free text using bleach.

    Plain text without markup characters is returned untouched.
    """
    if not text:
        return text
    if '<' not in text and '>' not in text and '&' not in text:
        return text

    allowed_tags = ['p', 'br', 'strong', 'em', 'u', 'ul', 'ol', 'li', 'blockquote']
    return bleach.clean(text, tags=allowed_tags, attributes={}, strip=True)


def validate_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    """Validate a latitude/longitude pair and return them as floats."""
    try:
        lat_val = float(lat.strip()) if isinstance(lat, str) else float(lat)
    except (ValueError, TypeError):
        raise ValidationError(f"Validation failed: Latitude must be a valid number, got '{lat}' ({type(lat).__name__})")

    try:
        lng_val = float(lng.strip()) if isinstance(lng, str) else float(lng)
    except (ValueError, TypeError):
        raise ValidationError(f"Validation failed: Longitude must be a valid number, got '{lng}' ({type(lng).__name__})")

    if not (-90 <= lat_val <= 90):
        raise ValidationError(f"Validation failed: Latitude must be between -90 and 90, got {lat_val}")
    if not (-180 <= lng_val <= 180):
        raise ValidationError(f"Validation failed: Longitude must be between -180 and 180, got {lng_val}")

    return lat_val, lng_val


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class RequiredFieldsResult:
    """Outcome of the completeness check run before submission."""
    is_valid: bool
    missing_fields: List[str] = field(default_factory=list)


def _leaf_checks(leaf, prefix):
    """Yield (label, value) pairs for a leaf's dimensions."""
    yield f"{prefix}Width", leaf.width
    yield f"{prefix}Height", leaf.height
    yield f"{prefix}Thickness", leaf.thickness


def _vision_panel_checks(leaf, prefix):
    yield f"{prefix}Vision Panel Width", leaf.vision_panel.width
    yield f"{prefix}Vision Panel Height", leaf.vision_panel.height
    yield f"{prefix}Vision Panel Material", leaf.vision_panel_material


def validate_required_fields(record) -> RequiredFieldsResult:
    """Return the ordered names of required fields that are still empty.

    The required set depends on the door configuration. Always required:
    door type, installation type, fire rating integrity and insulation,
    door closer brand, hinge set count, leaf dimensions, side gaps,
    protrusion, leaf and frame materials and at least one photo. A first
    leaf vision panel adds its dimensions and material. Single doors add
    the top and bottom gaps; double doors add the second leaf (and its
    vision panel), the in-between gap and each leaf's top and bottom gaps.

    The record is only read, never modified.

    Args:
        record: SurveyRecord to check

    Returns:
        RequiredFieldsResult: is_valid is True exactly when nothing is missing
    """
    checks = [
        ("Door Type", record.door_type),
        ("Installation Type", record.installation_type),
        ("Fire Rating Integrity", record.fire_rating.integrity),
        ("Fire Rating Insulation", record.fire_rating.insulation),
        ("Door Closer Brand", record.door_closer.brand),
        ("Number of Hinge Sets", record.hinges.num_sets),
    ]
    checks.extend(_leaf_checks(record.leaf_dimensions, "Leaf "))
    checks.extend([
        ("Left Side Gap", record.gaps.left_side),
        ("Right Side Gap", record.gaps.right_side),
        ("Protrusion", record.gaps.protrusion),
        ("Door Leaf Material", record.building_features.door_leaf_material),
        ("Door Frame Material", record.building_features.door_frame_material),
    ])

    missing = [label for label, value in checks if is_blank(value)]
    if not record.photos:
        missing.append("Photos (at least one)")

    if record.leaf_dimensions.has_vision_panel:
        missing.extend(label for label, value in _vision_panel_checks(record.leaf_dimensions, "") if is_blank(value))

    if record.door_type == DoorType.SINGLE:
        conditional = [
            ("Top Gap", record.gaps.top),
            ("Bottom Gap", record.gaps.bottom),
        ]
    elif record.door_type == DoorType.DOUBLE:
        second = record.second_leaf_dimensions
        conditional = list(_leaf_checks(second, "Second Leaf "))
        if second.has_vision_panel:
            conditional.extend(_vision_panel_checks(second, "Second Leaf "))
        conditional.extend([
            ("In-between Gap", record.gaps.in_between),
            ("Left Door Top Gap", record.gaps.left_door.top),
            ("Left Door Bottom Gap", record.gaps.left_door.bottom),
            ("Right Door Top Gap", record.gaps.right_door.top),
            ("Right Door Bottom Gap", record.gaps.right_door.bottom),
        ])
    else:
        conditional = []

    missing.extend(label for label, value in conditional if is_blank(value))
    return RequiredFieldsResult(is_valid=not missing, missing_fields=missing)
