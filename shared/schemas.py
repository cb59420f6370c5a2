"""Pydantic schemas for the fire door survey record and stored rows."""
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional
import json
from pydantic import BaseModel, Field, FiniteFloat, field_validator, model_validator, ConfigDict
from pydantic.alias_generators import to_camel
from shared.enums import (
    DoorType, InstallationType, VisionPanelMaterial, InspectionItemName,
    ComponentName, DEFECT_VOCABULARY, COMPONENT_DEFECT_VOCABULARY,
)
from shared.validation import sanitize_html, validate_string_length

# Used when geolocation is unavailable or denied (Wellington, NZ)
FALLBACK_LATITUDE = -41.2865
FALLBACK_LONGITUDE = 174.7762

# A gap measurement in millimetres, or None when not yet measured
Millimetres = Optional[FiniteFloat]


class RecordModel(BaseModel):
    """Base for every part of the survey record.

    Attributes are snake_case in Python; the serialized shape uses the
    camelCase keys the form and the stored JSON columns use.
    """
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True, validate_default=True
    )


def _check_tags(tags, vocabulary, label):
    unknown = [tag for tag in tags if tag not in vocabulary]
    if unknown:
        raise ValueError(f"{label} has unknown status tags: {', '.join(unknown)}")
    if len(set(tags)) != len(tags):
        raise ValueError(f"{label} has duplicate status tags")


# Location
class Coordinates(RecordModel):
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)

    def resolved(self) -> tuple[float, float]:
        """(lat, lng), falling back to the default coordinate if either part is missing."""
        if self.lat is None or self.lng is None:
            return FALLBACK_LATITUDE, FALLBACK_LONGITUDE
        return self.lat, self.lng


# Door identification
class DateManufactured(RecordModel):
    """Month (1-12) and four digit year as entered; either may be blank."""
    month: str = ""
    year: str = ""

    @field_validator('month')
    @classmethod
    def validate_month(cls, v):
        v = v.strip()
        if v and (not v.isdigit() or not 1 <= int(v) <= 12):
            raise ValueError(f"month must be 1-12, got '{v}'")
        return v

    @field_validator('year')
    @classmethod
    def validate_year(cls, v):
        v = v.strip()
        if v and (len(v) != 4 or not v.isdigit()):
            raise ValueError(f"year must have four digits, got '{v}'")
        return v


class FireRating(RecordModel):
    integrity: str = ""
    insulation: str = ""
    smoke_control: str = ""


# Hardware components
class Component(RecordModel):
    brand: str = ""
    ce_marking: bool = False
    status: List[str] = Field(default_factory=list)
    notes: str = ""

    # Set by subclasses
    component: ClassVar[ComponentName]

    @model_validator(mode='after')
    def validate_status_tags(self):
        vocabulary = COMPONENT_DEFECT_VOCABULARY[self.component]
        _check_tags(self.status, vocabulary, f"Component '{self.component.value}'")
        return self


class DoorCloser(Component):
    component: ClassVar[ComponentName] = ComponentName.DOOR_CLOSER


class Hinges(Component):
    component: ClassVar[ComponentName] = ComponentName.HINGES
    num_sets: Optional[int] = Field(default=None, ge=0)


class Hardware(Component):
    component: ClassVar[ComponentName] = ComponentName.HARDWARE


# Leaf geometry
class VisionPanel(RecordModel):
    width: str = ""
    height: str = ""


class LeafDimensions(RecordModel):
    width: str = ""
    height: str = ""
    thickness: str = ""
    has_vision_panel: bool = False
    vision_panel_material: Optional[VisionPanelMaterial] = VisionPanelMaterial.CLEAR
    vision_panel: VisionPanel = Field(default_factory=VisionPanel)


# Gap measurements
class LeafGaps(RecordModel):
    top: Millimetres = None
    bottom: Millimetres = None


class Gaps(RecordModel):
    top: Millimetres = None
    bottom: Millimetres = None
    left_side: Millimetres = None
    right_side: Millimetres = None
    in_between: Millimetres = None
    protrusion: Millimetres = None
    left_door: LeafGaps = Field(default_factory=LeafGaps)
    right_door: LeafGaps = Field(default_factory=LeafGaps)


# Building context
class BuildingFeatures(RecordModel):
    security_features: List[str] = Field(default_factory=list)
    security_features_other: str = ""
    wall_substrate: str = ""
    wall_substrate_other: str = ""
    wall_finish: str = ""
    wall_finish_other: str = ""
    floor_surface: str = ""
    floor_finish: str = ""
    door_leaf_material: str = ""
    door_frame_material: str = ""
    notes: str = ""


# Inspection checklist
class InspectionItem(RecordModel):
    status: List[str] = Field(default_factory=list)
    notes: str = ""

    @property
    def has_issues(self) -> bool:
        return bool(self.status)


class DoorCloserInspection(InspectionItem):
    slow_closing: bool = False


class HardwareInspection(InspectionItem):
    rattling: bool = False


class DoorSignageInspection(InspectionItem):
    one_side_only: bool = False
    not_nzs4520: bool = Field(default=False, alias='notNZS4520')


class Inspection(RecordModel):
    door_leaf: InspectionItem = Field(default_factory=InspectionItem)
    door_frame: InspectionItem = Field(default_factory=InspectionItem)
    vision_panel: InspectionItem = Field(default_factory=InspectionItem)
    intumescent_seal: InspectionItem = Field(default_factory=InspectionItem)
    smoke_seal: InspectionItem = Field(default_factory=InspectionItem)
    hinges: InspectionItem = Field(default_factory=InspectionItem)
    door_closer: DoorCloserInspection = Field(default_factory=DoorCloserInspection)
    hardware: HardwareInspection = Field(default_factory=HardwareInspection)
    fire_tag: InspectionItem = Field(default_factory=InspectionItem)
    door_signage: DoorSignageInspection = Field(default_factory=DoorSignageInspection)

    @model_validator(mode='after')
    def validate_status_tags(self):
        for name in InspectionItemName:
            _check_tags(self.item(name).status, DEFECT_VOCABULARY[name], f"Inspection item '{name.value}'")
        return self

    @staticmethod
    def attribute_for(name) -> str:
        """Python attribute holding the given checklist item."""
        return INSPECTION_ATTRIBUTES[InspectionItemName(name)]

    def item(self, name) -> InspectionItem:
        return getattr(self, self.attribute_for(name))


INSPECTION_ATTRIBUTES = {
    InspectionItemName(info.alias): attr for attr, info in Inspection.model_fields.items()
}


# Photos keep their snake_case keys in the stored JSON
class Photo(BaseModel):
    file_path: str
    description: str = ""
    timestamp: str

    @classmethod
    def create(cls, file_path: str, description: str = "") -> 'Photo':
        """Build a photo entry stamped with the current UTC time."""
        return cls(
            file_path=file_path,
            description=description,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )


class SurveyRecord(RecordModel):
    """One fire door inspection, as edited in the form."""
    location_name: str = ""
    coordinates: Coordinates = Field(default_factory=Coordinates)

    door_type: Optional[DoorType] = DoorType.SINGLE
    installation_type: Optional[InstallationType] = InstallationType.INTERIOR
    manufacturer: str = ""
    doorset_number: str = ""
    date_manufactured: DateManufactured = Field(default_factory=DateManufactured)
    fire_rating: FireRating = Field(default_factory=FireRating)

    door_closer: DoorCloser = Field(default_factory=DoorCloser)
    hinges: Hinges = Field(default_factory=Hinges)
    hardware: Hardware = Field(default_factory=Hardware)

    leaf_dimensions: LeafDimensions = Field(default_factory=LeafDimensions)
    second_leaf_dimensions: LeafDimensions = Field(default_factory=LeafDimensions)

    gaps: Gaps = Field(default_factory=Gaps)
    building_features: BuildingFeatures = Field(default_factory=BuildingFeatures)
    inspection: Inspection = Field(default_factory=Inspection)
    photos: List[Photo] = Field(default_factory=list)
    additional_notes: str = ""

    @field_validator('coordinates', 'date_manufactured', 'fire_rating', 'door_closer', 'hinges', 'hardware',
                     'leaf_dimensions', 'second_leaf_dimensions', 'gaps', 'building_features', 'inspection',
                     mode='before')
    @classmethod
    def absent_section_is_empty(cls, v):
        # Absent sub-objects stand for an untouched section
        return {} if v is None else v

    @property
    def is_double(self) -> bool:
        return self.door_type == DoorType.DOUBLE

    def to_form_dict(self) -> Dict[str, Any]:
        """The record in its camelCase form shape."""
        return self.model_dump(mode='json', by_alias=True)


def initial_survey_record() -> SurveyRecord:
    """A fresh record for a newly mounted form.

    Strings are empty, measurements None, lists empty, flags False and the
    door type, installation type and vision panel material take their first
    option.
    """
    return SurveyRecord()


# Stored row schemas
ROW_JSON_COLUMNS = (
    'door_closer', 'hinges', 'hardware', 'leaf_dimensions', 'second_leaf_dimensions',
    'gaps', 'building_features', 'inspection_results', 'photos',
)


class SurveyRowCreate(BaseModel):
    """A flattened survey row as sent to the row store."""
    location_name: str = Field(default="", max_length=200)
    location: str = Field(..., max_length=100)
    door_type: Optional[DoorType] = None
    installation_type: Optional[InstallationType] = None
    manufacturer: str = Field(default="", max_length=200)
    doorset_number: str = Field(default="", max_length=100)
    date_manufactured: Optional[str] = Field(default=None, pattern=r'^\d{4}-\d{2}-01$')
    fire_rating: Optional[str] = Field(default=None, max_length=50)
    door_closer: Optional[str] = None
    hinges: Optional[str] = None
    hardware: Optional[str] = None
    leaf_dimensions: Optional[str] = None
    second_leaf_dimensions: Optional[str] = None
    gaps: Optional[str] = None
    building_features: Optional[str] = None
    inspection_results: Optional[str] = None
    photos: Optional[str] = None
    additional_notes: str = ""
    pass_fail: bool

    @field_validator('location_name', 'manufacturer', 'doorset_number')
    @classmethod
    def validate_short_text(cls, v):
        return sanitize_html(validate_string_length(v, 'text field', 0, 200))

    @field_validator('additional_notes')
    @classmethod
    def sanitize_notes(cls, v):
        return sanitize_html(v) if v else ""

    @field_validator('location')
    @classmethod
    def validate_point(cls, v):
        if not v.startswith('POINT(') or not v.endswith(')'):
            raise ValueError("location must be a POINT(<lng> <lat>) literal")
        return v

    @field_validator(*ROW_JSON_COLUMNS)
    @classmethod
    def validate_json_column(cls, v):
        if v is None:
            return v
        try:
            json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"must be a JSON encoded string: {e}")
        return v

    model_config = ConfigDict(use_enum_values=True)
