"""Form state container for the survey record.

The form never writes into the record directly. Each input sends a typed
update message naming the field through an enum, and reduce() returns a new
record with the change applied and validated. FormStore holds the current
record for a form session and notifies subscribers after every change.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional
from shared.enums import (
    DoorType, InstallationType, InspectionItemName, ComponentName,
    DEFECT_VOCABULARY, COMPONENT_DEFECT_VOCABULARY, SECURITY_FEATURES,
    WALL_SUBSTRATES, WALL_FINISHES, FLOOR_SURFACES, FLOOR_FINISHES,
    DOOR_LEAF_MATERIALS, DOOR_FRAME_MATERIALS,
)
from shared.schemas import Inspection, Photo, SurveyRecord, initial_survey_record

logger = logging.getLogger(__name__)


class DoorDetailField(str, enum.Enum):
    MANUFACTURER = "manufacturer"
    DOORSET_NUMBER = "doorset_number"


class FireRatingField(str, enum.Enum):
    INTEGRITY = "integrity"
    INSULATION = "insulation"
    SMOKE_CONTROL = "smoke_control"


class ComponentField(str, enum.Enum):
    BRAND = "brand"
    CE_MARKING = "ce_marking"
    NOTES = "notes"
    NUM_SETS = "num_sets"  # hinges only


class Leaf(str, enum.Enum):
    FIRST = "leaf_dimensions"
    SECOND = "second_leaf_dimensions"


class LeafField(str, enum.Enum):
    WIDTH = "width"
    HEIGHT = "height"
    THICKNESS = "thickness"
    HAS_VISION_PANEL = "has_vision_panel"
    VISION_PANEL_MATERIAL = "vision_panel_material"
    VISION_PANEL_WIDTH = "vision_panel.width"
    VISION_PANEL_HEIGHT = "vision_panel.height"


class GapField(str, enum.Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT_SIDE = "left_side"
    RIGHT_SIDE = "right_side"
    IN_BETWEEN = "in_between"
    PROTRUSION = "protrusion"
    LEFT_DOOR_TOP = "left_door.top"
    LEFT_DOOR_BOTTOM = "left_door.bottom"
    RIGHT_DOOR_TOP = "right_door.top"
    RIGHT_DOOR_BOTTOM = "right_door.bottom"


class BuildingFeatureField(str, enum.Enum):
    SECURITY_FEATURES_OTHER = "security_features_other"
    WALL_SUBSTRATE = "wall_substrate"
    WALL_SUBSTRATE_OTHER = "wall_substrate_other"
    WALL_FINISH = "wall_finish"
    WALL_FINISH_OTHER = "wall_finish_other"
    FLOOR_SURFACE = "floor_surface"
    FLOOR_FINISH = "floor_finish"
    DOOR_LEAF_MATERIAL = "door_leaf_material"
    DOOR_FRAME_MATERIAL = "door_frame_material"
    NOTES = "notes"


class InspectionFlag(str, enum.Enum):
    SLOW_CLOSING = "slow_closing"
    RATTLING = "rattling"
    ONE_SIDE_ONLY = "one_side_only"
    NOT_NZS4520 = "not_nzs4520"


# Select fields and their options; "" is the unselected placeholder
BUILDING_FEATURE_OPTIONS = {
    BuildingFeatureField.WALL_SUBSTRATE: WALL_SUBSTRATES,
    BuildingFeatureField.WALL_FINISH: WALL_FINISHES,
    BuildingFeatureField.FLOOR_SURFACE: FLOOR_SURFACES,
    BuildingFeatureField.FLOOR_FINISH: FLOOR_FINISHES,
    BuildingFeatureField.DOOR_LEAF_MATERIAL: DOOR_LEAF_MATERIALS,
    BuildingFeatureField.DOOR_FRAME_MATERIAL: DOOR_FRAME_MATERIALS,
}

INSPECTION_FLAG_ITEMS = {
    InspectionFlag.SLOW_CLOSING: InspectionItemName.DOOR_CLOSER,
    InspectionFlag.RATTLING: InspectionItemName.HARDWARE,
    InspectionFlag.ONE_SIDE_ONLY: InspectionItemName.DOOR_SIGNAGE,
    InspectionFlag.NOT_NZS4520: InspectionItemName.DOOR_SIGNAGE,
}


# Update messages
@dataclass(frozen=True)
class SetLocationName:
    value: str


@dataclass(frozen=True)
class SetCoordinates:
    lat: Optional[float]
    lng: Optional[float]


@dataclass(frozen=True)
class SetDoorType:
    value: Optional[DoorType]


@dataclass(frozen=True)
class SetInstallationType:
    value: Optional[InstallationType]


@dataclass(frozen=True)
class SetDoorDetail:
    field: DoorDetailField
    value: str


@dataclass(frozen=True)
class SetDateManufactured:
    month: str
    year: str


@dataclass(frozen=True)
class SetFireRating:
    field: FireRatingField
    value: str


@dataclass(frozen=True)
class SetComponentField:
    component: ComponentName
    field: ComponentField
    value: Any


@dataclass(frozen=True)
class ToggleComponentStatus:
    component: ComponentName
    tag: str


@dataclass(frozen=True)
class SetLeafDimension:
    leaf: Leaf
    field: LeafField
    value: Any


@dataclass(frozen=True)
class SetGap:
    field: GapField
    value: Optional[float]


@dataclass(frozen=True)
class SetBuildingFeature:
    field: BuildingFeatureField
    value: str


@dataclass(frozen=True)
class ToggleSecurityFeature:
    feature: str


@dataclass(frozen=True)
class ToggleDefect:
    item: InspectionItemName
    tag: str


@dataclass(frozen=True)
class SetInspectionNotes:
    item: InspectionItemName
    notes: str


@dataclass(frozen=True)
class SetInspectionFlag:
    flag: InspectionFlag
    value: bool


@dataclass(frozen=True)
class AddPhoto:
    photo: Photo


@dataclass(frozen=True)
class RemovePhoto:
    index: int


@dataclass(frozen=True)
class SetPhotoDescription:
    index: int
    description: str


@dataclass(frozen=True)
class SetAdditionalNotes:
    value: str


@dataclass(frozen=True)
class ResetForm:
    pass


def _replace(model, **changes):
    """Copy a pydantic model with changes applied and re-validated."""
    return type(model).model_validate({**model.model_dump(), **changes})


def _toggle(tags: List[str], tag: str) -> List[str]:
    return [t for t in tags if t != tag] if tag in tags else [*tags, tag]


def _set_location_name(record, msg):
    return _replace(record, location_name=msg.value)


def _set_coordinates(record, msg):
    return _replace(record, coordinates={'lat': msg.lat, 'lng': msg.lng})


def _set_door_type(record, msg):
    return _replace(record, door_type=msg.value)


def _set_installation_type(record, msg):
    return _replace(record, installation_type=msg.value)


def _set_door_detail(record, msg):
    return _replace(record, **{DoorDetailField(msg.field).value: msg.value})


def _set_date_manufactured(record, msg):
    return _replace(record, date_manufactured={'month': msg.month, 'year': msg.year})


def _set_fire_rating(record, msg):
    fire_rating = _replace(record.fire_rating, **{FireRatingField(msg.field).value: msg.value})
    return _replace(record, fire_rating=fire_rating)


def _component_attribute(component) -> str:
    return {
        ComponentName.DOOR_CLOSER: 'door_closer',
        ComponentName.HINGES: 'hinges',
        ComponentName.HARDWARE: 'hardware',
    }[ComponentName(component)]


def _set_component_field(record, msg):
    attribute = _component_attribute(msg.component)
    field = ComponentField(msg.field)
    if field == ComponentField.NUM_SETS and attribute != 'hinges':
        raise ValueError(f"{msg.component} has no {field.value} field")
    component = _replace(getattr(record, attribute), **{field.value: msg.value})
    return _replace(record, **{attribute: component})


def _toggle_component_status(record, msg):
    name = ComponentName(msg.component)
    if msg.tag not in COMPONENT_DEFECT_VOCABULARY[name]:
        raise ValueError(f"'{msg.tag}' is not a status of {name.value}")
    attribute = _component_attribute(name)
    current = getattr(record, attribute)
    component = _replace(current, status=_toggle(current.status, msg.tag))
    return _replace(record, **{attribute: component})


def _set_leaf_dimension(record, msg):
    attribute = Leaf(msg.leaf).value
    leaf = getattr(record, attribute)
    field = LeafField(msg.field)
    if field in (LeafField.VISION_PANEL_WIDTH, LeafField.VISION_PANEL_HEIGHT):
        panel = _replace(leaf.vision_panel, **{field.value.split('.')[1]: msg.value})
        leaf = _replace(leaf, vision_panel=panel)
    else:
        leaf = _replace(leaf, **{field.value: msg.value})
    return _replace(record, **{attribute: leaf})


def _set_gap(record, msg):
    field = GapField(msg.field)
    gaps = record.gaps
    if '.' in field.value:
        door, edge = field.value.split('.')
        gaps = _replace(gaps, **{door: _replace(getattr(gaps, door), **{edge: msg.value})})
    else:
        gaps = _replace(gaps, **{field.value: msg.value})
    return _replace(record, gaps=gaps)


def _set_building_feature(record, msg):
    field = BuildingFeatureField(msg.field)
    options = BUILDING_FEATURE_OPTIONS.get(field)
    if options is not None and msg.value and msg.value not in options:
        raise ValueError(f"'{msg.value}' is not an option for {field.value}")
    features = _replace(record.building_features, **{field.value: msg.value})
    return _replace(record, building_features=features)


def _toggle_security_feature(record, msg):
    if msg.feature not in SECURITY_FEATURES:
        raise ValueError(f"'{msg.feature}' is not a security feature option")
    current = record.building_features
    features = _replace(current, security_features=_toggle(current.security_features, msg.feature))
    return _replace(record, building_features=features)


def _update_inspection_item(record, name, **changes):
    attribute = Inspection.attribute_for(name)
    item = _replace(record.inspection.item(name), **changes)
    inspection = _replace(record.inspection, **{attribute: item})
    return _replace(record, inspection=inspection)


def _toggle_defect(record, msg):
    name = InspectionItemName(msg.item)
    if msg.tag not in DEFECT_VOCABULARY[name]:
        raise ValueError(f"'{msg.tag}' is not a defect of {name.value}")
    current = record.inspection.item(name)
    return _update_inspection_item(record, name, status=_toggle(current.status, msg.tag))


def _set_inspection_notes(record, msg):
    return _update_inspection_item(record, msg.item, notes=msg.notes)


def _set_inspection_flag(record, msg):
    flag = InspectionFlag(msg.flag)
    return _update_inspection_item(record, INSPECTION_FLAG_ITEMS[flag], **{flag.value: bool(msg.value)})


def _add_photo(record, msg):
    return _replace(record, photos=[*record.photos, msg.photo])


def _check_photo_index(record, index):
    if not 0 <= index < len(record.photos):
        raise IndexError(f"No photo at index {index}")


def _remove_photo(record, msg):
    _check_photo_index(record, msg.index)
    return _replace(record, photos=[p for i, p in enumerate(record.photos) if i != msg.index])


def _set_photo_description(record, msg):
    _check_photo_index(record, msg.index)
    photos = list(record.photos)
    photos[msg.index] = _replace(photos[msg.index], description=msg.description)
    return _replace(record, photos=photos)


def _set_additional_notes(record, msg):
    return _replace(record, additional_notes=msg.value)


def _reset_form(record, msg):
    return initial_survey_record()


# Message dispatch table
REDUCERS = {
    SetLocationName: _set_location_name,
    SetCoordinates: _set_coordinates,
    SetDoorType: _set_door_type,
    SetInstallationType: _set_installation_type,
    SetDoorDetail: _set_door_detail,
    SetDateManufactured: _set_date_manufactured,
    SetFireRating: _set_fire_rating,
    SetComponentField: _set_component_field,
    ToggleComponentStatus: _toggle_component_status,
    SetLeafDimension: _set_leaf_dimension,
    SetGap: _set_gap,
    SetBuildingFeature: _set_building_feature,
    ToggleSecurityFeature: _toggle_security_feature,
    ToggleDefect: _toggle_defect,
    SetInspectionNotes: _set_inspection_notes,
    SetInspectionFlag: _set_inspection_flag,
    AddPhoto: _add_photo,
    RemovePhoto: _remove_photo,
    SetPhotoDescription: _set_photo_description,
    SetAdditionalNotes: _set_additional_notes,
    ResetForm: _reset_form,
}


def reduce(record: SurveyRecord, message) -> SurveyRecord:
    """Apply one update message and return the new record.

    The given record is left unchanged.

    Raises:
        TypeError: If the message type is not an update message
        ValueError: If the value is not valid for the field
        IndexError: If a photo message names a missing photo
    """
    handler = REDUCERS.get(type(message))
    if handler is None:
        raise TypeError(f"Unknown form update: {type(message).__name__}")
    return handler(record, message)


class FormStore:
    """Holds the record being edited and applies update messages to it."""

    def __init__(self, initial: Optional[SurveyRecord] = None):
        self._state = initial if initial is not None else initial_survey_record()
        self._listeners: List[Callable[[SurveyRecord], None]] = []

    @property
    def state(self) -> SurveyRecord:
        return self._state

    def dispatch(self, message) -> SurveyRecord:
        self._state = reduce(self._state, message)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Callable[[SurveyRecord], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def reset(self) -> SurveyRecord:
        logger.debug("Resetting survey form to its initial state")
        return self.dispatch(ResetForm())
