"""Tests for the survey record and row schemas."""
import pytest
from pydantic import ValidationError as PydanticValidationError
from shared.enums import InspectionItemName, DEFECT_VOCABULARY
from shared.schemas import (
    SurveyRecord, SurveyRowCreate, Inspection, Photo, initial_survey_record,
    FALLBACK_LATITUDE, FALLBACK_LONGITUDE, Coordinates,
)
from shared.validation import ValidationError


def test_initial_record_defaults():
    form = initial_survey_record().to_form_dict()
    assert form['locationName'] == ''
    assert form['coordinates'] == {'lat': None, 'lng': None}
    assert form['doorType'] == 'single'
    assert form['installationType'] == 'interior'
    assert form['leafDimensions']['visionPanelMaterial'] == 'clear'
    assert form['leafDimensions']['hasVisionPanel'] is False
    assert form['secondLeafDimensions']['visionPanel'] == {'width': '', 'height': ''}
    assert form['gaps']['inBetween'] is None
    assert form['buildingFeatures']['securityFeatures'] == []
    assert form['buildingFeatures']['wallSubstrate'] == ''
    assert form['photos'] == []
    assert form['additionalNotes'] == ''


def test_every_inspection_item_present():
    inspection = initial_survey_record().to_form_dict()['inspection']
    assert set(inspection) == {name.value for name in InspectionItemName}
    assert inspection['doorCloser']['slowClosing'] is False
    assert inspection['hardware']['rattling'] is False
    assert inspection['doorSignage'] == {'status': [], 'notes': '', 'oneSideOnly': False, 'notNZS4520': False}


def test_record_round_trips_through_form_shape(complete_record):
    assert SurveyRecord.model_validate(complete_record.to_form_dict()) == complete_record


def test_absent_sections_become_defaults():
    record = SurveyRecord.model_validate({'gaps': None, 'inspection': None})
    assert record.gaps.top is None
    assert record.inspection.door_leaf.status == []


def test_unknown_defect_tag_rejected():
    with pytest.raises(PydanticValidationError, match='unknown status tags'):
        Inspection.model_validate({'doorLeaf': {'status': ['Melted']}})


def test_duplicate_defect_tag_rejected():
    with pytest.raises(PydanticValidationError, match='duplicate'):
        Inspection.model_validate({'fireTag': {'status': ['Missing', 'Missing']}})


def test_component_status_uses_item_vocabulary():
    SurveyRecord.model_validate({'hinges': {'status': ['Squeaky']}})
    with pytest.raises(PydanticValidationError):
        SurveyRecord.model_validate({'hinges': {'status': ['Rapid Closing']}})


def test_inspection_item_lookup():
    inspection = Inspection.model_validate({'smokeSeal': {'status': ['Loose']}})
    assert Inspection.attribute_for('smokeSeal') == 'smoke_seal'
    assert inspection.item(InspectionItemName.SMOKE_SEAL).has_issues
    assert not inspection.item('visionPanel').has_issues


def test_vocabulary_has_no_ok_tag():
    for tags in DEFECT_VOCABULARY.values():
        assert 'OK' not in tags


def test_invalid_measurement_rejected():
    with pytest.raises(PydanticValidationError):
        SurveyRecord.model_validate({'gaps': {'top': 'wide'}})
    with pytest.raises(PydanticValidationError):
        SurveyRecord.model_validate({'gaps': {'top': float('nan')}})


def test_coordinates_resolved():
    assert Coordinates().resolved() == (FALLBACK_LATITUDE, FALLBACK_LONGITUDE)
    assert Coordinates(lat=1.5, lng=2.5).resolved() == (1.5, 2.5)


def test_photo_create_stamps_time():
    photo = Photo.create('https://cdn.example.com/a.jpg', 'Hinge side')
    assert photo.description == 'Hinge side'
    assert photo.timestamp.endswith('+00:00')


class TestSurveyRowCreate:

    def _row(self, **overrides):
        row = {'location': 'POINT(174.7762 -41.2865)', 'pass_fail': True}
        row.update(overrides)
        return row

    def test_minimal_row(self):
        row = SurveyRowCreate(**self._row())
        assert row.door_type is None
        assert row.additional_notes == ''

    def test_sanitizes_free_text(self):
        row = SurveyRowCreate(**self._row(additional_notes='<div>Closer</div> leaking'))
        assert row.additional_notes == 'Closer leaking'

    def test_rejects_bad_point(self):
        with pytest.raises(PydanticValidationError):
            SurveyRowCreate(**self._row(location='174.7 -41.2'))

    def test_rejects_bad_json_column(self):
        with pytest.raises(PydanticValidationError):
            SurveyRowCreate(**self._row(gaps='{not json'))

    def test_rejects_bad_date(self):
        with pytest.raises(PydanticValidationError):
            SurveyRowCreate(**self._row(date_manufactured='2019-03-15'))

    def test_rejects_unknown_door_type(self):
        with pytest.raises(PydanticValidationError):
            SurveyRowCreate(**self._row(door_type='triple'))

    def test_overlong_location_name(self):
        with pytest.raises((PydanticValidationError, ValidationError)):
            SurveyRowCreate(**self._row(location_name='x' * 300))
