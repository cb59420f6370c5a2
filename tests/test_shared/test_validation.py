"""Tests for validation utilities and the required-field check."""
import pytest
from shared.form_state import FormStore, SetGap, GapField
from shared.schemas import initial_survey_record
from shared.validation import (
    ValidationError, validate_string_length, validate_choice, sanitize_html,
    validate_coordinates, validate_required_fields, is_blank,
)


class TestValidationHelpers:

    def test_validate_string_length(self):
        assert validate_string_length('  Level 2  ', 'location') == 'Level 2'
        with pytest.raises(ValidationError):
            validate_string_length('x' * 201, 'location', max_length=200)
        with pytest.raises(ValidationError):
            validate_string_length(42, 'location')

    def test_validate_choice(self):
        assert validate_choice('single', 'door_type', ['single', 'double']) == 'single'
        with pytest.raises(ValidationError, match='door_type'):
            validate_choice('triple', 'door_type', ['single', 'double'])

    def test_sanitize_html(self):
        assert sanitize_html('Closer arm bent') == 'Closer arm bent'
        assert sanitize_html('<em onclick="x()">Bent</em> arm') == '<em>Bent</em> arm'
        assert sanitize_html('<div>Bent</div> arm') == 'Bent arm'

    def test_validate_coordinates(self):
        assert validate_coordinates('-41.2865', 174.7762) == (-41.2865, 174.7762)
        with pytest.raises(ValidationError):
            validate_coordinates(91, 0)
        with pytest.raises(ValidationError):
            validate_coordinates('north', 0)

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank('   ')
        assert not is_blank(0)
        assert not is_blank('0')


class TestRequiredFields:

    def test_complete_record_is_valid(self, complete_record, double_record):
        assert validate_required_fields(complete_record).is_valid
        assert validate_required_fields(double_record).is_valid

    def test_initial_record_lists_fields_in_order(self):
        result = validate_required_fields(initial_survey_record())
        assert not result.is_valid
        assert result.missing_fields == [
            "Fire Rating Integrity",
            "Fire Rating Insulation",
            "Door Closer Brand",
            "Number of Hinge Sets",
            "Leaf Width",
            "Leaf Height",
            "Leaf Thickness",
            "Left Side Gap",
            "Right Side Gap",
            "Protrusion",
            "Door Leaf Material",
            "Door Frame Material",
            "Photos (at least one)",
            "Top Gap",
            "Bottom Gap",
        ]

    def test_missing_door_and_installation_type(self, make_record):
        result = validate_required_fields(make_record(doorType=None, installationType=None))
        assert result.missing_fields[:2] == ["Door Type", "Installation Type"]
        # Without a door type no configuration-specific gaps are required
        assert "Top Gap" not in result.missing_fields

    def test_whitespace_counts_as_missing(self, make_record):
        record = make_record(doorCloser={'brand': '   '})
        assert validate_required_fields(record).missing_fields == ["Door Closer Brand"]

    def test_zero_measurement_is_present(self, make_record):
        record = make_record(gaps={'top': 0, 'bottom': 3, 'leftSide': 0, 'rightSide': 0, 'protrusion': 0})
        assert validate_required_fields(record).is_valid

    def test_vision_panel_fields(self, make_record):
        record = make_record(leafDimensions={
            'width': '926', 'height': '2040', 'thickness': '54',
            'hasVisionPanel': True, 'visionPanelMaterial': None,
        })
        assert validate_required_fields(record).missing_fields == [
            "Vision Panel Width", "Vision Panel Height", "Vision Panel Material",
        ]

    def test_double_door_requirements(self, make_record):
        record = make_record(doorType='double', gaps={'leftSide': 1, 'rightSide': 1, 'protrusion': 0})
        assert validate_required_fields(record).missing_fields == [
            "Second Leaf Width",
            "Second Leaf Height",
            "Second Leaf Thickness",
            "In-between Gap",
            "Left Door Top Gap",
            "Left Door Bottom Gap",
            "Right Door Top Gap",
            "Right Door Bottom Gap",
        ]

    def test_second_leaf_vision_panel(self, make_double_record):
        record = make_double_record(secondLeafDimensions={
            'width': '900', 'height': '2040', 'thickness': '54',
            'hasVisionPanel': True, 'visionPanel': {'width': '300'},
        })
        assert validate_required_fields(record).missing_fields == ["Second Leaf Vision Panel Height"]

    def test_single_door_ignores_second_leaf(self, complete_record):
        assert complete_record.second_leaf_dimensions.width == ''
        assert validate_required_fields(complete_record).is_valid

    def test_record_is_not_modified(self):
        store = FormStore()
        store.dispatch(SetGap(GapField.TOP, 2))
        before = store.state.model_dump()
        validate_required_fields(store.state)
        assert store.state.model_dump() == before
