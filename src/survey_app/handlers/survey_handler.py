"""Survey form lifecycle: mount and submission."""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from shared.form_state import SetCoordinates
from shared.mapper import map_survey_to_row
from shared.status import SurveyStatusResult, get_survey_status
from shared.validation import validate_required_fields
from ..services.api_service import TransportError
from ..services.geolocation_service import GeolocationResult
from ..state import SubmissionPhase


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    INVALID = "invalid"
    FAILED = "failed"
    BUSY = "busy"


@dataclass
class SubmissionOutcome:
    status: SubmissionStatus
    missing_fields: List[str] = field(default_factory=list)
    survey_status: Optional[SurveyStatusResult] = None
    row: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED


class SurveyHandler:
    """Mounts a fresh survey form and submits it to the row store."""

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger(self.__class__.__name__)
        self.position: Optional[GeolocationResult] = None

    def mount(self) -> GeolocationResult:
        """Start a new record and resolve the device position once."""
        self.app.state.reset_survey_state()
        self.position = self.app.geolocation_service.resolve()
        self._apply_position()
        return self.position

    def _apply_position(self):
        if self.position is not None:
            self.app.state.store.dispatch(SetCoordinates(self.position.lat, self.position.lng))

    def submit(self) -> SubmissionOutcome:
        """Validate, score, flatten and persist the current record.

        Missing required fields and transport failures return the form to
        editing with the record untouched. A stored survey resets the form;
        the resolved position is kept for the next door.
        """
        state = self.app.state
        if state.phase != SubmissionPhase.EDITING:
            self.logger.warning(f"Submit ignored while {state.phase.value}")
            return SubmissionOutcome(SubmissionStatus.BUSY)

        record = state.store.state

        state.phase = SubmissionPhase.VALIDATING
        required = validate_required_fields(record)
        if not required.is_valid:
            state.phase = SubmissionPhase.EDITING
            state.missing_fields = list(required.missing_fields)
            self.logger.info(f"Submission blocked, {len(required.missing_fields)} required fields missing")
            self.app.alert(
                "Missing required fields",
                "Please fill in the following fields:\n" + "\n".join(required.missing_fields),
            )
            return SubmissionOutcome(SubmissionStatus.INVALID, missing_fields=list(required.missing_fields))
        state.missing_fields = []

        state.phase = SubmissionPhase.MAPPING
        survey_status = get_survey_status(record)
        row = map_survey_to_row(record, survey_status)

        state.phase = SubmissionPhase.PERSISTING
        try:
            stored = self.app.api_service.insert(self.app.config.survey_table, row)
        except TransportError as e:
            state.phase = SubmissionPhase.EDITING
            state.last_error = e.message
            self.logger.error(f"Failed to store survey: {e.message}")
            self.app.alert("Error submitting survey", f"The survey was not saved: {e.message}")
            return SubmissionOutcome(SubmissionStatus.FAILED, survey_status=survey_status, error=e.message)

        self.logger.info(f"Stored survey {stored.get('id')} ({'PASS' if survey_status.passed else 'FAIL'})")
        state.reset_survey_state()
        self._apply_position()

        if survey_status.passed:
            self.app.alert("Survey submitted", "Result: PASS")
        else:
            self.app.alert("Survey submitted", "Result: FAIL\n" + "\n".join(survey_status.failures))
        return SubmissionOutcome(SubmissionStatus.SUBMITTED, survey_status=survey_status, row=stored)
