"""Application state management for the survey client."""
import enum
from dataclasses import dataclass, field
from typing import Optional, List, Dict
from shared.form_state import FormStore


class SubmissionPhase(str, enum.Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    MAPPING = "mapping"
    PERSISTING = "persisting"


@dataclass
class SessionState:
    """State shared by the client handlers for one running session."""
    # Form being edited
    store: FormStore = field(default_factory=FormStore)
    phase: SubmissionPhase = SubmissionPhase.EDITING
    missing_fields: List[str] = field(default_factory=list)
    last_error: Optional[str] = None

    # Photo ingestion in flight
    photos_in_progress: int = 0

    # Stored surveys for the list and detail views
    surveys: List[Dict] = field(default_factory=list)
    current_survey: Optional[Dict] = None

    def reset_survey_state(self):
        """Start over with a fresh record."""
        self.store.reset()
        self.phase = SubmissionPhase.EDITING
        self.missing_fields = []
        self.last_error = None
