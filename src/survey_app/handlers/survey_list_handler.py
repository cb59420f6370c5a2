"""Stored survey list, detail and deletion."""
import logging

from shared.mapper import decode_survey_row
from ..services.api_service import TransportError
from .photo_handler import stored_object_key

# Columns shown in the list view
SUMMARY_COLUMNS = ('id', 'created_at', 'location_name', 'door_type', 'installation_type', 'fire_rating', 'pass_fail')


class SurveyListHandler:
    """Reads stored surveys back for display and deletes them."""

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_surveys(self, filters=None):
        """Summary rows, newest first. Returns [] and alerts on failure."""
        try:
            rows = self.app.api_service.select(
                self.app.config.survey_table,
                columns=SUMMARY_COLUMNS,
                filters=filters,
                order='created_at.desc',
            )
        except TransportError as e:
            self.logger.error(f"Error fetching surveys: {e.message}")
            self.app.alert("Error loading surveys", e.message)
            return []
        self.app.state.surveys = rows
        return rows

    def load_detail(self, survey_id):
        """One stored survey with its JSON columns decoded, or None on failure."""
        try:
            row = self.app.api_service.get(self.app.config.survey_table, survey_id)
        except TransportError as e:
            self.logger.error(f"Error fetching survey {survey_id}: {e.message}")
            self.app.alert("Error loading survey", e.message)
            return None
        detail = decode_survey_row(row)
        self.app.state.current_survey = detail
        return detail

    def delete_survey(self, survey_id) -> bool:
        """Delete a stored survey after the user confirms.

        Its uploaded photos are removed from the object store afterwards;
        a failure there is logged and does not restore the row.
        """
        if not self.app.confirm("Delete survey", "Are you sure you want to delete this survey?"):
            return False

        photo_keys = self._photo_keys(survey_id)
        try:
            self.app.api_service.delete(self.app.config.survey_table, survey_id)
        except TransportError as e:
            self.logger.error(f"Error deleting survey {survey_id}: {e.message}")
            self.app.alert("Error deleting survey", e.message)
            return False

        self.app.state.surveys = [s for s in self.app.state.surveys if s.get('id') != survey_id]
        current = self.app.state.current_survey
        if current is not None and current.get('id') == survey_id:
            self.app.state.current_survey = None

        if photo_keys:
            try:
                self.app.api_service.remove(self.app.config.photo_bucket, photo_keys)
            except TransportError as e:
                self.logger.warning(f"Photos of survey {survey_id} left in storage: {e.message}")
        return True

    def _photo_keys(self, survey_id):
        current = self.app.state.current_survey
        if current is None or current.get('id') != survey_id:
            try:
                current = decode_survey_row(self.app.api_service.get(self.app.config.survey_table, survey_id))
            except TransportError as e:
                self.logger.warning(f"Could not read photos of survey {survey_id}: {e.message}")
                return []
        photos = current.get('photos')
        if not isinstance(photos, list):
            return []
        keys = (stored_object_key(p.get('file_path')) for p in photos if isinstance(p, dict))
        return [key for key in keys if key]
