"""Tests for the survey client handlers."""
import pytest
from unittest.mock import Mock
from PIL import Image
from shared.form_state import FormStore, SetLocationName
from shared.schemas import Photo, initial_survey_record
from src.survey_app.app import SurveyApp
from src.survey_app.config_manager import ConfigManager
from src.survey_app.handlers.photo_handler import stored_object_key
from src.survey_app.handlers.survey_handler import SubmissionStatus
from src.survey_app.handlers.survey_list_handler import SUMMARY_COLUMNS
from src.survey_app.services.api_service import TransportError
from src.survey_app.state import SubmissionPhase

DEVICE_POSITION = (-36.8485, 174.7633)


class Alerts:
    """Records alert() calls made by the handlers."""

    def __init__(self):
        self.calls = []

    def __call__(self, title, message):
        self.calls.append((title, message))

    @property
    def titles(self):
        return [title for title, _ in self.calls]


@pytest.fixture
def alerts():
    return Alerts()


@pytest.fixture
def api_service():
    api = Mock()
    api.upload.side_effect = lambda bucket, key, data, content_type: {
        'key': key, 'url': f'https://cdn.example.com/{bucket}/{key}'
    }
    api.remove.return_value = {'removed': [], 'failed': []}
    return api


@pytest.fixture
def survey_app(alerts, api_service):
    config = ConfigManager(photo_workers=2, gps_timeout=1.0)
    app = SurveyApp(
        config=config,
        alert=alerts,
        confirm=Mock(return_value=True),
        api_service=api_service,
        position_provider=lambda: DEVICE_POSITION,
    )
    app.startup()
    return app


def _load(app, record):
    app.state.store = FormStore(record)


class TestSurveyHandler:

    def test_mount_applies_device_position(self, survey_app):
        coordinates = survey_app.state.store.state.coordinates
        assert (coordinates.lat, coordinates.lng) == DEVICE_POSITION
        assert not survey_app.survey_handler.position.is_fallback

    def test_mount_falls_back_when_position_unavailable(self, alerts, api_service):
        app = SurveyApp(config=ConfigManager(), alert=alerts, api_service=api_service)
        position = app.startup()
        assert position.is_fallback
        coordinates = app.state.store.state.coordinates
        assert (coordinates.lat, coordinates.lng) == (-41.2865, 174.7762)

    def test_mount_survives_crashing_provider(self, alerts, api_service):
        def provider():
            raise RuntimeError('location services crashed')

        app = SurveyApp(config=ConfigManager(), alert=alerts, api_service=api_service, position_provider=provider)
        position = app.startup()

        assert position.is_fallback
        assert app.state.store.state.coordinates.lat == -41.2865

    def test_submit_incomplete_record(self, survey_app, alerts, api_service):
        survey_app.state.store.dispatch(SetLocationName('Plant room'))

        outcome = survey_app.survey_handler.submit()

        assert outcome.status == SubmissionStatus.INVALID
        assert 'Door Closer Brand' in outcome.missing_fields
        assert 'Photos (at least one)' in outcome.missing_fields
        assert survey_app.state.missing_fields == outcome.missing_fields
        assert survey_app.state.phase == SubmissionPhase.EDITING
        assert survey_app.state.store.state.location_name == 'Plant room'
        assert alerts.calls[-1][0] == 'Missing required fields'
        assert alerts.calls[-1][1].startswith('Please fill in the following fields:\n')
        api_service.insert.assert_not_called()

    def test_submit_passing_record(self, survey_app, alerts, api_service, complete_record):
        _load(survey_app, complete_record)
        api_service.insert.return_value = {'id': 'survey-1', 'pass_fail': True}

        outcome = survey_app.survey_handler.submit()

        assert outcome.submitted
        assert outcome.row == {'id': 'survey-1', 'pass_fail': True}
        table, row = api_service.insert.call_args.args
        assert table == 'fire_door_surveys'
        assert row['pass_fail'] is True
        assert row['location'] == 'POINT(174.7633 -36.8485)'
        assert alerts.calls[-1] == ('Survey submitted', 'Result: PASS')

        # Form resets for the next door, keeping the resolved position
        state = survey_app.state.store.state
        assert state.location_name == ''
        assert state.photos == []
        assert (state.coordinates.lat, state.coordinates.lng) == DEVICE_POSITION
        assert survey_app.state.phase == SubmissionPhase.EDITING

    def test_submit_failing_record(self, survey_app, alerts, api_service, make_record):
        _load(survey_app, make_record(
            gaps={'top': 2.5, 'bottom': 12, 'leftSide': 3, 'rightSide': 2, 'protrusion': 0.5},
            inspection={'fireTag': {'status': ['Painted']}},
        ))
        api_service.insert.return_value = {'id': 'survey-2', 'pass_fail': False}

        outcome = survey_app.survey_handler.submit()

        assert outcome.submitted
        assert not outcome.survey_status.passed
        assert api_service.insert.call_args.args[1]['pass_fail'] is False
        title, message = alerts.calls[-1]
        assert title == 'Survey submitted'
        assert message.startswith('Result: FAIL\n')
        assert message.endswith('Fire Tag issues: Painted')

    def test_submit_transport_failure_keeps_record(self, survey_app, alerts, api_service, complete_record):
        _load(survey_app, complete_record)
        api_service.insert.side_effect = TransportError('Service unavailable', status_code=503)

        outcome = survey_app.survey_handler.submit()

        assert outcome.status == SubmissionStatus.FAILED
        assert outcome.error == 'Service unavailable'
        assert survey_app.state.store.state == complete_record
        assert survey_app.state.phase == SubmissionPhase.EDITING
        assert survey_app.state.last_error == 'Service unavailable'
        assert alerts.calls[-1][0] == 'Error submitting survey'

        # Retrying once the store is back succeeds with the same record
        api_service.insert.side_effect = None
        api_service.insert.return_value = {'id': 'survey-3'}
        assert survey_app.survey_handler.submit().submitted

    def test_submit_while_busy(self, survey_app, api_service, complete_record):
        _load(survey_app, complete_record)
        survey_app.state.phase = SubmissionPhase.PERSISTING

        assert survey_app.survey_handler.submit().status == SubmissionStatus.BUSY
        api_service.insert.assert_not_called()


class TestPhotoHandler:

    def test_add_photos_uploads_each_file(self, survey_app, api_service, jpeg_file, tmp_path):
        second = tmp_path / 'frame.PNG'
        Image.new('RGB', (320, 240), color=(20, 20, 200)).save(second, format='PNG')

        result = survey_app.photo_handler.add_photos([str(jpeg_file), str(second)])

        assert len(result.added) == 2
        assert result.failed == []
        photos = survey_app.state.store.state.photos
        assert len(photos) == 2
        assert all(p.file_path.startswith('https://cdn.example.com/fire-door-photos/') for p in photos)
        assert api_service.upload.call_count == 2
        content_types = sorted(c.args[3] for c in api_service.upload.call_args_list)
        assert content_types == ['image/jpeg', 'image/png']
        assert any(p.file_path.endswith('.png') for p in photos)
        assert survey_app.state.photos_in_progress == 0
        assert set(survey_app.photo_handler.thumbnails) == {p.file_path for p in photos}

    def test_add_photos_partial_failure(self, survey_app, alerts, jpeg_file, tmp_path):
        broken = tmp_path / 'broken.jpg'
        broken.write_bytes(b'not an image')
        missing = tmp_path / 'missing.jpg'

        result = survey_app.photo_handler.add_photos([str(jpeg_file), str(broken), str(missing)])

        assert len(result.added) == 1
        assert sorted(path for path, _ in result.failed) == sorted([str(broken), str(missing)])
        assert len(survey_app.state.store.state.photos) == 1
        assert alerts.titles.count('Photo upload failed') == 2

    def test_add_photos_oversized_image_does_not_abort_batch(self, survey_app, alerts, tmp_path, monkeypatch):
        monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 1000)
        big = tmp_path / 'big.png'
        small = tmp_path / 'small.png'
        Image.new('RGB', (400, 400)).save(big, format='PNG')
        Image.new('RGB', (10, 10)).save(small, format='PNG')

        result = survey_app.photo_handler.add_photos([str(big), str(small)])

        assert len(result.added) == 1
        assert [path for path, _ in result.failed] == [str(big)]
        assert survey_app.state.photos_in_progress == 0
        assert alerts.titles.count('Photo upload failed') == 1

    def test_add_photos_unexpected_error(self, survey_app, alerts, api_service, jpeg_file):
        api_service.upload.side_effect = None
        api_service.upload.return_value = {}

        result = survey_app.photo_handler.add_photos([str(jpeg_file)])

        assert result.added == []
        assert result.failed[0][0] == str(jpeg_file)
        assert survey_app.state.photos_in_progress == 0
        assert alerts.titles[-1] == 'Photo upload failed'

    def test_add_photos_upload_failure(self, survey_app, alerts, api_service, jpeg_file):
        api_service.upload.side_effect = TransportError('Failed to upload object to fire-door-photos', 502)

        result = survey_app.photo_handler.add_photos([str(jpeg_file)])

        assert result.added == []
        assert survey_app.state.store.state.photos == []
        assert alerts.calls[-1] == ('Photo upload failed', 'door.jpg: Failed to upload object to fire-door-photos')

    def test_add_photos_embedded(self, alerts, api_service, jpeg_file):
        app = SurveyApp(config=ConfigManager(upload_photos=False), alert=alerts, api_service=api_service,
                        position_provider=lambda: DEVICE_POSITION)
        app.startup()

        app.photo_handler.add_photos([str(jpeg_file)])

        assert app.state.store.state.photos[0].file_path.startswith('data:image/jpeg;base64,')
        api_service.upload.assert_not_called()

    def test_photo_too_large(self, alerts, api_service, jpeg_file):
        app = SurveyApp(config=ConfigManager(max_photo_bytes=10), alert=alerts, api_service=api_service,
                        position_provider=lambda: DEVICE_POSITION)

        result = app.photo_handler.add_photos([str(jpeg_file)])

        assert result.added == []
        assert 'limit is 10' in result.failed[0][1]

    def test_remove_photo_deletes_stored_object(self, survey_app, api_service, jpeg_file):
        survey_app.photo_handler.add_photos([str(jpeg_file)])
        url = survey_app.state.store.state.photos[0].file_path

        survey_app.photo_handler.remove_photo(0)

        assert survey_app.state.store.state.photos == []
        api_service.remove.assert_called_once_with('fire-door-photos', [stored_object_key(url)])
        assert url not in survey_app.photo_handler.thumbnails

    def test_remove_photo_survives_store_failure(self, survey_app, api_service, jpeg_file):
        survey_app.photo_handler.add_photos([str(jpeg_file)])
        api_service.remove.side_effect = TransportError('Could not reach the server')

        survey_app.photo_handler.remove_photo(0)

        assert survey_app.state.store.state.photos == []

    def test_remove_photo_bad_index(self, survey_app):
        with pytest.raises(IndexError):
            survey_app.photo_handler.remove_photo(0)

    def test_set_description(self, survey_app):
        _load(survey_app, initial_survey_record().model_copy(update={
            'photos': [Photo(file_path='https://cdn.example.com/a.jpg', timestamp='2024-05-01T10:00:00+00:00')]
        }))
        survey_app.photo_handler.set_description(0, 'Closer arm')
        assert survey_app.state.store.state.photos[0].description == 'Closer arm'

    def test_stored_object_key(self):
        assert stored_object_key('https://cdn.example.com/fire-door-photos/abc.jpg') == 'abc.jpg'
        assert stored_object_key('data:image/jpeg;base64,AAAA') is None
        assert stored_object_key('') is None


class TestSurveyListHandler:

    def test_load_surveys(self, survey_app, api_service):
        api_service.select.return_value = [{'id': 'b'}, {'id': 'a'}]

        rows = survey_app.survey_list_handler.load_surveys({'pass_fail': False})

        assert rows == [{'id': 'b'}, {'id': 'a'}]
        assert survey_app.state.surveys == rows
        api_service.select.assert_called_once_with(
            'fire_door_surveys', columns=SUMMARY_COLUMNS, filters={'pass_fail': False}, order='created_at.desc'
        )

    def test_load_surveys_failure(self, survey_app, alerts, api_service):
        api_service.select.side_effect = TransportError('Could not reach the server')
        assert survey_app.survey_list_handler.load_surveys() == []
        assert alerts.calls[-1] == ('Error loading surveys', 'Could not reach the server')

    def test_load_detail_decodes_row(self, survey_app, api_service):
        api_service.get.return_value = {
            'id': 'a',
            'location': 'POINT(174.7633 -36.8485)',
            'gaps': '{"top": 2.5}',
            'photos': '[{"file_path": "https://cdn.example.com/fire-door-photos/abc.jpg"}]',
        }

        detail = survey_app.survey_list_handler.load_detail('a')

        assert detail['gaps'] == {'top': 2.5}
        assert detail['coordinates'] == {'lat': -36.8485, 'lng': 174.7633}
        assert survey_app.state.current_survey is detail

    def test_load_detail_missing(self, survey_app, alerts, api_service):
        api_service.get.side_effect = TransportError('Survey not found', status_code=404)
        assert survey_app.survey_list_handler.load_detail('nope') is None
        assert alerts.titles[-1] == 'Error loading survey'

    def test_delete_survey_removes_photos(self, survey_app, api_service):
        survey_app.state.surveys = [{'id': 'a'}, {'id': 'b'}]
        api_service.get.return_value = {
            'id': 'a',
            'photos': '[{"file_path": "https://cdn.example.com/fire-door-photos/abc.jpg"},'
                      ' {"file_path": "data:image/png;base64,AAAA"}]',
        }
        survey_app.survey_list_handler.load_detail('a')

        assert survey_app.survey_list_handler.delete_survey('a') is True

        api_service.delete.assert_called_once_with('fire_door_surveys', 'a')
        api_service.remove.assert_called_once_with('fire-door-photos', ['abc.jpg'])
        assert survey_app.state.surveys == [{'id': 'b'}]
        assert survey_app.state.current_survey is None

    def test_delete_survey_cancelled(self, survey_app, api_service):
        survey_app.confirm.return_value = False
        assert survey_app.survey_list_handler.delete_survey('a') is False
        api_service.delete.assert_not_called()

    def test_delete_survey_failure(self, survey_app, alerts, api_service):
        survey_app.state.surveys = [{'id': 'a'}]
        api_service.get.return_value = {'id': 'a', 'photos': '[]'}
        api_service.delete.side_effect = TransportError('Failed to delete survey', 500)

        assert survey_app.survey_list_handler.delete_survey('a') is False
        assert survey_app.state.surveys == [{'id': 'a'}]
        assert alerts.titles[-1] == 'Error deleting survey'
        api_service.remove.assert_not_called()
