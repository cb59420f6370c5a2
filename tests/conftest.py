"""Pytest configuration and fixtures for Fire Door Survey tests."""
import io
import pytest
from PIL import Image
from backend.app import create_app
from backend.models import db
from shared.schemas import Photo, SurveyRecord


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Create and configure a test app instance."""
    monkeypatch.setenv('LOG_DIR', str(tmp_path / 'logs'))
    db_path = tmp_path / 'test.db'

    test_config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_ALLOWED_BUCKETS': ('fire-door-photos',),
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


def _make_record(**overrides):
    """A complete single interior door that passes every check."""
    data = {
        'locationName': 'Level 2 stairwell',
        'coordinates': {'lat': -36.8485, 'lng': 174.7633},
        'doorType': 'single',
        'installationType': 'interior',
        'manufacturer': 'Acme Doors',
        'doorsetNumber': 'FD-201',
        'dateManufactured': {'month': '3', 'year': '2019'},
        'fireRating': {'integrity': '60', 'insulation': '30', 'smokeControl': ''},
        'doorCloser': {'brand': 'Dorma', 'ceMarking': True},
        'hinges': {'numSets': 3, 'brand': 'Hafele'},
        'hardware': {'brand': 'Assa'},
        'leafDimensions': {'width': '926', 'height': '2040', 'thickness': '54'},
        'gaps': {'top': 2.5, 'bottom': 6, 'leftSide': 3, 'rightSide': 2, 'protrusion': 0.5},
        'buildingFeatures': {'doorLeafMaterial': 'Timber', 'doorFrameMaterial': 'Steel'},
        'photos': [Photo(file_path='https://cdn.example.com/fire-door-photos/abc.jpg',
                         timestamp='2024-05-01T10:00:00+00:00').model_dump()],
    }
    data.update(overrides)
    return SurveyRecord.model_validate(data)


def _make_double_record(**overrides):
    """A complete double door that passes every check."""
    data = {
        'doorType': 'double',
        'secondLeafDimensions': {'width': '900', 'height': '2040', 'thickness': '54'},
        'gaps': {
            'leftSide': 2, 'rightSide': 2, 'inBetween': 4, 'protrusion': 0,
            'leftDoor': {'top': 2, 'bottom': 5},
            'rightDoor': {'top': 3, 'bottom': 8},
        },
    }
    data.update(overrides)
    return _make_record(**data)


@pytest.fixture
def make_record():
    """Factory for complete single door records; keyword overrides replace sections."""
    return _make_record


@pytest.fixture
def make_double_record():
    return _make_double_record


@pytest.fixture
def complete_record():
    return _make_record()


@pytest.fixture
def double_record():
    return _make_double_record()


@pytest.fixture
def jpeg_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (640, 480), color=(200, 30, 30)).save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def jpeg_file(tmp_path, jpeg_bytes):
    path = tmp_path / 'door.jpg'
    path.write_bytes(jpeg_bytes)
    return path
