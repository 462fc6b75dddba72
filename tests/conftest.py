"""
Pytest configuration and fixtures for Station Directory tests

Provides test database, Flask app, and HTTP client fixtures for testing
all components of the application.
"""

import os
import tempfile

import pytest

from station_directory.database import StationDatabase, crud
from station_directory.api import create_app
from station_directory.rate_limit import InMemoryRateLimitStore
from station_directory.recalculation import QualityRecalculator
from station_directory.settings import DEFAULT_SETTINGS


class FakeClock:
    """Manually advanced clock for rate-limit tests"""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_auth_file(tmp_path, monkeypatch):
    """Point the admin auth file at a temp path (auth disabled by default)"""
    auth_file = tmp_path / 'auth.json'
    monkeypatch.setenv('STATION_DIRECTORY_AUTH_FILE', str(auth_file))
    yield auth_file


@pytest.fixture
def test_db_path():
    """Provide a temporary database file path"""
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)
    os.unlink(path)  # let sqlite create a fresh file
    yield path
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


@pytest.fixture
def test_db(test_db_path):
    """Provide a connected test database with one station

    The station (id 1, public_id 'TestSt01') has no feedback.
    """
    db = StationDatabase(test_db_path)
    db.connect()

    cursor = db.get_cursor()
    crud.add_station(cursor, db.conn, create_test_station_data())
    cursor.close()

    yield db

    db.close()


@pytest.fixture
def recalculator(test_db):
    return QualityRecalculator(test_db)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(fake_clock):
    return InMemoryRateLimitStore(clock=fake_clock)


@pytest.fixture
def test_app(test_db, rate_limiter):
    """Provide a Flask test app with the test database"""
    app = create_app(test_db, DEFAULT_SETTINGS, rate_limiter=rate_limiter)
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def test_client(test_app):
    """Provide a Flask test client for making HTTP requests"""
    return test_app.test_client()


@pytest.fixture
def admin_auth(isolated_auth_file):
    """Enable admin auth with user 'admin' / password 'secret'

    Returns the Authorization header dict to send with admin requests.
    """
    import base64
    from station_directory.auth import hash_password, save_auth_config, failed_attempts

    save_auth_config('admin', hash_password('secret'))
    failed_attempts.clear()

    token = base64.b64encode(b'admin:secret').decode('ascii')
    yield {'Authorization': f'Basic {token}'}

    failed_attempts.clear()


@pytest.fixture
def add_feedback(test_db):
    """Factory fixture storing feedback directly (bypasses rate limits)"""

    def _add(station_id, feedback_type, count=1, resolved=False):
        ids = []
        for i in range(count):
            feedback_id = test_db.add_feedback(
                station_id, feedback_type, ip_address=f'10.0.0.{len(ids) + 1}'
            )
            if resolved:
                test_db.set_feedback_resolved(feedback_id)
            ids.append(feedback_id)
        return ids

    return _add


@pytest.fixture
def sample_stations(test_db):
    """Create stations with preset scores for tier/featured tests

    Returns dict name -> station id.
    """
    cursor = test_db.get_cursor()
    stations = {}
    presets = [
        ('Premium FM', 95.0, 4, True),
        ('High FM', 85.5, 3, True),
        ('Good FM', 72.0, 0, True),
        ('Fair FM', 60.0, 1, True),
        ('Poor FM', 35.0, 6, True),
        ('Hidden Premium FM', 92.0, 5, False),
    ]
    for name, score, feedback_count, active in presets:
        station_id = crud.add_station(cursor, test_db.conn, {
            'name': name,
            'url': f"http://stream.example.com/{name.replace(' ', '').lower()}",
            'is_active': active
        })
        crud.update_station_quality(cursor, test_db.conn, station_id, score, feedback_count)
        stations[name] = station_id
    cursor.close()
    return stations


# Test data helper functions
def create_test_station_data(**overrides):
    """Create test station data"""
    data = {
        'public_id': 'TestSt01',
        'name': 'Test Station',
        'url': 'http://stream.example.com/test',
        'homepage': 'http://example.com',
        'country': 'Canada',
        'genre': 'Pop',
        'language': 'english',
        'codec': 'MP3',
        'bitrate': 128,
        'clickcount': 0,
        'votes': 0,
    }
    data.update(overrides)
    return data


def create_rich_station_data(**overrides):
    """Station with every metadata field populated"""
    data = create_test_station_data(
        public_id=None,
        name='Rich Station',
        metadata_api_url='http://api.example.com/nowplaying',
        metadata_api_type='icecast',
        logo='http://example.com/logo.png',
        description='A well described station playing the best pop hits around the clock.',
    )
    data.update(overrides)
    return data


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
