from unittest.mock import Mock

import pytest

from app import create_app
from config import TestingConfig
from utils.settings_utils import load_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    load_settings()
    yield
    load_settings()


@pytest.fixture
def feed():
    feed = Mock()
    feed.get_positions.return_value = ([], {})
    feed.get_history.return_value = []
    return feed


@pytest.fixture
def email_service():
    service = Mock()
    service.send_zone_notification.return_value = True
    service.send_inspection_reminder.return_value = True
    return service


@pytest.fixture
def app(feed, email_service):
    app = create_app(TestingConfig, feed_service=feed, email_service=email_service)
    yield app
    app.config['FLEET_TRACKER'].stop()


@pytest.fixture
def client(app):
    return app.test_client()
