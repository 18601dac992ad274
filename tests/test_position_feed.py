from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from services.position_feed import PositionFeedService
from utils.errors import FetchFailed
from utils.position_utils import VehicleStatus


def response(status_code=200, payload=None, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} error")
    return resp


def make_service(session, **kwargs):
    return PositionFeedService("http://feed.test/api/", session=session, log_dir=None, **kwargs)


RECORDS = [
    {"id": 12, "latitude": 50.0755, "longitude": 14.4378, "timestamp": "2026-10-19T08:00:00Z",
     "status": "aktivní", "speed": "42 km/h"},
    {"id": 15, "latitude": 49.19, "longitude": 16.60, "timestamp": "garbage", "status": "servis"},
    {"id": 17, "latitude": None, "longitude": 16.60, "timestamp": "2026-10-19T08:00:00Z"},
]


def test_get_positions_parses_and_filters():
    session = Mock()
    session.get.return_value = response(payload=RECORDS)
    service = make_service(session, company_id="acme")

    samples, statuses = service.get_positions(["12"])

    assert [s.vehicle_id for s in samples] == ["12"]
    assert samples[0].speed == 42.0
    assert samples[0].timestamp == datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    assert statuses["15"] is VehicleStatus.IN_SERVICE
    url = session.get.call_args[0][0]
    params = session.get.call_args[1]["params"]
    assert url == "http://feed.test/api/auta/locations"
    assert params == {"ids": "12", "company": "acme"}


def test_get_positions_for_all_vehicles_keeps_bad_timestamps():
    session = Mock()
    session.get.return_value = response(payload=RECORDS)
    service = make_service(session)

    samples, _ = service.get_positions()

    assert [s.vehicle_id for s in samples] == ["12", "15"]
    assert samples[1].timestamp is None
    assert samples[1].to_dict()["time_display"] == "Unknown time"
    assert "ids" not in session.get.call_args[1]["params"]


def test_transport_error_raises_fetch_failed():
    session = Mock()
    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    service = make_service(session)

    with pytest.raises(FetchFailed) as excinfo:
        service.get_positions(["12"])
    assert isinstance(excinfo.value.cause, requests.exceptions.ConnectionError)


def test_http_error_raises_fetch_failed():
    session = Mock()
    session.get.return_value = response(status_code=500)
    with pytest.raises(FetchFailed):
        make_service(session).get_positions()


def test_invalid_json_raises_fetch_failed():
    session = Mock()
    bad = response()
    bad.json.side_effect = ValueError("Expecting value")
    session.get.return_value = bad
    with pytest.raises(FetchFailed):
        make_service(session).get_positions()


def test_non_list_payload_raises_fetch_failed():
    session = Mock()
    session.get.return_value = response(payload={"error": "maintenance"})
    with pytest.raises(FetchFailed):
        make_service(session).get_positions()


def test_authenticates_and_sends_token():
    session = Mock()
    session.post.return_value = response(text='"secret-token"')
    session.get.return_value = response(payload=[])
    service = make_service(session, username="dispatch", password="pw")

    service.get_positions()

    assert session.post.call_args[0][0] == "http://feed.test/api/auth"
    headers = session.get.call_args[1]["headers"]
    assert headers["Authorization"] == "Bearer secret-token"


def test_reauthenticates_once_on_401():
    session = Mock()
    session.post.side_effect = [response(text="old"), response(text="new")]
    session.get.side_effect = [response(status_code=401), response(payload=[])]
    service = make_service(session, username="dispatch", password="pw")

    assert service.get_positions() == ([], {})
    assert session.post.call_count == 2
    assert session.get.call_args[1]["headers"]["Authorization"] == "Bearer new"


def test_failed_authentication_raises_fetch_failed():
    session = Mock()
    session.post.return_value = response(status_code=403)
    service = make_service(session, username="dispatch", password="wrong")
    with pytest.raises(FetchFailed):
        service.get_positions()
    session.get.assert_not_called()


def test_authenticate_without_credentials_is_skipped():
    session = Mock()
    assert make_service(session).authenticate() is None
    session.post.assert_not_called()


def test_get_history_uses_vehicle_id_and_range():
    session = Mock()
    session.get.return_value = response(payload=[
        {"latitude": 50.07, "longitude": 14.43, "timestamp": "2026-10-19T07:00:00Z", "rychlost": 0,
         "stav": "stání"},
        {"latitude": 50.08, "longitude": 14.44, "timestamp": "2026-10-19T07:05:00Z", "rychlost": 35},
    ])
    service = make_service(session)
    start = datetime(2026, 10, 19, 6, 0, tzinfo=timezone.utc)
    end = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    samples = service.get_history("12", start, end)

    assert [s.vehicle_id for s in samples] == ["12", "12"]
    assert samples[0].stopped is True
    assert samples[1].speed == 35.0
    assert session.get.call_args[0][0] == "http://feed.test/api/auta/12/history"
    params = session.get.call_args[1]["params"]
    assert params["startDate"] == start.isoformat()
    assert params["endDate"] == end.isoformat()
