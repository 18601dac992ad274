import time
from datetime import datetime, timedelta, timezone

from utils.position_utils import PositionSample

PRAGUE = (50.0755, 14.4378)
BASE_TIME = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def sample(vehicle_id="12", lat=PRAGUE[0], lon=PRAGUE[1], minutes=0, speed=40.0, stopped=False,
           timestamp=BASE_TIME):
    return PositionSample(
        vehicle_id=vehicle_id,
        latitude=lat,
        longitude=lon,
        timestamp=timestamp + timedelta(minutes=minutes) if timestamp else None,
        speed=speed,
        stopped=stopped,
    )


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
