"""
History track processing.

Reduces a time-ordered position sequence for one vehicle into what the map
needs: a decimated track, a stops-only track, the waypoints handed to the
road-snapping router, and a summary of distance and speed.

Every function here takes a sequence and returns a new list; inputs are
never modified.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from utils.errors import InvalidCoordinate, OutOfOrderSamples
from utils.geo_utils import distance_km, validate_coordinate
from utils.settings_utils import get_setting

logger = logging.getLogger('history_utils')

DEFAULT_STOP_SPEED = 5.0


class TrackMode(Enum):
    ALL = "all"
    SIMPLIFIED = "simplified"
    STOPS = "stops"


class MovementState(Enum):
    MOVING = "moving"
    STOPPED = "stopped"


@dataclass(frozen=True)
class HistoryPoint:
    sample: object
    state: MovementState

    def to_dict(self):
        data = self.sample.to_dict()
        data["state"] = self.state.value
        return data


@dataclass(frozen=True)
class TrackSummary:
    total_distance_km: float
    max_speed: float
    avg_speed: float
    stop_count: int

    def to_dict(self):
        return {
            "total_distance_km": round(self.total_distance_km, 3),
            "max_speed": self.max_speed,
            "avg_speed": round(self.avg_speed, 2),
            "stop_count": self.stop_count,
        }


def _speed(sample):
    return sample.speed if sample.speed is not None else 0.0


def _stop_threshold(speed_threshold):
    if speed_threshold is None:
        return float(get_setting('stop_speed_threshold', DEFAULT_STOP_SPEED))
    return speed_threshold


def is_stopped(sample, speed_threshold=DEFAULT_STOP_SPEED):
    """A sample is stopped when marked so or slower than the threshold. Missing speed is 0."""
    return sample.stopped or _speed(sample) < speed_threshold


def _decimate(samples, stride):
    if not samples:
        return []
    kept = list(samples[::stride])
    if (len(samples) - 1) % stride:
        kept.append(samples[-1])
    return kept


def simplify(samples, min_samples=None, target_points=None):
    """
    Decimate a track for display.

    Tracks shorter than min_samples (20) are returned whole. Longer tracks
    keep every Nth sample with N = ceil(len / target_points), target_points
    being 15. The first and last samples are always kept.
    """
    samples = list(samples)
    if min_samples is None:
        min_samples = int(get_setting('simplify_min_samples', 20))
    if target_points is None:
        target_points = int(get_setting('simplify_target_points', 15))
    if len(samples) < min_samples:
        return samples
    stride = math.ceil(len(samples) / target_points)
    return _decimate(samples, stride)


def stops_only(samples, speed_threshold=None):
    """Samples where the vehicle was stopped (speed below the threshold, default 5)."""
    threshold = _stop_threshold(speed_threshold)
    return [sample for sample in samples if is_stopped(sample, threshold)]


def to_history_points(samples, speed_threshold=None):
    threshold = _stop_threshold(speed_threshold)
    return [
        HistoryPoint(
            sample=sample,
            state=MovementState.STOPPED if is_stopped(sample, threshold) else MovementState.MOVING,
        )
        for sample in samples
    ]


def summarize(samples, speed_threshold=None):
    """
    Distance and speed statistics for a track.

    total_distance_km sums the great-circle distance between consecutive
    samples. Missing speeds count as 0 in max_speed and avg_speed.
    """
    samples = list(samples)
    if not samples:
        return TrackSummary(0.0, 0.0, 0.0, 0)
    threshold = _stop_threshold(speed_threshold)
    total = 0.0
    for previous, current in zip(samples, samples[1:]):
        total += distance_km(previous.point, current.point)
    speeds = [_speed(sample) for sample in samples]
    return TrackSummary(
        total_distance_km=total,
        max_speed=max(speeds),
        avg_speed=sum(speeds) / len(speeds),
        stop_count=sum(1 for sample in samples if is_stopped(sample, threshold)),
    )


def routing_waypoints(samples, max_waypoints=None):
    """
    (lat, lon) waypoints for the road-snapping router.

    Starts from the simplified track and thins it further when it still
    exceeds max_waypoints, keeping both endpoints.
    """
    if max_waypoints is None:
        max_waypoints = int(get_setting('max_routing_waypoints', 25))
    if max_waypoints < 2:
        raise ValueError("max_waypoints must be at least 2")
    reduced = simplify(samples)
    if len(reduced) > max_waypoints:
        stride = math.ceil((len(reduced) - 1) / (max_waypoints - 1))
        reduced = _decimate(reduced, stride)
    return [sample.point for sample in reduced]


def ensure_time_ordered(samples):
    """
    Raise OutOfOrderSamples at the first sample older than its predecessor.
    Samples with an unknown timestamp are not compared.
    """
    previous = None
    for index, sample in enumerate(samples):
        if sample.timestamp is None:
            continue
        if previous is not None and sample.timestamp < previous:
            raise OutOfOrderSamples(index)
        previous = sample.timestamp


def clean_samples(samples):
    """
    Drop samples that cannot be placed on the map or on the timeline.

    Invalid coordinates and unknown timestamps are logged and skipped.
    """
    cleaned = []
    for sample in samples:
        try:
            validate_coordinate(sample.latitude, sample.longitude)
        except InvalidCoordinate as e:
            logger.warning(f"Skipping history sample for vehicle {sample.vehicle_id}: {e}")
            continue
        if sample.timestamp is None:
            logger.warning(f"Skipping history sample for vehicle {sample.vehicle_id}: unknown time")
            continue
        cleaned.append(sample)
    return cleaned


def process_track(samples, mode=TrackMode.ALL, speed_threshold=None):
    """
    Clean, order-check and reduce a track according to mode.

    Returns:
        dict: points (list of HistoryPoint), summary (TrackSummary over the
              full cleaned track) and waypoints ((lat, lon) pairs)

    Raises:
        OutOfOrderSamples: If the cleaned track is not time-ordered
    """
    mode = TrackMode(mode)
    cleaned = clean_samples(samples)
    ensure_time_ordered(cleaned)

    if mode is TrackMode.SIMPLIFIED:
        selected = simplify(cleaned)
    elif mode is TrackMode.STOPS:
        selected = stops_only(cleaned, speed_threshold)
    else:
        selected = cleaned

    logger.debug(f"Processed track in {mode.value} mode: {len(cleaned)} -> {len(selected)} samples")
    return {
        "points": to_history_points(selected, speed_threshold),
        "summary": summarize(cleaned, speed_threshold),
        "waypoints": routing_waypoints(cleaned),
    }
