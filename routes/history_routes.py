"""
History Routes Module

Endpoint for replaying a vehicle's position history: the processed track in
the requested display mode, a distance/speed summary and the waypoints for
road-snapped routing.
"""

from flask import Blueprint, request, jsonify, current_app
import logging
from utils.errors import FetchFailed, OutOfOrderSamples
from utils.history_utils import TrackMode
from utils.time_utils import parse_timestamp

# Configure logging for the history module
logger = logging.getLogger(__name__)

# Create Blueprint for history-related routes
history_bp = Blueprint('history', __name__)

@history_bp.route('/vehicles/<vehicle_id>/history', methods=['GET'])
def vehicle_history(vehicle_id):
    """
    Processed position history for one vehicle.

    Query parameters:
        mode: all | simplified | stops (default all)
        start, end: ISO timestamps; default is the last 24 hours

    Returns:
        json: points, summary and waypoints; 400 on bad parameters,
              422 on an unordered track, 502 when the feed fails
    """
    try:
        mode = TrackMode(request.args.get('mode', 'all'))
    except ValueError:
        return jsonify({"error": f"Unknown mode {request.args.get('mode')!r}"}), 400

    start = end = None
    if request.args.get('start'):
        start = parse_timestamp(request.args['start'])
        if start is None:
            return jsonify({"error": "start is not a valid timestamp"}), 400
    if request.args.get('end'):
        end = parse_timestamp(request.args['end'])
        if end is None:
            return jsonify({"error": "end is not a valid timestamp"}), 400

    tracker = current_app.config['FLEET_TRACKER']
    try:
        track = tracker.history(vehicle_id, start, end, mode)
    except FetchFailed as e:
        logger.warning(f"History fetch for vehicle {vehicle_id} failed: {e}")
        return jsonify({"error": "History is temporarily unavailable"}), 502
    except OutOfOrderSamples as e:
        logger.warning(f"History for vehicle {vehicle_id} is not time-ordered: {e}")
        return jsonify({"error": str(e), "index": e.index}), 422

    return jsonify({
        "vehicle_id": vehicle_id,
        "mode": mode.value,
        "points": [point.to_dict() for point in track["points"]],
        "summary": track["summary"].to_dict(),
        "waypoints": [list(point) for point in track["waypoints"]],
    })
