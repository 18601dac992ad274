"""
Tracking Routes Module

Endpoints for the live map: latest known positions, the tracked vehicle
selection, the poll interval and recent zone notifications.
"""

from flask import Blueprint, request, jsonify, current_app
import logging
from utils.time_utils import format_local_time

# Configure logging for the tracking module
logger = logging.getLogger(__name__)

# Create Blueprint for tracking-related routes
tracking_bp = Blueprint('tracking', __name__, url_prefix='/tracking')

def get_tracker():
    """Return the FleetTracker stored in the app configuration."""
    return current_app.config['FLEET_TRACKER']

def _selected(subscription):
    # None means every vehicle the feed reports
    if subscription is None:
        return []
    if subscription.vehicle_ids is None:
        return None
    return sorted(subscription.vehicle_ids)

@tracking_bp.route('/positions', methods=['GET'])
def positions():
    """
    Latest known position of every tracked vehicle.

    A failed fetch does not clear positions; it is reported in 'warning'
    next to the last good data.
    """
    tracker = get_tracker()
    subscription = tracker.subscription
    payload = {
        "vehicles": [sample.to_dict() for _, sample in sorted(tracker.positions().items())],
        "tracking": subscription is not None and not subscription.stopped,
        "interval": subscription.interval if subscription else None,
        "selected": _selected(subscription),
        "warning": None,
    }
    if tracker.last_error is not None:
        payload["warning"] = f"Positions may be stale: {tracker.last_error}"
    return jsonify(payload)

@tracking_bp.route('/selection', methods=['POST'])
def update_selection():
    """
    Replace the set of tracked vehicles.

    Expects JSON: {vehicle_ids: [...]}, or {vehicle_ids: null} to track
    every vehicle. Starts tracking if it is not running.
    """
    data = request.get_json(silent=True) or {}
    if 'vehicle_ids' not in data:
        return jsonify({"error": "vehicle_ids is required"}), 400
    vehicle_ids = data['vehicle_ids']
    if vehicle_ids is not None and not isinstance(vehicle_ids, list):
        return jsonify({"error": "vehicle_ids must be a list or null"}), 400
    if vehicle_ids is not None:
        vehicle_ids = [str(v) for v in vehicle_ids]

    tracker = get_tracker()
    if tracker.subscription is None or tracker.subscription.stopped:
        tracker.watch(vehicle_ids)
    else:
        tracker.select(vehicle_ids)
    logger.info(f"Tracking selection updated to {'all' if vehicle_ids is None else len(vehicle_ids)} vehicles")
    return jsonify({"selected": _selected(tracker.subscription)})

@tracking_bp.route('/interval', methods=['POST'])
def update_interval():
    data = request.get_json(silent=True) or {}
    try:
        interval = float(data.get('interval'))
    except (TypeError, ValueError):
        return jsonify({"error": "interval must be a number of seconds"}), 400
    if interval <= 0:
        return jsonify({"error": "interval must be positive"}), 400
    try:
        get_tracker().set_interval(interval)
    except RuntimeError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"interval": interval})

@tracking_bp.route('/refresh', methods=['POST'])
def refresh():
    try:
        started = get_tracker().refresh()
    except RuntimeError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"started": started})

@tracking_bp.route('/stop', methods=['POST'])
def stop():
    get_tracker().stop()
    return jsonify({"tracking": False})

@tracking_bp.route('/notifications', methods=['GET'])
def notifications():
    items = get_tracker().recent.items()
    return jsonify({
        "notifications": [
            dict(item.to_dict(), time_display=format_local_time(item.at)) for item in reversed(items)
        ]
    })
