"""
Zone Routes Module

Endpoints for managing the geofence zones of the live tracking session and
for inspecting the current (vehicle, zone) membership table.
"""

from flask import Blueprint, request, jsonify, current_app
import logging
from utils.zone_utils import Zone, parse_flag

# Configure logging for the zone module
logger = logging.getLogger(__name__)

# Create Blueprint for zone-related routes
zone_bp = Blueprint('zones', __name__)

def get_tracker():
    """Return the FleetTracker stored in the app configuration."""
    return current_app.config['FLEET_TRACKER']

@zone_bp.route('/zones', methods=['GET'])
def list_zones():
    zones = get_tracker().registry.zones()
    return jsonify({"zones": [zone.to_dict() for zone in zones]})

@zone_bp.route('/zones', methods=['POST'])
def create_zone():
    """
    Create a zone.

    Expects JSON: {id, name, center: [lat, lon], radius (meters), color?,
    active?, notify?}

    Returns:
        json: The created zone with 201, 400 on invalid geometry, 409 on
              duplicate id
    """
    data = request.get_json(silent=True) or {}
    try:
        zone = Zone.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected zone definition {data}: {e}")
        return jsonify({"error": str(e)}), 400
    try:
        get_tracker().add_zone(zone)
    except ValueError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(zone.to_dict()), 201

@zone_bp.route('/zones/<zone_id>', methods=['PUT'])
def update_zone(zone_id):
    tracker = get_tracker()
    existing = tracker.registry.get(zone_id)
    if existing is None:
        return jsonify({"error": f"Zone {zone_id} not found"}), 404

    changes = request.get_json(silent=True) or {}
    data = dict(existing.to_dict())
    if "center" not in changes and ("latitude" in changes or "longitude" in changes):
        # A partial latitude/longitude update keeps the other coordinate
        data.pop("center")
        data.setdefault("latitude", existing.center[0])
        data.setdefault("longitude", existing.center[1])
    data.update(changes)
    data['id'] = zone_id
    try:
        zone = Zone.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected update of zone {zone_id}: {e}")
        return jsonify({"error": str(e)}), 400
    tracker.update_zone(zone)
    return jsonify(zone.to_dict())

@zone_bp.route('/zones/<zone_id>', methods=['DELETE'])
def delete_zone(zone_id):
    try:
        get_tracker().remove_zone(zone_id)
    except KeyError:
        return jsonify({"error": f"Zone {zone_id} not found"}), 404
    return jsonify({"status": "deleted", "id": zone_id})

@zone_bp.route('/zones/<zone_id>/active', methods=['POST'])
def toggle_zone(zone_id):
    data = request.get_json(silent=True) or {}
    if 'active' not in data:
        return jsonify({"error": "Missing required parameter 'active'"}), 400
    try:
        zone = get_tracker().set_zone_active(zone_id, parse_flag(data['active']))
    except KeyError:
        return jsonify({"error": f"Zone {zone_id} not found"}), 404
    return jsonify(zone.to_dict())

@zone_bp.route('/zones/membership', methods=['GET'])
def membership():
    table = get_tracker().registry.membership()
    rows = [
        {"vehicle_id": vehicle_id, "zone_id": zone_id, "inside": inside}
        for (vehicle_id, zone_id), inside in sorted(table.items())
    ]
    return jsonify({"membership": rows})
