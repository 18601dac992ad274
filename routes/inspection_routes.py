"""
Inspection Routes Module

Endpoints for classifying inspection (STK) due dates and for sending the
reminder email about vehicles whose inspection is due soon.
"""

from flask import Blueprint, request, jsonify, current_app
import logging
from utils.inspection_utils import classify_inspection, find_expiring_vehicles
from utils.position_utils import Vehicle, VehicleStatus
from utils.time_utils import to_local_date

# Configure logging for the inspection module
logger = logging.getLogger(__name__)

# Create Blueprint for inspection-related routes
inspection_bp = Blueprint('inspections', __name__, url_prefix='/inspections')

def _vehicles_from_request():
    data = request.get_json(silent=True) or {}
    records = data.get('vehicles')
    if not isinstance(records, list):
        raise ValueError("vehicles must be a list")
    vehicles = []
    for record in records:
        if not isinstance(record, dict):
            raise ValueError("each vehicle must be an object")
        vehicles.append(Vehicle(
            id=str(record.get('id')),
            status=VehicleStatus.parse(record.get('status')),
            inspection_due=record.get('inspection_due'),
            label=record.get('label'),
        ))
    return vehicles, data.get('today')

@inspection_bp.route('/classify', methods=['POST'])
def classify():
    """
    Classify inspection due dates.

    Expects JSON: {vehicles: [{id, inspection_due, status?, label?}], today?}

    Returns:
        json: {results: [{id, inspection_due, tier}]}
    """
    try:
        vehicles, today = _vehicles_from_request()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    results = []
    for vehicle in vehicles:
        due = to_local_date(vehicle.inspection_due)
        results.append({
            "id": vehicle.id,
            "inspection_due": due.isoformat() if due else None,
            "tier": classify_inspection(vehicle.inspection_due, today).value,
        })
    return jsonify({"results": results})

@inspection_bp.route('/expiring', methods=['POST'])
def expiring():
    """
    List vehicles with an upcoming inspection and optionally email the list.

    Expects the same JSON as /classify plus notify (bool).
    """
    try:
        vehicles, today = _vehicles_from_request()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    matches = find_expiring_vehicles(vehicles, today)
    email_sent = False
    if matches and (request.get_json(silent=True) or {}).get('notify'):
        email_service = current_app.config.get('EMAIL_SERVICE')
        if email_service is None:
            logger.warning("Inspection reminder requested but no email service is configured")
        else:
            email_sent = email_service.send_inspection_reminder(matches)

    return jsonify({
        "count": len(matches),
        "vehicles": [
            {"id": v.id, "label": v.label, "inspection_due": to_local_date(v.inspection_due).isoformat()}
            for v in matches
        ],
        "email_sent": email_sent,
    })
