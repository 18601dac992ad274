"""
Distribution Routes Module

Endpoints for the newspaper distribution schedule: scheduling routes,
driving them through their lifecycle and recording drop-point progress.
An illegal lifecycle move answers 409 with the route's current status.
"""

from flask import Blueprint, request, jsonify, current_app
import logging
from utils.errors import InvalidTransition
from utils.route_utils import DistributionRoute
from utils.time_utils import parse_timestamp

# Configure logging for the distribution module
logger = logging.getLogger(__name__)

# Create Blueprint for distribution-related routes
distribution_bp = Blueprint('distribution', __name__, url_prefix='/distribution')

def get_scheduler():
    """Return the RouteScheduler stored in the app configuration."""
    return current_app.config['ROUTE_SCHEDULER']

@distribution_bp.route('/routes', methods=['GET'])
def list_routes():
    scheduler = get_scheduler()
    return jsonify({
        "routes": [route.to_dict() for route in scheduler.active_routes()],
        "counts": scheduler.status_counts(),
    })

@distribution_bp.route('/routes', methods=['POST'])
def schedule_route():
    """
    Schedule a pending route.

    Expects JSON: {id, vehicle_id, driver?, total_drop_points,
    scheduled_start?, estimated_end?}
    """
    data = request.get_json(silent=True) or {}
    try:
        total = data.get('total_drop_points')
        if isinstance(total, bool) or not isinstance(total, int):
            raise ValueError("total_drop_points must be an integer")
        if not data.get('id') or not data.get('vehicle_id'):
            raise ValueError("id and vehicle_id are required")
        route = DistributionRoute(
            id=str(data['id']),
            vehicle_id=str(data['vehicle_id']),
            driver=data.get('driver'),
            total_drop_points=total,
            scheduled_start=parse_timestamp(data.get('scheduled_start')),
            estimated_end=parse_timestamp(data.get('estimated_end')),
        )
        get_scheduler().schedule(route)
    except ValueError as e:
        logger.warning(f"Rejected route {data.get('id')}: {e}")
        return jsonify({"error": str(e)}), 400
    return jsonify(route.to_dict()), 201

@distribution_bp.route('/routes/<route_id>/<action>', methods=['POST'])
def route_action(route_id, action):
    """
    Apply a lifecycle action.

    Actions: start, complete, cancel, delay, issue, progress (JSON body
    {completed_drop_points}).
    """
    scheduler = get_scheduler()
    handlers = {
        'start': scheduler.start,
        'complete': scheduler.complete,
        'cancel': scheduler.cancel,
        'delay': scheduler.mark_delayed,
        'issue': scheduler.mark_issue,
    }
    try:
        if action == 'progress':
            data = request.get_json(silent=True) or {}
            route = scheduler.record_progress(route_id, data.get('completed_drop_points'))
        elif action in handlers:
            route = handlers[action](route_id)
        else:
            return jsonify({"error": f"Unknown action {action!r}"}), 404
    except KeyError:
        return jsonify({"error": f"Route {route_id} not found"}), 404
    except InvalidTransition as e:
        return jsonify({"error": str(e), "status": e.current_status.value}), 409

    payload = route.to_dict()
    if action == 'cancel':
        payload['cancelled'] = True
    return jsonify(payload)
