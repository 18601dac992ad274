"""
Home Routes Module

Entry point of the API: a small status document for health checks.
"""

from flask import Blueprint, jsonify, current_app

# Create a Blueprint for home-related routes
home_bp = Blueprint('home', __name__)

@home_bp.route('/')
def home():
    tracker = current_app.config['FLEET_TRACKER']
    subscription = tracker.subscription
    return jsonify({
        "status": "ok",
        "tracking": subscription is not None and not subscription.stopped,
        "zones": len(tracker.registry.zones()),
        "routes": len(current_app.config['ROUTE_SCHEDULER'].active_routes()),
    })
