"""
Settings Routes Module

Endpoints for viewing and changing the engine's runtime settings (poll
interval, stop threshold, inspection warning window, ...). Settings live in
memory; see utils.settings_utils.
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from utils.settings_utils import get_all_settings, get_setting, update_setting

# Configure logger for settings module
logger = logging.getLogger(__name__)

# Create Blueprint for settings-related routes
settings_bp = Blueprint('settings', __name__)

@settings_bp.route('/', methods=['GET'])
def settings():
    logger.info("Accessing settings")
    return jsonify({"settings": get_all_settings()})

@settings_bp.route('/update', methods=['POST'])
def update_setting_value():
    """
    Update a single setting.

    Expects JSON payload with setting_name and value fields. Out-of-range
    values are rejected with 400. Changing refresh_interval_seconds also
    reschedules the running poller.

    Returns:
        json: Success status or error message with appropriate HTTP status code
    """
    data = request.get_json(silent=True) or {}
    setting_name = data.get('setting_name')
    value = data.get('value')

    if not setting_name or value is None:
        return jsonify({"error": "Missing required parameters"}), 400

    if not update_setting(setting_name, value):
        return jsonify({"error": f"Failed to update setting {setting_name}"}), 400

    if setting_name == 'refresh_interval_seconds':
        tracker = current_app.config.get('FLEET_TRACKER')
        if tracker is not None and tracker.subscription is not None and not tracker.subscription.stopped:
            tracker.set_interval(get_setting(setting_name))
    return jsonify({"status": "success", "value": get_setting(setting_name)})

@settings_bp.route('/get/<setting_name>')
def get_setting_value(setting_name):
    """
    Retrieve a single setting value.

    Returns:
        json: Setting value, or 404 if the setting does not exist
    """
    value = get_setting(setting_name)
    if value is None:
        return jsonify({"value": None}), 404
    return jsonify({"value": value})
