"""
Flask application entry point for the fleet tracking engine.

This module provides functionality for:
- Flask application initialization and configuration
- Blueprint registration for the JSON API
- Service initialization (position feed, email)
- Creation of the tracking session and route scheduler

The tracking session, zone registry and route scheduler belong to the app
instance created here; they are stored in app.config for the blueprints.
"""

import os
import logging
from flask import Flask

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from config import get_config
from routes import (
    home_bp,
    zone_bp,
    tracking_bp,
    history_bp,
    inspection_bp,
    distribution_bp,
    settings_bp
)
from services import FleetTracker, init_services
from utils.alert_utils import NotificationDispatcher, LogSink, EmailSink
from utils.route_utils import RouteScheduler

def create_app(config_object=None, feed_service=None, email_service=None):
    """
    Flask application factory function.

    Args:
        config_object: Configuration class; defaults to get_config()
        feed_service: Position feed to use instead of the configured one
        email_service: Email service to use instead of the configured one

    Returns:
        Flask: Configured Flask application instance

    Notes:
        - Starts the live poller for all vehicles when START_POLLER is set
        - Zone emails are sent only while the send_zone_emails setting is on
    """
    logger.info("Starting Flask application creation")
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    if feed_service is None or email_service is None:
        default_feed, default_email = init_services(log_dir=app.config.get('LOG_DIR'))
        feed_service = feed_service or default_feed
        email_service = email_service or default_email

    dispatcher = NotificationDispatcher([LogSink(), EmailSink(email_service)])
    tracker = FleetTracker(feed_service, dispatcher=dispatcher)

    app.config['FEED_SERVICE'] = feed_service
    app.config['EMAIL_SERVICE'] = email_service
    app.config['FLEET_TRACKER'] = tracker
    app.config['ROUTE_SCHEDULER'] = RouteScheduler()

    logger.info("Registering blueprints")
    app.register_blueprint(home_bp)
    app.register_blueprint(zone_bp)
    app.register_blueprint(tracking_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(inspection_bp)
    app.register_blueprint(distribution_bp)
    app.register_blueprint(settings_bp, url_prefix='/settings')

    if app.config.get('START_POLLER'):
        # An empty TRACKED_VEHICLES list means every vehicle in the feed
        vehicle_ids = app.config.get('TRACKED_VEHICLES') or []
        tracker.watch(vehicle_ids or None)
        logger.info(f"Live polling started for {len(vehicle_ids) or 'all'} vehicles")

    logger.info("Application creation completed")
    return app

if __name__ == '__main__':
    app = create_app()
    # Get port from environment variable or use 5000 as default
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port)
