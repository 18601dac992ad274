"""
Routes Package Initialization

Exposes the Flask blueprints of the fleet engine's JSON API.

Blueprints:
    - home_bp: Status document
    - zone_bp: Geofence zone management and membership
    - tracking_bp: Live positions, selection, interval and notifications
    - history_bp: Processed vehicle history
    - inspection_bp: Inspection due-date classification and reminders
    - distribution_bp: Distribution route lifecycle
    - settings_bp: Runtime settings
"""

from .home_routes import home_bp                  # Status endpoint
from .zone_routes import zone_bp                  # Zone management endpoints
from .tracking_routes import tracking_bp          # Live tracking endpoints
from .history_routes import history_bp            # History replay endpoints
from .inspection_routes import inspection_bp      # Inspection endpoints
from .distribution_routes import distribution_bp  # Distribution route endpoints
from .settings_routes import settings_bp          # Settings configuration endpoints

# Define public API for the routes package
__all__ = [
    'home_bp',
    'zone_bp',
    'tracking_bp',
    'history_bp',
    'inspection_bp',
    'distribution_bp',
    'settings_bp'
]
