"""
Application Constants Module

This module defines the default tuning settings of the fleet engine. Each
value can be overridden with a FLEET_<NAME> environment variable and changed
at runtime through the settings routes.
"""

DEFAULT_SETTINGS = {
    'refresh_interval_seconds': 30,       # Poll interval for live positions
    'stop_speed_threshold': 5,            # Below this speed (km/h) a sample counts as stopped
    'inspection_warning_days': 30,        # Width of the "upcoming" inspection window
    'simplify_min_samples': 20,           # Tracks shorter than this are never decimated
    'simplify_target_points': 15,         # Target size of a decimated track
    'max_routing_waypoints': 25,          # Upper bound sent to the road-snapping router
    'local_timezone': 'Europe/Prague',    # Calendar used for day-granularity comparisons
    'send_zone_emails': 'false',          # Toggle for zone enter/exit emails
    'notification_history_size': 100,     # Notifications kept for the dashboard
}
