"""
Configuration Module

Central configuration hub for the fleet engine. It imports and exposes the
configuration classes and constants so the rest of the code base can
import them from one place.
"""

import logging

# Configure application-wide logging with INFO level
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

try:
    from .services import PositionFeedConfig, EmailConfig  # External service configurations
    from .app_config import get_config, Config, DevelopmentConfig, ProductionConfig, TestingConfig
    from .constants import DEFAULT_SETTINGS  # Default tuning settings

    logger.debug("All configurations and constants imported successfully.")

except ImportError as e:
    logger.error(f"Error importing configurations or constants: {e}")
    raise

__all__ = [
    'PositionFeedConfig',
    'EmailConfig',
    'get_config',
    'Config',
    'DevelopmentConfig',
    'ProductionConfig',
    'TestingConfig',
    'DEFAULT_SETTINGS'
]
