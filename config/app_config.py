"""
Application Configuration Module

Per-environment settings of the fleet engine's Flask app (development,
production, testing). Values come from environment variables, loaded from a
.env file when one is present.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

logger = logging.getLogger(__name__)

def _vehicle_list(raw):
    return [vehicle_id.strip() for vehicle_id in raw.split(',') if vehicle_id.strip()]

class Config:
    """
    Settings shared by every environment.

    Attributes:
        SECRET_KEY (str): Flask secret key
        DEBUG (bool): Flask debug mode
        TESTING (bool): Flask testing mode
        START_POLLER (bool): Start live position polling in create_app
        TRACKED_VEHICLES (list): Vehicle ids polled at startup; empty means all
        LOG_DIR (str): Directory of the feed client's rotating log, None to disable
    """
    SECRET_KEY = os.getenv('SECRET_KEY', 'default-dev-key')
    DEBUG = False
    TESTING = False
    START_POLLER = os.getenv('START_POLLER', 'true').lower() == 'true'
    TRACKED_VEHICLES = _vehicle_list(os.getenv('TRACKED_VEHICLES', ''))
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

class DevelopmentConfig(Config):
    DEBUG = True

class ProductionConfig(Config):
    DEBUG = False

class TestingConfig(Config):
    """Tests feed position batches themselves, so nothing polls or writes logs."""
    TESTING = True
    START_POLLER = False
    TRACKED_VEHICLES = []
    LOG_DIR = None

def get_config():
    """
    Pick the configuration class named by FLASK_ENV.

    Returns:
        type: DevelopmentConfig, ProductionConfig or TestingConfig;
              DevelopmentConfig when FLASK_ENV is unset or unknown
    """
    env = os.getenv('FLASK_ENV', 'development')
    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig
    }

    if env not in config_map:
        logger.warning(f"Unknown environment '{env}' specified. Defaulting to 'development'.")
    else:
        logger.info(f"Loading configuration for environment: {env}")

    return config_map.get(env, DevelopmentConfig)
