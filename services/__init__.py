"""
Services Module

Centralized initialization of the services the fleet engine talks to:
- Position Feed Service: current positions and history from the feed API
- Email Service: zone notifications and inspection reminders via SendGrid
- Fleet Tracker: the live tracking session built on top of both

Configurations are loaded from environment variables through the config
module.
"""

import logging
from config import EmailConfig, PositionFeedConfig

logger = logging.getLogger(__name__)

# Import services after config to avoid circular imports
from .email import EmailService
from .position_feed import PositionFeedService
from .tracking import FleetTracker

__all__ = ['EmailService', 'PositionFeedService', 'FleetTracker', 'init_services']

def init_services(log_dir='logs'):
    """
    Initialize the feed and email services from configuration.

    Returns:
        tuple: (PositionFeedService, EmailService)

    Raises:
        Exception: If any service fails to initialize. The error is logged
                   before being re-raised.

    Example:
        >>> feed_service, email_service = init_services()
        >>> samples, statuses = feed_service.get_positions(["12", "15"])
    """
    try:
        email_service = EmailService(
            api_key=EmailConfig.API_KEY,
            sender_email=EmailConfig.SENDER_EMAIL,
            recipient_emails=EmailConfig.RECIPIENT_EMAILS,
            sender_name=EmailConfig.SENDER_NAME,
            fallback_email=EmailConfig.FALLBACK_EMAIL
        )
        logger.info("EmailService initialized successfully")

        feed_service = PositionFeedService(
            base_url=PositionFeedConfig.BASE_URL,
            company_id=PositionFeedConfig.COMPANY_ID,
            username=PositionFeedConfig.USERNAME,
            password=PositionFeedConfig.PASSWORD,
            timeout=PositionFeedConfig.TIMEOUT,
            log_dir=log_dir
        )
        logger.info("PositionFeedService initialized successfully")

        return feed_service, email_service
    except Exception as e:
        logger.error(f"Error initializing services: {e}", exc_info=True)
        raise
