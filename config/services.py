"""
External Services Configuration Module

This module manages configuration settings for the external services used by
the engine: the vehicle position feed and email notifications through SendGrid.
Sensitive credentials are loaded from environment variables.
"""

import os
from dotenv import load_dotenv

# Load service credentials from environment variables
load_dotenv()

class PositionFeedConfig:
    """
    Position feed API configuration.

    Attributes:
        BASE_URL (str): Feed API base URL
        COMPANY_ID (str): Company identifier sent with every request
        USERNAME (str): Authentication username for API access
        PASSWORD (str): Authentication password for API access
        TIMEOUT (float): Per-request timeout in seconds
    """
    BASE_URL = os.getenv('FEED_BASE_URL', 'http://localhost:8080/api')
    COMPANY_ID = os.getenv('FEED_COMPANY_ID')
    USERNAME = os.getenv('FEED_USERNAME')
    PASSWORD = os.getenv('FEED_PASSWORD')
    TIMEOUT = float(os.getenv('FEED_TIMEOUT', '10'))

class EmailConfig:
    """
    Email notification service configuration.

    Attributes:
        API_KEY (str): SendGrid API key for authentication
        SENDER_EMAIL (str): Default sender email address
        SENDER_NAME (str): Display name for the email sender
        RECIPIENT_EMAILS (list): Recipients of zone and inspection notices
        FALLBACK_EMAIL (str): Used when no recipient is configured
    """
    API_KEY = os.getenv('SENDGRID_API_KEY')
    SENDER_EMAIL = os.getenv('NOTIFICATION_SENDER', 'fleet@example.com')
    SENDER_NAME = 'Fleet Notifications'
    RECIPIENT_EMAILS = [e.strip() for e in os.getenv('NOTIFICATION_EMAIL', '').split(',') if e.strip()]
    FALLBACK_EMAIL = os.getenv('NOTIFICATION_FALLBACK_EMAIL')
