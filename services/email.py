"""
Email Service Module

This module provides email notification functionality using the SendGrid API.
It sends zone enter/exit notifications and inspection (STK) reminders to the
configured recipients.

Key Features:
- SendGrid API integration for email delivery
- Zone transition notifications
- Upcoming inspection reminders listing every affected vehicle
- Fallback recipient when no recipient list is configured
"""

import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content
from utils.time_utils import to_local_date, format_local_time

# Configure logging
logger = logging.getLogger('EmailService')

__all__ = ['EmailService']

class EmailService:
    def __init__(self, api_key, sender_email, recipient_emails, sender_name="Fleet Notifications",
                 fallback_email=None, client=None):
        self.client = client or SendGridAPIClient(api_key)
        self.sender_email = sender_email
        self.recipient_emails = recipient_emails if isinstance(recipient_emails, list) else [recipient_emails]
        self.sender_name = sender_name
        self.fallback_email = fallback_email

    def _recipients(self):
        recipients = [email for email in self.recipient_emails if email]
        if not recipients and self.fallback_email:
            logger.warning("No notification recipients configured, using fallback email")
            recipients = [self.fallback_email]
        return recipients

    def _send(self, subject, body):
        """
        Send one plain-text message to every recipient.

        Returns:
            bool: True if every message was accepted, False otherwise
        """
        recipients = self._recipients()
        if not recipients:
            logger.error(f"No recipients for email '{subject}'")
            return False

        from_email = Email(self.sender_email, self.sender_name)
        content = Content("text/plain", body)
        success = True
        for recipient_email in recipients:
            try:
                mail = Mail(from_email, To(recipient_email), subject, content)
                logger.debug(f"Attempting to send '{subject}' to {recipient_email}")
                self.client.send(mail)
                logger.info(f"Successfully sent '{subject}' to {recipient_email}")
            except Exception as e:
                logger.error(f"Failed to send '{subject}' to {recipient_email}: {str(e)}")
                success = False
        return success

    def send_zone_notification(self, notification):
        """
        Email a zone enter/exit notification.

        Args:
            notification (Notification): Dispatched notification

        Returns:
            bool: True if the email was sent to every recipient
        """
        verb = "entered" if notification.kind.value == "enter" else "left"
        subject = f"Vehicle {notification.vehicle_id} {verb} zone {notification.zone_name}"
        body = f"""{notification.message}.

Zone: {notification.zone_name} ({notification.zone_id})
Time: {format_local_time(notification.at)}"""
        logger.info(f"Sending zone notification for vehicle {notification.vehicle_id}")
        return self._send(subject, body)

    def send_inspection_reminder(self, vehicles):
        """
        Email the list of vehicles whose inspection is due soon.

        Args:
            vehicles (list): Vehicle records, usually from find_expiring_vehicles

        Returns:
            bool: True if sent, False if sending failed or the list was empty
        """
        if not vehicles:
            logger.info("No vehicles need an inspection reminder")
            return False

        lines = []
        for vehicle in vehicles:
            due = to_local_date(vehicle.inspection_due)
            label = vehicle.label or vehicle.id
            lines.append(f"- {label}: inspection due {format_due_date(due)}")

        subject = f"Inspection due soon for {len(vehicles)} vehicle{'s' if len(vehicles) != 1 else ''}"
        body = "The following vehicles have an inspection (STK) due within the warning period:\n\n"
        body += "\n".join(lines)
        logger.info(f"Sending inspection reminder for {len(vehicles)} vehicles")
        return self._send(subject, body)


def format_due_date(due_date):
    """
    Format a due date for display in email messages.

    Returns:
        str: e.g. "19.10.2026", or 'N/A' when the date is missing
    """
    if not due_date:
        return 'N/A'
    return due_date.strftime("%d.%m.%Y")
