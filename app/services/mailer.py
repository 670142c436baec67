"""
Email delivery: Resend (preferred) or SendGrid (legacy fallback).

Without an API key the email is only logged (dev mode).
"""

import html
import logging

logger = logging.getLogger(__name__)


def booking_email_html(subject, message, brand="CabLink"):
    """Minimal HTML wrapper around a plain-text notification"""
    return (
        "<div style=\"font-family:Arial,sans-serif;max-width:560px;margin:0 auto\">"
        "<h2 style=\"color:#1a73e8\">{brand}</h2>"
        "<h3>{subject}</h3>"
        "<p>{message}</p>"
        "<p style=\"color:#888;font-size:12px\">You are receiving this because you "
        "booked a ride with {brand}.</p>"
        "</div>"
    ).format(brand=html.escape(brand), subject=html.escape(subject), message=html.escape(message))


class EmailSender:
    def __init__(self, resend_api_key=None, sendgrid_api_key=None,
                 from_email="bookings@cablink.in", from_name="CabLink"):
        self.resend_api_key = resend_api_key
        self.sendgrid_api_key = sendgrid_api_key
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_config(cls, config):
        return cls(
            resend_api_key=config.get("RESEND_API_KEY"),
            sendgrid_api_key=config.get("SENDGRID_API_KEY"),
            from_email=config.get("EMAIL_FROM", "bookings@cablink.in"),
            from_name=config.get("EMAIL_FROM_NAME", "CabLink"),
        )

    def send(self, to_email, subject, message):
        """Send one email. Returns the provider id/status, or None in dev mode."""
        if not to_email:
            logger.warning("send called with empty email address")
            return None

        html_content = booking_email_html(subject, message, brand=self.from_name)

        if self.resend_api_key:
            return self._send_resend(to_email, subject, html_content)
        if self.sendgrid_api_key:
            return self._send_sendgrid(to_email, subject, html_content)

        logger.info("[EMAIL-DEV] To %s: %s - %s", to_email, subject, message)
        return None

    def _send_resend(self, to_email, subject, html_content):
        """Send via the Resend API. Returns the response id."""
        import resend
        resend.api_key = self.resend_api_key

        params = {
            "from": "{} <{}>".format(self.from_name, self.from_email),
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        response = resend.Emails.send(params)
        logger.info("Email sent via Resend to %s (id: %s)", to_email, response.get("id"))
        return response.get("id")

    def _send_sendgrid(self, to_email, subject, html_content):
        """Send via SendGrid. Returns the HTTP status code."""
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Mail

        message = Mail(
            from_email=(self.from_email, self.from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        response = SendGridAPIClient(self.sendgrid_api_key).send(message)
        logger.info("Email sent via SendGrid to %s (status: %s)", to_email, response.status_code)
        return response.status_code
