"""
SMS and WhatsApp delivery via Twilio.

- Phone number formatting (ensures a +91 prefix for bare Indian numbers)
- Dev-mode fallback: without credentials the message is only logged
- WhatsApp uses the same Twilio client with ``whatsapp:`` addresses

Provider errors propagate to the caller; the notification dispatcher
isolates them per channel.
"""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "91"


def format_phone(phone, country_code=DEFAULT_COUNTRY_CODE):
    """Normalise a phone number to E.164.

    Handles common input formats:
        "9876543210"        -> "+919876543210"
        "09876543210"       -> "+919876543210"
        "919876543210"      -> "+919876543210"
        "+919876543210"     -> "+919876543210"
        "98765 43210"       -> "+919876543210"
        "" / None           -> ""

    Numbers that already start with '+' are returned as-is.
    """
    if not phone:
        return ""

    stripped = re.sub(r"[^\d+]", "", str(phone).strip())
    if not stripped:
        return ""

    if stripped.startswith("+"):
        return stripped

    digits = re.sub(r"\D", "", stripped)

    if len(digits) == 10:
        return "+{}{}".format(country_code, digits)
    if len(digits) == 11 and digits.startswith("0"):
        return "+{}{}".format(country_code, digits[1:])
    if len(digits) == 10 + len(country_code) and digits.startswith(country_code):
        return "+{}".format(digits)
    # Best effort: prepend + and hope for the best
    return "+{}".format(digits)


class TwilioMessenger:
    """Sends SMS and WhatsApp messages through one lazily created Twilio client"""

    def __init__(self, account_sid=None, auth_token=None, from_number=None,
                 whatsapp_number=None, country_code=DEFAULT_COUNTRY_CODE):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.whatsapp_number = whatsapp_number
        self.country_code = country_code
        self._client = None

    @classmethod
    def from_config(cls, config):
        return cls(
            account_sid=config.get("TWILIO_ACCOUNT_SID"),
            auth_token=config.get("TWILIO_AUTH_TOKEN"),
            from_number=config.get("TWILIO_PHONE_NUMBER"),
            whatsapp_number=config.get("TWILIO_WHATSAPP_NUMBER"),
            country_code=config.get("SMS_DEFAULT_COUNTRY_CODE", DEFAULT_COUNTRY_CODE),
        )

    def _get_client(self):
        """Lazily initialise the Twilio REST client."""
        if self._client is None and self.account_sid and self.auth_token:
            from twilio.rest import Client
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send_sms(self, to_phone, message):
        """Send an SMS. Returns the message SID, or None in dev mode."""
        formatted = format_phone(to_phone, self.country_code)
        if not formatted:
            logger.warning("send_sms called with empty/invalid phone: %r", to_phone)
            return None

        client = self._get_client()
        if not client or not self.from_number:
            logger.info("[SMS-DEV] To %s: %s", formatted, message)
            return None

        msg = client.messages.create(body=message, from_=self.from_number, to=formatted)
        logger.info("SMS sent to %s (SID: %s)", formatted, msg.sid)
        return msg.sid

    def send_whatsapp(self, to_phone, message):
        """Send a WhatsApp message. Returns the message SID, or None in dev mode."""
        formatted = format_phone(to_phone, self.country_code)
        if not formatted:
            logger.warning("send_whatsapp called with empty/invalid phone: %r", to_phone)
            return None

        client = self._get_client()
        if not client or not self.whatsapp_number:
            logger.info("[WHATSAPP-DEV] To %s: %s", formatted, message)
            return None

        msg = client.messages.create(
            body=message,
            from_="whatsapp:{}".format(format_phone(self.whatsapp_number, self.country_code)),
            to="whatsapp:{}".format(formatted),
        )
        logger.info("WhatsApp message sent to %s (SID: %s)", formatted, msg.sid)
        return msg.sid
