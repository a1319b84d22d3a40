"""
OTP Delivery Channels
=====================
Adapters that hand a code to an SMS gateway, a mail server or the log.
"""

from .base import DeliveryChannel, DeliveryResult
from .console import ConsoleChannel
from .email import SMTPEmailChannel, SMTPConfig
from .sms import TwilioSMSChannel, TwilioConfig, format_phone_number
from .templates import sms_body, email_subject, email_html, email_text

__all__ = [
    "DeliveryChannel",
    "DeliveryResult",
    "ConsoleChannel",
    "SMTPEmailChannel",
    "SMTPConfig",
    "TwilioSMSChannel",
    "TwilioConfig",
    "format_phone_number",
    "sms_body",
    "email_subject",
    "email_html",
    "email_text",
]
