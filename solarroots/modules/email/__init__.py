"""
Email Module
============

Confirmation email sending over MailChannels or SendGrid, with the provider
chosen once from app config and sends running in the background.
"""

from .email_service import EmailService
from .providers import (
    EmailDeliveryError, MailChannelsProvider, SendGridProvider, provider_from_config
)

__all__ = [
    'EmailService', 'EmailDeliveryError', 'MailChannelsProvider',
    'SendGridProvider', 'provider_from_config'
]
