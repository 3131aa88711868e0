"""
Email Provider Adapters
=======================

Transactional email over HTTP. Each provider exposes ``send()`` and raises
``EmailDeliveryError`` when the API does not accept the message.

- MailChannels: https://api.mailchannels.net/tx/v1/send
- SendGrid: https://api.sendgrid.com/v3/mail/send
"""

import logging

import requests

logger = logging.getLogger(__name__)

MAILCHANNELS_URL = "https://api.mailchannels.net/tx/v1/send"
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailDeliveryError(Exception):
    """Raised when a provider rejects or fails to accept a message"""

    def __init__(self, provider, status_code, body=''):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} request failed with status {status_code}")


def _content(html_body, text_body):
    # text/plain must precede text/html for both APIs
    content = []
    if text_body:
        content.append({'type': 'text/plain', 'value': text_body})
    content.append({'type': 'text/html', 'value': html_body})
    return content


class MailChannelsProvider:
    name = 'mailchannels'

    def __init__(self, from_email, from_name, dkim_domain=None, dkim_selector=None,
                 api_key=None, timeout=15):
        self.from_email = from_email
        self.from_name = from_name
        self.dkim_domain = dkim_domain
        self.dkim_selector = dkim_selector
        self.api_key = api_key
        self.timeout = timeout

    def build_payload(self, recipient, subject, html_body, text_body=None):
        personalization = {'to': [{'email': recipient}]}
        if self.dkim_domain:
            personalization['dkim_domain'] = self.dkim_domain
        if self.dkim_selector:
            personalization['dkim_selector'] = self.dkim_selector

        return {
            'personalizations': [personalization],
            'from': {'email': self.from_email, 'name': self.from_name},
            'subject': subject,
            'content': _content(html_body, text_body),
        }

    def send(self, recipient, subject, html_body, text_body=None):
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['X-Api-Key'] = self.api_key

        response = requests.post(
            MAILCHANNELS_URL,
            headers=headers,
            json=self.build_payload(recipient, subject, html_body, text_body),
            timeout=self.timeout,
        )

        if not response.ok:
            logger.error(f"MailChannels error {response.status_code}: {response.text}")
            raise EmailDeliveryError('MailChannels', response.status_code, response.text)

        logger.debug(f"MailChannels accepted message to {recipient}")


class SendGridProvider:
    name = 'sendgrid'

    def __init__(self, api_key, from_email, from_name, timeout=15):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout

    def build_payload(self, recipient, subject, html_body, text_body=None):
        return {
            'personalizations': [{'to': [{'email': recipient}]}],
            'from': {'email': self.from_email, 'name': self.from_name},
            'subject': subject,
            'content': _content(html_body, text_body),
        }

    def send(self, recipient, subject, html_body, text_body=None):
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
        }

        response = requests.post(
            SENDGRID_URL,
            headers=headers,
            json=self.build_payload(recipient, subject, html_body, text_body),
            timeout=self.timeout,
        )

        if not response.ok:
            logger.error(f"SendGrid error {response.status_code}: {response.text}")
            raise EmailDeliveryError('SendGrid', response.status_code, response.text)

        logger.debug(f"SendGrid accepted message to {recipient}")


def provider_from_config(config):
    """
    Pick the provider once, at configuration-load time.

    EMAIL_PROVIDER wins when set; otherwise SendGrid is used if an API key is
    configured and MailChannels is the fallback.
    """
    choice = (config.get('EMAIL_PROVIDER') or '').strip().lower()
    if not choice:
        choice = 'sendgrid' if config.get('SENDGRID_API_KEY') else 'mailchannels'

    from_email = config.get('MAIL_FROM_EMAIL') or 'noreply@example.com'
    from_name = config.get('MAIL_FROM_NAME') or 'Solar Roots'
    timeout = int(config.get('EMAIL_TIMEOUT') or 15)

    if choice == 'sendgrid':
        if not config.get('SENDGRID_API_KEY'):
            logger.warning("EMAIL_PROVIDER is sendgrid but SENDGRID_API_KEY is not configured")
        return SendGridProvider(
            api_key=config.get('SENDGRID_API_KEY'),
            from_email=config.get('SENDGRID_FROM_EMAIL') or from_email,
            from_name=config.get('SENDGRID_FROM_NAME') or from_name,
            timeout=timeout,
        )

    if choice != 'mailchannels':
        logger.warning(f"Unknown EMAIL_PROVIDER '{choice}', falling back to MailChannels")

    return MailChannelsProvider(
        from_email=from_email,
        from_name=from_name,
        dkim_domain=config.get('MAILCHANNELS_DOMAIN'),
        dkim_selector=config.get('MAILCHANNELS_SUBDOMAIN'),
        api_key=config.get('MAILCHANNELS_API_KEY'),
        timeout=timeout,
    )
