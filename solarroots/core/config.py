import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Solar Roots backend.
    Every value can be overridden through environment variables (or a .env file).
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    SOLARROOTS_DB = os.getenv('SOLARROOTS_DB', os.path.join(DB_DIR, 'solarroots.db'))

    STATIC_FOLDER = os.getenv('STATIC_FOLDER', os.path.join(os.getcwd(), 'public'))

    # Public origin used in confirmation links, falls back to the request origin
    SITE_BASE_URL = os.getenv('SITE_BASE_URL')

    # Email settings
    # EMAIL_PROVIDER is optional: 'sendgrid' or 'mailchannels'. When unset the
    # provider is SendGrid if SENDGRID_API_KEY is present, MailChannels otherwise.
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', '')
    MAIL_FROM_EMAIL = os.getenv('MAIL_FROM_EMAIL', 'noreply@example.com')
    MAIL_FROM_NAME = os.getenv('MAIL_FROM_NAME', 'Solar Roots')
    EMAIL_BRAND_NAME = os.getenv('EMAIL_BRAND_NAME', 'Solar Roots')
    EMAIL_SEND_WORKERS = int(os.getenv('EMAIL_SEND_WORKERS', '2'))
    EMAIL_TIMEOUT = int(os.getenv('EMAIL_TIMEOUT', '15'))

    # MailChannels
    MAILCHANNELS_DOMAIN = os.getenv('MAILCHANNELS_DOMAIN')
    MAILCHANNELS_SUBDOMAIN = os.getenv('MAILCHANNELS_SUBDOMAIN')
    MAILCHANNELS_API_KEY = os.getenv('MAILCHANNELS_API_KEY')

    # SendGrid
    SENDGRID_API_KEY = os.getenv('SENDGRID_API_KEY')
    SENDGRID_FROM_EMAIL = os.getenv('SENDGRID_FROM_EMAIL')
    SENDGRID_FROM_NAME = os.getenv('SENDGRID_FROM_NAME')

    # Admin credential - either a plaintext password or a hex SHA-256 digest
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH')

    # Table names
    SUBSCRIPTIONS_TABLE = "subscriptions"
    PROFILES_TABLE = "profiles"
    EMAIL_LOGS_TABLE = "email_logs"
    APP_LOGS_TABLE = "app_logs"

    # Port for local server
    port = int(os.getenv('PORT', '5000'))


def config_to_dict(config_class=Config):
    """Collect the upper-case settings of a config class into a plain dict"""
    return {key: getattr(config_class, key) for key in dir(config_class) if key.isupper()}
