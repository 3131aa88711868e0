"""
Email Service Module
====================

Sends the subscription confirmation email through the provider chosen at
init time (MailChannels or SendGrid). Sends are fire-and-forget: they run on
a small thread pool so the HTTP response never waits on the provider, and a
failed send is logged, never raised to the caller.
"""

import atexit
import logging
import sqlite3
import threading
import weakref
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from solarroots.core.config import Config
from solarroots.core.database import Database
from solarroots.core.logging_service import db_log

from .providers import provider_from_config

logger = logging.getLogger(__name__)

# Services still alive in this process; released apps drop out on their own
_live_services = weakref.WeakSet()


def _shutdown_all():
    for service in list(_live_services):
        service.shutdown()


atexit.register(_shutdown_all)


class EmailService:
    """
    Confirmation email sender bound to one Flask app.

    Configuration (read from app.config by init_app):
        EMAIL_PROVIDER: 'sendgrid' or 'mailchannels' (optional, inferred otherwise)
        SENDGRID_API_KEY, SENDGRID_FROM_EMAIL, SENDGRID_FROM_NAME
        MAILCHANNELS_DOMAIN, MAILCHANNELS_SUBDOMAIN, MAILCHANNELS_API_KEY
        MAIL_FROM_EMAIL, MAIL_FROM_NAME: default sender
        EMAIL_BRAND_NAME: brand used in subject and body
        EMAIL_SEND_WORKERS: background worker threads
        SOLARROOTS_DB: database that receives email_logs rows
    """

    def __init__(self, app=None):
        self.provider = None
        self.brand_name = 'Solar Roots'
        self.db_path = None
        self.executor = None
        self._pending = set()
        self._lock = threading.Lock()

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize email service with Flask app configuration"""
        self.provider = provider_from_config(app.config)
        self.brand_name = app.config.get('EMAIL_BRAND_NAME') or 'Solar Roots'
        self.db_path = app.config.get('SOLARROOTS_DB')
        workers = int(app.config.get('EMAIL_SEND_WORKERS') or 2)
        if self.executor is not None:
            self.executor.shutdown(wait=True)
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='email-send')
        _live_services.add(self)

        app.extensions['email_service'] = self
        logger.info(f"Email service initialized (provider: {self.provider.name})")

    def _log_email(self, recipient: str, subject: str, status: str,
                   error_message: Optional[str] = None):
        """Record an email attempt in the email_logs table"""
        try:
            conn = Database.connect(self.db_path)
            try:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {Config.EMAIL_LOGS_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        recipient TEXT NOT NULL,
                        subject TEXT NOT NULL,
                        provider TEXT,
                        status TEXT NOT NULL,
                        error_message TEXT,
                        sent_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.execute(f"""
                    INSERT INTO {Config.EMAIL_LOGS_TABLE} (recipient, subject, provider, status, error_message)
                    VALUES (?, ?, ?, ?, ?)
                """, (recipient, subject, self.provider.name, status, error_message))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to log email to database: {e}")

    def confirmation_subject(self):
        return f"Confirm your {self.brand_name} subscription"

    def build_confirmation_bodies(self, link):
        """Return (html_body, text_body) for a confirmation link"""
        text_body = f"Thanks for subscribing to {self.brand_name}! Confirm your email by visiting: {link}"
        html_body = (
            f"<p>Thanks for subscribing to {self.brand_name}!</p>"
            f"<p><a href=\"{link}\">Click here to confirm your email address</a>.</p>"
        )
        return html_body, text_body

    def send_confirmation_email(self, recipient, link):
        """
        Send the confirmation email synchronously.
        Raises whatever the provider raises after recording the attempt.
        """
        subject = self.confirmation_subject()
        html_body, text_body = self.build_confirmation_bodies(link)

        logger.info(f"Sending confirmation email to {recipient} via {self.provider.name}")
        try:
            self.provider.send(recipient, subject, html_body, text_body)
        except Exception as e:
            self._log_email(recipient, subject, 'failed', str(e))
            raise

        self._log_email(recipient, subject, 'sent')

    def dispatch_confirmation(self, recipient, link):
        """
        Fire-and-forget: queue the send on the background executor and return
        the Future immediately. Failures go to the log, never to the caller.
        """
        future = self.executor.submit(self._send_in_background, recipient, link)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _send_in_background(self, recipient, link):
        """Executor task: returns True on success, logs and returns False on failure"""
        try:
            self.send_confirmation_email(recipient, link)
            return True
        except Exception as e:
            logger.error(f"Failed to send confirmation email to {recipient}: {e}")
            db_log('error', 'email', f'Failed to send confirmation email to {recipient}',
                   {'error': str(e)}, db_path=self.db_path)
            return False

    def _forget(self, future):
        with self._lock:
            self._pending.discard(future)

    def wait_for_pending(self, timeout=None):
        """Block until every queued send has finished (tests and shutdown)"""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self):
        if self.executor is not None:
            self.executor.shutdown(wait=True)
