"""
Subscriptions Routes
====================

Provides:
- POST /api/subscribe -- subscribe (double opt-in)
- GET /confirm -- confirmation link target
- POST /api/check -- does this email already have a subscription?

Lifecycle: unknown -> pending (token issued) -> confirmed (terminal).
A repeat subscribe while pending re-sends the same token; it never rotates.
"""

import logging
import sqlite3
import uuid
from urllib.parse import urlencode

from flask import request, render_template, current_app

from solarroots.core.database import Database, utc_now
from solarroots.core.helpers import (
    get_json_object, normalize_email, validate_email,
    json_error, json_success, internal_error
)
from solarroots.core.logging_service import LoggingService, db_log
from . import subscriptions_bp
from .database import SubscriptionDatabase

logger = logging.getLogger(__name__)


def _get_email_service():
    return current_app.extensions.get('email_service')


def build_confirmation_link(email, token):
    """Absolute /confirm link using SITE_BASE_URL, or the request origin"""
    base = current_app.config.get('SITE_BASE_URL') or request.host_url
    query = urlencode({'token': token, 'email': email})
    return f"{base.rstrip('/')}/confirm?{query}"


def _confirm_page(heading, message, status, success):
    return render_template(
        'subscriptions/confirm.html',
        brand_name=current_app.config.get('EMAIL_BRAND_NAME', 'Solar Roots'),
        heading=heading,
        message=message,
        success=success,
    ), status


def _invalid_link_page():
    return _confirm_page(
        'Invalid confirmation link',
        'This confirmation link is no longer valid. Please subscribe again to receive a new link.',
        400,
        False,
    )


# ===================
# PUBLIC API ROUTES
# ===================

@subscriptions_bp.route('/api/subscribe', methods=['POST'])
def subscribe():
    """Create or refresh a pending subscription and email the confirmation link"""
    data = get_json_object()
    if data is None:
        return json_error('Invalid JSON body.', 400)

    email = normalize_email(data.get('email'))
    if not validate_email(email):
        return json_error('A valid email address is required.', 400)

    try:
        with Database.connection() as conn:
            existing = SubscriptionDatabase.get_subscription(conn, email)
            now = utc_now()

            if existing and existing['confirmed']:
                logger.info(f"Subscribe for already confirmed email: {email}")
                return json_success('Email is already confirmed.', 200)

            if existing:
                token = existing.get('confirmation_token')
                if token:
                    SubscriptionDatabase.touch_pending(conn, email, now)
                else:
                    token = str(uuid.uuid4())
                    SubscriptionDatabase.reissue_token(conn, email, token, now)
                logger.info(f"Re-sending confirmation for pending subscription: {email}")
            else:
                token = str(uuid.uuid4())
                SubscriptionDatabase.create_pending(conn, email, token, now)
                logger.info(f"New pending subscription: {email}")
                db_log('info', 'subscriptions', f'New subscriber: {email}')

        link = build_confirmation_link(email, token)
        svc = _get_email_service()
        if svc:
            svc.dispatch_confirmation(email, link)
        else:
            logger.warning(f"Email service not configured, confirmation for {email} not sent")

        return json_success('Confirmation email sent. Please check your inbox.', 202)

    except sqlite3.Error as e:
        logger.error(f"Database error in subscribe: {e}")
        LoggingService.log_error_with_traceback('subscriptions', e, {'route': 'subscribe'})
        return internal_error()
    except Exception as e:
        logger.error(f"Error in subscribe: {e}")
        LoggingService.log_error_with_traceback('subscriptions', e, {'route': 'subscribe'})
        return internal_error()


@subscriptions_bp.route('/confirm', methods=['GET'])
def confirm():
    """Confirm a subscription from the emailed link"""
    token = request.args.get('token', '').strip()
    email = normalize_email(request.args.get('email', ''))

    if not token or not email:
        return _invalid_link_page()

    try:
        with Database.connection() as conn:
            existing = SubscriptionDatabase.get_subscription(conn, email)

            if not existing:
                logger.info(f"Confirmation for unknown email: {email}")
                return _invalid_link_page()

            if existing['confirmed']:
                return _confirm_page(
                    'Already confirmed',
                    'Your email has already been confirmed. Thanks for being part of the cooperative!',
                    200,
                    True,
                )

            if existing.get('confirmation_token') != token:
                logger.info(f"Confirmation token mismatch for: {email}")
                return _invalid_link_page()

            SubscriptionDatabase.mark_confirmed(conn, email, utc_now())

        logger.info(f"Subscription confirmed: {email}")
        db_log('info', 'subscriptions', f'Subscription confirmed: {email}')
        return _confirm_page(
            'Subscription confirmed',
            'Your email has been confirmed. Thanks for joining us!',
            200,
            True,
        )

    except Exception as e:
        logger.error(f"Error in confirm: {e}")
        LoggingService.log_error_with_traceback('subscriptions', e, {'route': 'confirm'})
        return _confirm_page(
            'Something went wrong',
            'We could not confirm your email right now. Please try again later.',
            500,
            False,
        )


@subscriptions_bp.route('/api/check', methods=['POST'])
def check_subscription():
    """Read-only: report whether an email already has a subscription"""
    data = get_json_object()
    if data is None or not isinstance(data.get('email'), str):
        return json_error('Invalid request.', 400)

    email = normalize_email(data['email'])
    if not validate_email(email):
        return json_error('A valid email address is required.', 400)

    try:
        with Database.connection() as conn:
            existing = SubscriptionDatabase.get_subscription(conn, email)

        if existing:
            return json_success('This email is already subscribed.', 200, exists=True)
        return json_success('This email is available.', 200, exists=False)

    except Exception as e:
        logger.error(f"Error in check_subscription: {e}")
        LoggingService.log_error_with_traceback('subscriptions', e, {'route': 'check'})
        return internal_error()
