"""
Subscriptions Module
====================

Provides:
- POST /api/subscribe -- create or refresh a pending subscription and email a confirmation link
- GET /confirm -- confirm a subscription from the emailed link (HTML page)
- POST /api/check -- read-only probe of whether an email is subscribed
"""

from flask import Blueprint

subscriptions_bp = Blueprint(
    'subscriptions',
    __name__,
    template_folder='templates',
)

from . import routes
from .database import SubscriptionDatabase

__all__ = ['subscriptions_bp', 'SubscriptionDatabase']
