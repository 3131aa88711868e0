"""
Solar Roots Modules
===================

Flask blueprint modules for subscriptions, profiles, admin auth and email.
"""

__all__ = ['auth', 'email', 'profiles', 'subscriptions']
