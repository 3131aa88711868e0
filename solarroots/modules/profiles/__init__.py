"""
Profiles Module
===============

Provides:
- POST /api/profile -- profile upsert (name, bio, password digest)
- POST /api/login -- member login
"""

from flask import Blueprint

profiles_bp = Blueprint('profiles', __name__)

from . import routes
from .database import ProfileDatabase

__all__ = ['profiles_bp', 'ProfileDatabase']
