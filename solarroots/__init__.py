"""
Solar Roots - Landing Site Backend
==================================

Flask backend for a community-energy-cooperative landing site:
- Email subscriptions with double opt-in confirmation
- Optional member profiles (name, bio, password)
- Member and admin login

Usage:
    from solarroots import create_app

    app = create_app()
    app.run()
"""

__version__ = '0.1.0'

import logging
import os

from flask import Flask, current_app, request, send_from_directory
from flask_cors import CORS
from werkzeug.security import safe_join

from .core.config import Config, config_to_dict
from .core.database import Database
from .modules.auth import admin_bp
from .modules.email import EmailService
from .modules.profiles import profiles_bp
from .modules.subscriptions import subscriptions_bp

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST,OPTIONS',
    'Access-Control-Allow-Headers': 'content-type',
}

_METHOD_ORDER = ('GET', 'HEAD', 'POST', 'OPTIONS')


def create_app(config=None):
    """
    Build the Flask app.

    Args:
        config: optional mapping applied on top of Config (tests use this
                to point SOLARROOTS_DB at a temp directory)
    """
    app = Flask(__name__, static_folder=None)
    app.config.update(config_to_dict(Config))
    if config:
        app.config.update(config)

    CORS(app, resources={r"/api/*": {"origins": "*"}}, send_wildcard=True,
         methods=['POST', 'OPTIONS'], allow_headers=['content-type'])

    app.register_blueprint(subscriptions_bp)
    app.register_blueprint(profiles_bp)
    app.register_blueprint(admin_bp)

    EmailService(app)

    _register_handlers(app)

    logger.info(f"Solar Roots app created (database: {app.config['SOLARROOTS_DB']})")
    return app


def _serve_static(path):
    """Return a response for a file under STATIC_FOLDER, or None"""
    folder = current_app.config.get('STATIC_FOLDER')
    if not folder or not os.path.isdir(folder):
        return None

    relative = path.lstrip('/')
    if not relative or relative.endswith('/'):
        relative += 'index.html'

    full_path = safe_join(folder, relative)
    if full_path is None:
        return None
    if os.path.isdir(full_path):
        relative = f"{relative.rstrip('/')}/index.html"
        full_path = safe_join(folder, relative)
    if not full_path or not os.path.isfile(full_path):
        return None

    return send_from_directory(folder, relative)


def _register_handlers(app):

    @app.before_request
    def handle_preflight():
        if request.method == 'OPTIONS':
            response = app.response_class(status=204)
            response.headers.update(CORS_HEADERS)
            return response

    @app.route('/health')
    def health():
        try:
            Database.ping()
            return {'status': 'ok', 'checks': {'database': 'ok'}}, 200
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {'status': 'critical', 'checks': {'database': 'error'}}, 503

    @app.errorhandler(404)
    def not_found(error):
        # Unmatched paths fall through to the static site
        if request.method in ('GET', 'HEAD'):
            response = _serve_static(request.path)
            if response is not None:
                return response
        return 'Not Found', 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        valid = error.valid_methods or []
        allow = ','.join(m for m in _METHOD_ORDER if m in valid)
        headers = dict(CORS_HEADERS)
        headers['Allow'] = allow
        return 'Method Not Allowed', 405, headers
