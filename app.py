"""
Solar Roots Backend
===================

Run with:
    python app.py

Or behind a WSGI server:
    gunicorn app:app
"""

import logging

from solarroots import create_app
from solarroots.core.config import Config

logging.basicConfig(level=logging.INFO)

app = create_app()


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Solar Roots Backend")
    print("=" * 60)
    print(f"Subscribe API:   http://localhost:{Config.port}/api/subscribe")
    print(f"Health:          http://localhost:{Config.port}/health")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
