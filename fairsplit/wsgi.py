"""
wsgi.py — WSGI entry point.

    flask --app fairsplit.wsgi run
    gunicorn "fairsplit.wsgi:app"

The config is chosen from FLASK_ENV (development, testing, production).
"""

import os

from fairsplit.app import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))


if __name__ == "__main__":
    app.run(port=int(os.getenv("PORT", "5000")))
