"""
app/__init__.py — Flask application factory.

Importing this module builds nothing. Every create_app() call returns a new
app with its own LedgerStore, so tests can create as many isolated apps as
they like.

Responsibilities:
  1. Apply the config class named by config_name
  2. Configure logging from LOG_LEVEL
  3. Register a custom JSON provider that writes Decimal as a JSON number
     (monetary amounts travel as 2-place decimal numbers)
  4. Create the LedgerStore and optionally seed sample data
  5. Register all route blueprints under API_PREFIX
  6. Register global error handlers (AppError → JSON, Exception → 500)
"""

from __future__ import annotations

import logging
import traceback
from decimal import Decimal

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError

from fairsplit.config import config_by_name, validate_production_config


# ── Custom JSON provider ───────────────────────────────────────────────────
# Flask's default JSON encoder turns Decimal into a string. Amounts are
# always 2-place Decimals built from integer cents, so float(Decimal) is
# exact at JSON precision: Decimal("10.00") → 10.0, Decimal("3.33") → 3.33.

class DecimalJSONProvider(DefaultJSONProvider):
    """
    Extends Flask's default JSON provider to serialise Decimal as a number.

    Installed as app.json, so every jsonify() body writes amounts as numbers.
    """

    def default(self, o):
        if isinstance(o, Decimal):
            return float(o)
        return super().default(o)


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Builds a FairSplit Flask app.

    Args:
        config_name: Key into config_by_name ("development", "testing" or
                     "production"). Unknown names fall back to development.

    Returns:
        The app, with store, blueprints and error handlers registered.
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)
    app.json.sort_keys = app.config["JSON_SORT_KEYS"]

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    _configure_logging(app)

    # ── Ledger store ───────────────────────────────────────────────────────
    # Import here (not at module top) to keep import-time side effects nil.
    from fairsplit.app.extensions import init_store
    store = init_store(app)

    if app.config["SEED_SAMPLE_DATA"]:
        from fairsplit.app.services.sample_data import seed_sample_data
        seed_sample_data(store)

    # ── Blueprints ─────────────────────────────────────────────────────────
    _register_blueprints(app)

    # ── Error handlers ─────────────────────────────────────────────────────
    _register_error_handlers(app)
    _register_cors(app)

    return app


def _configure_logging(app: Flask) -> None:
    """
    Applies LOG_LEVEL to the Flask logger and to the package loggers used by
    the service layer (logging.getLogger(__name__) under "fairsplit").
    """
    level = logging.getLevelName(str(app.config["LOG_LEVEL"]).upper())
    if not isinstance(level, int):
        level = logging.INFO

    app.logger.setLevel(level)
    package_logger = logging.getLogger("fairsplit")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"
        ))
        package_logger.addHandler(handler)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under API_PREFIX.

    All three blueprints share the /groups prefix; individual route files
    only specify the path relative to it (e.g. "" and "/<group_id>/expenses").
    """
    from fairsplit.app.routes.expenses import expenses_bp
    from fairsplit.app.routes.groups import groups_bp
    from fairsplit.app.routes.settlements import settlements_bp

    prefix = app.config["API_PREFIX"].rstrip("/")

    app.register_blueprint(groups_bp,      url_prefix=f"{prefix}/groups")
    app.register_blueprint(expenses_bp,    url_prefix=f"{prefix}/groups")
    app.register_blueprint(settlements_bp, url_prefix=f"{prefix}/groups")

    @app.route(f"{prefix}/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"}), 200


def _register_error_handlers(app: Flask) -> None:
    """
    Wires every failure into the {"error": {code, message, field?}} envelope.

    Handlers:
      AppError        → structured JSON error envelope with the correct HTTP status
      ValidationError → marshmallow schema errors formatted as MISSING_FIELD /
                        INVALID_FIELD / INVALID_AMOUNT_PRECISION responses (400)
      HTTPException   → Flask's own 404/405 etc. in the same envelope
      Exception       → generic INTERNAL_ERROR (500); full traceback logged

    Stack traces never leave the server.
    """
    from werkzeug.exceptions import HTTPException

    from fairsplit.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Services raise AppError and routes let it through; this is the only
        place it becomes a response. 4xx is logged at INFO, 5xx at ERROR.
        """
        if error.http_status >= 500:
            app.logger.error(
                "%s %s failed with %s: %s",
                request.method, request.path, error.code, error.message,
            )
        else:
            app.logger.info(
                "%s %s rejected with %s: %s",
                request.method, request.path, error.code, error.message,
            )
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Schema failures become MISSING_FIELD, INVALID_FIELD or the error code
        the validator raised (INVALID_AMOUNT_PRECISION).

        Marshmallow raises ValidationError with a messages dict keyed by field
        name (wire name, e.g. "paidBy"). Only the FIRST error is returned.
        """
        field, raw_message = _first_validation_message(error.messages)

        known_codes = {v for k, v in vars(ErrorCode).items() if k.isupper()}
        if raw_message in known_codes:
            code = raw_message
        elif str(raw_message).startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
        else:
            code = ErrorCode.INVALID_FIELD

        response_body = {
            "error": {
                "code": code,
                "message": _code_to_message(code) if raw_message == code else raw_message,
            }
        }
        if field is not None:
            response_body["error"]["field"] = field

        app.logger.info(
            "%s %s rejected with %s: %s",
            request.method, request.path, code, raw_message,
        )
        return jsonify(response_body), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Unknown routes and wrong methods still answer in the error envelope."""
        return jsonify({
            "error": {
                "code": error.name.upper().replace(" ", "_"),
                "message": error.description,
            }
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Last resort: INTERNAL_ERROR (500). The traceback goes to the log only.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _first_validation_message(messages) -> tuple[str | None, str]:
    """
    Flattens marshmallow's nested messages to the first (field, message) pair.

    Examples:
      {"amount": ["INVALID_AMOUNT_PRECISION"]}         → ("amount", "INVALID_AMOUNT_PRECISION")
      {"participants": {0: ["Not a valid string."]}}    → ("participants", "Not a valid string.")
      {"contributions": {"Bob": {"value": ["..."]}}}    → ("contributions", "...")
    """
    field = None
    node = messages

    if isinstance(node, dict) and node:
        field_name, node = next(iter(node.items()))
        field = field_name if field_name != "_schema" else None

    while True:
        if isinstance(node, dict) and node:
            node = next(iter(node.values()))
        elif isinstance(node, list) and node:
            node = node[0]
        else:
            break

    if isinstance(node, (dict, list)):
        return field, "Invalid input."
    return field, str(node)


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser clients.

    When DEBUG or TESTING is true any origin is reflected so a frontend
    served from another local port can call the API. Otherwise only origins
    listed in CORS_ALLOWED_ORIGINS are allowed.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))
        allowed = app.config.get("CORS_ALLOWED_ORIGINS") or []

        if allow_all or (origin and origin in allowed):
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"

        return response


def _code_to_message(code: str) -> str:
    """
    Default prose for schema validators that raise a bare error code.
    """
    _messages = {
        "INVALID_AMOUNT_PRECISION": "Amount must have at most 2 decimal places.",
    }
    return _messages.get(code, "Invalid input.")
