
import os
from pathlib import Path

from dotenv import load_dotenv


_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent

# Root .env is canonical; fairsplit/.env is read as a fallback.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_PACKAGE_DIR / ".env")


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_int_env(*names: str, default: int) -> int:
    """Parses the first non-empty env var in `names` as int, else returns `default`."""
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _parse_bool_env(name: str, default: bool) -> bool:
    """
    Parses a boolean env var.

    Accepted truthy values: 1, true, yes, on (case-insensitive).
    Anything else set explicitly is False; unset or empty returns `default`.
    """
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_list_env(name: str) -> list[str]:
    """Splits a comma-separated env var into trimmed, non-empty items."""
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class BaseConfig:

    SECRET_KEY: str = _first_non_empty_env(
        "SECRET_KEY",
        default="change-me-in-production",
    )

    JSON_SORT_KEYS: bool = False

    # All routes are mounted under this prefix (e.g. /api/groups).
    API_PREFIX: str = _first_non_empty_env("API_PREFIX", default="/api")

    # Group registry limits. MAX_GROUPS = 0 disables the group limit.
    MAX_PARTICIPANTS: int = _parse_int_env("MAX_PARTICIPANTS", default=10)
    MAX_GROUPS:       int = _parse_int_env("MAX_GROUPS", default=10)

    SEED_SAMPLE_DATA: bool = _parse_bool_env("SEED_SAMPLE_DATA", default=False)

    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="INFO")

    # Origins allowed outside DEBUG/TESTING (comma-separated in the env).
    CORS_ALLOWED_ORIGINS: list[str] = _parse_list_env("CORS_ALLOWED_ORIGINS")


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False

    SEED_SAMPLE_DATA: bool = _parse_bool_env("SEED_SAMPLE_DATA", default=True)
    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="DEBUG")


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    # Tests always start from an empty store with the documented limits,
    # whatever the developer's .env says.
    SEED_SAMPLE_DATA: bool = False
    MAX_PARTICIPANTS: int = 10
    MAX_GROUPS:       int = 10
    API_PREFIX:       str = "/api"
    LOG_LEVEL:        str = "WARNING"


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False


def validate_production_config(app) -> None:
    """
    Refuses to start a production app on development-grade settings.

    create_app("production") calls this right after loading ProductionConfig.
    Raises ValueError naming the first offending setting.
    """
    if app.config.get("SECRET_KEY") == "change-me-in-production":
        raise ValueError(
            "SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    if app.config.get("MAX_PARTICIPANTS", 0) <= 0:
        raise ValueError("MAX_PARTICIPANTS must be a positive integer.")
    if app.config.get("MAX_GROUPS", 0) < 0:
        raise ValueError("MAX_GROUPS must be zero (unlimited) or a positive integer.")
    if "*" in app.config.get("CORS_ALLOWED_ORIGINS", []):
        raise ValueError(
            "CORS_ALLOWED_ORIGINS must list explicit origins in production; "
            "'*' is not allowed."
        )
    if app.config.get("SEED_SAMPLE_DATA"):
        raise ValueError("SEED_SAMPLE_DATA must be disabled in production.")


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   from fairsplit.config import config_by_name
#   app.config.from_object(config_by_name[flask_env])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}

