"""Application configuration module."""

import os
from datetime import timedelta

DEFAULT_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:5500",
    "http://127.0.0.1:5500",
)
MAIL_BACKENDS = ("smtp", "console", "memory")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_SCHEMA = _env_flag("AUTO_CREATE_SCHEMA", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    _raw_origins = os.getenv("ORIGINS", ",".join(DEFAULT_ORIGINS))
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Sessions
    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", False)
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_REFRESH_EACH_REQUEST = False

    # Passwords and verification
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6"))
    OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "600"))
    REQUIRE_VERIFIED_EMAIL = _env_flag("REQUIRE_VERIFIED_EMAIL", False)

    # Mail
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "console")
    MAIL_SERVER = os.getenv("MAIL_SERVER")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_SENDER = os.getenv("MAIL_SENDER")
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", True)
    MAIL_TIMEOUT = float(os.getenv("MAIL_TIMEOUT", "10"))

    # Seeded administrator (optional)
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
    ADMIN_FULLNAME = os.getenv("ADMIN_FULLNAME", "Site Admin")


def validate_config(config) -> None:
    """Fail fast when required secrets are missing.

    ``config`` is any mapping with the keys above, usually ``app.config``.
    """

    if not config.get("SECRET_KEY"):
        raise RuntimeError("SECRET_KEY must be set in the environment.")

    backend = config.get("MAIL_BACKEND")
    if backend not in MAIL_BACKENDS:
        raise RuntimeError(
            "MAIL_BACKEND must be one of: {}.".format(", ".join(MAIL_BACKENDS))
        )

    if backend == "smtp":
        required = ("MAIL_SERVER", "MAIL_USERNAME", "MAIL_PASSWORD", "MAIL_SENDER")
        missing = [key for key in required if not config.get(key)]
        if missing:
            raise RuntimeError(
                "SMTP mail backend requires: {}.".format(", ".join(missing))
            )

    if config.get("OTP_LENGTH", 0) < 4:
        raise RuntimeError("OTP_LENGTH must be at least 4.")
