# backend/smart_enterprise/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/smart_enterprise.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///smart_enterprise.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tokens
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me-before-deploying")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_SECONDS = int(os.environ.get("JWT_EXPIRES_SECONDS", "3600"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

    TOKEN_BLACKLIST_SWEEP_SECONDS = int(os.environ.get("TOKEN_BLACKLIST_SWEEP_SECONDS", "300"))
    TOKEN_BLACKLIST_SWEEPER_ENABLED = _env_bool("TOKEN_BLACKLIST_SWEEPER_ENABLED", True)

    # "<requests>/<window seconds>"
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_GLOBAL = os.environ.get("RATELIMIT_GLOBAL", "200/900")
    RATELIMIT_SIGNIN = os.environ.get("RATELIMIT_SIGNIN", "5/900")
    RATELIMIT_SIGNUP = os.environ.get("RATELIMIT_SIGNUP", "5/3600")

    CORS_ALLOWED_ORIGINS = [
        o.strip()
        for o in os.environ.get("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
        if o.strip()
    ]

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = os.environ.get("LOG_DIR")  # unset -> console only

    # Development only: include stack traces in 500 responses
    EXPOSE_STACK_TRACES = _env_bool("EXPOSE_STACK_TRACES", False)
