# backend/smart_enterprise/routes/system.py
"""
Service banner and health endpoints. Both are public; /health is exempt from
the global rate limit so probes never get throttled.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..responses import api_response

system_bp = Blueprint("system", __name__)

SERVICE_NAME = "smart-enterprise"


def check_database_health() -> dict:
    """Run a trivial query and report status with latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


@system_bp.get("/")
def index():
    return api_response({"service": SERVICE_NAME}, message="Smart Enterprise API is running")


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return api_response(
        {"service": SERVICE_NAME, "database": database},
        message="OK" if healthy else "Degraded",
        status=200 if healthy else 503,
    )
