from __future__ import annotations

from flask import jsonify

from .time_utils import iso_timestamp


def api_response(data=None, *, message: str, status: int = 200):
    """Success envelope shared by every route: {success, status, message, data, timestamp}."""
    body = {
        "success": True,
        "status": status,
        "message": message,
        "timestamp": iso_timestamp(),
    }
    if data is not None:
        body["data"] = data
    return jsonify(body), status
