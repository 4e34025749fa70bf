import os
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from event_calendar.extensions import db

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    storage_dir = current_app.config.get("IMAGE_STORAGE_DIR")
    return jsonify(
        {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": current_app.config.get("ENVIRONMENT", "unknown"),
            "database": {"hasUrl": bool(current_app.config.get("SQLALCHEMY_DATABASE_URI"))},
            "auth": {"hasSecret": bool(current_app.config.get("JWT_SECRET_KEY"))},
            "storage": {
                "hasBucket": "image_bucket" in current_app.extensions,
                "directoryExists": bool(storage_dir) and os.path.isdir(storage_dir),
            },
        }
    ), 200


def _timed_check(service, check):
    start = time.monotonic()
    try:
        check()
        duration = int((time.monotonic() - start) * 1000)
        current_app.logger.info(f"{service} warmed ({duration}ms)")
        return {"service": service, "status": "success", "duration": duration}
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"{service} warmup failed: {str(e)}")
        return {"service": service, "status": "error", "duration": 0}


@health_bp.route("/warmup", methods=["GET"])
def warmup():
    start = time.monotonic()
    results = [
        _timed_check("database", lambda: db.session.execute(db.text("SELECT 1")).scalar_one()),
        _timed_check(
            "api",
            lambda: db.session.execute(db.text("SELECT COUNT(*) FROM events")).scalar_one(),
        ),
    ]
    return jsonify(
        {
            "status": "warmed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "totalDuration": f"{int((time.monotonic() - start) * 1000)}ms",
            "services": results,
            "environment": current_app.config.get("ENVIRONMENT", "development"),
        }
    ), 200
