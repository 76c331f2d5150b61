# backend/backoffice/routes/system.py
"""
System health endpoint.

Reports database connectivity and whether the end-of-day attendance closer
is running, for deployment debugging.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text
from ..extensions import db
from backoffice.time_utils import local_now

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_scheduler_health() -> dict:
    scheduler = current_app.extensions.get("attendance_scheduler")
    if scheduler is None:
        return {"status": "disabled"}
    if not scheduler.running:
        return {"status": "degraded", "warning": "Auto-close thread is not running"}
    return {"status": "healthy", "runs_at": scheduler.at.strftime("%H:%M")}


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: database reachable (scheduler problems only degrade)
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    scheduler_health = check_scheduler_health()

    if database_health["status"] == "unhealthy":
        overall_status = "unhealthy"
        http_status = 503
    elif scheduler_health["status"] == "degraded":
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": local_now().replace(microsecond=0).isoformat(),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "attendance_scheduler": scheduler_health,
        }
    }

    return response, http_status
