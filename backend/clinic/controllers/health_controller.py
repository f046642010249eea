"""
Health controller - health check endpoint for monitoring.
"""

import logging

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from clinic.db.session import get_engine

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Report database connectivity.

    Returns 200 with status "healthy" when ``SELECT 1`` succeeds, otherwise
    503 with status "unhealthy". No authentication required.
    """
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return jsonify({"status": "unhealthy", "database": False}), 503

    return jsonify({"status": "healthy", "database": True}), 200
