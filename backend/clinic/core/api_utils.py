"""
JSON envelope shared by every endpoint: ``{"success", "message", "data"?}``.
"""

from typing import Any, Optional

from flask import jsonify

from clinic.schemas.dtos import AdmissionResult


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """Build the ``(response, status)`` pair; ``data`` is omitted when None."""
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status_code


def admission_response(result: AdmissionResult, created_key: str) -> tuple:
    """Render an AdmissionResult: 201 with the new id, or 400 with every error."""
    if result.success:
        return api_response(True, result.message, {created_key: result.entity_id}, 201)
    return api_response(
        False,
        result.message,
        {"errors": result.errors, "codes": result.codes},
        400,
    )
