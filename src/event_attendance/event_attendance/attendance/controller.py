from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.validators import require_non_empty, require_positive_int
from ..common.web import admin_required, json_body, login_required
from ..core.enums import AdmissionOutcome, RejectionReason
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from .service import AdmissionResult

logger = logging.getLogger(__name__)

_REJECTION_STATUS = {
    RejectionReason.INVALID_TOKEN: 400,
    RejectionReason.TOO_EARLY: 400,
    RejectionReason.TOO_LATE: 400,
    RejectionReason.STUDENT_NOT_FOUND: 404,
    RejectionReason.ORGANIZATION_NOT_FOUND: 404,
    RejectionReason.EVENT_NOT_FOUND: 404,
    RejectionReason.ALREADY_SIGNED_IN: 409,
    RejectionReason.ALREADY_SIGNED_OUT: 409,
    RejectionReason.NOT_YET_SIGNED_IN: 409,
}


def _iso(value):
    return value.isoformat() if value else None


def record_json(record) -> dict:
    return {
        "id": record.attendance_id,
        "studentId": record.student_id,
        "eventId": record.event_id,
        "status": record.status.value,
        "signInMorning": _iso(record.sign_in_morning),
        "signOutMorning": _iso(record.sign_out_morning),
        "signInAfternoon": _iso(record.sign_in_afternoon),
        "signOutAfternoon": _iso(record.sign_out_afternoon),
        "morning": record.morning.value,
        "afternoon": record.afternoon.value,
    }


def result_response(result: AdmissionResult):
    body = {
        "outcome": result.outcome.value,
        "reason": result.reason.value if result.reason else None,
        "message": result.message,
        "record": record_json(result.record) if result.record else None,
        "window": (
            {"opensAt": _iso(result.window.opens_at), "closesAt": _iso(result.window.closes_at)}
            if result.window
            else None
        ),
    }
    if result.outcome == AdmissionOutcome.CREATED:
        return jsonify(body), 201
    if result.outcome == AdmissionOutcome.UPDATED:
        return jsonify(body), 200
    return jsonify(body), _REJECTION_STATUS.get(result.reason, 400)


def register(app: Flask, container: Container) -> None:
    service = container.admission_service

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_scan")
    @login_required
    def api_attendance_scan():
        """Mark attendance from a scanned QR payload."""
        try:
            data = json_body()
            token = require_non_empty(data.get("token"), "token")
            event_id = require_positive_int(data.get("eventId"), "eventId")
            result = service.admit(token, event_id, data.get("session"))
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception:
            logger.exception("Attendance scan failed")
            return jsonify({"message": "Failed to mark attendance"}), 500
        return result_response(result)

    def _manual(action: str):
        try:
            data = json_body()
            student_id = require_positive_int(data.get("studentId"), "studentId")
            event_id = require_positive_int(data.get("eventId"), "eventId")
            if action == "sign-in":
                result = service.manual_sign_in(student_id, event_id, data.get("session"))
            elif action == "sign-out":
                result = service.manual_sign_out(student_id, event_id, data.get("session"))
            else:
                raise ValidationError("action must be 'sign-in' or 'sign-out'")
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception:
            logger.exception("Manual %s failed", action)
            return jsonify({"message": f"Failed to manually {action.replace('-', ' ')}"}), 500
        return result_response(result)

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="api_attendance_manual")
    @admin_required
    def api_attendance_manual():
        data = request.get_json(silent=True)
        action = data.get("action") if isinstance(data, dict) else None
        return _manual(str(action or "").strip().lower())

    @app.route("/api/attendance/manual-sign-in", methods=["POST"], endpoint="api_attendance_manual_sign_in")
    @admin_required
    def api_attendance_manual_sign_in():
        return _manual("sign-in")

    @app.route("/api/attendance/manual-sign-out", methods=["POST"], endpoint="api_attendance_manual_sign_out")
    @admin_required
    def api_attendance_manual_sign_out():
        return _manual("sign-out")

    @app.route("/api/events/<int:event_id>/attendance", methods=["GET"], endpoint="api_event_attendance")
    @admin_required
    def api_event_attendance(event_id: int):
        try:
            records = service.list_for_event(event_id)
        except NotFoundError as e:
            return jsonify({"message": str(e)}), 404
        return jsonify([record_json(r) for r in records]), 200