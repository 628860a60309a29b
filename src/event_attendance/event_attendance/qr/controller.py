from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, session

from ..common.web import admin_required, login_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _ensure_can_view(student_id: int) -> None:
    if session.get("role") == Role.ADMIN.value:
        return
    if session.get("student_id") != student_id:
        raise AuthorizationError("Students may only view their own QR code")


def register(app: Flask, container: Container) -> None:
    qr_service = container.qr_service

    @app.route("/api/students/<int:student_id>/qr", methods=["GET"], endpoint="api_student_qr_image")
    @login_required
    def api_student_qr_image(student_id: int):
        """PNG of the student's QR payload. Students may only fetch their own."""
        try:
            _ensure_can_view(student_id)
            png = qr_service.render_png(student_id)
        except AuthorizationError as e:
            return jsonify({"message": str(e)}), 403
        except NotFoundError as e:
            return jsonify({"message": str(e)}), 404
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception:
            logger.exception("QR rendering failed for student %s", student_id)
            return jsonify({"message": "Failed to generate QR code"}), 500
        return Response(png, mimetype="image/png")

    @app.route("/api/students/<int:student_id>/qr", methods=["POST"], endpoint="api_student_qr_issue")
    @admin_required
    def api_student_qr_issue(student_id: int):
        """Re-issue the payload from the current name, organization and secret."""
        try:
            token = qr_service.issue_for_student(student_id)
        except NotFoundError as e:
            return jsonify({"message": str(e)}), 404
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception:
            logger.exception("QR issuing failed for student %s", student_id)
            return jsonify({"message": "Failed to issue QR code"}), 500
        return jsonify({"studentId": student_id, "qrCodeData": token}), 200
