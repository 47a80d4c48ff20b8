from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_id
from ..container import Container
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")

    def _fail(e: DomainError):
        return jsonify({"message": str(e)}), e.status_code

    @app.route(f"{prefix}/attendance", methods=["GET"], endpoint="attendance_matrix")
    def attendance_matrix():
        try:
            matrix = container.report_service.student_history(request.args.get("classSection"))
            return jsonify(matrix.to_dict())
        except Exception:
            logger.exception("Attendance matrix failed")
            return jsonify({"message": "Failed to fetch attendance records"}), 500

    @app.route(f"{prefix}/attendance/summary/<class_date>", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary(class_date: str):
        try:
            summary = container.report_service.roll_call(
                parse_iso_date(class_date),
                staff_id=optional_id(request.args.get("staffId"), "staffId"),
                schedule_id=optional_id(request.args.get("scheduleId"), "scheduleId"),
            )
            return jsonify({"summary": summary.to_dict(), "report": summary.as_text()})
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Roll-call summary failed")
            return jsonify({"message": "Failed to build summary"}), 500

    @app.route(f"{prefix}/attendance/report", methods=["GET"], endpoint="attendance_report")
    def attendance_report():
        try:
            container.sweeper.maybe_sweep()
            summaries = container.report_service.roll_call_report(
                staff_id=optional_id(request.args.get("staffId"), "staffId"),
            )
            if not summaries:
                return jsonify({"report": "No attendance records found.", "structured": []})
            return jsonify(
                {
                    "report": "\n\n".join(s.as_text() for s in summaries),
                    "structured": [s.to_dict() for s in summaries],
                }
            )
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("History report failed")
            return jsonify({"message": "History fetch failed"}), 500
