from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import fmt_date, parse_iso_date
from ..common.validators import optional_id, require_id, require_id_list, require_non_empty
from ..container import Container
from ..core.exceptions import DomainError
from .service import parse_status

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")

    def _fail(e: DomainError):
        return jsonify({"message": str(e)}), e.status_code

    def _body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route(f"{prefix}/attendance/update", methods=["PATCH"], endpoint="attendance_update")
    def attendance_update():
        data = _body()
        try:
            staff_id = optional_id(data.get("staffId"), "staffId")
            student_id = require_id(data.get("studentId"), "studentId")
            status = parse_status(require_non_empty(data.get("status"), "status"))
            schedule_id = optional_id(data.get("scheduleId"), "scheduleId")
            class_date = parse_iso_date(data["classDate"]) if data.get("classDate") else None

            container.attendance_service.update_one(
                student_id=student_id,
                status=status,
                pin=data.get("pin"),
                class_date=class_date,
                schedule_id=schedule_id,
                staff_id=staff_id,
            )
            return jsonify({"message": "Attendance updated successfully"})
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Attendance update failed")
            return jsonify({"message": "Failed to update attendance"}), 500

    @app.route(f"{prefix}/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    def attendance_bulk():
        data = _body()
        try:
            staff_id = require_id(data.get("staffId"), "staffId")
            schedule_id = require_id(data.get("scheduleId"), "scheduleId")
            present_ids = require_id_list(data.get("presentStudentIds"), "presentStudentIds")

            result = container.attendance_service.submit_roll(
                schedule_id=schedule_id,
                staff_id=staff_id,
                pin=data.get("pin"),
                present_student_ids=present_ids,
            )
            return jsonify(
                {
                    "message": "Attendance submitted successfully and locked for you.",
                    "present": result.present,
                    "absent": result.absent,
                    "scheduleClosed": result.retired,
                }
            )
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Bulk attendance failed")
            return jsonify({"message": "Failed to submit attendance"}), 500

    @app.route(f"{prefix}/attendance/schedule", methods=["GET"], endpoint="attendance_schedules")
    def attendance_schedules():
        try:
            staff_id = optional_id(request.args.get("staffId"), "staffId")
            schedules = container.attendance_service.open_schedules_for(staff_id)
            return jsonify([s.to_dict() for s in schedules])
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Schedule listing failed")
            return jsonify({"message": "Failed to fetch schedules"}), 500

    @app.route(f"{prefix}/attendance/schedule/history", methods=["GET"], endpoint="attendance_schedule_history")
    def attendance_schedule_history():
        try:
            staff_id = optional_id(request.args.get("staffId"), "staffId")
            container.sweeper.maybe_sweep()
            return jsonify({"history": container.schedule_service.history_by_staff(staff_id=staff_id)})
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("History listing failed")
            return jsonify({"message": "Failed to fetch history"}), 500

    @app.route(f"{prefix}/attendance/present/<class_date>", methods=["GET"], endpoint="attendance_present")
    def attendance_present(class_date: str):
        try:
            students = container.attendance_service.present_students(
                parse_iso_date(class_date),
                staff_id=optional_id(request.args.get("staffId"), "staffId"),
                schedule_id=optional_id(request.args.get("scheduleId"), "scheduleId"),
            )
            return jsonify([s.to_dict() for s in students])
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Present list failed")
            return jsonify({"message": "Failed to fetch present list"}), 500

    @app.route(f"{prefix}/attendance/all", methods=["GET"], endpoint="attendance_dates")
    def attendance_dates():
        try:
            return jsonify([fmt_date(d) for d in container.attendance_service.attendance_dates()])
        except Exception:
            logger.exception("Date listing failed")
            return jsonify({"message": "Failed to fetch dates"}), 500
