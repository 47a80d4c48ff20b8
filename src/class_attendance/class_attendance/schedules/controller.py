from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import require_id, require_id_list, require_non_empty
from ..container import Container
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")

    def _fail(e: DomainError):
        return jsonify({"message": str(e)}), e.status_code

    @app.route(f"{prefix}/schedule", methods=["POST"], endpoint="schedule_create")
    def schedule_create():
        data = request.get_json(silent=True) or {}
        try:
            class_date = parse_iso_date(require_non_empty(data.get("date"), "date"))
            start_time = parse_hhmm(require_non_empty(data.get("startTime"), "startTime"))
            end_time = parse_hhmm(require_non_empty(data.get("endTime"), "endTime"))
            staff_ids = require_id_list(data.get("staffIds"), "staffIds")

            schedule = container.schedule_service.create(
                class_date=class_date,
                start_time=start_time,
                end_time=end_time,
                staff_ids=staff_ids,
            )
            return jsonify({"message": "Schedule created successfully", "schedule": schedule.to_dict()}), 201
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Schedule creation failed")
            return jsonify({"message": "Failed to save schedule"}), 500

    @app.route(f"{prefix}/schedule", methods=["GET"], endpoint="schedule_upcoming")
    def schedule_upcoming():
        try:
            schedules = container.schedule_service.list_upcoming()
            return jsonify({"schedules": [s.to_dict() for s in schedules]})
        except Exception:
            logger.exception("Schedule listing failed")
            return jsonify({"message": "Failed to fetch schedules"}), 500

    @app.route(f"{prefix}/schedule/history", methods=["GET"], endpoint="schedule_history")
    def schedule_history():
        try:
            container.sweeper.maybe_sweep()
            return jsonify({"history": container.schedule_service.history_by_schedule()})
        except Exception:
            logger.exception("History listing failed")
            return jsonify({"message": "Failed to fetch history"}), 500

    @app.route(f"{prefix}/schedule/<class_date>", methods=["GET"], endpoint="schedule_by_date")
    def schedule_by_date(class_date: str):
        try:
            schedules = container.schedule_service.list_for_date(parse_iso_date(class_date))
            return jsonify({"schedules": [s.to_dict() for s in schedules]})
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Schedule lookup failed")
            return jsonify({"message": "Error fetching schedule"}), 500

    @app.route(f"{prefix}/schedule/<schedule_id>", methods=["DELETE"], endpoint="schedule_cancel")
    def schedule_cancel(schedule_id: str):
        try:
            container.schedule_service.cancel(require_id(schedule_id, "id"))
            return jsonify({"message": "Class cancelled successfully"})
        except DomainError as e:
            return _fail(e)
        except Exception:
            logger.exception("Schedule cancel failed")
            return jsonify({"message": "Error cancelling class"}), 500
