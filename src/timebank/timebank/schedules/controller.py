from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container
from ..core.enums import Weekday


def register(app: Flask, container: Container) -> None:
    @app.route("/employers/<int:employer_id>/schedules", methods=["GET"], endpoint="schedule_versions")
    def schedule_versions(employer_id: int):
        return jsonify(to_jsonable(list(container.schedules_repo.list_versions(employer_id=employer_id))))

    @app.route("/employers/<int:employer_id>/schedules/active", methods=["GET"], endpoint="schedule_active")
    def schedule_active(employer_id: int):
        day = parse_iso_date(request.args["date"])
        schedule = container.schedules_repo.get_active(employer_id=employer_id, weekday=Weekday.of(day), on_date=day)
        if schedule is None:
            return jsonify({"error": "no schedule configured for that date"}), 404
        return jsonify(to_jsonable(schedule))
