from __future__ import annotations

from datetime import datetime

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/employers/<int:employer_id>/punches", methods=["POST"], endpoint="punch_record")
    def punch_record(employer_id: int):
        body = request.get_json(silent=True) or {}
        at = body.get("timestamp")
        punch = container.punch_service.record_punch(
            employer_id,
            now=datetime.fromisoformat(at) if at else None,
            manual=bool(body.get("manual", False)),
            justification=body.get("justification"),
        )
        return jsonify(to_jsonable(punch)), 201

    @app.route("/employers/<int:employer_id>/punches", methods=["GET"], endpoint="punch_list_day")
    def punch_list_day(employer_id: int):
        day = parse_iso_date(request.args["date"])
        return jsonify(to_jsonable(container.punch_service.punches_for_day(employer_id, day)))

    @app.route("/punches/<int:punch_id>", methods=["PUT"], endpoint="punch_edit")
    def punch_edit(punch_id: int):
        body = request.get_json(silent=True) or {}
        punch = container.punch_service.edit_punch(
            punch_id,
            timestamp=datetime.fromisoformat(body["timestamp"]),
            justification=body.get("justification") or "",
        )
        return jsonify(to_jsonable(punch))

    @app.route("/employers/<int:employer_id>/punches/recalculate", methods=["POST"], endpoint="punch_recalculate")
    def punch_recalculate(employer_id: int):
        day_s = request.args.get("date")
        if day_s:
            result = container.punch_service.recalculate_day(employer_id, parse_iso_date(day_s))
        else:
            result = container.punch_service.recalculate_history(employer_id)
        return jsonify(to_jsonable(result))
