from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/employers/<int:employer_id>/summary", methods=["GET"], endpoint="day_summary")
    def day_summary(employer_id: int):
        day = parse_iso_date(request.args["date"])
        return jsonify(to_jsonable(container.day_summary_service.summary_for(employer_id, day)))

    @app.route("/employers/<int:employer_id>/balance", methods=["GET"], endpoint="period_balance")
    def period_balance(employer_id: int):
        start = parse_iso_date(request.args["start"])
        end = parse_iso_date(request.args["end"])
        include = request.args.get("adjustments", "1") != "0"
        balance = container.balance_service.period_balance(employer_id, start, end, include_adjustments=include)
        payload = to_jsonable(balance)
        payload["balance_minutes"] = balance.balance_minutes
        payload["balance"] = balance.balance_label
        return jsonify(payload)
