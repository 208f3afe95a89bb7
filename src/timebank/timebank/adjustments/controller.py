from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    ledger = container.adjustment_ledger

    @app.route("/employers/<int:employer_id>/adjustments", methods=["POST"], endpoint="adjustment_record")
    def adjustment_record(employer_id: int):
        body = request.get_json(silent=True) or {}
        adjustment = ledger.record(
            employer_id,
            reference_date=parse_iso_date(body.get("reference_date") or ""),
            minutes=body.get("minutes"),
            justification=body.get("justification") or "",
        )
        return jsonify(to_jsonable(adjustment)), 201

    @app.route("/employers/<int:employer_id>/adjustments", methods=["GET"], endpoint="adjustment_list")
    def adjustment_list(employer_id: int):
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        items = ledger.list_for(
            employer_id,
            start=parse_iso_date(start_s) if start_s else None,
            end=parse_iso_date(end_s) if end_s else None,
        )
        return jsonify(to_jsonable(list(items)))

    @app.route("/employers/<int:employer_id>/adjustments/sum", methods=["GET"], endpoint="adjustment_sum")
    def adjustment_sum(employer_id: int):
        start = parse_iso_date(request.args["start"])
        end = parse_iso_date(request.args["end"])
        return jsonify({"employer_id": employer_id, "minutes": ledger.period_sum(employer_id, start, end)})

    @app.route("/adjustments/<int:adjustment_id>", methods=["DELETE"], endpoint="adjustment_delete")
    def adjustment_delete(adjustment_id: int):
        ledger.delete(adjustment_id)
        return "", 204
