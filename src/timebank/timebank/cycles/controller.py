from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    cycles = container.cycle_manager

    @app.route("/employers/<int:employer_id>/cycle", methods=["GET"], endpoint="cycle_status")
    def cycle_status(employer_id: int):
        return jsonify(to_jsonable(cycles.pending_cycle_status(employer_id)))

    @app.route("/employers/<int:employer_id>/cycle/at", methods=["GET"], endpoint="cycle_for_date")
    def cycle_for_date(employer_id: int):
        cycle = cycles.cycle_for_date(employer_id, parse_iso_date(request.args["date"]))
        if cycle is None:
            return jsonify({"error": "no cycle contains that date"}), 404
        return jsonify(to_jsonable(cycle))

    @app.route("/employers/<int:employer_id>/cycle/advance", methods=["POST"], endpoint="cycle_advance")
    def cycle_advance(employer_id: int):
        return jsonify(to_jsonable(cycles.detect_and_advance(employer_id)))

    @app.route("/employers/<int:employer_id>/cycle/close", methods=["POST"], endpoint="cycle_close")
    def cycle_close(employer_id: int):
        body = request.get_json(silent=True) or {}
        return jsonify(to_jsonable(cycles.close_current_cycle(employer_id, note=body.get("note")))), 201

    @app.route("/employers/<int:employer_id>/cycle/bootstrap", methods=["POST"], endpoint="cycle_bootstrap")
    def cycle_bootstrap(employer_id: int):
        force = request.args.get("force", "0") in {"1", "true", "yes"}
        return jsonify(to_jsonable(cycles.bootstrap_retroactive_cycles(employer_id, force=force)))

    @app.route("/employers/<int:employer_id>/cycle/reverse", methods=["POST"], endpoint="cycle_reverse")
    def cycle_reverse(employer_id: int):
        body = request.get_json(silent=True) or {}
        start = parse_iso_date(body.get("correct_cycle_start") or "")
        return jsonify(to_jsonable(cycles.reverse_closures(employer_id, correct_cycle_start=start)))
