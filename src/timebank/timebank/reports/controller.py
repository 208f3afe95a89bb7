from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_jsonable
from ..container import Container
from ..periods.calculator import period_for
from .service import export_xlsx

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/periods/rh", methods=["GET"], endpoint="rh_period")
    def rh_period():
        period = period_for(parse_iso_date(request.args["date"]), int(request.args.get("start_day", "1")))
        return jsonify(to_jsonable(period))

    @app.route("/employers/<int:employer_id>/report", methods=["GET"], endpoint="period_report")
    def period_report(employer_id: int):
        if request.args.get("date"):
            report = reports.build_rh_report(employer_id, reference_date=parse_iso_date(request.args["date"]))
        else:
            report = reports.build_period_report(
                employer_id,
                start=parse_iso_date(request.args["start"]),
                end=parse_iso_date(request.args["end"]),
            )

        if request.args.get("format") == "xlsx":
            output = export_xlsx(report)
            name = f"timebank_{employer_id}_{report.period.start.isoformat()}_{report.period.end.isoformat()}.xlsx"
            return send_file(output, download_name=name, as_attachment=True, mimetype=XLSX_MIMETYPE)
        return jsonify(to_jsonable(report))
