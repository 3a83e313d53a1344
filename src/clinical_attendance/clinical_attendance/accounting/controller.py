from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_range_bound
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError

_CSV_FIELDS = [
    "record_id",
    "work_date",
    "site_id",
    "rotation_id",
    "clock_in",
    "clock_out",
    "total_hours",
    "status",
    "notes",
]


def register(app: Flask, container: Container) -> None:
    def _build_report():
        student_id = require_non_empty(request.args.get("studentId"), "studentId")
        tz = app.config["LOCAL_TIMEZONE"]
        try:
            start = parse_range_bound(request.args.get("from"), end=False, timezone_str=tz)
            end = parse_range_bound(request.args.get("to"), end=True, timezone_str=tz)
        except ValueError:
            raise ValidationError("from/to must be ISO-8601 dates or timestamps")
        if start and end and start > end:
            raise ValidationError("from must not be after to")
        return student_id, container.accounting_service.report(student_id, start, end)

    @app.route("/api/report", methods=["GET"], endpoint="api_report")
    def api_report():
        try:
            student_id, report = _build_report()
        except ValidationError as e:
            return jsonify({"error": {"code": "BAD_REQUEST", "message": str(e)}}), 400

        body = report.to_dict()
        body["completedHours"] = container.accounting_service.completed_hours(student_id)
        return jsonify(body)

    @app.route("/api/report.csv", methods=["GET"], endpoint="api_report_csv")
    def api_report_csv():
        try:
            student_id, report = _build_report()
        except ValidationError as e:
            return jsonify({"error": {"code": "BAD_REQUEST", "message": str(e)}}), 400

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for row in container.accounting_service.csv_rows(report):
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=clinical_hours_{student_id}.csv"},
        )
