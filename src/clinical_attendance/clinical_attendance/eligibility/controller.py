from __future__ import annotations

from datetime import date, datetime
from typing import Union

from flask import Flask, jsonify, request

from ..catalog.model import ClinicalSite
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime, to_site_local
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError


def _site_summary(site: ClinicalSite) -> dict:
    return {
        "id": site.site_id,
        "name": site.name,
        "capacity": site.capacity,
        "specialties": list(site.specialties),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/eligibility", methods=["GET"], endpoint="api_eligibility")
    def api_eligibility():
        try:
            student_id = require_non_empty(request.args.get("studentId"), "studentId")
            site_id = require_non_empty(request.args.get("siteId"), "siteId")
        except ValidationError as e:
            return jsonify({"error": {"code": "BAD_REQUEST", "message": str(e)}}), 400

        result = container.eligibility_resolver.check_eligibility(student_id, site_id)
        return jsonify({"eligible": result.eligible, "reasons": result.reasons})

    @app.route("/api/students/<student_id>/available-sites", methods=["GET"], endpoint="api_available_sites")
    def api_available_sites(student_id: str):
        raw = (request.args.get("date") or "").strip()
        try:
            on: Union[date, datetime]
            if not raw:
                on = container.now()
            elif len(raw) == 10:
                on = parse_iso_date(raw)
            else:
                on = to_site_local(parse_iso_datetime(raw), app.config["LOCAL_TIMEZONE"])
        except ValueError:
            return jsonify({"error": {"code": "BAD_REQUEST", "message": "date must be ISO-8601"}}), 400

        pairs = container.eligibility_resolver.list_eligible_site_slots(student_id, on)
        sites = container.eligibility_resolver.list_available_sites(student_id, on)
        return jsonify(
            {
                "sites": [_site_summary(s) for s in sites],
                "slots": [
                    {
                        "siteId": p.site.site_id,
                        "slotId": p.slot.slot_id,
                        "startTime": p.slot.start.strftime("%H:%M"),
                        "endTime": p.slot.end.strftime("%H:%M"),
                        "specialty": p.slot.specialty,
                    }
                    for p in pairs
                ],
            }
        )
