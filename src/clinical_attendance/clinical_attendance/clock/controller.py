from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..collaborators.location import CapturedLocation
from ..common.datetime_utils import parse_request_timestamp
from ..common.validators import (
    normalize_notes,
    optional_float,
    require_accuracy,
    require_latitude,
    require_longitude,
    require_non_empty,
)
from ..container import Container
from ..core.constants import MAX_FUTURE_SKEW_MINUTES
from ..core.enums import ErrorCategory
from ..core.exceptions import ValidationError
from ..core.results import ClockResult
from .model import RequestContext

_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.BUSINESS_LIMIT: 400,
    ErrorCategory.STATE_CONFLICT: 409,
    ErrorCategory.SYSTEM: 503,
}


def _bad_request(message: str):
    return jsonify({"ok": False, "error": {"code": "BAD_REQUEST", "category": "VALIDATION", "message": message}}), 400


def _parse_location(payload: dict[str, Any]) -> Optional[CapturedLocation]:
    coordinate = payload.get("coordinate")
    if coordinate is None:
        return None
    if not isinstance(coordinate, dict):
        raise ValidationError("coordinate must be an object with latitude and longitude")

    lat = optional_float(coordinate.get("latitude"), "latitude")
    lon = optional_float(coordinate.get("longitude"), "longitude")
    if lat is None or lon is None:
        raise ValidationError("coordinate requires latitude and longitude")

    return CapturedLocation(
        latitude=require_latitude(lat),
        longitude=require_longitude(lon),
        accuracy=require_accuracy(optional_float(payload.get("accuracy"), "accuracy")),
        source=str(payload.get("source") or "gps"),
    )


def _request_context() -> RequestContext:
    return RequestContext(ip_address=request.remote_addr, user_agent=request.headers.get("User-Agent"))


def register(app: Flask, container: Container) -> None:
    def _timezone() -> str:
        return app.config["LOCAL_TIMEZONE"]

    def _reject_future(at: datetime, action: str) -> None:
        if at > container.now() + timedelta(minutes=MAX_FUTURE_SKEW_MINUTES):
            raise ValidationError(f"{action} time cannot be more than {MAX_FUTURE_SKEW_MINUTES} minutes in the future")

    def _failure(result: ClockResult):
        error = result.error
        status = _STATUS_BY_CATEGORY.get(error.code.category, 400)
        return jsonify({"ok": False, "error": error.to_dict()}), status

    @app.route("/api/clock-in", methods=["POST"], endpoint="api_clock_in")
    def api_clock_in():
        payload = request.get_json(silent=True) or {}
        try:
            student_id = require_non_empty(payload.get("studentId"), "studentId")
            site_id = require_non_empty(payload.get("siteId"), "siteId")
            at = parse_request_timestamp(payload.get("timestamp"), _timezone())
            _reject_future(at, "Clock-in")
            location = _parse_location(payload)
            notes = normalize_notes(payload.get("notes"))
        except ValidationError as e:
            return _bad_request(str(e))

        result = container.clock_service.clock_in(
            student_id,
            site_id,
            at,
            location,
            notes=notes,
            context=_request_context(),
        )
        if not result.ok:
            return _failure(result)
        return jsonify({"ok": True, "recordId": result.record.record_id, "record": result.record.to_dict()}), 201

    @app.route("/api/clock-out", methods=["POST"], endpoint="api_clock_out")
    def api_clock_out():
        payload = request.get_json(silent=True) or {}
        try:
            student_id = require_non_empty(payload.get("studentId"), "studentId")
            at = parse_request_timestamp(payload.get("timestamp"), _timezone())
            _reject_future(at, "Clock-out")
            location = _parse_location(payload)
            notes = normalize_notes(payload.get("notes"))
        except ValidationError as e:
            return _bad_request(str(e))

        result = container.clock_service.clock_out(
            student_id,
            at,
            location,
            notes=notes,
            context=_request_context(),
        )
        if not result.ok:
            return _failure(result)
        return jsonify({"ok": True, "totalHours": result.record.total_hours, "record": result.record.to_dict()}), 200

    @app.route("/api/clock/status", methods=["GET"], endpoint="api_clock_status")
    def api_clock_status():
        try:
            student_id = require_non_empty(request.args.get("studentId"), "studentId")
            raw_at = request.args.get("at")
            at = parse_request_timestamp(raw_at, _timezone(), field_name="at") if raw_at else container.now()
        except ValidationError as e:
            return _bad_request(str(e))

        status = container.clock_service.current_status(student_id, at)
        return jsonify(
            {
                "clockedIn": status.clocked_in,
                "elapsedHours": status.elapsed_hours,
                "record": status.record.to_dict() if status.record else None,
            }
        )
