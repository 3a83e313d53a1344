from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from ..catalog.model import ClinicalSite
from ..catalog.repository import CatalogRepository
from ..collaborators.location import CapturedLocation, FacilityLookup
from ..common.geo import round_half_up
from ..core.constants import DEFAULT_GPS_ACCURACY_RISK_M
from ..core.enums import ClockErrorCode, RecordStatus
from ..core.exceptions import ClockRejected, SystemFault
from ..core.results import ClockResult
from ..rotations.lookup import RotationLookup
from ..rules.geofence import is_accuracy_risk, validate_geofence
from ..rules.window import is_within_operating_hours, is_within_slot_window
from .model import ClockMetadata, ClockRecord, ClockStatus, LocationSnapshot, RequestContext
from .repository import ClockRecordStore

logger = structlog.get_logger(__name__)


def _new_record_id() -> str:
    return uuid.uuid4().hex


class ClockService:
    """Clock-in/clock-out state machine: NO_OPEN_RECORD -> OPEN -> CLOSED.

    Every check runs before any write. Rejections and store faults come back
    as ClockResult failures; nothing is raised to the caller.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        store: ClockRecordStore,
        *,
        rotation_lookup: RotationLookup | None = None,
        facility_lookup: FacilityLookup | None = None,
        gps_accuracy_risk_m: float = DEFAULT_GPS_ACCURACY_RISK_M,
        id_factory: Callable[[], str] = _new_record_id,
    ):
        self._catalog = catalog
        self._store = store
        self._rotations = rotation_lookup or RotationLookup(catalog)
        self._facility_lookup = facility_lookup
        self._gps_accuracy_risk_m = float(gps_accuracy_risk_m)
        self._id_factory = id_factory

    # ---- clock-in ----

    def clock_in(
        self,
        student_id: str,
        site_id: str,
        at: datetime,
        location: CapturedLocation | None = None,
        *,
        notes: str | None = None,
        context: RequestContext | None = None,
    ) -> ClockResult:
        log = logger.bind(student_id=student_id, site_id=site_id, at=at.isoformat())
        try:
            record = self._admit_clock_in(student_id, site_id, at, location, notes=notes, context=context)
        except ClockRejected as exc:
            log.info("clock_in.rejected", code=exc.code.value, reason=exc.message)
            return ClockResult.failure(exc.code, exc.message, exc.context)
        except SystemFault as exc:
            log.error("clock_in.system_fault", code=exc.code.value, error=str(exc))
            return ClockResult.failure(exc.code, str(exc))

        log.info("clock_in.accepted", record_id=record.record_id, rotation_id=record.rotation_id)
        return ClockResult.success(self._enrich_with_facility(record, location))

    def _admit_clock_in(
        self,
        student_id: str,
        site_id: str,
        at: datetime,
        location: CapturedLocation | None,
        *,
        notes: str | None,
        context: RequestContext | None,
    ) -> ClockRecord:
        site = self._catalog.get_site(site_id)
        if not site or not is_within_operating_hours(site, at):
            raise ClockRejected(
                ClockErrorCode.OUTSIDE_HOURS,
                "Site is closed at the requested time",
                {"site_id": site_id, "known_site": site is not None},
            )

        rotation = self._rotations.find_active_rotation(student_id, site_id, at)
        if not rotation:
            raise ClockRejected(ClockErrorCode.NO_ROTATION, "No active rotation for date/site")

        if not is_within_slot_window(site, rotation, at):
            raise ClockRejected(
                ClockErrorCode.OUTSIDE_SLOT,
                "No rotation slot covers the requested time",
                {"rotation_id": rotation.rotation_id, "grace_minutes": site.rules.grace_minutes},
            )

        snapshot = self._snapshot(site, location)
        if site.rules.geofence_required and not snapshot.within_geofence:
            raise ClockRejected(ClockErrorCode.GEOFENCE_FAIL, "Location is outside the site geofence", self._geofence_context(site, snapshot))

        record = ClockRecord(
            record_id=self._id_factory(),
            student_id=student_id,
            rotation_id=rotation.rotation_id,
            site_id=site.site_id,
            work_date=at.date(),
            clock_in=at,
            notes=notes,
            status=RecordStatus.OPEN,
            metadata=ClockMetadata(
                clock_in=snapshot,
                ip_address=context.ip_address if context else None,
                user_agent=context.user_agent if context else None,
            ),
        )

        # duplicate check and insert are one step in the store
        if not self._store.insert_if_absent(record):
            raise ClockRejected(
                ClockErrorCode.DUPLICATE_OPEN,
                "Student already has an open record for this date",
                {"date": at.date().isoformat()},
            )
        return record

    # ---- clock-out ----

    def clock_out(
        self,
        student_id: str,
        at: datetime,
        location: CapturedLocation | None = None,
        *,
        notes: str | None = None,
        context: RequestContext | None = None,
    ) -> ClockResult:
        log = logger.bind(student_id=student_id, at=at.isoformat())
        try:
            record = self._admit_clock_out(student_id, at, location, notes=notes, context=context)
        except ClockRejected as exc:
            log.info("clock_out.rejected", code=exc.code.value, reason=exc.message)
            return ClockResult.failure(exc.code, exc.message, exc.context)
        except SystemFault as exc:
            log.error("clock_out.system_fault", code=exc.code.value, error=str(exc))
            return ClockResult.failure(exc.code, str(exc))

        log.info("clock_out.accepted", record_id=record.record_id, total_hours=record.total_hours)
        return ClockResult.success(record)

    def _admit_clock_out(
        self,
        student_id: str,
        at: datetime,
        location: CapturedLocation | None,
        *,
        notes: str | None,
        context: RequestContext | None,
    ) -> ClockRecord:
        record = self._find_open(student_id, at)
        if not record:
            raise ClockRejected(ClockErrorCode.NO_OPEN_RECORD, "No open record to clock out of")

        site = self._catalog.get_site(record.site_id)
        rotation = self._catalog.get_rotation(record.rotation_id)
        if not site or not rotation or record.clock_in is None:
            raise ClockRejected(
                ClockErrorCode.INVALID_STATE,
                "Open record refers to a missing site or rotation",
                {"record_id": record.record_id},
            )

        duration = (at - record.clock_in).total_seconds() / 3600
        total_hours = round_half_up(duration)
        # a sub-minute shift would round to 0.00 hours
        if duration <= 0 or total_hours <= 0:
            raise ClockRejected(
                ClockErrorCode.INVALID_TIME_ORDER,
                "Clock-out must be after clock-in",
                {"clock_in": record.clock_in.isoformat()},
            )

        if not site.rules.allow_overnight and at.date() != record.clock_in.date():
            raise ClockRejected(ClockErrorCode.OVERNIGHT_NOT_ALLOWED, "Site does not allow overnight shifts")

        if duration > site.rules.max_shift_hours:
            raise ClockRejected(
                ClockErrorCode.SHIFT_TOO_LONG,
                f"Shift exceeds {site.rules.max_shift_hours:g} hours",
                {"hours": round_half_up(duration), "max_shift_hours": site.rules.max_shift_hours},
            )

        snapshot = self._snapshot(site, location)
        if site.rules.geofence_required_at_clock_out and not snapshot.within_geofence:
            raise ClockRejected(ClockErrorCode.GEOFENCE_FAIL, "Location is outside the site geofence", self._geofence_context(site, snapshot))

        metadata = replace(record.metadata, clock_out=snapshot)
        if context:
            metadata = replace(
                metadata,
                ip_address=metadata.ip_address or context.ip_address,
                user_agent=metadata.user_agent or context.user_agent,
            )

        closed = replace(
            record,
            clock_out=at,
            total_hours=total_hours,
            notes=notes if notes is not None else record.notes,
            status=RecordStatus.CLOSED,
            metadata=metadata,
        )
        if not self._store.update(closed, expected_status=RecordStatus.OPEN):
            # another request closed it first
            raise ClockRejected(ClockErrorCode.NO_OPEN_RECORD, "No open record to clock out of", {"record_id": record.record_id})
        return closed

    # ---- queries ----

    def current_status(self, student_id: str, on: datetime) -> ClockStatus:
        record = self._find_open(student_id, on)
        if not record:
            return ClockStatus(clocked_in=False)

        elapsed = None
        if record.clock_in is not None:
            elapsed = round_half_up(max((on - record.clock_in).total_seconds(), 0) / 3600)
        return ClockStatus(clocked_in=True, record=record, elapsed_hours=elapsed)

    # ---- helpers ----

    def _find_open(self, student_id: str, at: datetime) -> Optional[ClockRecord]:
        """Open record for `at`'s date, else the previous date's (overnight shift)."""
        record = self._store.find_open_record(student_id, at.date())
        if record:
            return record
        return self._store.find_open_record(student_id, at.date() - timedelta(days=1))

    def _snapshot(self, site: ClinicalSite, location: CapturedLocation | None) -> LocationSnapshot:
        if location is None:
            return LocationSnapshot(within_geofence=False)

        measured = validate_geofence(site, location.latitude, location.longitude, required=True)
        return LocationSnapshot(
            latitude=location.latitude,
            longitude=location.longitude,
            accuracy=location.accuracy,
            source=location.source,
            within_geofence=measured.ok,
            distance_meters=round_half_up(measured.distance_meters) if measured.distance_meters is not None else None,
            accuracy_risk=is_accuracy_risk(location.accuracy, self._gps_accuracy_risk_m),
        )

    @staticmethod
    def _geofence_context(site: ClinicalSite, snapshot: LocationSnapshot) -> dict:
        return {
            "distance_meters": snapshot.distance_meters,
            "radius_meters": site.location.radius_meters if site.location else None,
            "coordinate_supplied": snapshot.latitude is not None,
        }

    def _enrich_with_facility(self, record: ClockRecord, location: CapturedLocation | None) -> ClockRecord:
        if self._facility_lookup is None or location is None:
            return record

        try:
            facility = self._facility_lookup.lookup(location.latitude, location.longitude)
        except Exception as exc:  # external collaborator; the clock-in already stands
            logger.warning("clock_in.facility_lookup_failed", record_id=record.record_id, error=str(exc))
            return record
        if not facility:
            return record

        enriched = replace(record, metadata=replace(record.metadata, facility=facility))
        try:
            if self._store.update(enriched, expected_status=RecordStatus.OPEN):
                return enriched
        except SystemFault as exc:
            logger.warning("clock_in.facility_enrichment_skipped", record_id=record.record_id, error=str(exc))
        return record
