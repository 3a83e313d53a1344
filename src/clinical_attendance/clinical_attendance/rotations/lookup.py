from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..catalog.model import Rotation
from ..catalog.repository import CatalogRepository
from ..core.enums import RotationStatus

# Lower rank wins when several rotations cover the same student/site/date.
_STATUS_RANK = {
    RotationStatus.ACTIVE: 0,
    RotationStatus.SCHEDULED: 1,
}


@dataclass(frozen=True)
class AssignmentCheck:
    ok: bool
    rotation: Optional[Rotation] = None
    reason: Optional[str] = None


class RotationLookup:
    """Find the rotation binding a student to a site on a given day."""

    def __init__(self, catalog: CatalogRepository):
        self._catalog = catalog

    def find_active_rotation(self, student_id: str, site_id: str, at: datetime) -> Optional[Rotation]:
        """Rotation covering `at` (inclusive date range), or None.

        Cancelled and completed rotations never match. If several match,
        ACTIVE is preferred over SCHEDULED, then the most recently created.
        """
        day = at.date() if isinstance(at, datetime) else at
        candidates = [
            r
            for r in self._catalog.list_rotations(student_id=student_id, site_id=site_id)
            if r.status in _STATUS_RANK and r.start_date <= day <= r.end_date
        ]
        if not candidates:
            return None

        candidates.sort(key=lambda r: r.created_at, reverse=True)
        candidates.sort(key=lambda r: _STATUS_RANK[r.status])
        return candidates[0]

    def verify_assignment(self, student_id: str, site_id: str, on: date | datetime) -> AssignmentCheck:
        at = on if isinstance(on, datetime) else datetime.combine(on, datetime.min.time())
        rotation = self.find_active_rotation(student_id, site_id, at)
        if not rotation:
            return AssignmentCheck(ok=False, reason="No active rotation for date/site")
        return AssignmentCheck(ok=True, rotation=rotation)
