from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union

from ..catalog.model import ClinicalSite, RotationSlot
from ..catalog.repository import CatalogRepository
from ..common.geo import weekday_index
from ..core.enums import RotationStatus
from ..rules.window import is_within_operating_hours


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SiteSlot:
    site: ClinicalSite
    slot: RotationSlot


class EligibilityResolver:
    """Use case: can this student be placed at this site?

    Pure reads; safe to call any number of times.
    """

    def __init__(self, catalog: CatalogRepository):
        self._catalog = catalog

    def check_eligibility(self, student_id: str, site_id: str) -> EligibilityResult:
        student = self._catalog.get_student(student_id)
        site = self._catalog.get_site(site_id)
        if not student or not site:
            return EligibilityResult(eligible=False, reasons=["Student or site not found"])

        reasons: list[str] = []
        program = self._catalog.get_program(student.program_id)
        accepted = set(site.requirements)
        for req in program.requirements if program else ():
            if req not in accepted:
                reasons.append(f"Site missing program requirement: {req}")

        placed = [r for r in self._catalog.list_rotations(site_id=site.site_id) if r.status != RotationStatus.CANCELLED]
        if len(placed) >= site.capacity:
            reasons.append("Site capacity reached")

        return EligibilityResult(eligible=not reasons, reasons=reasons)

    def list_available_sites(self, student_id: str, on: Union[date, datetime]) -> list[ClinicalSite]:
        """Sites the student is eligible for that are open at `on`.

        A plain date asks for the whole day: any site with operating hours on
        that weekday qualifies.
        """
        return [
            site
            for site in self._catalog.list_sites()
            if self.check_eligibility(student_id, site.site_id).eligible and _is_open(site, on)
        ]

    def list_eligible_site_slots(self, student_id: str, on: Union[date, datetime]) -> list[SiteSlot]:
        day = weekday_index(on)
        return [
            SiteSlot(site=site, slot=slot)
            for site in self.list_available_sites(student_id, on)
            for slot in site.slots
            if slot.weekday == day
        ]


def _is_open(site: ClinicalSite, on: Union[date, datetime]) -> bool:
    if isinstance(on, datetime):
        return is_within_operating_hours(site, on)
    return bool(site.operating_hours.get(weekday_index(on)))
