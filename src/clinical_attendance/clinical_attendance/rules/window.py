"""Operating-hours and slot-window checks.

All instants are site-local wall-clock times; no timezone math happens here.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..catalog.model import ClinicalSite, Rotation, RotationSlot
from ..common.geo import minutes_since_midnight, time_to_minutes, weekday_index


def is_within_operating_hours(site: ClinicalSite, at: datetime) -> bool:
    window = site.operating_hours.get(weekday_index(at))
    if not window:
        return False  # closed that day
    now = minutes_since_midnight(at)
    return time_to_minutes(window.open) <= now <= time_to_minutes(window.close)


def matching_slots(site: ClinicalSite, rotation: Rotation, at: datetime) -> list[RotationSlot]:
    day = weekday_index(at)
    return [s for s in site.slots if s.weekday == day and (not s.specialty or s.specialty == rotation.specialty)]


def is_within_slot_window(site: ClinicalSite, rotation: Rotation, at: datetime) -> bool:
    return find_slot(site, rotation, at) is not None


def find_slot(site: ClinicalSite, rotation: Rotation, at: datetime) -> Optional[RotationSlot]:
    """Return the slot governing `at`, if `at` falls inside it.

    Only the first slot matching the weekday and the rotation's specialty is
    considered; later matches are ignored. Its window is widened on both ends
    by the site's grace period.
    """
    slots = matching_slots(site, rotation, at)
    if not slots:
        return None
    slot = slots[0]
    grace = int(site.rules.grace_minutes or 0)
    now = minutes_since_midnight(at)
    if time_to_minutes(slot.start) - grace <= now <= time_to_minutes(slot.end) + grace:
        return slot
    return None
