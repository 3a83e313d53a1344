"""Interfaces to the location services that sit outside the engine.

The engine never calls LocationCapture: the calling layer captures a
coordinate (with its own timeout) and passes the result in. FacilityLookup is
only used to enrich record metadata after a decision has been made.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class CapturedLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    source: str = "gps"


@dataclass(frozen=True)
class FacilityInfo:
    name: str
    address: Optional[str] = None
    confidence: Optional[float] = None


class LocationCapture(Protocol):
    def capture(self, timeout_ms: int) -> CapturedLocation:
        raise NotImplementedError


class FacilityLookup(Protocol):
    def lookup(self, latitude: float, longitude: float) -> Optional[FacilityInfo]:
        """Reverse-geocode a coordinate. Returns None on a cache/lookup miss."""

        raise NotImplementedError
