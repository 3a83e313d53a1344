"""
Geofence validation.
Compares a reported coordinate with the site's registered location and radius.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..catalog.model import ClinicalSite
from ..common.geo import haversine_meters


@dataclass(frozen=True)
class GeofenceResult:
    ok: bool
    distance_meters: Optional[float] = None


def validate_geofence(
    site: ClinicalSite,
    latitude: Optional[float],
    longitude: Optional[float],
    *,
    required: Optional[bool] = None,
) -> GeofenceResult:
    """
    Check a coordinate against the site's geofence.

    Args:
        site: Site whose rules and registered location apply
        latitude: Reported latitude (None when no coordinate was captured)
        longitude: Reported longitude
        required: Overrides `site.rules.geofence_required` (used to measure
            the distance for metadata even when the site does not enforce it)

    Returns:
        GeofenceResult. When geofencing is not required the result is ok with
        no distance. Strict sites use the same comparison; their strictness
        lives in the configured radius.
    """
    if required is None:
        required = site.rules.geofence_required
    if not required:
        return GeofenceResult(ok=True)

    if site.location is None or latitude is None or longitude is None:
        return GeofenceResult(ok=False)

    distance = haversine_meters(site.location.latitude, site.location.longitude, latitude, longitude)
    return GeofenceResult(ok=distance <= site.location.radius_meters, distance_meters=distance)


def is_accuracy_risk(accuracy_m: Optional[float], threshold_m: float) -> Optional[bool]:
    """True if GPS accuracy is poor. None when no accuracy was reported."""
    if accuracy_m is None:
        return None
    return accuracy_m > threshold_m
