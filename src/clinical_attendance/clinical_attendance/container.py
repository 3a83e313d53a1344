from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .accounting.service import TimeAccountingService
from .catalog.memory_catalog_repository import InMemoryCatalogRepository
from .catalog.mysql_catalog_repository import MySQLCatalogRepository
from .catalog.repository import CatalogRepository
from .clock.memory_clock_store import InMemoryClockRecordStore
from .clock.mysql_clock_store import MySQLClockRecordStore
from .clock.repository import ClockRecordStore
from .clock.service import ClockService
from .collaborators.location import FacilityLookup
from .common.datetime_utils import now_local
from .core.constants import (
    DEFAULT_GPS_ACCURACY_RISK_M,
    DEFAULT_LOCK_TIMEOUT_SECONDS,
)
from .core.exceptions import ValidationError
from .database.connection import DatabaseConnection, DBConfig
from .eligibility.service import EligibilityResolver
from .rotations.lookup import RotationLookup

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class Container:
    catalog: CatalogRepository
    clock_store: ClockRecordStore

    rotation_lookup: RotationLookup
    eligibility_resolver: EligibilityResolver
    clock_service: ClockService
    accounting_service: TimeAccountingService

    now: Callable[[], datetime] = now_local


def build_container(
    *,
    store_backend: str = "memory",
    db_config: Optional[dict] = None,
    catalog_seed_path: Optional[str] = None,
    catalog: Optional[CatalogRepository] = None,
    clock_store: Optional[ClockRecordStore] = None,
    facility_lookup: Optional[FacilityLookup] = None,
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    gps_accuracy_risk_m: float = DEFAULT_GPS_ACCURACY_RISK_M,
    now: Callable[[], datetime] = now_local,
) -> Container:
    """Wire repositories and services.

    `catalog` / `clock_store` override the backend choice (tests pass in-memory fakes).
    """
    backend = (store_backend or "memory").lower()

    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config or {}))
        catalog = catalog or MySQLCatalogRepository(conn)
        clock_store = clock_store or MySQLClockRecordStore(conn)
    elif backend == "memory":
        if catalog is None:
            if catalog_seed_path:
                seed = Path(catalog_seed_path)
                if not seed.is_absolute():
                    seed = PROJECT_ROOT / seed
                catalog = InMemoryCatalogRepository.from_json_file(seed)
            else:
                catalog = InMemoryCatalogRepository()
        clock_store = clock_store or InMemoryClockRecordStore(lock_timeout=lock_timeout_seconds)
    else:
        raise ValidationError(f"Unknown STORE_BACKEND: {store_backend}")

    rotation_lookup = RotationLookup(catalog)
    eligibility_resolver = EligibilityResolver(catalog)
    clock_service = ClockService(
        catalog,
        clock_store,
        rotation_lookup=rotation_lookup,
        facility_lookup=facility_lookup,
        gps_accuracy_risk_m=gps_accuracy_risk_m,
    )
    accounting_service = TimeAccountingService(clock_store)

    return Container(
        catalog=catalog,
        clock_store=clock_store,
        rotation_lookup=rotation_lookup,
        eligibility_resolver=eligibility_resolver,
        clock_service=clock_service,
        accounting_service=accounting_service,
        now=now,
    )
