"""Example: drive the engine through the service layer (no Flask).

Uses the in-memory backend and the demo catalog in database/catalog_seed.json.
"""

from datetime import datetime

from src.clinical_attendance.clinical_attendance.collaborators.location import CapturedLocation
from src.clinical_attendance.clinical_attendance.container import build_container


def main():
    container = build_container(store_backend="memory", catalog_seed_path="database/catalog_seed.json")
    service = container.clock_service

    # Monday 2025-01-06, inside the General Radiology slot at City Hospital
    at_hospital = CapturedLocation(latitude=40.7130, longitude=-74.0062, accuracy=12.0)
    result = service.clock_in("user_s01", "site_city_hospital", datetime(2025, 1, 6, 7, 5), at_hospital)
    print("clock-in:", result.ok, result.error.to_dict() if result.error else result.record.record_id)

    result = service.clock_out("user_s01", datetime(2025, 1, 6, 15, 35), at_hospital)
    print("clock-out:", result.ok, result.error.to_dict() if result.error else result.record.total_hours)

    report = container.accounting_service.report("user_s01")
    print("report:", report.total_hours, "hours over", len(report.records), "record(s)")


if __name__ == "__main__":
    main()
