from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClinicalSite, Program, Rotation, StudentProfile


class CatalogRepository(Protocol):
    """Read-only access to programs, students, sites and rotations.

    These entities are mutated by admin workflows outside the engine.
    """

    def get_program(self, program_id: str) -> Optional[Program]:
        raise NotImplementedError

    def get_student(self, student_id: str) -> Optional[StudentProfile]:
        raise NotImplementedError

    def get_site(self, site_id: str) -> Optional[ClinicalSite]:
        raise NotImplementedError

    def list_sites(self) -> Sequence[ClinicalSite]:
        raise NotImplementedError

    def get_rotation(self, rotation_id: str) -> Optional[Rotation]:
        raise NotImplementedError

    def list_rotations(
        self,
        *,
        student_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[Rotation]:
        raise NotImplementedError
