from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

"""Employee identity, profile and catalog entry models."""

STATUS_ACTIVE = "active"


@dataclass
class EmployeeRecord:
    """Employee identity, unique by ``employee_number`` (soft-deleted included)."""
    employee_number: str
    id: int | None = None
    first_name: str | None = None
    paternal_last_name: str | None = None
    maternal_last_name: str | None = None
    name: str | None = None
    sede_id: int | None = None
    area_id: int | None = None
    campaign_id: int | None = None
    position_id: int | None = None
    status: str = STATUS_ACTIVE
    password_hash: str | None = None
    deleted_at: datetime | None = None

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None


@dataclass
class EmployeeProfile:
    """One-to-one hire metadata for an identity."""
    user_id: int
    hire_date: date | None = None
    employee_status_id: int | None = None
    hire_type_id: int | None = None
    manager_id: int | None = None
    id: int | None = None


@dataclass(frozen=True)
class CatalogEntry:
    """Row of a reference catalog (sede, area, campaign, ...)."""
    id: int
    name: str
    code: str | None = None
    is_active: bool = True
