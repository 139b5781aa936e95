from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from enum import Enum
from typing import Protocol, runtime_checkable

from employee_import.models.assignment import AssignableRef, ScheduleAssignment
from employee_import.models.employee import CatalogEntry, EmployeeProfile, EmployeeRecord

"""Collaborator interface of the importer.

Everything the pipeline reads or writes goes through an ``EmployeeStore``.
Two implementations ship: ``PostgresStore`` (psycopg2) and ``MemoryStore``
(in-process, for dry runs and tests).

``transaction()`` is re-entrant: a nested block joins the outer transaction,
so the schedule versioner is atomic on its own and still part of the row
transaction when the importer drives it.
"""


class Catalog(Enum):
    """Reference catalogs; the value is the backing table name."""
    SEDE = "sedes"
    CAMPAIGN = "campaigns"
    AREA = "areas"
    POSITION = "positions"
    SCHEDULE = "schedules"
    EMPLOYEE_STATUS = "employee_statuses"
    HIRE_TYPE = "hire_types"

    @property
    def matches_code(self) -> bool:
        """Sedes can also be referenced by their short code."""
        return self is Catalog.SEDE


class StoreError(Exception):
    """Raised by stores for integrity problems they detect themselves."""


@runtime_checkable
class EmployeeStore(Protocol):
    def transaction(self) -> AbstractContextManager[None]: ...

    # catalogs (read-only)
    def load_catalog(self, catalog: Catalog, include_inactive: bool = False) -> list[CatalogEntry]:
        """Active entries only, unless ``include_inactive``."""
        ...

    # identities
    def find_active_employee_id_by_name(self, name: str) -> int | None: ...
    def find_employee_by_number(self, employee_number: str) -> EmployeeRecord | None:
        """Soft-deleted identities included."""
        ...
    def get_employee(self, employee_id: int) -> EmployeeRecord | None: ...
    def list_employees(self, trashed: bool = False) -> list[EmployeeRecord]:
        """Active identities by id, or only the soft-deleted ones when ``trashed``."""
        ...
    def insert_employee(self, record: EmployeeRecord) -> int: ...
    def update_employee(self, record: EmployeeRecord) -> None: ...
    def restore_employee(self, employee_id: int) -> None: ...

    # profiles
    def get_profile(self, user_id: int) -> EmployeeProfile | None: ...
    def save_profile(self, profile: EmployeeProfile) -> int: ...

    # schedule assignments
    def entity_exists(self, ref: AssignableRef) -> bool: ...
    def find_assignment_covering(self, ref: AssignableRef, on: date) -> ScheduleAssignment | None: ...
    def find_next_assignment(self, ref: AssignableRef, after: date) -> ScheduleAssignment | None:
        """Earliest assignment starting strictly after ``after``."""
        ...
    def close_assignment(self, assignment_id: int, valid_until: date) -> None: ...
    def insert_assignment(
        self, schedule_id: int, ref: AssignableRef, valid_from: date, valid_until: date | None
    ) -> ScheduleAssignment: ...
    def list_assignments(self, ref: AssignableRef) -> list[ScheduleAssignment]: ...
