from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from itertools import count
from typing import Any

from employee_import.db.store import Catalog, StoreError
from employee_import.models.assignment import AssignableKind, AssignableRef, ScheduleAssignment
from employee_import.models.employee import CatalogEntry, EmployeeProfile, EmployeeRecord

"""Dict-backed EmployeeStore.

Used by the test-suite and by offline CLI runs (``DISABLE_DB_CONNECT=1``). Transactions snapshot the
whole state on entry and restore it when the block raises.
"""


class MemoryStore:
    def __init__(self) -> None:
        self._state: dict[str, Any] = {
            "catalogs": {c: {} for c in Catalog},
            "employees": {},
            "profiles": {},
            "assignments": {},
        }
        self._ids = count(1)
        self._tx_depth = 0

    # -- seeding helpers -------------------------------------------------
    def add_catalog_entry(
        self, catalog: Catalog, name: str, code: str | None = None, is_active: bool = True
    ) -> int:
        entry = CatalogEntry(id=next(self._ids), name=name, code=code, is_active=is_active)
        self._state["catalogs"][catalog][entry.id] = entry
        return entry.id

    def add_employee(self, record: EmployeeRecord) -> int:
        return self.insert_employee(record)

    @property
    def employees(self) -> list[EmployeeRecord]:
        return list(self._state["employees"].values())

    @property
    def profiles(self) -> list[EmployeeProfile]:
        return list(self._state["profiles"].values())

    @property
    def assignments(self) -> list[ScheduleAssignment]:
        return list(self._state["assignments"].values())

    # -- transactions ----------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        snapshot = copy.deepcopy(self._state)
        self._tx_depth = 1
        try:
            yield
        except BaseException:
            self._state = snapshot
            raise
        finally:
            self._tx_depth = 0

    # -- catalogs --------------------------------------------------------
    def load_catalog(self, catalog: Catalog, include_inactive: bool = False) -> list[CatalogEntry]:
        return [e for e in self._state["catalogs"][catalog].values() if include_inactive or e.is_active]

    # -- identities ------------------------------------------------------
    def find_active_employee_id_by_name(self, name: str) -> int | None:
        wanted = name.strip().lower()
        for rec in self._state["employees"].values():
            if rec.deleted_at is None and rec.name and rec.name.strip().lower() == wanted:
                return rec.id
        return None

    def find_employee_by_number(self, employee_number: str) -> EmployeeRecord | None:
        for rec in self._state["employees"].values():
            if rec.employee_number == employee_number:
                return copy.copy(rec)
        return None

    def get_employee(self, employee_id: int) -> EmployeeRecord | None:
        rec = self._state["employees"].get(employee_id)
        return copy.copy(rec) if rec else None

    def list_employees(self, trashed: bool = False) -> list[EmployeeRecord]:
        found = [copy.copy(r) for r in self._state["employees"].values() if r.trashed == trashed]
        return sorted(found, key=lambda r: r.id)

    def insert_employee(self, record: EmployeeRecord) -> int:
        if self.find_employee_by_number(record.employee_number) is not None:
            raise StoreError(f"duplicate employee_number: {record.employee_number}")
        stored = replace(record, id=next(self._ids))
        self._state["employees"][stored.id] = stored
        return stored.id

    def update_employee(self, record: EmployeeRecord) -> None:
        if record.id not in self._state["employees"]:
            raise StoreError(f"employee not found: {record.id}")
        self._state["employees"][record.id] = copy.copy(record)

    def restore_employee(self, employee_id: int) -> None:
        self._state["employees"][employee_id].deleted_at = None

    def soft_delete_employee(self, employee_id: int) -> None:
        self._state["employees"][employee_id].deleted_at = datetime.now()

    # -- profiles --------------------------------------------------------
    def get_profile(self, user_id: int) -> EmployeeProfile | None:
        prof = self._state["profiles"].get(user_id)
        return copy.copy(prof) if prof else None

    def save_profile(self, profile: EmployeeProfile) -> int:
        if profile.id is None:
            profile = replace(profile, id=next(self._ids))
        self._state["profiles"][profile.user_id] = copy.copy(profile)
        return profile.id

    # -- schedule assignments -------------------------------------------
    def entity_exists(self, ref: AssignableRef) -> bool:
        if ref.kind is AssignableKind.USER:
            rec = self._state["employees"].get(ref.id)
            return rec is not None and rec.deleted_at is None
        catalog = Catalog.AREA if ref.kind is AssignableKind.AREA else Catalog.CAMPAIGN
        return ref.id in self._state["catalogs"][catalog]

    def _for(self, ref: AssignableRef) -> list[ScheduleAssignment]:
        found = [a for a in self._state["assignments"].values() if a.assignable == ref]
        return sorted(found, key=lambda a: (a.valid_from, a.id))

    def find_assignment_covering(self, ref: AssignableRef, on: date) -> ScheduleAssignment | None:
        for a in self._for(ref):
            if a.covers(on):
                return a
        return None

    def find_next_assignment(self, ref: AssignableRef, after: date) -> ScheduleAssignment | None:
        for a in self._for(ref):
            if a.valid_from > after:
                return a
        return None

    def close_assignment(self, assignment_id: int, valid_until: date) -> None:
        current = self._state["assignments"][assignment_id]
        self._state["assignments"][assignment_id] = replace(current, valid_until=valid_until)

    def insert_assignment(
        self, schedule_id: int, ref: AssignableRef, valid_from: date, valid_until: date | None
    ) -> ScheduleAssignment:
        assignment = ScheduleAssignment(
            id=next(self._ids),
            schedule_id=schedule_id,
            assignable=ref,
            valid_from=valid_from,
            valid_until=valid_until,
        )
        self._state["assignments"][assignment.id] = assignment
        return assignment

    def list_assignments(self, ref: AssignableRef) -> list[ScheduleAssignment]:
        return self._for(ref)
