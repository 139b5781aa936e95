from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any

from employee_import.db.store import Catalog, StoreError
from employee_import.models.assignment import AssignableKind, AssignableRef, ScheduleAssignment
from employee_import.models.employee import CatalogEntry, EmployeeProfile, EmployeeRecord

"""EmployeeStore backed by a psycopg2 cursor.

The connection is expected in autocommit mode; transaction boundaries are the
explicit BEGIN / COMMIT / ROLLBACK issued by ``transaction()``, one per row.

Identity lookups by employee number take a transaction-scoped advisory lock on
the number before reading the row ``FOR UPDATE``, so two import runs touching
the same employee serialize instead of racing; the unique constraint on
``users.employee_number`` is the last line.
"""

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_USER_COLUMNS = (
    "id, employee_number, first_name, paternal_last_name, maternal_last_name, name, "
    "sede_id, area_id, campaign_id, position_id, status, password, deleted_at"
)
_ASSIGNMENT_COLUMNS = "id, schedule_id, scheduleable_type, scheduleable_id, valid_from, valid_until"
_ENTITY_TABLES = {
    AssignableKind.USER: "users",
    AssignableKind.AREA: "areas",
    AssignableKind.CAMPAIGN: "campaigns",
}


def _employee_from_row(row: tuple[Any, ...]) -> EmployeeRecord:
    return EmployeeRecord(
        id=row[0],
        employee_number=row[1],
        first_name=row[2],
        paternal_last_name=row[3],
        maternal_last_name=row[4],
        name=row[5],
        sede_id=row[6],
        area_id=row[7],
        campaign_id=row[8],
        position_id=row[9],
        status=row[10],
        password_hash=row[11],
        deleted_at=row[12],
    )


def _assignment_from_row(row: tuple[Any, ...]) -> ScheduleAssignment:
    return ScheduleAssignment(
        id=row[0],
        schedule_id=row[1],
        assignable=AssignableRef(kind=AssignableKind(row[2]), id=row[3]),
        valid_from=row[4],
        valid_until=row[5],
    )


class PostgresStore:
    def __init__(self, cursor: Any, dry_run: bool = False) -> None:
        self.cursor = cursor
        self.dry_run = dry_run
        self._tx_depth = 0

    def create_schema(self) -> None:
        """Create the tables this store reads and writes (idempotent DDL)."""
        self.cursor.execute(SCHEMA_PATH.read_text(encoding="utf-8"))

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        self.cursor.execute("BEGIN")
        self._tx_depth = 1
        try:
            yield
        except BaseException:
            self.cursor.execute("ROLLBACK")
            raise
        else:
            self.cursor.execute("ROLLBACK" if self.dry_run else "COMMIT")
        finally:
            self._tx_depth = 0

    def _one(self, sql: str, params: tuple[Any, ...]) -> tuple[Any, ...] | None:
        self.cursor.execute(sql, params)
        return self.cursor.fetchone()

    # -- catalogs --------------------------------------------------------
    def load_catalog(self, catalog: Catalog, include_inactive: bool = False) -> list[CatalogEntry]:
        code_col = "code" if catalog.matches_code else "NULL"
        where = "" if include_inactive else " WHERE is_active = TRUE"
        # table name comes from the Catalog enum, never from input
        self.cursor.execute(f"SELECT id, name, {code_col}, is_active FROM {catalog.value}{where} ORDER BY id")
        return [CatalogEntry(id=r[0], name=r[1], code=r[2], is_active=r[3]) for r in self.cursor.fetchall()]

    # -- identities ------------------------------------------------------
    def find_active_employee_id_by_name(self, name: str) -> int | None:
        row = self._one(
            "SELECT id FROM users WHERE deleted_at IS NULL AND name IS NOT NULL "
            "AND LOWER(TRIM(name)) = LOWER(%s) ORDER BY id LIMIT 1",
            (name.strip(),),
        )
        return row[0] if row else None

    def find_employee_by_number(self, employee_number: str) -> EmployeeRecord | None:
        self.cursor.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (employee_number,))
        row = self._one(
            f"SELECT {_USER_COLUMNS} FROM users WHERE employee_number = %s FOR UPDATE",
            (employee_number,),
        )
        return _employee_from_row(row) if row else None

    def get_employee(self, employee_id: int) -> EmployeeRecord | None:
        row = self._one(f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s", (employee_id,))
        return _employee_from_row(row) if row else None

    def list_employees(self, trashed: bool = False) -> list[EmployeeRecord]:
        deleted = "IS NOT NULL" if trashed else "IS NULL"
        self.cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE deleted_at {deleted} ORDER BY id")
        return [_employee_from_row(r) for r in self.cursor.fetchall()]

    def insert_employee(self, record: EmployeeRecord) -> int:
        row = self._one(
            "INSERT INTO users (employee_number, first_name, paternal_last_name, maternal_last_name, "
            "name, sede_id, area_id, campaign_id, position_id, status, password, created_at, updated_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW()) RETURNING id",
            (
                record.employee_number,
                record.first_name,
                record.paternal_last_name,
                record.maternal_last_name,
                record.name,
                record.sede_id,
                record.area_id,
                record.campaign_id,
                record.position_id,
                record.status,
                record.password_hash,
            ),
        )
        if row is None:
            raise StoreError("INSERT ... RETURNING produced no row")
        return row[0]

    def update_employee(self, record: EmployeeRecord) -> None:
        self.cursor.execute(
            "UPDATE users SET first_name = %s, paternal_last_name = %s, maternal_last_name = %s, "
            "name = %s, sede_id = %s, area_id = %s, campaign_id = %s, position_id = %s, "
            "updated_at = NOW() WHERE id = %s",
            (
                record.first_name,
                record.paternal_last_name,
                record.maternal_last_name,
                record.name,
                record.sede_id,
                record.area_id,
                record.campaign_id,
                record.position_id,
                record.id,
            ),
        )

    def restore_employee(self, employee_id: int) -> None:
        self.cursor.execute(
            "UPDATE users SET deleted_at = NULL, updated_at = NOW() WHERE id = %s", (employee_id,)
        )

    # -- profiles --------------------------------------------------------
    def get_profile(self, user_id: int) -> EmployeeProfile | None:
        row = self._one(
            "SELECT id, user_id, hire_date, employee_status_id, hire_type_id, manager_id "
            "FROM employee_profiles WHERE user_id = %s",
            (user_id,),
        )
        if row is None:
            return None
        return EmployeeProfile(
            id=row[0],
            user_id=row[1],
            hire_date=row[2],
            employee_status_id=row[3],
            hire_type_id=row[4],
            manager_id=row[5],
        )

    def save_profile(self, profile: EmployeeProfile) -> int:
        values = (
            profile.hire_date,
            profile.employee_status_id,
            profile.hire_type_id,
            profile.manager_id,
        )
        if profile.id is not None:
            self.cursor.execute(
                "UPDATE employee_profiles SET hire_date = %s, employee_status_id = %s, "
                "hire_type_id = %s, manager_id = %s, updated_at = NOW() WHERE id = %s",
                (*values, profile.id),
            )
            return profile.id
        row = self._one(
            "INSERT INTO employee_profiles (hire_date, employee_status_id, hire_type_id, manager_id, "
            "user_id, created_at, updated_at) VALUES (%s, %s, %s, %s, %s, NOW(), NOW()) RETURNING id",
            (*values, profile.user_id),
        )
        if row is None:
            raise StoreError("INSERT ... RETURNING produced no row")
        return row[0]

    # -- schedule assignments -------------------------------------------
    def entity_exists(self, ref: AssignableRef) -> bool:
        table = _ENTITY_TABLES[ref.kind]
        extra = " AND deleted_at IS NULL" if ref.kind is AssignableKind.USER else ""
        return self._one(f"SELECT 1 FROM {table} WHERE id = %s{extra}", (ref.id,)) is not None

    def find_assignment_covering(self, ref: AssignableRef, on: date) -> ScheduleAssignment | None:
        row = self._one(
            f"SELECT {_ASSIGNMENT_COLUMNS} FROM schedule_assignments "
            "WHERE scheduleable_type = %s AND scheduleable_id = %s AND valid_from <= %s "
            "AND (valid_until IS NULL OR valid_until >= %s) ORDER BY valid_from, id LIMIT 1 FOR UPDATE",
            (ref.kind.value, ref.id, on, on),
        )
        return _assignment_from_row(row) if row else None

    def find_next_assignment(self, ref: AssignableRef, after: date) -> ScheduleAssignment | None:
        row = self._one(
            f"SELECT {_ASSIGNMENT_COLUMNS} FROM schedule_assignments "
            "WHERE scheduleable_type = %s AND scheduleable_id = %s AND valid_from > %s "
            "ORDER BY valid_from, id LIMIT 1",
            (ref.kind.value, ref.id, after),
        )
        return _assignment_from_row(row) if row else None

    def close_assignment(self, assignment_id: int, valid_until: date) -> None:
        self.cursor.execute(
            "UPDATE schedule_assignments SET valid_until = %s, updated_at = NOW() WHERE id = %s",
            (valid_until, assignment_id),
        )

    def insert_assignment(
        self, schedule_id: int, ref: AssignableRef, valid_from: date, valid_until: date | None
    ) -> ScheduleAssignment:
        row = self._one(
            "INSERT INTO schedule_assignments (schedule_id, scheduleable_type, scheduleable_id, "
            "valid_from, valid_until, created_at, updated_at) VALUES (%s, %s, %s, %s, %s, NOW(), NOW()) "
            f"RETURNING {_ASSIGNMENT_COLUMNS}",
            (schedule_id, ref.kind.value, ref.id, valid_from, valid_until),
        )
        if row is None:
            raise StoreError("INSERT ... RETURNING produced no row")
        return _assignment_from_row(row)

    def list_assignments(self, ref: AssignableRef) -> list[ScheduleAssignment]:
        self.cursor.execute(
            f"SELECT {_ASSIGNMENT_COLUMNS} FROM schedule_assignments "
            "WHERE scheduleable_type = %s AND scheduleable_id = %s ORDER BY valid_from, id",
            (ref.kind.value, ref.id),
        )
        return [_assignment_from_row(r) for r in self.cursor.fetchall()]
