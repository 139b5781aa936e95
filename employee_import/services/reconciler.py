from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from employee_import.db.store import EmployeeStore
from employee_import.models.assignment import AssignableKind, AssignableRef, AssignmentOutcome
from employee_import.models.employee import STATUS_ACTIVE, EmployeeProfile, EmployeeRecord
from employee_import.models.row_data import ImportRow, ResolvedRow, StageFailure
from employee_import.services.name_splitter import split_full_name
from employee_import.services.schedule_versioner import ScheduleVersioner

"""Reconciliation & upsert of one accepted row.

Everything for a row happens in one store transaction: find-or-create the
identity by employee number (soft-deleted ones are restored, never
duplicated), overwrite its attributes, upsert the one-to-one profile and
version the schedule assignment. Any exception rolls the row back entirely.
"""

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def hash_credential(secret: str) -> str:
    """PBKDF2-SHA256 hash in ``algorithm$iterations$salt$hash`` form."""
    salt = secrets.token_hex(8)
    digest = hashlib.pbkdf2_hmac("sha256", secret.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${base64.b64encode(digest).decode()}"


def placeholder_suffix() -> str:
    return secrets.token_hex(3)


@dataclass(frozen=True)
class UpsertOutcome:
    employee_id: int
    employee_number: str
    created: bool
    restored: bool = False
    schedule: AssignmentOutcome | None = None


class EmployeeReconciler:
    def __init__(
        self,
        store: EmployeeStore,
        versioner: ScheduleVersioner,
        suffix_factory: Callable[[], str] = placeholder_suffix,
    ) -> None:
        self.store = store
        self.versioner = versioner
        self.suffix_factory = suffix_factory

    def employee_number_for(self, row: ImportRow) -> str:
        """The row's ``numero_empleado`` or a unique ``IMP-<row>-<suffix>`` placeholder."""
        number = row.get("numero_empleado").strip()
        if number:
            return number
        return f"IMP-{row.row_number}-{self.suffix_factory()}"

    def upsert(self, row: ImportRow, resolved: ResolvedRow, today: date) -> UpsertOutcome:
        with self.store.transaction():
            employee_number = self.employee_number_for(row)
            record = self.store.find_employee_by_number(employee_number)
            created = record is None
            restored = False
            if record is None:
                record = EmployeeRecord(
                    employee_number=employee_number,
                    status=STATUS_ACTIVE,
                    password_hash=hash_credential(secrets.token_urlsafe(32)),
                )
            elif record.trashed:
                self.store.restore_employee(record.id)  # type: ignore[arg-type]
                record.deleted_at = None
                restored = True

            parts = split_full_name(row.get("nombre_completo").strip())
            record.first_name = parts.first_name
            record.paternal_last_name = parts.paternal_last_name
            record.maternal_last_name = parts.maternal_last_name
            record.name = parts.full_name
            record.sede_id = resolved.sede_id
            record.area_id = resolved.area_id
            record.campaign_id = resolved.campaign_id
            record.position_id = resolved.position_id

            if created:
                record.id = self.store.insert_employee(record)
            else:
                self.store.update_employee(record)
            employee_id: int = record.id  # type: ignore[assignment]

            profile = self.store.get_profile(employee_id) or EmployeeProfile(user_id=employee_id)
            profile.hire_date = resolved.hire_date
            profile.employee_status_id = resolved.employee_status_id
            profile.hire_type_id = resolved.hire_type_id
            profile.manager_id = resolved.manager_id
            self.store.save_profile(profile)

            schedule_outcome = None
            if resolved.schedule_id is not None:
                result = self.versioner.assign(
                    AssignableRef(AssignableKind.USER, employee_id), resolved.schedule_id, today
                )
                schedule_outcome = result.outcome

        logger.debug(
            "row=%d employee_number=%s id=%d created=%s restored=%s",
            row.row_number, employee_number, employee_id, created, restored,
        )
        return UpsertOutcome(
            employee_id=employee_id,
            employee_number=employee_number,
            created=created,
            restored=restored,
            schedule=schedule_outcome,
        )

    def try_upsert(self, row: ImportRow, resolved: ResolvedRow, today: date) -> UpsertOutcome | StageFailure:
        """``upsert`` with any error turned into an ``exception`` stage failure.

        The transaction has been rolled back by the time the failure is returned.
        """
        try:
            return self.upsert(row, resolved, today)
        except Exception as e:
            logger.debug("row=%d transaction rolled back", row.row_number, exc_info=True)
            return StageFailure(attribute="exception", errors=[str(e) or type(e).__name__])
