from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from employee_import.db.store import EmployeeStore
from employee_import.models.assignment import (
    AssignableKind,
    AssignableRef,
    AssignmentOutcome,
    ScheduleAssignment,
)
from employee_import.models.employee import EmployeeRecord

"""Schedule assignment versioning.

Each ``(kind, id)`` entity owns a date-ranged history of schedule assignments.
At most one of them is active on any given date.

Boundary convention (shared by the importer and manual assignment): windows
are inclusive on both ends and a superseded assignment is closed on the day
*before* its successor starts, so adjacent windows never share a day.
"""

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class AssignmentResult:
    outcome: AssignmentOutcome
    assignment: ScheduleAssignment  # active one on the effective date
    closed: ScheduleAssignment | None = None  # superseded assignment, before closing


class ScheduleVersioner:
    def __init__(self, store: EmployeeStore) -> None:
        self.store = store

    def assign(
        self,
        ref: AssignableRef,
        schedule_id: int,
        effective_date: date,
        valid_until: date | None = None,
    ) -> AssignmentResult:
        """Make ``schedule_id`` the active schedule of ``ref`` from ``effective_date``.

        1. same schedule already covers the date -> no-op
        2. another schedule covers it -> close that one the day before
        3. insert the new assignment, open-ended unless ``valid_until`` is
           given or a later assignment exists (then it ends the day before it)

        Raises:
            ValueError: ``valid_until`` earlier than ``effective_date``
        """
        if valid_until is not None and valid_until < effective_date:
            raise ValueError("valid_until must be on or after the effective date")

        with self.store.transaction():
            current = self.store.find_assignment_covering(ref, effective_date)
            if current is not None and current.schedule_id == schedule_id:
                return AssignmentResult(outcome=AssignmentOutcome.UNCHANGED, assignment=current)

            if current is not None:
                self.store.close_assignment(current.id, effective_date - ONE_DAY)

            end = valid_until
            following = self.store.find_next_assignment(ref, effective_date)
            if following is not None:
                cap = following.valid_from - ONE_DAY
                end = cap if end is None else min(end, cap)

            created = self.store.insert_assignment(schedule_id, ref, effective_date, end)

        outcome = AssignmentOutcome.CREATED if current is None else AssignmentOutcome.REPLACED
        logger.debug(
            "assignable=%s schedule=%s from=%s until=%s outcome=%s",
            ref, schedule_id, effective_date, end, outcome.value,
        )
        return AssignmentResult(outcome=outcome, assignment=created, closed=current)

    def active_assignment(self, ref: AssignableRef, on: date) -> ScheduleAssignment | None:
        return self.store.find_assignment_covering(ref, on)

    def history(self, ref: AssignableRef) -> list[ScheduleAssignment]:
        return self.store.list_assignments(ref)

    def effective_schedule_id(
        self, employee: EmployeeRecord, on: date, default_schedule_id: int | None = None
    ) -> int | None:
        """Schedule that applies to an employee on ``on``.

        Precedence: the employee's own assignment, then their area's, then
        their campaign's, then ``default_schedule_id``.
        """
        if employee.id is None:
            raise ValueError("employee must be persisted")
        candidates = [AssignableRef(AssignableKind.USER, employee.id)]
        if employee.area_id:
            candidates.append(AssignableRef(AssignableKind.AREA, employee.area_id))
        if employee.campaign_id:
            candidates.append(AssignableRef(AssignableKind.CAMPAIGN, employee.campaign_id))
        for ref in candidates:
            active = self.active_assignment(ref, on)
            if active is not None:
                return active.schedule_id
        return default_schedule_id
