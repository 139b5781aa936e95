from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

"""Schedule assignment models.

An assignment attaches a schedule to a user, an area or a campaign for a date
window ``[valid_from, valid_until]`` (``valid_until=None`` is open-ended).
"""


class AssignableKind(Enum):
    """Entity types a schedule can be attached to."""
    USER = "user"
    AREA = "area"
    CAMPAIGN = "campaign"

    @classmethod
    def parse(cls, value: str) -> AssignableKind:
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown assignable kind: {value!r}") from None


@dataclass(frozen=True)
class AssignableRef:
    """Composite key of an assignable entity."""
    kind: AssignableKind
    id: int

    def __str__(self) -> str:
        return f"{self.kind.value}#{self.id}"


@dataclass(frozen=True)
class ScheduleAssignment:
    id: int
    schedule_id: int
    assignable: AssignableRef
    valid_from: date
    valid_until: date | None = None

    def covers(self, on: date) -> bool:
        """True when the validity window contains ``on``."""
        return self.valid_from <= on and (self.valid_until is None or self.valid_until >= on)


class AssignmentOutcome(Enum):
    """What ``ScheduleVersioner.assign`` did."""
    UNCHANGED = "unchanged"  # same schedule already active on the date
    CREATED = "created"  # no covering assignment existed
    REPLACED = "replaced"  # covering assignment closed, new one opened
