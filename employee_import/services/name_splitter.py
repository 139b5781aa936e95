from __future__ import annotations

from dataclasses import dataclass

"""Full name -> first name / paternal surname / maternal surname.

Fixed heuristic, applied the same way for every locale:

    1 token  -> first name
    2 tokens -> first name, paternal
    3 tokens -> first name, paternal, maternal
    4+       -> the last two tokens are the surnames, the rest is the first name
"""


@dataclass(frozen=True)
class NameParts:
    first_name: str | None = None
    paternal_last_name: str | None = None
    maternal_last_name: str | None = None

    @property
    def full_name(self) -> str | None:
        """Display name rebuilt from the parts (None when all are empty)."""
        parts = [p for p in (self.first_name, self.paternal_last_name, self.maternal_last_name) if p]
        return " ".join(parts) or None


def split_full_name(full_name: str) -> NameParts:
    tokens = full_name.split()
    if not tokens:
        return NameParts()
    if len(tokens) == 1:
        return NameParts(first_name=tokens[0])
    if len(tokens) == 2:
        return NameParts(first_name=tokens[0], paternal_last_name=tokens[1])
    if len(tokens) == 3:
        return NameParts(*tokens)
    return NameParts(
        first_name=" ".join(tokens[:-2]),
        paternal_last_name=tokens[-2],
        maternal_last_name=tokens[-1],
    )
