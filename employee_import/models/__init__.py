"""Domain models for the employee master-data importer."""

from .assignment import AssignableKind, AssignableRef, AssignmentOutcome, ScheduleAssignment
from .config_models import DEFAULT_HEADER_ALIASES, DatabaseConfig, HeaderAliasTable, ImportConfig
from .employee import CatalogEntry, EmployeeProfile, EmployeeRecord
from .processing_result import Failure, ImportReport, RowWarning
from .row_data import ImportRow, ResolvedRow, StageFailure

__all__ = [
    # Configuration models
    "DEFAULT_HEADER_ALIASES",
    "DatabaseConfig",
    "HeaderAliasTable",
    "ImportConfig",
    # Row processing models
    "ImportRow",
    "ResolvedRow",
    "StageFailure",
    "Failure",
    "RowWarning",
    "ImportReport",
    # Persistence models
    "CatalogEntry",
    "EmployeeProfile",
    "EmployeeRecord",
    "AssignableKind",
    "AssignableRef",
    "AssignmentOutcome",
    "ScheduleAssignment",
]
