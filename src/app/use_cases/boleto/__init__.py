"""Use cases de boleto."""

from app.use_cases.boleto.archive_tasks import ArchiveTaskRunner
from app.use_cases.boleto.issue_and_archive import (
    ArchiveMode,
    IssueAndArchiveResult,
    IssueAndArchiveUseCase,
)

__all__ = [
    "ArchiveMode",
    "ArchiveTaskRunner",
    "IssueAndArchiveResult",
    "IssueAndArchiveUseCase",
]
