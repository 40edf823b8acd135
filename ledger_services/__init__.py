"""
ledger_services -- Package init and public API.

Responsibility:
    Outer services that compose kernel selectors with I/O the kernel must
    not do itself: rendering files and writing them to storage.

Architecture position:
    Services -- above the kernel.

    Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
        ledger_services/ -> ledger_kernel/   (allowed)
        ledger_kernel/   -> ledger_services/ (FORBIDDEN)

Failure modes:
    - ImportError at startup if openpyxl is missing.
"""

from ledger_services.reports import (
    GeneratedReport,
    LocalReportStore,
    ReportDocument,
    ReportService,
    ReportStore,
)

__all__ = [
    "GeneratedReport",
    "LocalReportStore",
    "ReportDocument",
    "ReportService",
    "ReportStore",
]
