"""
Report Service (``ledger_services.reports.service``).

Responsibility
--------------
Generates a user's transaction report for a calendar month or an explicit
range: loads the rows through ``TransactionSelector``, assembles a
``ReportDocument`` with the pure builder, renders it to xlsx, stores it
through a ``ReportStore`` and returns the download URL.

Architecture position
---------------------
**Services layer** -- read-only over the ledger, write-only to the store.
Constructor: ``session`` + ``store`` + ``clock`` + reporting time zone.

Invariants enforced
-------------------
* Read-only -- no ledger mutation.
* Only the acting user's transactions are ever included.
* Keys: ``<user_id>/<YYYY>-<MM>-monthly-report.xlsx`` and
  ``<user_id>/custom-<uuid>.xlsx``.

Failure modes
-------------
* ValidationError for a bad month or start > end, before any query.
* UserNotFoundError for an unknown user.
* Store I/O errors propagate.

Audit relevance
---------------
``report_generated`` is logged with the key, period and row count.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.periods import (
    DateWindow,
    month_label,
    month_window,
    resolve_zone,
    to_utc,
    window,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.transaction import Transaction
from ledger_kernel.selectors.transaction_selector import TransactionSelector
from ledger_kernel.services.user_service import UserService
from ledger_services.reports.builder import build_report_document
from ledger_services.reports.models import GeneratedReport, ReportRow
from ledger_services.reports.renderer import XLSX_CONTENT_TYPE, render_xlsx
from ledger_services.reports.store import ReportStore

logger = get_logger("reports.service")


def _instant_label(instant: datetime) -> str:
    return to_utc(instant).strftime("%Y-%m-%dT%H:%M:%SZ")


class ReportService:
    """
    Transaction report export.

    Guarantees
    ----------
    * Clock is injectable for deterministic ``generated_at`` stamps.
    * Rows are ordered newest first, as in every transaction listing.

    Non-goals
    ---------
    * PDF layout.
    * Cloud storage or signed URLs; the store decides what a URL is.
    """

    def __init__(
        self,
        session: Session,
        store: ReportStore,
        clock: Clock | None = None,
        reporting_timezone: str = "UTC",
    ):
        self._session = session
        self._store = store
        self._clock = clock or SystemClock()
        self._zone_name = reporting_timezone
        self._zone = resolve_zone(reporting_timezone)
        self._transactions = TransactionSelector(session)
        self._users = UserService(session)

    def monthly_report(self, user_id: UUID, year: int, month: int) -> GeneratedReport:
        """Report for one calendar month in the reporting time zone."""
        period = month_window(year, month, self._zone)
        key = f"{user_id}/{year:04d}-{month:02d}-monthly-report.xlsx"
        return self._generate(user_id, period, month_label(year, month), key)

    def custom_report(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> GeneratedReport:
        """Report for an inclusive instant range."""
        period = window(start, end)
        label = f"{_instant_label(period.start)} to {_instant_label(period.end)}"
        key = f"{user_id}/custom-{uuid4()}.xlsx"
        return self._generate(user_id, period, label, key)

    def _row(self, transaction: Transaction) -> ReportRow:
        local_date = to_utc(transaction.transaction_date).astimezone(self._zone).date()
        return ReportRow(
            transaction_date=local_date,
            description=transaction.description or "",
            transaction_type=transaction.transaction_type.value,
            category_name=transaction.category.name if transaction.category else "",
            account_name=transaction.account.name,
            amount=transaction.amount.copy_abs(),
        )

    def _generate(
        self, user_id: UUID, period: DateWindow, label: str, key: str
    ) -> GeneratedReport:
        user = self._users.get_user(user_id)
        transactions = self._transactions.in_window(user_id, period)

        document = build_report_document(
            (self._row(t) for t in transactions),
            period_label=label,
            owner_name=f"{user.first_name} {user.last_name}",
            generated_at=self._clock.now(),
        )
        self._store.save(key, render_xlsx(document), XLSX_CONTENT_TYPE)
        url = self._store.url_for(key)

        logger.info(
            "report_generated",
            extra={
                "key": key,
                "period": label,
                "row_count": len(document.rows),
                "reporting_timezone": self._zone_name,
            },
        )
        return GeneratedReport(key=key, download_url=url, document=document)
