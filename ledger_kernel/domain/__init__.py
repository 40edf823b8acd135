"""Pure domain helpers: ownership scope, clock, reporting periods."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.periods import DateWindow, month_window, to_utc, window
from ledger_kernel.domain.scope import GlobalScope, OwnedScope, Scope, scope_for

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "DateWindow",
    "month_window",
    "window",
    "to_utc",
    "Scope",
    "GlobalScope",
    "OwnedScope",
    "scope_for",
]
