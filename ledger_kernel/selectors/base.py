"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, domain/ and
    models/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but never
      call session.add(), session.delete(), session.commit(), or
      session.flush().
    - Every query that returns user data is filtered by the acting user.
    - Session ownership: the caller owns the session and its transaction.

Failure modes:
    - None of their own; database errors propagate to the caller.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors perform read-only queries and return either frozen
        dataclasses (aggregates) or ORM rows the caller already owns.
    """

    def __init__(self, session: Session):
        self.session = session
