"""
Module: ledger_kernel.db.types
Responsibility: Exact decimal column types for money, trade quantities and
    unit prices, plus the scale check and rounding every writer and reader
    shares.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the ledger.  Columns round-trip Decimal exactly
      on every backend: NUMERIC where the database has one, fixed-point
      text on SQLite (whose NUMERIC affinity is a double).
    - A value is written only if it fits its column; fits_scale() is how
      services check that before posting, so the database never rounds.
    - round_money() is the only sanctioned rounding function for amounts
      shown to users (reports, API totals).
"""

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_PRECISION = 38
MONEY_SCALE = 9
QUANTITY_PRECISION = 38
QUANTITY_SCALE = 18

# Arithmetic on amounts (balance updates, trade totals, report sums) runs in
# this context: wide enough that no sum of column values is ever rounded.
LEDGER_DECIMAL = Context(prec=2 * MONEY_PRECISION, traps=[InvalidOperation])


def fits_scale(value: Decimal, precision: int, scale: int) -> bool:
    """True when NUMERIC(precision, scale) stores ``value`` without rounding."""
    if not value.is_finite():
        return False
    try:
        stored = value.quantize(
            Decimal(1).scaleb(-scale), context=Context(prec=precision)
        )
    except InvalidOperation:
        return False
    return stored == value


def fits_money(value: Decimal) -> bool:
    return fits_scale(value, MONEY_PRECISION, MONEY_SCALE)


def fits_quantity(value: Decimal) -> bool:
    return fits_scale(value, QUANTITY_PRECISION, QUANTITY_SCALE)


class ExactDecimal(TypeDecorator):
    """Fixed-scale Decimal: NUMERIC(p, s), or its plain text form on SQLite."""

    impl = Numeric
    cache_ok = True

    def __init__(self, precision: int, scale: int):
        super().__init__(precision, scale, asdecimal=True)
        self.precision = precision
        self.scale = scale

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            # sign, point and the digits
            return dialect.type_descriptor(String(self.precision + 2))
        return dialect.type_descriptor(Numeric(self.precision, self.scale, asdecimal=True))

    def _quantize(self, value: Decimal) -> Decimal:
        return value.quantize(
            Decimal(1).scaleb(-self.scale), context=Context(prec=self.precision)
        )

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        exact = self._quantize(Decimal(value))
        return format(exact, "f") if dialect.name == "sqlite" else exact

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._quantize(Decimal(value))


# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, ExactDecimal(MONEY_PRECISION, MONEY_SCALE)]

# Trade quantity and unit price need more fractional digits (fund units, crypto)
Quantity = Annotated[Decimal, ExactDecimal(QUANTITY_PRECISION, QUANTITY_SCALE)]
Price = Annotated[Decimal, ExactDecimal(QUANTITY_PRECISION, QUANTITY_SCALE)]


MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value for presentation.

    Stored balances are never rounded; only derived figures shown to a
    person go through here.
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=rounding, context=LEDGER_DECIMAL)
