# charterdesk/business_logic/calculations/money.py

import re
import logging
from decimal import Decimal, Context, ROUND_HALF_UP, InvalidOperation
from functools import total_ordering
from typing import Any, Iterable, Union

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Percentages are carried at this precision so that discount -> tax -> commission
# chains only round once, when the figure is shown or stored.
INTERNAL_PRECISION = Decimal("0.0001")
# Quantizing to four places needs more digits than the default 28-digit context
# holds once amounts reach 10**24.
_QUANTIZE_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)

# Same acceptance as a browser's parseFloat / parseInt: a leading numeric prefix.
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def to_decimal(value: Any) -> Decimal:
    """
    Parses a user-entered value into a Decimal.
    Empty, missing or non-numeric input gives 0; it never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    text = value if isinstance(value, str) else str(value)  # str(0.1) == "0.1", no binary noise
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return ZERO
    try:
        parsed = Decimal(match.group(1))
    except InvalidOperation:
        return ZERO
    return parsed if parsed else ZERO  # drop "-0"


def to_int(value: Any) -> int:
    """parseInt-like parsing for head counts: "3 pax" -> 3, "2.7" -> 2, junk -> 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (ValueError, OverflowError, InvalidOperation):
            return 0
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else 0


def _quantize(amount: Decimal, exponent: Decimal) -> Decimal:
    try:
        return amount.quantize(exponent, rounding=ROUND_HALF_UP, context=_QUANTIZE_CONTEXT)
    except InvalidOperation:
        logger.warning(f"Amount {amount} cannot be represented as currency. Using 0.")
        return ZERO.quantize(exponent)


@total_ordering
class Money:
    """
    An immutable currency amount.

    ``Money.of()`` is the entry point for entered values and rounds them to
    cents. Results of percentage operations keep four decimal places until
    ``rounded()`` is called.
    """
    __slots__ = ("_amount",)

    def __init__(self, amount: Any = ZERO):
        self._amount = _quantize(to_decimal(amount), INTERNAL_PRECISION)

    @classmethod
    def of(cls, value: Any) -> "Money":
        if isinstance(value, Money):
            return value
        return cls(_quantize(to_decimal(value), CENT))

    @classmethod
    def zero(cls) -> "Money":
        return cls(ZERO)

    @classmethod
    def total(cls, values: Iterable[Any]) -> "Money":
        result = cls.zero()
        for value in values:
            result = result + as_money(value)
        return result

    @property
    def amount(self) -> Decimal:
        return self._amount

    def rounded(self) -> "Money":
        return Money(_quantize(self._amount, CENT))

    def as_decimal(self) -> Decimal:
        """The amount rounded to cents, ready to be stored or shown."""
        return _quantize(self._amount, CENT)

    def percent(self, percentage: Any) -> "Money":
        return Money(self._amount * to_decimal(percentage) / Decimal(100))

    def times(self, quantity: Any) -> "Money":
        return Money(self._amount * to_decimal(quantity))

    def is_zero(self) -> bool:
        return self._amount == ZERO

    def is_negative(self) -> bool:
        return self._amount < ZERO

    def __add__(self, other: Any) -> "Money":
        return Money(self._amount + as_money(other).amount)

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Money":
        return Money(self._amount - as_money(other).amount)

    def __rsub__(self, other: Any) -> "Money":
        return Money(as_money(other).amount - self._amount)

    def __neg__(self) -> "Money":
        return Money(-self._amount)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Money):
            return self._amount == other._amount
        if isinstance(other, (int, float, Decimal, str)):
            return self._amount == to_decimal(other)
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        return self._amount < as_money(other).amount

    def __hash__(self) -> int:
        return hash(self._amount)

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __float__(self) -> float:
        return float(self.as_decimal())

    def __str__(self) -> str:
        return f"{self.as_decimal():.2f}"

    def __repr__(self) -> str:
        return f"Money('{self._amount}')"


MoneyLike = Union[Money, Decimal, int, float, str, None]


def as_money(value: Any) -> Money:
    """Money instances pass through untouched; anything else goes through Money.of()."""
    return value if isinstance(value, Money) else Money.of(value)


def add(a: MoneyLike, b: MoneyLike) -> Money:
    return as_money(a) + as_money(b)


def subtract(a: MoneyLike, b: MoneyLike) -> Money:
    return as_money(a) - as_money(b)


def multiply_by_percent(amount: MoneyLike, percentage: MoneyLike) -> Money:
    return as_money(amount).percent(percentage)
