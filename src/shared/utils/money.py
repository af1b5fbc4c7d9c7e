from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from src.core.config import settings

ZERO = Decimal("0.00")


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Convert to Decimal via str() so floats keep their printed value.

    Raises:
        InvalidOperation: value is not numeric (e.g. "abc", None)
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise InvalidOperation(f"Not a numeric value: {value!r}")
    return Decimal(str(value))


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    value = to_decimal(value)
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_money(value: Union[Decimal, float, int, str], symbol: str | None = None) -> str:
    """
    Render an amount for people: currency symbol, thousands grouping, 2 places.

    Examples:
        >>> format_money(Decimal("1234.5"), symbol="₹")
        '₹1,234.50'
        >>> format_money(-700, symbol="₹")
        '-₹700.00'
    """
    symbol = settings.currency_symbol if symbol is None else symbol
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
