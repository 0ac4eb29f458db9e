from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, Mapping

from app.errors import SourceError
from app.schemas.quote import Quote

_CENT = Decimal("0.01")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_decimal(value: Any, *, field_name: str) -> Decimal:
    if _is_blank(value):
        raise SourceError(f"missing value for {field_name}")
    text = str(value).strip()
    if field_name == "change_percent":
        text = text.removesuffix("%").strip()
    try:
        parsed = Decimal(text)
    except InvalidOperation as exc:
        raise SourceError(f"invalid numeric value for {field_name}: {value!r}") from exc
    if not parsed.is_finite():
        raise SourceError(f"invalid numeric value for {field_name}: {value!r}")
    return parsed


def _round_cents(value: Decimal, *, field_name: str) -> Decimal:
    try:
        rounded = value.quantize(_CENT, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as exc:
        raise SourceError(f"invalid numeric value for {field_name}: {value}") from exc
    # rounded sign follows the parsed sign, so "-0" never yields "-0.00"
    return rounded if value < 0 else rounded.copy_abs()


def normalize_quote(payload: Mapping[str, Any]) -> Quote:
    """Turn a flat source payload into a canonical Quote.

    Numbers are rounded half-to-even to 2 fraction digits and a trailing
    percent sign is dropped from ``change_percent``. The symbol is kept as
    the source reported it. Raises SourceError on missing or malformed
    fields, a negative price, or a sign disagreement between ``change`` and
    ``change_percent``. Signs are judged on the values as reported, before
    rounding.
    """
    if not isinstance(payload, Mapping):
        raise SourceError("payload must be a mapping")

    symbol = payload.get("symbol")
    if _is_blank(symbol):
        raise SourceError("missing value for symbol")

    price = _parse_decimal(payload.get("price"), field_name="price")
    change = _parse_decimal(payload.get("change"), field_name="change")
    change_percent = _parse_decimal(payload.get("change_percent"), field_name="change_percent")

    if price < 0:
        raise SourceError(f"negative price: {price}")
    if (change < 0) != (change_percent < 0):
        raise SourceError(f"sign mismatch between change={change} and change_percent={change_percent}")

    return Quote(
        symbol=str(symbol),
        price=_round_cents(price, field_name="price"),
        change=_round_cents(change, field_name="change"),
        change_percent=_round_cents(change_percent, field_name="change_percent"),
    )
