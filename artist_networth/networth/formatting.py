from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from babel.numbers import format_decimal

from artist_networth.networth.currency import symbol_for_code


@dataclass(frozen=True)
class ResolvedNetWorth:
    amount: float
    currency_code: Optional[str] = None
    currency_label: Optional[str] = None
    symbol: str = ""
    as_of: Optional[str] = None
    entity_id: Optional[str] = None
    source: str = "Wikidata"


@dataclass(frozen=True)
class DisplayView:
    text: str
    amount: float
    currency_code: Optional[str] = None
    currency_label: Optional[str] = None
    as_of: Optional[str] = None
    entity_id: Optional[str] = None
    source: str = "Wikidata"


def format_number(amount: float, locale: str = "en_US") -> str:
    """Group an amount the way `locale` does, with no fractional digits (half up)."""
    whole = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return format_decimal(whole, locale=locale)


def format_networth(data: Optional[ResolvedNetWorth], locale: str = "en_US") -> Optional[DisplayView]:
    if data is None or not data.amount:
        return None
    sym = data.symbol or symbol_for_code(data.currency_code)
    value = format_number(data.amount, locale)
    if sym:
        text = f"{sym}{value}"
    elif data.currency_code or data.currency_label:
        text = f"{data.currency_code or data.currency_label} {value}"
    else:
        text = value
    return DisplayView(
        text=text,
        amount=data.amount,
        currency_code=data.currency_code or None,
        currency_label=data.currency_label or None,
        as_of=data.as_of or None,
        entity_id=data.entity_id,
        source=data.source,
    )
