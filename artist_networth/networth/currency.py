from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import re

_ISO_RE = re.compile(r"^[A-Z]{3}$")
_SYMBOL_RE = re.compile(r"^[^\w\s]$")


@dataclass(frozen=True)
class CurrencyMeta:
    code: Optional[str] = None
    label: Optional[str] = None
    symbol: str = ""


# Common currency items; everything else is resolved from labels/aliases.
CURRENCY_QID_MAP: Mapping[str, CurrencyMeta] = MappingProxyType({
    "Q4917": CurrencyMeta(code="USD", symbol="$"),
    "Q4916": CurrencyMeta(code="EUR", symbol="€"),
    "Q25224": CurrencyMeta(code="GBP", symbol="£"),
    "Q8146": CurrencyMeta(code="JPY", symbol="¥"),
})

EMPTY_CURRENCY = CurrencyMeta()


def is_currency_unit(unit_id: Optional[str]) -> bool:
    # "1" is Wikidata's dimensionless unit
    return bool(unit_id) and unit_id != "1"


def currency_from_aliases(label: Optional[str], aliases: Iterable[str]) -> CurrencyMeta:
    """Pick the first 3-letter uppercase alias as ISO code and the first
    single-glyph alias as symbol. No match leaves the field empty."""
    aliases = list(aliases)
    code = next((a for a in aliases if _ISO_RE.match(a)), None)
    symbol = next((a for a in aliases if _SYMBOL_RE.match(a)), "")
    return CurrencyMeta(code=code, label=label or None, symbol=symbol)


def symbol_for_code(code: Optional[str], table: Mapping[str, CurrencyMeta] = CURRENCY_QID_MAP) -> str:
    if not code:
        return ""
    for meta in table.values():
        if meta.code == code and meta.symbol:
            return meta.symbol
    if code == "USD":
        return "$"
    return ""
