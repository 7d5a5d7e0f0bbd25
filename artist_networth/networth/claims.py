from __future__ import annotations
from typing import Optional, Sequence
import re

from artist_networth.ingestion.wikidata_client import NetWorthClaim

RANK_SCORES = {"preferred": 2, "normal": 1}

_TIME_RE = re.compile(r"^\+?(\d{4})-(\d{2})-(\d{2})")


def rank_score(rank: Optional[str]) -> int:
    return RANK_SCORES.get(rank or "", 0)


def pick_best_claim(claims: Sequence[NetWorthClaim]) -> Optional[NetWorthClaim]:
    """Choose one statement: highest rank, then latest point in time.

    Times compare as raw strings; "" stands for a missing qualifier so an
    undated statement loses every tie against a dated one.
    """
    usable = [c for c in claims if c.amount]
    if not usable:
        return None
    ordered = sorted(usable, key=lambda c: (rank_score(c.rank), c.point_in_time or ""), reverse=True)
    return ordered[0]


def parse_amount(amount: str) -> float:
    return float(amount.replace("+", "", 1))


def unit_entity_id(unit: Optional[str]) -> str:
    # "http://www.wikidata.org/entity/Q4917" -> "Q4917"
    return (unit or "").rstrip("/").split("/")[-1]


def as_of_date(point_in_time: Optional[str]) -> Optional[str]:
    """Degrade a Wikidata time to the precision it actually carries.

    "+2019-00-00T00:00:00Z" -> "2019", "+2019-05-00..." -> "2019-05",
    "+2019-05-12..." -> "2019-05-12". Unparseable input -> None.
    """
    if not point_in_time:
        return None
    m = _TIME_RE.match(point_in_time)
    if not m:
        return None
    year, month, day = m.groups()
    if month == "00":
        return year
    if day == "00":
        return f"{year}-{month}"
    return f"{year}-{month}-{day}"
