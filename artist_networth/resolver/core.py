from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

# Description fragments that mark a search hit as a musician/act.
MUSICIAN_HINTS: Tuple[str, ...] = (
    "singer",
    "musician",
    "rapper",
    "songwriter",
    "record producer",
    "DJ",
    "composer",
    "rock band",
    "pop singer",
)


@dataclass(frozen=True)
class EntityCandidate:
    id: str
    description: Optional[str] = None
    score: float = 0.0  # provider match score, higher is better
    label: Optional[str] = None


def parse_search_results(payload: Dict[str, Any]) -> List[EntityCandidate]:
    """Parse a wbsearchentities payload, keeping provider order.

    Entries without an id are skipped; a missing match score counts as 0.
    """
    out: List[EntityCandidate] = []
    for item in payload.get("search") or []:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        match = item.get("match") or {}
        try:
            score = float(match.get("score") or 0)
        except (TypeError, ValueError):
            score = 0.0
        out.append(
            EntityCandidate(
                id=item["id"],
                description=item.get("description"),
                score=score,
                label=item.get("label"),
            )
        )
    return out


def has_hint(candidate: EntityCandidate, hints: Iterable[str] = MUSICIAN_HINTS) -> bool:
    desc = (candidate.description or "").lower()
    return any(h.lower() in desc for h in hints)


def rank_candidates(
    candidates: Sequence[EntityCandidate], hints: Iterable[str] = MUSICIAN_HINTS
) -> List[EntityCandidate]:
    """Order candidates for a musician lookup.

    Ranking heuristic:
    - Description containing a musician hint (case-insensitive) sorts first
    - Then match score, descending
    Python's sort is stable, so provider order breaks any remaining tie.
    """
    hints = tuple(hints)
    return sorted(candidates, key=lambda c: (not has_hint(c, hints), -c.score))


def pick_best_candidate(
    candidates: Sequence[EntityCandidate], hints: Iterable[str] = MUSICIAN_HINTS
) -> Optional[str]:
    ranked = rank_candidates(candidates, hints)
    return ranked[0].id if ranked else None
