from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from artist_networth.config.env import NetworthConfig, get_networth_config
from artist_networth.ingestion.wikidata_client import WikidataClient, extract_claims, extract_labels
from artist_networth.networth.cancel import CancelToken
from artist_networth.networth.claims import as_of_date, parse_amount, pick_best_claim, unit_entity_id
from artist_networth.networth.currency import (
    CURRENCY_QID_MAP,
    EMPTY_CURRENCY,
    CurrencyMeta,
    currency_from_aliases,
    is_currency_unit,
)
from artist_networth.networth.errors import NotFound, ResolutionCancelled, TransportFailure
from artist_networth.networth.formatting import DisplayView, ResolvedNetWorth, format_networth
from artist_networth.resolver.core import MUSICIAN_HINTS, parse_search_results, pick_best_candidate

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
RESOLVED = "resolved"
NOT_FOUND = "not_found"
FAILED = "failed"


@dataclass(frozen=True)
class ResolutionState:
    status: str = IDLE  # idle|loading|resolved|not_found|failed
    data: Optional[ResolvedNetWorth] = None
    error: Optional[str] = None
    locale: str = "en_US"

    @property
    def loading(self) -> bool:
        return self.status == LOADING

    @property
    def formatted(self) -> Optional[DisplayView]:
        return format_networth(self.data, self.locale)

    def to_dict(self) -> Dict[str, Any]:
        formatted = self.formatted
        return {
            "status": self.status,
            "loading": self.loading,
            "error": self.error,
            "data": asdict(self.data) if self.data else None,
            "formatted": asdict(formatted) if formatted else None,
        }


class NetWorthResolver:
    """Name -> Wikidata item -> best net worth statement -> ResolvedNetWorth.

    At most three sequential requests per resolution (search, claims,
    currency labels). Every step receives the caller's CancelToken.
    """

    def __init__(
        self,
        client: WikidataClient,
        currencies: Mapping[str, CurrencyMeta] = CURRENCY_QID_MAP,
        hints: Iterable[str] = MUSICIAN_HINTS,
        cfg: Optional[NetworthConfig] = None,
    ):
        self.client = client
        self.currencies = currencies
        self.hints = tuple(hints)
        self.cfg = cfg or get_networth_config()

    async def resolve(self, name: Optional[str], token: Optional[CancelToken] = None) -> ResolutionState:
        """Resolve `name` to a terminal state.

        Raises ResolutionCancelled when `token` is cancelled; that outcome is
        never reported as a state.
        """
        query = (name or "").strip()
        if not query:
            return ResolutionState(status=IDLE, locale=self.cfg.locale)
        token = token or CancelToken(query)
        try:
            qid = await self.find_entity_id(query, token)
            if not qid:
                raise NotFound(f'No Wikidata item found for "{query}".')
            data = await self.fetch_networth(qid, token)
            if data is None:
                raise NotFound(f'No net worth ({self.cfg.property_id}) found for "{query}".')
        except NotFound as e:
            token.raise_if_cancelled()
            logger.info(f"{query}: {e}")
            return self._state(NOT_FOUND, error=str(e))
        except TransportFailure as e:
            token.raise_if_cancelled()
            return self._state(FAILED, error=str(e) or "Failed to fetch net worth.")
        except ResolutionCancelled:
            raise
        except Exception as e:
            token.raise_if_cancelled()
            logger.exception(f"{query}: lookup failed")
            return self._state(FAILED, error=str(e) or "Failed to fetch net worth.")
        token.raise_if_cancelled()
        logger.info(f"{query}: resolved {data.entity_id} {data.amount} {data.currency_code or ''}")
        return self._state(RESOLVED, data=data)

    def _state(self, status: str, data: Optional[ResolvedNetWorth] = None, error: Optional[str] = None) -> ResolutionState:
        return ResolutionState(status=status, data=data, error=error, locale=self.cfg.locale)

    async def find_entity_id(self, query: str, token: CancelToken) -> Optional[str]:
        payload = await self.client.search_entities(query, token)
        candidates = parse_search_results(payload)
        logger.debug(f"{query}: {len(candidates)} candidates")
        return pick_best_candidate(candidates, self.hints)

    async def fetch_networth(self, qid: str, token: CancelToken) -> Optional[ResolvedNetWorth]:
        payload = await self.client.get_claims(qid, token)
        claims = extract_claims(payload, qid, self.cfg.property_id, self.cfg.point_in_time_qualifier)
        best = pick_best_claim(claims)
        if best is None:
            return None
        cur = await self.currency_meta(unit_entity_id(best.unit), token)
        return ResolvedNetWorth(
            amount=parse_amount(best.amount),
            currency_code=cur.code,
            currency_label=cur.label,
            symbol=cur.symbol or ("$" if cur.code == "USD" else ""),
            as_of=as_of_date(best.point_in_time),
            entity_id=qid,
        )

    async def currency_meta(self, unit_qid: str, token: CancelToken) -> CurrencyMeta:
        if not is_currency_unit(unit_qid):
            return EMPTY_CURRENCY
        if unit_qid in self.currencies:
            return self.currencies[unit_qid]
        payload = await self.client.get_labels(unit_qid, token)
        label, aliases = extract_labels(payload, unit_qid, self.client.cfg.language)
        return currency_from_aliases(label, aliases)
