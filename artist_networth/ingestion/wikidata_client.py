from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import asyncio
import logging
import re

import httpx

from artist_networth.config.env import WikidataConfig, get_wikidata_config
from artist_networth.networth.cancel import CancelToken
from artist_networth.networth.errors import ResolutionCancelled, TransportFailure

"""
Wikidata Action API (no key, public):
- action=wbsearchentities: free-text item search
- action=wbgetentities: claims or labels/aliases for item ids
Builders and parsers are pure; WikidataClient does the async I/O.
"""

logger = logging.getLogger(__name__)


def build_search_params(name: str, cfg: Optional[WikidataConfig] = None) -> Dict[str, str]:
    cfg = cfg or get_wikidata_config()
    return _with_common({
        "action": "wbsearchentities",
        "search": name,
        "language": cfg.language,
        "type": "item",
        "limit": str(cfg.search_limit),
    }, cfg)


def build_claims_params(qid: str, cfg: Optional[WikidataConfig] = None) -> Dict[str, str]:
    cfg = cfg or get_wikidata_config()
    return _with_common({"action": "wbgetentities", "ids": qid, "props": "claims"}, cfg)


def build_labels_params(qid: str, cfg: Optional[WikidataConfig] = None) -> Dict[str, str]:
    cfg = cfg or get_wikidata_config()
    return _with_common({
        "action": "wbgetentities",
        "ids": qid,
        "props": "labels|aliases",
        "languages": cfg.language,
    }, cfg)


def _with_common(params: Dict[str, str], cfg: WikidataConfig) -> Dict[str, str]:
    out = {"format": "json"}
    if cfg.origin:
        out["origin"] = cfg.origin
    out.update(params)
    return out


@dataclass(frozen=True)
class NetWorthClaim:
    amount: str  # signed decimal string, e.g. "+150000000"
    unit: str = ""  # entity URI of the currency, or "1"
    rank: str = "normal"  # preferred|normal|deprecated
    point_in_time: Optional[str] = None  # e.g. "+2019-00-00T00:00:00Z"


_AMOUNT_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")


def _is_number(s: str) -> bool:
    # Wikidata quantities are plain signed decimals; rejects nan, inf, 1_000
    return bool(_AMOUNT_RE.match(s))


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_claims(payload: Dict[str, Any], qid: str, prop: str, qualifier: str = "P585") -> List[NetWorthClaim]:
    """Extract quantity statements for `prop` from a wbgetentities payload.

    Statements without a numeric amount are dropped; document order is kept.
    """
    entity = _dict(_dict(payload.get("entities")).get(qid))
    statements = _dict(entity.get("claims")).get(prop)
    if not isinstance(statements, list):
        return []
    out: List[NetWorthClaim] = []
    for st in statements:
        if not isinstance(st, dict):
            continue
        value = _dict(_dict(st.get("mainsnak")).get("datavalue")).get("value")
        if not isinstance(value, dict):
            continue
        amount = value.get("amount")
        if not amount or not isinstance(amount, str) or not _is_number(amount):
            continue
        out.append(
            NetWorthClaim(
                amount=amount,
                unit=value.get("unit") if isinstance(value.get("unit"), str) else "",
                rank=st.get("rank") if isinstance(st.get("rank"), str) else "normal",
                point_in_time=_first_time(_dict(st.get("qualifiers")), qualifier),
            )
        )
    return out


def _first_time(qualifiers: Dict[str, Any], qualifier: str) -> Optional[str]:
    snaks = qualifiers.get(qualifier)
    if not isinstance(snaks, list) or not snaks or not isinstance(snaks[0], dict):
        return None
    value = _dict(snaks[0].get("datavalue")).get("value")
    if isinstance(value, dict) and isinstance(value.get("time"), str):
        return value["time"]
    return None


def extract_labels(payload: Dict[str, Any], qid: str, language: str = "en") -> Tuple[Optional[str], List[str]]:
    """Return (label, aliases) for `qid` in `language`; missing parts degrade to None/[]."""
    entity = _dict(_dict(payload.get("entities")).get(qid))
    label = _dict(_dict(entity.get("labels")).get(language)).get("value")
    if not isinstance(label, str) or not label:
        label = None
    raw = _dict(entity.get("aliases")).get(language)
    aliases = [
        a["value"]
        for a in (raw if isinstance(raw, list) else [])
        if isinstance(a, dict) and isinstance(a.get("value"), str)
    ]
    return label, aliases


class WikidataClient:
    """Async client for the Wikidata Action API.

    Each request runs as its own task so a CancelToken can abort it while in
    flight; an aborted request raises ResolutionCancelled.
    """

    def __init__(
        self,
        cfg: Optional[WikidataConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cfg = cfg or get_wikidata_config()
        self._client = httpx.AsyncClient(
            timeout=self.cfg.timeout_sec,
            headers={"User-Agent": self.cfg.user_agent},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "WikidataClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def search_entities(self, name: str, token: Optional[CancelToken] = None) -> Dict[str, Any]:
        return await self.get_json(build_search_params(name, self.cfg), token)

    async def get_claims(self, qid: str, token: Optional[CancelToken] = None) -> Dict[str, Any]:
        return await self.get_json(build_claims_params(qid, self.cfg), token)

    async def get_labels(self, qid: str, token: Optional[CancelToken] = None) -> Dict[str, Any]:
        return await self.get_json(build_labels_params(qid, self.cfg), token)

    async def get_json(self, params: Dict[str, str], token: Optional[CancelToken] = None) -> Dict[str, Any]:
        token = token or CancelToken()
        token.raise_if_cancelled()
        loop = asyncio.get_running_loop()
        logger.debug(f"Wikidata {params.get('action')} {params.get('search') or params.get('ids')}")
        request = asyncio.ensure_future(self._client.get(self.cfg.api_url, params=params))
        unregister = token.add_callback(lambda: loop.call_soon_threadsafe(request.cancel))
        try:
            resp = await request
        except asyncio.CancelledError:
            if token.cancelled:
                raise ResolutionCancelled(f"request aborted: {params.get('action')}") from None
            raise
        except httpx.HTTPError as e:
            logger.warning(f"Wikidata request failed: {e}")
            raise TransportFailure(f"Wikidata request failed: {e}") from e
        finally:
            unregister()
        if not resp.is_success:
            logger.warning(f"Wikidata HTTP {resp.status_code} for {params.get('action')}")
            raise TransportFailure(f"Wikidata HTTP {resp.status_code}", status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportFailure("Wikidata returned invalid JSON", status=resp.status_code) from e
        return data if isinstance(data, dict) else {}
