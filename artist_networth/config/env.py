from __future__ import annotations
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class WikidataConfig:
    api_url: str = "https://www.wikidata.org/w/api.php"
    user_agent: str = "ArtistNetworth/0.1 (contact@example.com)"
    timeout_sec: float = 10.0
    language: str = "en"
    search_limit: int = 10
    origin: str | None = None  # "*" when requests come from a browser


def get_wikidata_config() -> WikidataConfig:
    return WikidataConfig(
        api_url=os.getenv("WIKIDATA_API_URL", WikidataConfig.api_url),
        user_agent=os.getenv("WIKIDATA_USER_AGENT", WikidataConfig.user_agent),
        timeout_sec=float(os.getenv("WIKIDATA_TIMEOUT_SEC", "10")),
        language=os.getenv("WIKIDATA_LANGUAGE", "en"),
        search_limit=int(os.getenv("WIKIDATA_SEARCH_LIMIT", "10")),
        origin=os.getenv("WIKIDATA_ORIGIN") or None,
    )


@dataclass(frozen=True)
class NetworthConfig:
    property_id: str = "P2218"  # net worth
    point_in_time_qualifier: str = "P585"
    lookup_timeout_sec: float = 30.0
    locale: str = "en_US"  # CLDR locale for number grouping


def get_networth_config() -> NetworthConfig:
    return NetworthConfig(
        property_id=os.getenv("NETWORTH_PROPERTY", "P2218"),
        lookup_timeout_sec=float(os.getenv("LOOKUP_TIMEOUT_SEC", "30")),
        locale=os.getenv("NETWORTH_LOCALE", "en_US"),
    )
