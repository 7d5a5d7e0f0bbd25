import asyncio
import json
import logging
import os
import sys

from artist_networth.ingestion.wikidata_client import WikidataClient
from .core import has_hint, parse_search_results, rank_candidates


async def _search(name: str):
    async with WikidataClient() as client:
        payload = await client.search_entities(name)
    return rank_candidates(parse_search_results(payload))


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m artist_networth.resolver.cli <artist name>")
        sys.exit(2)
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))
    name = " ".join(sys.argv[1:])
    cands = asyncio.run(_search(name))
    print(json.dumps([
        {
            "id": c.id,
            "label": c.label,
            "description": c.description,
            "score": round(c.score, 2),
            "hint": has_hint(c),
        }
        for c in cands
    ], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
