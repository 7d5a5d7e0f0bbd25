import json
import logging
import os
import sys

from artist_networth.exports.writers import write_networth
from artist_networth.ingestion.wikidata_client import WikidataClient
from artist_networth.networth.pipeline import NetWorthResolver
from artist_networth.networth.slots import SlotBoard, parse_artist_list


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    as_csv = "--csv" in args
    args = [a for a in args if a != "--csv"]
    names = parse_artist_list(" ".join(args))
    if not names:
        print("Usage: python -m artist_networth.networth.cli [--csv] <artist>[, <artist> ...]")
        sys.exit(2)
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))
    board = SlotBoard(lambda: NetWorthResolver(WikidataClient()))
    try:
        results = board.run(board.lookup_many(names))
    finally:
        board.close()
    if as_csv:
        sys.stdout.write(write_networth(results))
        return
    print(json.dumps([{"name": n, **s.to_dict()} for n, s in results], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
