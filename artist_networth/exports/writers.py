from __future__ import annotations
from typing import List, Dict, Any, Iterable, Tuple
import csv
import io

SCHEMAS = {
    "networth": [
        "name","status","entity_id","amount","currency_code","currency_label","symbol","as_of","text","source","error"
    ],
}


def write_csv(rows: Iterable[Dict[str, Any]], columns: List[str]) -> str:
    buf = io.StringIO()
    w = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
    w.writeheader()
    for r in rows:
        w.writerow({k: r.get(k) for k in columns})
    return buf.getvalue()


def networth_row(name: str, state: Any) -> Dict[str, Any]:
    """Flatten a (name, ResolutionState) pair into a CSV row."""
    row: Dict[str, Any] = {"name": name, "status": state.status, "error": state.error}
    d = state.data
    if d is not None:
        row.update({
            "entity_id": d.entity_id,
            "amount": d.amount,
            "currency_code": d.currency_code,
            "currency_label": d.currency_label,
            "symbol": d.symbol,
            "as_of": d.as_of,
            "source": d.source,
        })
    f = state.formatted
    if f is not None:
        row["text"] = f.text
    return row


def write_networth(results: Iterable[Tuple[str, Any]]) -> str:
    return write_csv((networth_row(n, s) for n, s in results), SCHEMAS["networth"])
