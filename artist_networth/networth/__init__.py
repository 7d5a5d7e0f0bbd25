"""Net worth lookup (Wikidata P2218) for artist names.

- pipeline.py: NetWorthResolver and ResolutionState
- claims.py / currency.py: statement selection, currency normalization
- formatting.py: display text
- slots.py: superseding per-slot lookups on a background event loop
"""
