"""Entity Resolver package.

Ranks Wikidata search candidates for a free-text artist name, biased toward musicians.
Pure-python, deterministic. See `artist_networth/resolver/core.py`.
"""
