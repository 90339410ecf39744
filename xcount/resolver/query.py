"""
Query normalization and cashtag rewrites.

The ``$`` cashtag operator is only available on paid X API tiers, so
bare cashtags are rewritten up front and compound queries get a
hashtag fallback when the upstream rejects them.
"""

import re
from typing import Iterable, Optional

BARE_CASHTAG = re.compile(r"^\$[A-Za-z0-9_]+$")
CASHTAG_TOKEN = re.compile(r"\$([A-Za-z0-9_]+)")


def normalize_query(
    raw: Optional[str],
    default_query: str,
    aliases: Iterable[str] = ()
) -> str:
    """
    Turn the caller's ``q`` parameter into the query sent upstream.

    Missing queries fall back to ``default_query``. A bare cashtag such
    as ``$ZEN`` becomes ``(#ZEN OR ZEN OR <aliases>) -is:retweet``.
    """
    query = default_query if raw is None else str(raw).strip()
    if BARE_CASHTAG.match(query):
        query = rewrite_bare_cashtag(query, aliases)
    return query


def rewrite_bare_cashtag(cashtag: str, aliases: Iterable[str] = ()) -> str:
    """Expand ``$SYM`` into a hashtag/term disjunction without retweets."""
    symbol = cashtag[1:].upper()
    terms = [f"#{symbol}", symbol, *aliases]
    return f"({' OR '.join(terms)}) -is:retweet"


def has_cashtag(query: str) -> bool:
    return "$" in query


def cashtags_to_hashtags(query: str) -> str:
    """Replace every ``$TOKEN`` with ``#TOKEN``."""
    return CASHTAG_TOKEN.sub(r"#\1", query)


def fallback_note(original: str, fallback: str) -> str:
    return (
        f'Fell back from "{original}" to "{fallback}" '
        "because cashtags are restricted on this API tier."
    )
