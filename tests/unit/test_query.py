"""Tests for query normalization and cashtag rewrites."""

from xcount.resolver.query import (
    cashtags_to_hashtags,
    fallback_note,
    has_cashtag,
    normalize_query,
    rewrite_bare_cashtag,
)

DEFAULT = "#21MWITHPRIVACY -is:retweet"
ALIASES = ('"Horizen"', "Zcash")


class TestNormalize:
    def test_missing_uses_default(self):
        assert normalize_query(None, DEFAULT, ALIASES) == DEFAULT

    def test_strips_whitespace(self):
        assert normalize_query("  bitcoin lang:en \n", DEFAULT, ALIASES) == "bitcoin lang:en"

    def test_empty_string_is_not_replaced(self):
        assert normalize_query("   ", DEFAULT, ALIASES) == ""

    def test_bare_cashtag_rewritten(self):
        query = normalize_query("$zen", DEFAULT, ALIASES)
        assert query == '(#ZEN OR ZEN OR "Horizen" OR Zcash) -is:retweet'
        assert "$" not in query

    def test_bare_cashtag_after_strip(self):
        assert normalize_query(" $ZEN ", DEFAULT, ALIASES).startswith("(#ZEN OR ZEN")

    def test_compound_cashtag_left_alone(self):
        assert normalize_query("$ZEN lang:en", DEFAULT, ALIASES) == "$ZEN lang:en"


class TestRewrite:
    def test_without_aliases(self):
        assert rewrite_bare_cashtag("$btc") == "(#BTC OR BTC) -is:retweet"

    def test_excludes_retweets(self):
        assert rewrite_bare_cashtag("$ZEN", ALIASES).endswith("-is:retweet")


class TestHashtagFallback:
    def test_replaces_every_cashtag(self):
        assert cashtags_to_hashtags("($ZEN OR $ZEC) -is:retweet") == "(#ZEN OR #ZEC) -is:retweet"

    def test_detects_cashtag(self):
        assert has_cashtag("$ZEN lang:en")
        assert not has_cashtag("#ZEN lang:en")

    def test_note_names_both_queries(self):
        note = fallback_note("$ZEN lang:en", "#ZEN lang:en")
        assert '"$ZEN lang:en"' in note
        assert '"#ZEN lang:en"' in note
        assert "cashtags are restricted" in note
