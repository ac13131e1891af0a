"""
Tests for the prefix/substring athlete search index.
"""

import pytest

from app.features.athletes.identity import derive_identity_key
from app.features.athletes.models import AthleteSearchEntry
from app.features.athletes.search import AthleteSearchIndex


def entry(name, iso="USA", gender="Female", race_count=1, country="United States"):
    return AthleteSearchEntry(
        key=derive_identity_key(name, iso, gender),
        full_name=name,
        country=country,
        country_iso=iso,
        race_count=race_count,
    )


NAMES = [
    "Mary Jane Watson",
    "Jane Doe",
    "Janet Jackson",
    "Anna Janeway",
    "Bob Smith",
    "jane austen",
    "Benjamin Jan",
    "Zoe Janssen",
]


@pytest.fixture
def index():
    return AthleteSearchIndex([entry(n) for n in NAMES])


# =============================================================================
# Query handling
# =============================================================================

class TestQueryHandling:
    """Short queries, limits, case folding."""

    @pytest.mark.parametrize("query", ["", "a", "J"])
    def test_short_query_returns_empty(self, index, query):
        assert index.search(query) == []
        assert index.search(query, limit=100) == []

    def test_none_query_returns_empty(self, index):
        assert index.search(None) == []

    def test_case_folded(self, index):
        upper = [e.full_name for e in index.search("JANE")]
        lower = [e.full_name for e in index.search("jane")]
        assert upper == lower
        assert upper

    @pytest.mark.parametrize("limit", [0, 1, 2, 3, 5, 100])
    def test_limit_bounds_results(self, index, limit):
        assert len(index.search("ja", limit)) <= limit

    def test_negative_limit_returns_empty(self, index):
        assert index.search("jane", -1) == []

    def test_default_limit_is_ten(self):
        many = AthleteSearchIndex([entry(f"Runner {i:02d}") for i in range(30)])
        assert len(many.search("runner")) == 10

    def test_no_match_returns_empty(self, index):
        assert index.search("xyzzy") == []


# =============================================================================
# Ordering
# =============================================================================

class TestOrdering:
    """Prefix matches before substring matches."""

    def test_prefix_then_substring(self, index):
        names = [e.full_name for e in index.search("jane")]
        # Prefix matches, alphabetical by lower-cased name
        assert names[:3] == ["jane austen", "Jane Doe", "Janet Jackson"]
        # Substring-only matches in sorted index order
        assert names[3:] == ["Anna Janeway", "Mary Jane Watson"]

    def test_prefix_block_precedes_substring_block(self, index):
        for query in ["ja", "jan", "an", "son", "en"]:
            results = index.search(query, limit=50)
            names = [e.full_name.lower() for e in results]
            prefix_count = 0
            while prefix_count < len(names) and names[prefix_count].startswith(query):
                prefix_count += 1
            for name in names[prefix_count:]:
                assert not name.startswith(query)
                assert query in name

    def test_prefix_phase_fills_limit(self, index):
        results = index.search("jane", limit=2)
        assert [e.full_name for e in results] == ["jane austen", "Jane Doe"]

    def test_substring_phase_respects_limit(self, index):
        results = index.search("jane", limit=4)
        assert [e.full_name for e in results][-1] == "Anna Janeway"

    def test_no_duplicates(self, index):
        results = index.search("jan", limit=50)
        keys = [e.key for e in results]
        assert len(keys) == len(set(keys))

    def test_all_matches_found(self, index):
        results = index.search("jan", limit=50)
        expected = {n for n in NAMES if "jan" in n.lower()}
        assert {e.full_name for e in results} == expected

    def test_ordinal_not_locale_sort(self):
        idx = AthleteSearchIndex([entry("Émile Jan"), entry("Ezra Jan"), entry("Eamon Jan")])
        assert [e.full_name for e in idx.entries] == ["Eamon Jan", "Ezra Jan", "Émile Jan"]

    def test_input_order_irrelevant(self):
        forward = AthleteSearchIndex([entry(n) for n in NAMES])
        backward = AthleteSearchIndex([entry(n) for n in reversed(NAMES)])
        assert forward.search("an", 50) == backward.search("an", 50)


class TestIndex:
    """Index construction."""

    def test_len(self, index):
        assert len(index) == len(NAMES)

    def test_entries_is_copy(self, index):
        index.entries.clear()
        assert len(index) == len(NAMES)

    def test_empty_index(self):
        assert AthleteSearchIndex([]).search("jane") == []
