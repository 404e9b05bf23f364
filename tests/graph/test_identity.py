import pytest

from medgraph.graph.identity import (
    IdentityResolver,
    canonical_key,
    contains_name,
    union_names,
)
from medgraph.graph.types import EntityKind, GraphData, Medication


@pytest.mark.parametrize(
    "name, expected",
    [
        ("  Tylenol ", "tylenol"),
        ("IBUPROFEN", "ibuprofen"),
        ("", ""),
        (None, ""),
        (42, ""),
    ],
)
def test_canonical_key(name, expected):
    assert canonical_key(name) == expected


def test_contains_name_ignores_case_and_whitespace():
    assert contains_name(["Advil", "Tylenol"], " tylenol")
    assert not contains_name(["Advil"], "Aleve")


def test_union_keeps_existing_order_and_casing():
    assert union_names(["X"], ["x", "Y"]) == ["X", "Y"]


def test_union_trims_and_drops_junk():
    assert union_names(["Headache"], ["  Fever ", "", None, 7, "fever"]) == ["Headache", "Fever"]


def test_union_ignores_non_list_sources():
    assert union_names(["Nausea"], "Dizziness") == ["Nausea"]
    assert union_names(None, None) == []


def test_union_dedupes_within_existing():
    assert union_names(["Nausea", "nausea"], []) == ["Nausea"]


class TestIdentityResolver:

    @pytest.fixture
    def graph(self):
        graph = GraphData.empty()
        graph.medications["Tylenol"] = Medication(name="Tylenol")
        graph.medications["tylenol"] = Medication(name="tylenol")
        return graph

    def test_find_key_is_case_insensitive(self, graph):
        resolver = IdentityResolver(graph)

        assert resolver.find_key(EntityKind.MEDICATIONS, "TYLENOL ") == "Tylenol"

    def test_first_stored_entity_wins(self, graph):
        resolver = IdentityResolver(graph)

        assert resolver.find_key(EntityKind.MEDICATIONS, "tylenol") == "Tylenol"

    def test_find_key_misses(self, graph):
        resolver = IdentityResolver(graph)

        assert resolver.find_key(EntityKind.MEDICATIONS, "Advil") is None
        assert resolver.find_key(EntityKind.MEDICATIONS, "   ") is None
        assert resolver.find_key(EntityKind.EFFECTS, "Tylenol") is None

    def test_register_makes_entity_findable(self, graph):
        resolver = IdentityResolver(graph)
        advil = Medication(name="Advil")

        resolver.register(EntityKind.MEDICATIONS, "Advil", advil)

        assert resolver.find_key("medication", "advil") == "Advil"
