import asyncio

import pytest

from medgraph.common.exceptions import InvalidInputError
from medgraph.graph.merge import MergeEngine
from medgraph.graph.types import GraphData
from medgraph.storage.base_storage import BaseGraphStorage
from medgraph.storage.graph_store import GraphStore


class InMemoryStorage(BaseGraphStorage):
    def __init__(self, graph=None, save_result=True):
        self.graph = graph or GraphData.empty()
        self.save_result = save_result
        self.saved = []

    async def load(self):
        return self.graph.copy()

    async def save(self, graph):
        self.saved.append(graph.to_dict())
        return self.save_result


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def engine(storage):
    return MergeEngine(GraphStore(storage))


ADVIL_FRAGMENT = {
    "medications": {
        "Advil": {
            "name": "Advil",
            "ingredients": ["Ibuprofen"],
            "sideEffects": ["Stomach upset"],
            "symptomsTreated": ["Headache"],
        }
    },
    "ingredients": {
        "Ibuprofen": {"name": "Ibuprofen", "medications": ["Advil"], "description": "Anti-inflammatory"}
    },
    "effects": {
        "Headache": {
            "name": "Headache",
            "medicationsCausingIt": [],
            "medicationsTreatingIt": ["Advil"],
            "description": "Pain in the head",
        }
    },
}


@pytest.mark.asyncio
async def test_advil_fragment_into_empty_graph(engine, storage):
    graph = await engine.merge(ADVIL_FRAGMENT)

    assert graph.counts() == {"medicationCount": 1, "ingredientCount": 1, "effectCount": 2}
    assert graph.ingredients["Ibuprofen"].medications == ["Advil"]
    assert graph.ingredients["Ibuprofen"].description == "Anti-inflammatory"
    assert graph.effects["Headache"].medications_treating_it == ["Advil"]
    assert graph.effects["Stomach upset"].medications_causing_it == ["Advil"]
    assert graph.effects["Stomach upset"].description is None
    assert engine.store.graph is graph
    assert storage.saved[-1] == graph.to_dict()


@pytest.mark.asyncio
async def test_merge_is_idempotent(engine):
    first = (await engine.merge(ADVIL_FRAGMENT)).to_dict()
    second = (await engine.merge(ADVIL_FRAGMENT)).to_dict()

    assert first == second


@pytest.mark.asyncio
async def test_same_medication_with_different_case_is_one_entity(engine):
    await engine.merge({"medications": {"a": {"name": "Tylenol", "ingredients": ["Acetaminophen"]}}})
    graph = await engine.merge({"medications": {"b": {"name": "tylenol", "symptomsTreated": ["Fever"]}}})

    assert list(graph.medications) == ["Tylenol"]
    med = graph.medications["Tylenol"]
    assert med.name == "tylenol"
    assert med.ingredients == ["Acetaminophen"]
    assert med.symptoms_treated == ["Fever"]
    assert graph.ingredients["Acetaminophen"].medications == ["Tylenol"]
    assert graph.effects["Fever"].medications_treating_it == ["tylenol"]


@pytest.mark.asyncio
async def test_relationship_arrays_are_case_insensitive_unions(engine):
    await engine.merge({"medications": {"m": {"name": "M", "ingredients": ["X"]}}})
    graph = await engine.merge({"medications": {"m": {"name": "M", "ingredients": ["x", "Y"]}}})

    assert graph.medications["M"].ingredients == ["X", "Y"]
    assert list(graph.ingredients) == ["X", "Y"]


@pytest.mark.asyncio
async def test_side_effect_propagates_to_effect_record(engine):
    await engine.merge({"effects": {"n": {"name": "Nausea", "description": "Feeling sick"}}})
    graph = await engine.merge({"medications": {"x": {"name": "Aspirin", "sideEffects": ["nausea"]}}})

    assert list(graph.effects) == ["Nausea"]
    assert graph.effects["Nausea"].medications_causing_it == ["Aspirin"]
    assert graph.effects["Nausea"].description == "Feeling sick"


@pytest.mark.asyncio
async def test_description_last_write_wins(engine):
    await engine.merge({"ingredients": {"i": {"name": "Caffeine", "description": "Stimulant"}}})

    graph = await engine.merge({"ingredients": {"i": {"name": "caffeine"}}})
    assert graph.ingredients["Caffeine"].description == "Stimulant"

    graph = await engine.merge({"ingredients": {"i": {"name": "Caffeine", "description": "CNS stimulant"}}})
    assert graph.ingredients["Caffeine"].description == "CNS stimulant"

    graph = await engine.merge({"ingredients": {"i": {"name": "Caffeine", "description": ""}}})
    assert graph.ingredients["Caffeine"].description == ""


@pytest.mark.asyncio
async def test_non_string_description_is_treated_as_null(engine):
    await engine.merge({"effects": {"e": {"name": "Rash", "description": "Red skin"}}})

    graph = await engine.merge({"effects": {"e": {"name": "Rash", "description": {"en": "Red skin"}}}})

    assert graph.effects["Rash"].description is None
    assert "description" not in graph.to_dict()["effects"]["Rash"]


@pytest.mark.asyncio
async def test_ingredient_and_effect_links_do_not_flow_back_to_medications(engine):
    await engine.merge({"medications": {"m": {"name": "Benadryl"}}})
    graph = await engine.merge(
        {"effects": {"e": {"name": "Drowsiness", "medicationsCausingIt": ["Benadryl"]}}}
    )

    assert graph.effects["Drowsiness"].medications_causing_it == ["Benadryl"]
    assert graph.medications["Benadryl"].side_effects == []

    graph = await engine.merge({"ingredients": {"i": {"name": "Caffeine", "medications": ["Excedrin"]}}})

    assert graph.ingredients["Caffeine"].medications == ["Excedrin"]
    assert "Excedrin" not in graph.medications


@pytest.mark.asyncio
async def test_nameless_and_malformed_records_are_skipped(engine):
    graph = await engine.merge(
        {
            "medications": {"a": {"ingredients": ["Ghost"]}, "b": {"name": "   "}, "c": "Advil"},
            "ingredients": "not a section",
            "effects": {"e": {"name": "Rash"}},
        }
    )

    assert graph.medications == {}
    assert graph.ingredients == {}
    assert list(graph.effects) == ["Rash"]
    assert engine.last_summary.skipped == 3
    assert engine.last_summary.created["effects"] == 1


@pytest.mark.parametrize("fragment", [None, [], "medications", 42])
@pytest.mark.asyncio
async def test_non_object_fragment_is_rejected(engine, storage, fragment):
    with pytest.raises(InvalidInputError):
        await engine.merge(fragment)

    assert storage.saved == []


@pytest.mark.asyncio
async def test_empty_fragment_leaves_graph_unchanged(engine):
    before = (await engine.merge(ADVIL_FRAGMENT)).to_dict()

    after = await engine.merge({})

    assert after.to_dict() == before


@pytest.mark.asyncio
async def test_failed_save_still_returns_merged_graph():
    storage = InMemoryStorage(save_result=False)
    engine = MergeEngine(GraphStore(storage))

    graph = await engine.merge(ADVIL_FRAGMENT)

    assert "Advil" in graph.medications
    assert engine.store.graph is graph


@pytest.mark.asyncio
async def test_snapshot_held_by_reader_is_not_mutated(engine):
    await engine.merge(ADVIL_FRAGMENT)
    snapshot = engine.store.graph
    before = snapshot.to_dict()

    await engine.merge({"medications": {"a": {"name": "Advil", "sideEffects": ["Dizziness"]}}})

    assert snapshot.to_dict() == before
    assert engine.store.graph is not snapshot
    assert engine.store.graph.medications["Advil"].side_effects == ["Stomach upset", "Dizziness"]


@pytest.mark.asyncio
async def test_summary_counts_created_and_updated(engine):
    await engine.merge(ADVIL_FRAGMENT)
    summary = engine.last_summary

    assert summary.created == {"medications": 1, "ingredients": 1, "effects": 2}
    assert summary.updated == {"medications": 0, "ingredients": 1, "effects": 1}


@pytest.mark.asyncio
async def test_concurrent_merges_keep_every_update(engine):
    fragments = [
        {"medications": {"m": {"name": "Multivitamin", "ingredients": [f"Vitamin {i}"]}}}
        for i in range(20)
    ]

    await asyncio.gather(*(engine.merge(fragment) for fragment in fragments))

    graph = engine.store.graph
    assert len(graph.medications["Multivitamin"].ingredients) == 20
    assert len(graph.ingredients) == 20
    assert all(i.medications == ["Multivitamin"] for i in graph.ingredients.values())
