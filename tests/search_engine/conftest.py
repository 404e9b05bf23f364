import pytest

from medgraph.graph.types import Effect, GraphData, Ingredient, Medication
from medgraph.storage.graph_store import GraphStore
from medgraph.storage.json_storage import JsonGraphStorage


@pytest.fixture
def populated_store(tmp_path):
    store = GraphStore(JsonGraphStorage(storage_folder=str(tmp_path)))
    graph = GraphData.empty()
    graph.medications["Advil"] = Medication(
        name="Advil",
        ingredients=["Ibuprofen"],
        side_effects=["Stomach upset"],
        symptoms_treated=["Headache"],
    )
    graph.ingredients["Ibuprofen"] = Ingredient(name="Ibuprofen", medications=["Advil"])
    graph.effects["Headache"] = Effect(
        name="Headache",
        medications_treating_it=["Advil"],
        description="Pain in the head",
    )
    graph.effects["Stomach upset"] = Effect(
        name="Stomach upset",
        medications_causing_it=["Advil"],
        description="Discomfort in the abdomen after taking the medication",
    )
    graph.effects["Drowsiness"] = Effect(
        name="Drowsiness",
        description="Feeling sleepy or tired",
    )
    store.publish(graph)
    return store
