from medgraph.graph.types import (
    EntityKind,
    Medication,
    Ingredient,
    Effect,
    GraphData,
)

__all__ = [
    "EntityKind",
    "Medication",
    "Ingredient",
    "Effect",
    "GraphData",
]
