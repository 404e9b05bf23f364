__version__ = "0.1.0"

# Graph model and facade
from medgraph.graph.types import EntityKind, Medication, Ingredient, Effect, GraphData
from medgraph.graph.medication_graph import MedicationGraph
from medgraph.graph.merge import MergeEngine

# Storage
from medgraph.storage import GraphStore, JsonGraphStorage

# Queries
from medgraph.search_engine import QueryEngine, NotFound, EffectMatch

# Scanning
from medgraph.scan import MedicationScanner, VisionClient

# Global settings
from medgraph.common.env import Env
from medgraph.common.global_parameters import Settings
from medgraph.common.exceptions import (
    MedGraphError,
    InvalidInputError,
    ScanError,
    NotAMedicationError,
)


__all__ = [
    "__version__",
    "MedicationGraph",
    "MergeEngine",
    "EntityKind",
    "Medication",
    "Ingredient",
    "Effect",
    "GraphData",
    "GraphStore",
    "JsonGraphStorage",
    "QueryEngine",
    "NotFound",
    "EffectMatch",
    "MedicationScanner",
    "VisionClient",
    "Env",
    "Settings",
    "MedGraphError",
    "InvalidInputError",
    "ScanError",
    "NotAMedicationError",
]
