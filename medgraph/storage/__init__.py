from medgraph.storage.base_storage import BaseGraphStorage
from medgraph.storage.graph_store import GraphStore
from medgraph.storage.json_storage import JsonGraphStorage

__all__ = ["BaseGraphStorage", "GraphStore", "JsonGraphStorage"]
