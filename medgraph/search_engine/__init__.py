from medgraph.search_engine.query_engine import QueryEngine
from medgraph.search_engine.types import EffectMatch, NotFound

__all__ = ["QueryEngine", "EffectMatch", "NotFound"]
