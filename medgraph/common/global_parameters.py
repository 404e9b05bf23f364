DEFAULT_FILENAMES = {
    "graph_snapshot": "db.json",
}


class Settings:
    """
    Process-wide defaults. Attributes are plain class attributes so callers
    (and tests) can override them before building a graph.
    """
    storage_folder: str = "medgraph_storage"

    # rapidfuzz scores are 0..100; 60 keeps matches within a 0.4 distance
    search_score_cutoff: float = 60.0
    search_limit: int | None = None
