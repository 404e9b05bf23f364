import asyncio

from medgraph.common.logger import logger
from medgraph.graph.types import GraphData
from medgraph.storage.base_storage import BaseGraphStorage


class GraphStore:
    """
    Owner of the single authoritative in-memory graph.

    The published graph is never mutated in place: writers take
    :attr:`write_lock`, change a copy and :meth:`publish` it, so a reader
    holding :attr:`graph` sees either the state before or after a merge.

    Lifecycle: ``initialize`` -> any number of merges and reads -> ``close``.
    """

    def __init__(self, storage: BaseGraphStorage):
        """
        :param storage: Backend used to load and persist snapshots.
        """
        self.storage = storage
        self._graph = GraphData.empty()
        self._initialized = False
        self.write_lock = asyncio.Lock()

    @property
    def graph(self) -> GraphData:
        """
        The currently published graph. Treat it as read-only.
        """
        return self._graph

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> "GraphStore":
        """
        Load the persisted snapshot, replacing the in-memory graph.

        :return: Self for method chaining.
        """
        async with self.write_lock:
            self._graph = await self.storage.load()
            self._initialized = True
        return self

    def publish(self, graph: GraphData) -> None:
        """
        Make ``graph`` the published graph. Callers must hold :attr:`write_lock`.

        :param graph: Fully built replacement graph.
        """
        self._graph = graph

    async def persist(self) -> bool:
        """
        Write the published graph through the storage backend.

        In-memory state stays authoritative if the write fails.

        :return: Whether the snapshot was written.
        """
        saved = await self.storage.save(self._graph)
        if not saved:
            logger.warning("[GraphStore] Snapshot not persisted; continuing with in-memory state only.")
        return saved

    async def close(self) -> None:
        """
        Flush the published graph once more before shutdown.
        """
        if not self._initialized:
            return
        async with self.write_lock:
            await self.persist()
