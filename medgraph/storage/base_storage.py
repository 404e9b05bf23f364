from abc import ABC, abstractmethod

from medgraph.graph.types import GraphData


class BaseGraphStorage(ABC):
    """
    Base contract for snapshot storage backends.

    A backend persists the whole graph as one document. Loading fails open
    and saving is best-effort: neither raises to the caller.
    """

    @abstractmethod
    async def load(self) -> GraphData:
        """
        Read the persisted snapshot.

        :return: Stored graph, or an empty graph if nothing usable is stored.
        """
        ...

    @abstractmethod
    async def save(self, graph: GraphData) -> bool:
        """
        Overwrite the persisted snapshot with ``graph``.

        :param graph: Graph to persist.
        :return: ``True`` on success, ``False`` if the write failed.
        """
        ...
