from __future__ import annotations

from typing import Any, Dict, List, Optional

from medgraph.common.env import Env
from medgraph.common.exceptions import ScanError
from medgraph.common.logger import configure_logging
from medgraph.graph.graph_view import neighborhood, to_node_link
from medgraph.graph.merge import MergeEngine
from medgraph.graph.types import AnyEntity, Effect, EntityKind, GraphData
from medgraph.scan.scanner import MedicationScanner, ScanOutcome
from medgraph.scan.vision_client import VisionClient
from medgraph.search_engine.query_engine import QueryEngine
from medgraph.search_engine.types import EffectMatch, NotFound
from medgraph.storage.base_storage import BaseGraphStorage
from medgraph.storage.graph_store import GraphStore
from medgraph.storage.json_storage import JsonGraphStorage


class MedicationGraph:
    """
    High-level facade for scanning, merging and querying the medication graph.

    :param storage: Snapshot backend. Defaults to :class:`JsonGraphStorage`
        in ``Settings.storage_folder``.
    :param vision_client: Optional client used by :meth:`scan`.
    :param score_cutoff: Optional fuzzy search cutoff override.
    """

    def __init__(
        self,
        storage: Optional[BaseGraphStorage] = None,
        vision_client: Optional[VisionClient] = None,
        score_cutoff: Optional[float] = None,
    ):
        self.store = GraphStore(storage or JsonGraphStorage())
        self.merge_engine = MergeEngine(self.store)
        self.query_engine = QueryEngine(self.store, score_cutoff=score_cutoff)
        self.vision_client = vision_client
        self.scanner = MedicationScanner(vision_client, self.merge_engine) if vision_client else None

    @classmethod
    def from_env(cls, env: Env | None = None, storage: Optional[BaseGraphStorage] = None) -> "MedicationGraph":
        """
        Build a scanning-enabled graph from environment configuration.

        Applies ``env.log_level`` to the shared logger and creates the
        vision client from the same settings.

        :param env: Loaded configuration. Read from the environment when omitted.
        :param storage: Optional snapshot backend.
        :return: Uninitialized graph; call :meth:`initialize` before use.
        """
        env = env or Env.from_env()
        configure_logging(env.log_level)
        return cls(storage=storage, vision_client=VisionClient.from_env(env))

    @property
    def graph(self) -> GraphData:
        return self.store.graph

    async def initialize(self) -> "MedicationGraph":
        """
        Load the persisted snapshot.

        :return: Self for method chaining.
        """
        await self.store.initialize()
        return self

    async def merge(self, fragment: Any) -> GraphData:
        """
        Merge a partial graph; see :meth:`MergeEngine.merge`.
        """
        return await self.merge_engine.merge(fragment)

    async def get_by_name(self, kind: EntityKind | str, name: str) -> AnyEntity | NotFound:
        return await self.query_engine.get_by_name(kind, name)

    async def search_effects(self, query: str) -> List[EffectMatch]:
        return await self.query_engine.search_effects(query)

    async def search_effect_entities(self, query: str) -> List[Effect]:
        return await self.query_engine.search_effect_entities(query)

    async def scan(self, image_data_url: str) -> ScanOutcome:
        """
        Read a medication label photo and merge the result.

        :param image_data_url: Photo as a base64 data URL.
        :return: Scan outcome with the merged fragment and new counts.
        :raises ScanError: If no vision client is configured or the scan failed.
        """
        if self.scanner is None:
            raise ScanError("No vision client configured for scanning.")
        return await self.scanner.scan(image_data_url)

    def neighborhood(self, kind: EntityKind | str, name: str, radius: int = 1) -> Dict[str, Any] | NotFound:
        return neighborhood(self.store.graph, kind, name, radius=radius)

    def node_link(self) -> Dict[str, Any]:
        return to_node_link(self.store.graph)

    def stats(self) -> Dict[str, int]:
        return self.store.graph.counts()

    async def close(self) -> None:
        """
        Flush the snapshot and release the vision client.
        """
        await self.store.close()
        if self.vision_client is not None:
            await self.vision_client.async_close()
