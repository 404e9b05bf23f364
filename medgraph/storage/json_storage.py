import json
import os
import tempfile

from medgraph.common.global_parameters import DEFAULT_FILENAMES, Settings
from medgraph.common.logger import logger
from medgraph.graph.types import GraphData
from medgraph.storage.base_storage import BaseGraphStorage


class JsonGraphStorage(BaseGraphStorage):
    """
    Snapshot storage using a single local JSON file.

    The document has exactly three top-level keys, ``medications``,
    ``ingredients`` and ``effects``, each mapping an entity name to the
    entity object.
    """

    def __init__(
        self,
        storage_folder: str | None = None,
        filename: str = DEFAULT_FILENAMES["graph_snapshot"],
    ):
        """
        :param storage_folder: Folder holding the snapshot. Defaults to ``Settings.storage_folder``.
        :param filename: Snapshot file name, or an absolute path.
        """
        folder = storage_folder if storage_folder is not None else Settings.storage_folder
        self.filename = os.path.join(folder, filename)

    async def load(self) -> GraphData:
        """
        Read the snapshot file.

        A missing file, an unreadable file, invalid JSON or a document that
        is not a JSON object all yield an empty graph. Records written by
        older versions without relationship arrays get empty arrays.

        :return: Loaded graph.
        """
        if not os.path.exists(self.filename):
            logger.info(f"[JsonGraphStorage] No snapshot at {self.filename}, starting with an empty graph.")
            return GraphData.empty()

        try:
            with open(self.filename, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"[JsonGraphStorage] Cannot read snapshot {self.filename}: {e}. Resetting to an empty graph.")
            return GraphData.empty()

        if not isinstance(data, dict):
            logger.warning(
                f"[JsonGraphStorage] Snapshot {self.filename} is a {type(data).__name__}, not an object. "
                f"Resetting to an empty graph."
            )
            return GraphData.empty()

        graph = GraphData.from_dict(data)
        logger.info(f"[JsonGraphStorage] Loaded snapshot {self.filename}: {graph.counts()}")
        return graph

    async def save(self, graph: GraphData) -> bool:
        """
        Serialize the whole graph and atomically replace the snapshot file.

        :param graph: Graph to persist.
        :return: ``True`` on success; failures are logged and reported as ``False``.
        """
        folder = os.path.dirname(os.path.abspath(self.filename))
        tmp_name = None
        try:
            os.makedirs(folder, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=folder,
                prefix=os.path.basename(self.filename) + ".",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(graph.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.filename)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.exception(f"[JsonGraphStorage] Failed to save {self.filename}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            return False
