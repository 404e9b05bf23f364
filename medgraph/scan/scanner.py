from dataclasses import dataclass
from typing import Any, Dict

from medgraph.common.logger import logger
from medgraph.graph.merge import MergeEngine
from medgraph.scan.parsing import parse_scan_response
from medgraph.scan.vision_client import VisionClient


@dataclass
class ScanOutcome:
    """
    Result of one accepted scan.

    :param fragment: Fragment extracted from the image and merged.
    :param counts: Entity counts of the graph after the merge.
    """
    fragment: Dict[str, Any]
    counts: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Medication scanned and stored successfully",
            "data": self.fragment,
            **self.counts,
        }


class MedicationScanner:
    """
    Photo -> vision model -> fragment -> merge.
    """

    def __init__(self, client: VisionClient, engine: MergeEngine):
        self.client = client
        self.engine = engine

    async def scan(self, image_data_url: str) -> ScanOutcome:
        """
        Read a medication label and merge what the model found.

        :param image_data_url: Photo as a base64 data URL.
        :return: The merged fragment and the new entity counts.
        :raises InvalidInputError: If the image is not a base64 data URL.
        :raises NotAMedicationError: If the model did not recognise a medication.
        :raises ScanError: If the model call failed or returned unparsable output.
        """
        raw = await self.client.analyze(image_data_url)
        fragment = parse_scan_response(raw)
        graph = await self.engine.merge(fragment)
        summary = self.engine.last_summary
        logger.info(
            f"[MedicationScanner] Scan merged: created={summary.created}, updated={summary.updated}, "
            f"skipped={summary.skipped}"
        )
        return ScanOutcome(fragment=fragment, counts=graph.counts())
