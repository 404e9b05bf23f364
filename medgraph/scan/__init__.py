from medgraph.scan.parsing import parse_image_data_url, parse_scan_response
from medgraph.scan.scanner import MedicationScanner, ScanOutcome
from medgraph.scan.vision_client import VisionClient

__all__ = [
    "MedicationScanner",
    "ScanOutcome",
    "VisionClient",
    "parse_image_data_url",
    "parse_scan_response",
]
