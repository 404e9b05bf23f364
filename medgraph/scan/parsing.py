"""
Turning raw vision-model output into a graph fragment.

The model is asked for bare JSON but frequently wraps it in a markdown code
block, and signals unrecognisable images with a sentinel object.
"""

import json
import re
from typing import Any, Dict, Tuple

from medgraph.common.exceptions import InvalidInputError, NotAMedicationError, ScanError
from medgraph.common.logger import logger
from medgraph.scan.prompts import NOT_A_MEDICATION

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_DATA_URL = re.compile(r"^data:image/([\w+.-]+);base64,(.+)$", re.DOTALL)


def extract_json_text(text: str) -> str:
    """
    Return the JSON payload of a model response, unwrapping a code block if present.
    """
    text = (text or "").strip()
    match = _CODE_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text


def parse_scan_response(text: str) -> Dict[str, Any]:
    """
    Parse a model response into a merge fragment.

    :param text: Raw model output.
    :return: Fragment with at least one medication.
    :raises ScanError: If the payload is not a JSON object.
    :raises NotAMedicationError: If the model returned the sentinel or no medications.
    """
    payload = extract_json_text(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error(f"[parse_scan_response] Model output is not JSON: {payload[:200]!r}")
        raise ScanError(f"Failed to parse model response: {e}") from e

    if not isinstance(data, dict):
        raise ScanError(f"Model response must be a JSON object, got {type(data).__name__}")

    if data.get("error") == NOT_A_MEDICATION:
        logger.warning("[parse_scan_response] Model reported the image is not a medication.")
        raise NotAMedicationError(
            "The scanned item does not appear to be a medication. "
            "Please try again with a medication label."
        )

    medications = data.get("medications")
    if not isinstance(medications, dict) or not medications:
        logger.warning("[parse_scan_response] No medications found in model response.")
        raise NotAMedicationError(
            "No medication could be identified in the image. "
            "Please try again with a clearer medication label."
        )

    return data


def parse_image_data_url(data_url: str) -> Tuple[str, str]:
    """
    Split a ``data:image/<type>;base64,<data>`` URL.

    :param data_url: Image encoded as a data URL.
    :return: ``(mime_type, base64_data)``.
    :raises InvalidInputError: If the string is not a base64 image data URL.
    """
    if not isinstance(data_url, str) or not data_url:
        raise InvalidInputError("No image provided.")
    match = _DATA_URL.match(data_url.strip())
    if not match:
        raise InvalidInputError("Invalid image format. Expected base64 data URL.")
    return f"image/{match.group(1)}", match.group(2)
