"""
Read scan results to be filtered.

A source is one of:
- "-": JSON read from stdin
- "https://...": JSON downloaded with HttpClient
- anything else: path to a JSON file

The JSON is either a single result object ({"target", "findings"}) or a
bare list of findings.
"""
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .findings import Result
from .http_client import HttpClient


logger = logging.getLogger(__name__)


def read_source(source: str, client: Optional[HttpClient] = None) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()

    if source.startswith("https://"):
        logger.info(f"Downloading scan results from {source}")
        return (client or HttpClient()).get_bytes(source)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Scan results not found: {source}")
    return path.read_bytes()


def load_result(source: str, client: Optional[HttpClient] = None) -> Result:
    """
    Load scan results from ``source``.

    Raises:
        ValueError: If the content is not valid findings JSON
    """
    content = read_source(source, client)
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Scan results from {source} are not valid JSON: {e}") from e

    if isinstance(raw, list):
        raw = {"target": source, "findings": raw}
    if not isinstance(raw, dict):
        raise ValueError(f"Scan results from {source} must be an object or a list of findings")

    result = Result.from_dict(raw)
    if not result.target:
        result.target = source
    return result
