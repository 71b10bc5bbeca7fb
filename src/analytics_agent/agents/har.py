"""
HAR replay: feed a browser HAR export into the capture buffer so a sheet can
be reconciled without driving a browser
"""
import json
import logging
from pathlib import Path
from typing import List

from ..models.capture import RawInterception
from ..utils.url_utils import matches_url_pattern
from .capture import RequestCaptureBuffer

logger = logging.getLogger(__name__)


def load_har_interceptions(har_path: str, method: str = "POST",
                           url_pattern: str = "") -> List[RawInterception]:
    """Matching entries of a HAR 1.2 file as RawInterceptions"""
    path = Path(har_path)
    if not path.exists():
        raise FileNotFoundError(f"HAR file not found: {har_path}")

    with open(path, 'r', encoding='utf-8') as f:
        har_data = json.load(f)

    interceptions = []
    for har_entry in har_data.get('log', {}).get('entries', []):
        request = har_entry.get('request', {})
        response = har_entry.get('response', {})
        url = request.get('url', '')

        if request.get('method', '').upper() != method.upper():
            continue
        if not matches_url_pattern(url, url_pattern):
            continue

        interceptions.append(RawInterception(
            method=request.get('method', method),
            url=url,
            status=response.get('status', 0),
            response_headers={h['name']: h['value'] for h in response.get('headers', [])},
            timestamp=har_entry.get('startedDateTime', ''),
            post_data=request.get('postData', {}).get('text') or None,
        ))

    logger.info(f"Loaded {len(interceptions)} matching entries from {har_path}")
    return interceptions


def replay_har(har_path: str, buffer: RequestCaptureBuffer, method: str = "POST",
               url_pattern: str = "") -> int:
    """Buffer every matching HAR entry untagged; returns the number of captures kept"""
    kept = 0
    for raw in load_har_interceptions(har_path, method, url_pattern):
        kept += len(buffer.on_capture(raw))
    return kept
