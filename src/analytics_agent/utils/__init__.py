"""
Shared helpers: logging setup, .env loading and query-string decoding
"""

from .env_loader import load_env_file
from .helpers import setup_logging, get_timestamp, save_json_results, Timer
from .url_utils import (
    extract_query, decode_query_string, decode_payload_events,
    encode_query, contains_any, matches_url_pattern
)

__all__ = [
    'load_env_file',
    'setup_logging',
    'get_timestamp',
    'save_json_results',
    'Timer',
    'extract_query',
    'decode_query_string',
    'decode_payload_events',
    'encode_query',
    'contains_any',
    'matches_url_pattern'
]
