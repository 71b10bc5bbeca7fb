"""
URL and query-string utilities for analytics hits
"""
from fnmatch import fnmatch
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote, unquote, urlparse


def extract_query(url: str) -> str:
    """Return everything after the first '?' (fragment excluded)"""
    if '?' not in url:
        return ""
    query = url.split('?', 1)[1]
    return query.split('#', 1)[0]


def decode_component(text: str) -> str:
    """Percent-decode without treating '+' as a space, like decodeURIComponent"""
    return unquote(text, errors='replace')


def decode_query_string(query: str) -> Dict[str, str]:
    """Decode a query string into a flat mapping, later duplicates win.

    Pairs are split before percent-decoding so encoded '&' and '=' stay inside
    their value.
    """
    params: Dict[str, str] = {}
    if not query:
        return params

    for pair in query.split('&'):
        if not pair:
            continue
        if '=' in pair:
            key, value = pair.split('=', 1)
        else:
            key, value = pair, ""
        params[decode_component(key)] = decode_component(value)

    return params


def decode_payload_events(url: str, post_data: Optional[str] = None) -> List[Dict[str, str]]:
    """Decode an analytics hit into one parameter mapping per event.

    GA4 batches several events into the POST body, one query string per line.
    Each line is layered over the parameters shared in the URL.
    """
    shared = decode_query_string(extract_query(url))
    lines = [line.strip() for line in (post_data or "").splitlines() if line.strip()]

    if not lines:
        return [shared]

    events = []
    for line in lines:
        params = dict(shared)
        params.update(decode_query_string(line))
        events.append(params)
    return events


def encode_query(params: Dict[str, str]) -> str:
    """Percent-encode a mapping into a query string"""
    return '&'.join(f"{quote(str(k), safe='')}={quote(str(v), safe='')}" for k, v in params.items())


def contains_any(text: str, needles: Iterable[str]) -> bool:
    """True when any non-empty needle is a substring of text"""
    return any(needle and needle in text for needle in needles)


def matches_url_pattern(url: str, pattern: str) -> bool:
    """Glob match of a URL against a pattern such as '*://*analytics.google.com/g/collect*'"""
    if not pattern:
        return True
    return fnmatch(url, pattern)


def extract_domain(url: str) -> str:
    return urlparse(url).netloc
