from __future__ import annotations
from pathlib import Path

import requests

from .errors import FetchError

USER_AGENT = "usos-rpc/1.0"
DEFAULT_TIMEOUT_SECONDS = 30

_SCHEME_REWRITES = {
    "webcal://": "http://",
    "webcals://": "https://",
}


def to_http_url(location: str) -> str:
    """Map webcal(s):// links onto http(s)://; other locations are returned unchanged."""
    lowered = location.lower()
    for prefix, replacement in _SCHEME_REWRITES.items():
        if lowered.startswith(prefix):
            return replacement + location[len(prefix):]
    return location


def is_remote(location: str) -> bool:
    return to_http_url(location).lower().startswith(("http://", "https://"))


def fetch_content(location: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str:
    if is_remote(location):
        url = to_http_url(location)
        try:
            resp = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}") from e
        return resp.text

    path = Path(location).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise FetchError(f"Cannot read file contents ({path}): {e}") from e
