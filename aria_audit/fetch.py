import os
import logging

import requests

from aria_audit.errors import PageFetchError

logger = logging.getLogger(__name__)

HEADERS = {
    "accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    "user-agent": "aria-audit/0.1 (+accessibility audit)",
}


def fetch_html(url: str, timeout: float = 30.0) -> str:
    """Fetches a page's markup as served (no script execution)."""
    try:
        logger.info(f"Fetching {url}...")
        response = requests.get(url, headers=HEADERS, timeout=timeout)
    except requests.RequestException as e:
        raise PageFetchError(f"Could not fetch {url}: {e}") from e

    if response.status_code != 200:
        raise PageFetchError(f"Fetching {url} returned HTTP {response.status_code}")
    return response.text


def read_html_file(path: str) -> str:
    if not os.path.isfile(path):
        raise PageFetchError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()
