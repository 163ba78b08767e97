# SPDX-License-Identifier: MIT
"""HTTP client for the Typst package index."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from .models import IndexPackage
from .snapshot import RegistrySnapshot

logger = logging.getLogger(__name__)

INDEX_URL = "https://packages.typst.org/preview/index.json"
DEFAULT_TIMEOUT = 30.0

_PACKAGE_LIST = TypeAdapter(list[IndexPackage])


class NetworkError(Exception):
    """Raised when the package index or a pull request cannot be fetched or understood."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


def fetch_index(
    url: str = INDEX_URL,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> RegistrySnapshot:
    """Download the full package index.

    Every call performs a fresh request; nothing is cached between calls.

    Args:
        url: Index location
        timeout: Request timeout in seconds
        transport: Custom httpx transport, used by tests to serve canned responses

    Returns:
        Snapshot of all published package versions

    Raises:
        NetworkError: On transport failure, a non-2xx status, a body that is not
            JSON, or JSON that is not an array of package objects
    """
    logger.debug("Fetching package index from %s", url)

    try:
        with httpx.Client(follow_redirects=True, timeout=timeout, transport=transport) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise NetworkError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise NetworkError(url, str(e) or type(e).__name__) from e

    try:
        payload = response.json()
    except ValueError as e:
        raise NetworkError(url, "response is not valid JSON") from e

    try:
        packages = _PACKAGE_LIST.validate_python(payload)
    except ValidationError as e:
        raise NetworkError(url, f"unexpected index format ({e.error_count()} error(s))") from e

    snapshot = RegistrySnapshot(tuple(packages))
    logger.info("Fetched %d package versions from the index", len(snapshot))
    return snapshot
