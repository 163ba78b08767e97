# SPDX-License-Identifier: MIT
"""Client for the Typst package index.

Example:
    >>> from tyler_index import fetch_index
    >>> snapshot = fetch_index()
    >>> snapshot.latest("cetz")
    '0.3.4'
"""

__version__ = "0.1.0"

from .models import (
    IndexPackage,
    IndexTemplate,
)
from .snapshot import RegistrySnapshot
from .client import (
    DEFAULT_TIMEOUT,
    INDEX_URL,
    NetworkError,
    fetch_index,
)

__all__ = [
    # Models
    "IndexPackage",
    "IndexTemplate",
    "RegistrySnapshot",
    # Client
    "INDEX_URL",
    "DEFAULT_TIMEOUT",
    "NetworkError",
    "fetch_index",
]
