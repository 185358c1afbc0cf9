"""
Canonical JSON serialization and hashing helpers.

Provides one canonical JSON policy and SHA-256 helpers so identifiers derived from
sources and manifests stay stable across runs. Stdlib only.

Notes:
    - Canonical JSON: sort_keys=True, separators=(",", ":"), ensure_ascii=False.
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - Used for cache file names (tidylab.io.fetch) and report digests (tidylab.lessons.render).
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_text",
    "hash_mapping",
    "source_key",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sorted keys and compact separators.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_text(s: str) -> str:
    """Compute the SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_mapping(obj: Mapping[str, Any]) -> str:
    """
    Hash a mapping via its canonical JSON form.

    Key order does not affect the result:

    >>> hash_mapping({"a": 1, "b": 2}) == hash_mapping({"b": 2, "a": 1})
    True
    """
    return hash_text(json_dumps_canonical(dict(obj)))


def source_key(source: str, length: int = 16) -> str:
    """Short stable key for a CSV source (URL or path), used as a cache file stem."""
    return hash_text(source.strip())[:length]
