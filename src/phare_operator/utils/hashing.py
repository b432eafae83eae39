"""Content hashing for the managed config."""

from __future__ import annotations

import hashlib
from typing import Mapping


def hash_config_data(data: Mapping[str, str] | None) -> str:
    """Return a deterministic SHA-256 hex digest of config data.

    Keys are sorted and each entry is encoded as ``key=value\\n``. ConfigMap
    keys cannot contain ``=`` or newlines.

    Changing this encoding changes every hash and rolls every managed workload once.
    """
    digest = hashlib.sha256()
    for key in sorted(data or {}):
        value = (data or {})[key]
        digest.update(f"{key}={'' if value is None else value}\n".encode("utf-8"))
    return digest.hexdigest()
