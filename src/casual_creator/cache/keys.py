import hashlib
import json
import re
from typing import Any, Dict, Iterable, Optional


def normalize_query(query: str) -> str:
    """Lower-case, trim, collapse whitespace, and make ``:`` safe for composite keys."""
    return re.sub(r"\s+", " ", query.strip().lower()).replace(":", "_")


def short_hash(text: str, length: int = 12) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def build_cache_key(
    query: str,
    recency: Optional[str] = None,
    domains: Optional[Iterable[str]] = None,
    system_prompt: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Composite cache key.

    Combines the normalized query, the recency filter, the sorted domain
    filter, and a hash of the system prompt, so identical queries under a
    different framing do not collide.
    """
    parts = [normalize_query(query)]
    parts.append(f"recency={recency or ''}")
    parts.append("domains=" + ",".join(sorted(d.strip().lower() for d in (domains or []))))
    parts.append(f"ctx={short_hash(system_prompt) if system_prompt else ''}")
    if extra:
        parts.append(f"extra={short_hash(json.dumps(extra, sort_keys=True, default=str))}")
    return "|".join(parts)
