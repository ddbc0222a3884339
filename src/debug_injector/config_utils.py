from __future__ import annotations

import os
from typing import Dict, Optional


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() if strip else value


def env_optional_str(name: str, default: Optional[str] = None, *, strip: bool = True) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip() if strip else value
    return value or default


def env_first(*names: str) -> Optional[str]:
    """Return the first non-empty value among several env var names."""

    for name in names:
        value = env_optional_str(name)
        if value:
            return value
    return None


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def env_mapping(name: str) -> Dict[str, str]:
    """Parse `key=value,key2=value2` into a dict; malformed pairs are skipped."""

    raw = os.environ.get(name) or ""
    out: Dict[str, str] = {}
    for pair in raw.split(","):
        key, sep, value = pair.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            continue
        out[key] = value
    return out
