from __future__ import annotations

import os
from typing import Dict, List, Optional


_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})


def _read(name: str, *, strip: bool = True) -> Optional[str]:
    """Raw variable value, or ``None`` when the variable is unset."""

    raw = os.environ.get(name)
    if raw is None or not strip:
        return raw
    return raw.strip()


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    raw = _read(name, strip=strip)
    return default if raw is None else raw


def env_optional_str(name: str, default: Optional[str] = None, *, strip: bool = True) -> Optional[str]:
    # Empty counts as unset so DEVTEST_INSTANCE_ID="" does not select an instance.
    return _read(name, strip=strip) or default


def env_first(*names: str) -> Optional[str]:
    """Return the first non-empty value among several variable names."""

    for name in names:
        value = env_optional_str(name)
        if value:
            return value
    return None


def env_bool(name: str, default: bool) -> bool:
    word = (_read(name) or "").lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default


def env_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = _read(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def env_csv(name: str, default: List[str]) -> List[str]:
    raw = _read(name)
    if raw is None:
        return list(default)
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item]


def env_pairs(name: str, default: Dict[str, str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE,KEY2=VALUE2`` into a dict; malformed items are skipped."""

    raw = _read(name)
    if raw is None:
        return dict(default)
    out: Dict[str, str] = {}
    for item in raw.split(","):
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        out[key] = value.strip()
    return out
