"""
Template-based prompt construction: prompt modules define template strings and
pass keyword arguments; missing placeholders render as empty strings.
"""

from __future__ import annotations

from typing import Any


class _SafeFormatDict(dict):
    """Mapping that returns empty string for missing keys (for str.format_map)."""

    def __missing__(self, key: str) -> str:
        return ""


def build_from_template(template: str, **kwargs: Any) -> str:
    if not template:
        return ""
    safe = {k: ("" if v is None else v) for k, v in kwargs.items()}
    return template.format_map(_SafeFormatDict(safe))
