"""Placeholder detection for postback URL templates."""

from __future__ import annotations

import re

PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")


def detect_placeholders(url_template: str) -> tuple[str, ...]:
    """Return the unique `{name}` placeholders of a template in first-seen order."""
    names: list[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(url_template):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return tuple(names)
