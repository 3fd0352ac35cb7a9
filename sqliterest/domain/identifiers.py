from __future__ import annotations

import re

_DISALLOWED = re.compile(r"[^A-Za-z0-9_]")


def sanitize_identifier(name: str) -> str:
    """Keep only ASCII letters, digits and underscore, in their original order.

    Every table and column name is passed through here before it is placed in
    SQL text. Nothing is quoted or escaped; an input made only of disallowed
    characters comes back as ``""`` and later fails table validation.
    """
    return _DISALLOWED.sub("", name or "")
