"""Qualified names for aggregated tools.

Every view of the registry (dispatch map, flat catalog, generated
signatures) derives its names from ``qualify`` so they stay in lock-step.
"""

import re
from typing import Tuple

_ILLEGAL_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize(raw: str) -> str:
    """Map any string onto a legal identifier.

    Characters outside ``[A-Za-z0-9_]`` become ``_`` and a leading digit is
    prefixed with ``_``. The mapping is idempotent.
    """
    name = _ILLEGAL_CHARS.sub("_", raw)
    if name[:1].isdigit():
        name = f"_{name}"
    return name


def qualify(backend_id: str, raw_name: str) -> str:
    """Build ``namespace.function`` for a backend's tool.

    Dotted tool names are flattened with underscores so the only dot left is
    the one separating the backend namespace from the tool.
    """
    function = "_".join(sanitize(segment) for segment in raw_name.split("."))
    return f"{sanitize(backend_id)}.{function}"


def split_qualified(qualified_name: str) -> Tuple[str, str]:
    """Split a qualified name into its namespace and function halves."""
    if "." not in qualified_name:
        raise ValueError(f"Tool name must be namespaced: {qualified_name}")
    namespace, function = qualified_name.split(".", 1)
    return namespace, function
