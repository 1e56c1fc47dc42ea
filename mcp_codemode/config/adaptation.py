"""Adaptation of configuration values to the process environment."""

import logging
import os
import re
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Replace ``${VAR}`` placeholders with environment values.

    Placeholders whose variable is unset or empty are left as written.
    """
    if environ is None:
        environ = os.environ

    def _substitute(match: re.Match) -> str:
        resolved = environ.get(match.group(1))
        if not resolved:
            logger.debug(f"Environment variable {match.group(1)} not set, keeping placeholder")
            return match.group(0)
        return resolved

    return PLACEHOLDER_PATTERN.sub(_substitute, value)


def expand_mapping(
    values: Optional[Dict[str, str]], environ: Optional[Mapping[str, str]] = None
) -> Optional[Dict[str, str]]:
    """Expand every value of a header or environment mapping."""
    if values is None:
        return None
    return {key: expand_env_vars(value, environ) for key, value in values.items()}
