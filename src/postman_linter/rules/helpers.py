"""Shared helpers for rule modules."""

import logging
import re

logger = logging.getLogger(__name__)


def compile_patterns(patterns: list[str], flags: int = 0) -> list[re.Pattern]:
    """Compile ``patterns``, dropping any that fail to compile.

    A broken pattern only disables itself, never the rule or the run.
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, flags))
        except re.error as e:
            logger.warning("skipping invalid pattern %r: %s", pattern, e)
    return compiled


def matches_any(patterns: list[re.Pattern], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)
