"""Postman Collection v2.x parser.

Turns an exported collection (file, text or decoded mapping) into the
typed ``Collection`` model the rules work on.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from postman_linter.errors import CollectionParseError

from .base import Collection
from .detect import load_document, looks_like_collection

logger = logging.getLogger(__name__)

# Validation and deep copies recurse once per folder level.
MAX_FOLDER_DEPTH = 64


def parse_collection(source: Path | str | dict) -> Collection:
    """Parse a Postman collection from a path, JSON/YAML text or a dict."""
    if isinstance(source, Path):
        try:
            source = source.read_text(encoding="utf-8")
        except OSError as e:
            raise CollectionParseError(f"cannot read collection: {e}") from e

    if isinstance(source, str):
        try:
            data = load_document(source)
        except ValueError as e:
            raise CollectionParseError(f"failed to parse collection: {e}") from e
    else:
        data = source

    if not isinstance(data, dict):
        raise CollectionParseError("failed to parse collection: top-level value must be an object")

    if not looks_like_collection(data):
        logger.warning("document does not look like a Postman collection; linting it anyway")

    depth = _nesting_depth(data)
    if depth > MAX_FOLDER_DEPTH:
        raise CollectionParseError(
            f"folder nesting deeper than {MAX_FOLDER_DEPTH} levels (found {depth})"
        )

    try:
        return Collection.model_validate(data)
    except ValidationError as e:
        raise CollectionParseError(f"invalid collection: {e}") from e


def _nesting_depth(data: dict) -> int:
    """Number of nested ``item`` levels, top-level items counting as 1."""
    deepest = 0
    stack = [(data.get("item"), 1)]
    while stack:
        items, depth = stack.pop()
        if not isinstance(items, list) or not items:
            continue
        deepest = max(deepest, depth)
        stack.extend((child.get("item"), depth + 1) for child in items if isinstance(child, dict))
    return deepest
