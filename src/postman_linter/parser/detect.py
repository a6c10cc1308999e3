"""Decode JSON/YAML documents and sniff whether they are Postman collections."""

import json

import yaml


def load_document(text: str):
    """Decode a JSON document, falling back to YAML.

    Raises ValueError when neither decoder accepts the text.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as json_error:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError:
            raise ValueError(f"not valid JSON or YAML: {json_error}") from None


def looks_like_collection(data) -> bool:
    """Tell whether a decoded document looks like a Postman collection."""
    if not isinstance(data, dict):
        return False
    info = data.get("info")
    if isinstance(info, dict):
        if "_postman_id" in info:
            return True
        schema = info.get("schema")
        if isinstance(schema, str) and "collection" in schema:
            return True
    return isinstance(data.get("item"), list)
