"""Rule selection and scoring configuration.

The configuration file is the one exported by the rule editor::

    {"version": "1.0", "enabledRules": ["test-http-status-mandatory"], "customTemplates": {}}

It may be written as JSON or YAML. An optional ``scoring`` mapping overrides
the score weights.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from postman_linter.errors import ConfigError
from postman_linter.parser.detect import load_document
from postman_linter.rules.registry import available_rules
from postman_linter.scoring import ScoringPolicy

logger = logging.getLogger(__name__)


class LintConfig(BaseModel):
    """Which rules run (None for all, empty for none) and how the score is computed."""

    rules: list[str] | None = None
    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)


class ExportedConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str | int | float | None = None
    enabled_rules: list[str] | None = Field(default=None, alias="enabledRules")
    custom_templates: dict[str, Any] | None = Field(default=None, alias="customTemplates")
    scoring: ScoringPolicy | None = None


def load_config(path: Path | str) -> LintConfig:
    """Load an exported configuration file into a ``LintConfig``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e

    try:
        data = load_document(text)
    except ValueError as e:
        raise ConfigError(f"failed to parse config {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")

    try:
        exported = ExportedConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e

    if exported.custom_templates:
        logger.info("ignoring %d custom template(s) in %s", len(exported.custom_templates), path)

    return LintConfig(
        rules=select_rules(exported.enabled_rules),
        scoring=exported.scoring or ScoringPolicy(),
    )


def select_rules(rule_ids: list[str] | None) -> list[str] | None:
    """Drop unknown rule ids, keeping the None/empty distinction."""
    if rule_ids is None:
        return None
    known = set(available_rules())
    selected = []
    for rule_id in rule_ids:
        if rule_id in known:
            selected.append(rule_id)
        else:
            logger.warning("unknown rule %r ignored", rule_id)
    return selected
