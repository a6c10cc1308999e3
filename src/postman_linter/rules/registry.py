"""Ordered table of lint rules and the dispatcher that runs them."""

import logging
from dataclasses import dataclass
from typing import Callable

from postman_linter.models import LintIssue, RuleCategory, Severity
from postman_linter.parser.base import Collection

from . import best_practices, documentation, security, structure, testing

logger = logging.getLogger(__name__)

CheckFunction = Callable[[Collection], list[LintIssue]]


@dataclass(frozen=True)
class Rule:
    id: str
    name: str
    category: RuleCategory
    severity: Severity
    description: str
    check: CheckFunction


# Registration order is the order issues are reported in.
RULES: tuple[Rule, ...] = (
    Rule(
        "test-http-status-mandatory", "HTTP status test",
        RuleCategory.TESTING, Severity.ERROR,
        "Every request asserts the HTTP status code in its own tests",
        testing.check_http_status,
    ),
    Rule(
        "test-description-with-uri", "Test description names the URI",
        RuleCategory.TESTING, Severity.ERROR,
        "Test descriptions mention a segment of the request path or a location variable",
        testing.check_description_with_uri,
    ),
    Rule(
        "test-response-time-mandatory", "Response time test",
        RuleCategory.TESTING, Severity.WARNING,
        "Every request asserts its response time, directly or through a folder",
        testing.check_response_time,
    ),
    Rule(
        "test-body-content-validation", "Response body validation",
        RuleCategory.TESTING, Severity.WARNING,
        "Tested requests also assert on the response body",
        testing.check_body_content,
    ),
    Rule(
        "test-schema-validation-recommended", "JSON schema validation",
        RuleCategory.TESTING, Severity.WARNING,
        "GET and POST requests validate their JSON response against a schema",
        testing.check_schema_validation,
    ),
    Rule(
        "request-naming-convention", "Request naming",
        RuleCategory.STRUCTURE, Severity.WARNING,
        "Request names start with the HTTP method",
        structure.check_naming_convention,
    ),
    Rule(
        "response-time-threshold", "Response time threshold",
        RuleCategory.PERFORMANCE, Severity.WARNING,
        "Response time assertions allow at most 2000ms",
        structure.check_response_time_threshold,
    ),
    Rule(
        "environment-variables-usage", "Environment variables",
        RuleCategory.BEST_PRACTICES, Severity.WARNING,
        "Request URLs use a variable instead of a hardcoded host",
        best_practices.check_environment_variables,
    ),
    Rule(
        "test-coverage-minimum", "Test coverage",
        RuleCategory.BEST_PRACTICES, Severity.WARNING,
        "At least 80% of the requests carry tests",
        best_practices.check_test_coverage,
    ),
    Rule(
        "collection-overview-template", "Collection overview",
        RuleCategory.DOCUMENTATION, Severity.ERROR,
        "The collection description follows the documentation template",
        documentation.check_overview_template,
    ),
    Rule(
        "request-examples-required", "Response examples",
        RuleCategory.DOCUMENTATION, Severity.ERROR,
        "Requests have named, non-empty response examples and documented query parameters",
        documentation.check_request_examples,
    ),
    Rule(
        "hardcoded-secrets", "Hardcoded secrets",
        RuleCategory.SECURITY, Severity.ERROR,
        "Requests do not contain credentials in clear text",
        security.check_hardcoded_secrets,
    ),
)

_BY_ID = {rule.id: rule for rule in RULES}


def available_rules() -> list[str]:
    return [rule.id for rule in RULES]


def get_rule(rule_id: str) -> Rule | None:
    return _BY_ID.get(rule_id)


def run_rules(collection: Collection, enabled: list[str] | None = None) -> list[LintIssue]:
    """Run the enabled rules and concatenate their issues in registry order.

    ``enabled=None`` runs every rule; an empty list runs none. A rule that
    raises is logged and contributes no issues.
    """
    selected = set(enabled) if enabled is not None else None
    issues: list[LintIssue] = []
    for rule in RULES:
        if selected is not None and rule.id not in selected:
            continue
        try:
            found = rule.check(collection)
        except Exception:
            logger.exception("rule %s failed", rule.id)
            continue
        logger.debug("%s: %d issue(s)", rule.id, len(found))
        issues.extend(found)
    return issues
