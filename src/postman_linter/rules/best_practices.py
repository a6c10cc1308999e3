"""Collection-wide hygiene: environment variables and test coverage."""

import re

from postman_linter.models import LintIssue, Severity, UseEnvironmentVariableFix
from postman_linter.parser.base import Collection
from postman_linter.paths import NodePath
from postman_linter.scope import iter_requests

HARDCODED_URL_PATTERN = re.compile(r"^https?://[^{]")
LOCAL_HOSTS = ("localhost", "127.0.0.1")

MIN_COVERAGE_PERCENT = 80.0


def check_environment_variables(collection: Collection) -> list[LintIssue]:
    """Request URLs should come from a ``{{variable}}``, not a hardcoded host."""
    issues = []
    for context in iter_requests(collection):
        url = context.item.url
        hardcoded = (
            HARDCODED_URL_PATTERN.match(url) is not None
            and "{{" not in url
            and not any(host in url for host in LOCAL_HOSTS)
        )
        if not hardcoded:
            continue
        issues.append(LintIssue(
            rule_id="environment-variables-usage",
            severity=Severity.WARNING,
            message=(
                f'🔧 Request "{context.name()}" should use an environment variable '
                "for the URL (ex: {{base_url}})"
            ),
            path=context.path.at("request/url"),
            fix=UseEnvironmentVariableFix(field="url", suggested_variable="{{base_url}}"),
        ))
    return issues


def coverage_counts(collection: Collection) -> tuple[int, int]:
    """Return (requests, requests with a non-blank test script)."""
    total = with_tests = 0
    for context in iter_requests(collection):
        total += 1
        if any(script.strip() for script in context.item.scripts("test")):
            with_tests += 1
    return total, with_tests


def check_test_coverage(collection: Collection) -> list[LintIssue]:
    """At least 80% of the requests should carry tests."""
    total, with_tests = coverage_counts(collection)
    if total == 0:
        return []
    coverage = with_tests / total * 100.0
    if coverage >= MIN_COVERAGE_PERCENT:
        return []
    return [LintIssue(
        rule_id="test-coverage-minimum",
        severity=Severity.WARNING,
        message=(
            f"📊 Couverture de tests insuffisante : {coverage:.1f}% "
            f"({with_tests}/{total} requêtes testées). Minimum recommandé : 80%"
        ),
        path=NodePath(),
    )]
