"""Structure and performance rules."""

import re

from postman_linter.models import LintIssue, RenameRequestFix, Severity, UpdateThresholdFix
from postman_linter.parser.base import Collection
from postman_linter.scope import iter_requests

NAMING_PATTERN = re.compile(r"^(GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)\s+")
THRESHOLD_PATTERN = re.compile(r"responseTime.*\.to\.be\.below\((\d+)\)")

MAX_RESPONSE_TIME_MS = 2000


def check_naming_convention(collection: Collection) -> list[LintIssue]:
    """Request names start with their HTTP method, e.g. ``GET Users List``."""
    issues = []
    for context in iter_requests(collection):
        method = context.item.method
        item_name = context.name()
        if not method or NAMING_PATTERN.match(item_name):
            continue
        issues.append(LintIssue(
            rule_id="request-naming-convention",
            severity=Severity.WARNING,
            message=(
                f'📝 Requête "{item_name}" : le nom devrait commencer par la méthode HTTP '
                f'(ex: "{method} {item_name}")'
            ),
            path=context.path,
            fix=RenameRequestFix(suggested_name=f"{method} {item_name}"),
        ))
    return issues


def check_response_time_threshold(collection: Collection) -> list[LintIssue]:
    """Response-time assertions must not allow more than 2000ms."""
    issues = []
    for context in iter_requests(collection):
        for match in THRESHOLD_PATTERN.finditer(context.item.test_script):
            threshold = int(match.group(1))
            if threshold <= MAX_RESPONSE_TIME_MS:
                continue
            issues.append(LintIssue(
                rule_id="response-time-threshold",
                severity=Severity.WARNING,
                message=(
                    f'⏱️ Request "{context.name()}" has response time threshold too high '
                    f"({threshold}ms > {MAX_RESPONSE_TIME_MS}ms recommended)"
                ),
                path=context.path,
                fix=UpdateThresholdFix(current_threshold=threshold, suggested_threshold=MAX_RESPONSE_TIME_MS),
            ))
    return issues
