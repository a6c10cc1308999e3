"""Collection statistics and the 0-100 health score."""

from pydantic import BaseModel

from postman_linter.models import LintIssue, LintStats, Severity
from postman_linter.parser.base import Collection
from postman_linter.scope import walk


class ScoringPolicy(BaseModel):
    """Penalty weights and bonus used by ``compute_score``.

    Each weight is applied to the share of requests affected by issues of that
    severity, so collections of different sizes stay comparable.
    """

    error_weight: float = 15
    warning_weight: float = 8
    info_weight: float = 3
    bonus: float = 5
    bonus_max_warnings: int = 2


def compute_stats(collection: Collection, issues: list[LintIssue]) -> LintStats:
    stats = LintStats(total_tests=_count_tests(collection.event))
    for context in walk(collection):
        item = context.item
        stats.total_tests += _count_tests(item.event)
        if item.is_request:
            stats.total_requests += 1
        elif item.is_folder:
            stats.total_folders += 1

    for issue in issues:
        if issue.severity == Severity.ERROR:
            stats.errors += 1
        elif issue.severity == Severity.WARNING:
            stats.warnings += 1
        else:
            stats.infos += 1
    return stats


def _count_tests(events) -> int:
    return sum(1 for event in events or [] if event.listen == "test")


def compute_score(stats: LintStats, policy: ScoringPolicy | None = None) -> int:
    policy = policy or ScoringPolicy()
    total = max(stats.total_requests, 1)

    def ratio(count: int) -> float:
        return min(count / total, 1.0)

    score = 100.0 - (
        ratio(stats.errors) * policy.error_weight
        + ratio(stats.warnings) * policy.warning_weight
        + ratio(stats.infos) * policy.info_weight
    )
    if stats.errors == 0 and stats.warnings <= policy.bonus_max_warnings:
        score += policy.bonus
    return int(max(0.0, min(100.0, score)))
