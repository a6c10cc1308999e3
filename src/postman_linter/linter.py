"""Lint a collection, and optionally fix it and lint the result again."""

import logging

from postman_linter.config import LintConfig
from postman_linter.fixer import apply_fixes
from postman_linter.models import LintAndFixResult, LintResult, ResultSummary
from postman_linter.parser.base import Collection
from postman_linter.rules.registry import run_rules
from postman_linter.scoring import compute_score, compute_stats

logger = logging.getLogger(__name__)


def lint(collection: Collection, config: LintConfig | None = None) -> LintResult:
    config = config or LintConfig()
    issues = run_rules(collection, config.rules)
    stats = compute_stats(collection, issues)
    score = compute_score(stats, config.scoring)
    logger.debug("score %d with %d issue(s)", score, len(issues))
    return LintResult(score=score, issues=issues, stats=stats)


def lint_and_fix(collection: Collection, config: LintConfig | None = None) -> LintAndFixResult:
    """Lint, apply every available fix to a copy, and lint the copy."""
    config = config or LintConfig()
    before = lint(collection, config)
    fixed, fixes_applied = apply_fixes(collection, before.issues)
    after = lint(fixed, config)
    return LintAndFixResult(
        fixed_collection=fixed,
        fixes_applied=fixes_applied,
        before=ResultSummary(score=before.score, issues=len(before.issues)),
        after=ResultSummary(score=after.score, issues=len(after.issues)),
        remaining_issues=after.issues,
    )
