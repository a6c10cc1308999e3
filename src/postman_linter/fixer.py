"""Apply the fix directives attached to lint issues.

Fixes only ever add or rewrite script lines and names, never remove them, and
each handler checks whether its change is already present so that applying
the same issues twice changes nothing the second time.
"""

import logging
import re

from postman_linter.models import (
    AddTestFix,
    LintIssue,
    RenameRequestFix,
    UpdateTestDescriptionFix,
    UpdateThresholdFix,
)
from postman_linter.parser.base import Collection, Event, Item, Script
from postman_linter.paths import NodePath, resolve
from postman_linter.scope import inherited

logger = logging.getLogger(__name__)

SCRIPT_TYPE = "text/javascript"
LOCATION_COMMENT = "// Définir la variable location pour les tests"
LOCATION_LINE = "pm.environment.set('location', pm.request.url.getPath());"

MAX_RESPONSE_TIME_MS = 2000
BELOW_PATTERN = re.compile(r"\.below\((\d+)\)")

# Line families considered the same assertion when adding a test.
DUPLICATE_MARKERS = ("Status code", "responseTime", "response time")


def apply_fixes(collection: Collection, issues: list[LintIssue]) -> tuple[Collection, int]:
    """Return a fixed copy of ``collection`` and the number of fixes that changed it.

    The input collection is never modified. Issues without a fix, issues whose
    path does not resolve to an item, and fix kinds without an automatic
    handler are skipped.
    """
    fixed = collection.model_copy(deep=True)
    applied = 0
    for issue in issues:
        if issue.fix is None:
            continue
        item = resolve(fixed, issue.path)
        if not isinstance(item, Item):
            logger.debug("skipping %s fix: %s does not address an item", issue.rule_id, issue.path)
            continue
        if _apply(fixed, item, issue.path, issue.fix):
            applied += 1
    logger.debug("applied %d of %d issues", applied, len(issues))
    return fixed, applied


def _apply(collection: Collection, item: Item, path: NodePath, fix) -> bool:
    if isinstance(fix, RenameRequestFix):
        return _rename(item, fix)
    if isinstance(fix, AddTestFix):
        return _add_test(collection, item, path, fix)
    if isinstance(fix, UpdateTestDescriptionFix):
        return _update_description(collection, item, path, fix)
    if isinstance(fix, UpdateThresholdFix):
        return _update_threshold(item, fix)
    logger.debug("no automatic handler for %s fixes", fix.type)
    return False


def _rename(item: Item, fix: RenameRequestFix) -> bool:
    if item.name == fix.suggested_name:
        return False
    item.name = fix.suggested_name
    return True


def _events(item: Item) -> list[Event]:
    if item.event is None:
        item.event = []
    return item.event


def _exec(event: Event) -> list[str]:
    """The event's source lines, creating an empty script when missing."""
    if event.script is None:
        event.script = Script(exec=[], type=SCRIPT_TYPE)
    if event.script.exec is None:
        event.script.exec = []
    return event.script.exec


def _ensure_location(collection: Collection, item: Item, path: NodePath) -> bool:
    """Make sure the ``location`` variable is set before the item's tests run."""
    scope = inherited(collection, path)
    if scope is not None and scope.extend(item).has_variable("location"):
        return False

    events = _events(item)
    for event in events:
        if event.listen == "prerequest":
            _exec(event).append(LOCATION_LINE)
            return True

    events.append(Event(
        listen="prerequest",
        script=Script(exec=[LOCATION_COMMENT, LOCATION_LINE], type=SCRIPT_TYPE),
    ))
    return True


def _is_duplicate(line: str, test_code: str) -> bool:
    return any(marker in line and marker in test_code for marker in DUPLICATE_MARKERS)


def _add_test(collection: Collection, item: Item, path: NodePath, fix: AddTestFix) -> bool:
    changed = False
    if "location" in fix.test_code:
        changed = _ensure_location(collection, item, path)

    events = _events(item)
    test_event = next((event for event in events if event.listen == "test"), None)
    if test_event is None:
        events.append(Event(
            listen="test",
            script=Script(exec=fix.test_code.splitlines(), type=SCRIPT_TYPE),
        ))
        return True

    lines = _exec(test_event)
    if any(_is_duplicate(line, fix.test_code) for line in lines):
        return changed
    lines.extend(fix.test_code.splitlines())
    return True


def _update_description(
    collection: Collection, item: Item, path: NodePath, fix: UpdateTestDescriptionFix
) -> bool:
    quoted = (f'"{fix.old_description}"', f"'{fix.old_description}'")

    changed = False
    for event in item.event or []:
        if event.listen != "test" or event.script is None or not event.script.exec:
            continue
        lines = event.script.exec
        for index, line in enumerate(lines):
            if not any(literal in line for literal in quoted):
                continue
            for literal in quoted:
                line = line.replace(literal, fix.new_description)
            lines[index] = line
            changed = True

    if changed and "location" in fix.new_description:
        _ensure_location(collection, item, path)
    return changed


def _update_threshold(item: Item, fix: UpdateThresholdFix) -> bool:
    changed = False
    for event in item.event or []:
        if event.listen != "test" or event.script is None or not event.script.exec:
            continue
        lines = event.script.exec
        for index, line in enumerate(lines):
            if "responseTime" not in line or "below" not in line:
                continue
            rewritten = BELOW_PATTERN.sub(
                lambda match: (
                    f".below({fix.suggested_threshold})"
                    if int(match.group(1)) > MAX_RESPONSE_TIME_MS
                    else match.group(0)
                ),
                line,
            )
            if rewritten != line:
                lines[index] = rewritten
                changed = True
    return changed
