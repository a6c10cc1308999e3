"""Documentation rules: the collection overview and per-request examples.

The overview must follow the team template: four sections (Prérequis,
Présentation, Mode d'emploi, Reste à faire) and a metadata table carrying a
Référent and a Version de collection.
"""

import re
from dataclasses import dataclass

from postman_linter.models import LintIssue, Severity
from postman_linter.parser.base import Collection
from postman_linter.paths import NodePath
from postman_linter.scope import iter_requests

from .helpers import compile_patterns

REQUIRED_SECTIONS = [
    ("Prérequis", ["prérequis", "prerequis", "requirements", "pré-requis"]),
    ("Présentation", ["présentation", "presentation", "description", "overview"]),
    ("Mode d'emploi", ["mode d'emploi", "mode d emploi", "utilisation", "usage", "how to use", "instructions"]),
    ("Reste à faire", ["reste à faire", "todo", "à faire", "remaining", "next steps"]),
]

MIN_DESCRIPTION_BYTES = 100

REFERENT_WORD = re.compile(r"(?i)référent")
REFERENT_COLUMN = compile_patterns([r"(?i)\|.*référent.*\|", r"(?i)référent\s*:"])
VERSION_WORD = re.compile(r"(?i)version.*collection")
VERSION_COLUMN = compile_patterns([r"(?i)\|.*version.*collection.*\|", r"(?i)version.*collection\s*:"])

VERSION_PATTERNS = compile_patterns([
    r"(?i)version.*collection\s*:?\s*([v]?\d+\.\d+\.\d+)",
    r"(?i)version\s+de\s+collection\s*:?\s*([v]?\d+\.\d+\.\d+)",
    r"(?i)collection\s+version\s*:?\s*([v]?\d+\.\d+\.\d+)",
])
REFERENT_PATTERNS = compile_patterns([
    r"(?i)référent\s*:?\s*([^\n\r\|*]+)",
    r"(?i)referent\s*:?\s*([^\n\r\|*]+)",
    r"(?i)contact\s*:?\s*([^\n\r\|*]+)",
    r"(?i)responsable\s*:?\s*([^\n\r\|*]+)",
])
BLANK_REFERENT = re.compile(r"^[\*\-\s]*$")
COLLECTION_LINK = re.compile(r"(?i)\[Collection[^\]]*\]\((https?://[^\)]+)\)")
NEWMAN_REPORT_LINK = re.compile(r"(?i)\[Rapport\s+Newman[^\]]*\]\((https?://[^\)]+)\)")

DESCRIPTION_PATH = NodePath(field="info/description")


@dataclass
class CollectionMetadata:
    collection_version: str | None = None
    referent: str | None = None
    gitlab_collection_link: str | None = None
    gitlab_newman_report_link: str | None = None


def extract_metadata(description: str) -> CollectionMetadata:
    """Read the metadata table (or free-text equivalents) of an overview."""
    metadata = CollectionMetadata()
    _extract_from_table(description, metadata)

    if metadata.collection_version is None:
        for pattern in VERSION_PATTERNS:
            match = pattern.search(description)
            if match:
                version = match.group(1).strip()
                metadata.collection_version = version if version.startswith("v") else f"v{version}"
                break

    if metadata.referent is None:
        for pattern in REFERENT_PATTERNS:
            match = pattern.search(description)
            if not match:
                continue
            referent = match.group(1).strip().replace("|", "").replace("*", "").strip()
            if referent and not BLANK_REFERENT.match(referent):
                metadata.referent = referent
                break

    metadata.gitlab_collection_link = _link(COLLECTION_LINK, description)
    metadata.gitlab_newman_report_link = _link(NEWMAN_REPORT_LINK, description)
    return metadata


def _link(pattern: re.Pattern, description: str) -> str | None:
    match = pattern.search(description)
    if match is None:
        return None
    url = match.group(1).strip()
    return None if "null" in url.lower() else url


def _table_cells(line: str, lower: bool = False) -> list[str]:
    cells = []
    for cell in line.split("|"):
        cell = cell.strip().replace("*", "")
        if lower:
            cell = cell.lower()
        if cell:
            cells.append(cell)
    return cells


def _apply_cell(key: str, value: str, metadata: CollectionMetadata) -> None:
    value = value.strip()
    if not value or value == "---":
        return
    if "version" in key and "collection" in key:
        if not value.startswith("v") and value[0].isdigit():
            value = f"v{value}"
        metadata.collection_version = value
    if "référent" in key or "referent" in key:
        metadata.referent = value


def _extract_from_table(description: str, metadata: CollectionMetadata) -> None:
    """Fill metadata from the first Markdown table of the description.

    Both layouts are understood: a two-column key/value table, and a table
    whose header row names the columns and whose rows hold the values.
    """
    in_table = False
    headers: list[str] = []
    for line in description.splitlines():
        trimmed = line.strip()

        if "|" in trimmed and not in_table:
            headers = _table_cells(trimmed, lower=True)
            in_table = True
            continue

        if in_table and trimmed.startswith("|") and "---" in trimmed:
            continue

        if in_table and "|" in trimmed:
            values = _table_cells(trimmed)
            if len(headers) == 2 and len(values) == 2:
                _apply_cell(values[0].strip().lower(), values[1], metadata)
            else:
                for header, value in zip(headers, values):
                    _apply_cell(header, value, metadata)

        if in_table and not trimmed:
            break


def check_overview_template(collection: Collection) -> list[LintIssue]:
    """The collection overview must follow the documentation template."""
    description = collection.description
    lowered = description.lower()
    issues = []

    for section, keywords in REQUIRED_SECTIONS:
        if any(keyword in lowered for keyword in keywords):
            continue
        issues.append(_description_issue(
            "collection-overview-template",
            f'❌ Section de documentation manquante : "{section}"',
        ))

    metadata = extract_metadata(description)
    has_referent_column = bool(REFERENT_WORD.search(description)) and any(
        pattern.search(description) for pattern in REFERENT_COLUMN
    )
    has_version_column = bool(VERSION_WORD.search(description)) and any(
        pattern.search(description) for pattern in VERSION_COLUMN
    )

    if not has_referent_column:
        issues.append(_description_issue(
            "collection-documentation-structure",
            '👤 Tableau de documentation manquant : colonne "Référent" non présente',
        ))
    elif metadata.referent is None:
        issues.append(_description_issue(
            "collection-documentation-structure",
            '👤 Référent manquant : la colonne "Référent" est présente mais vide',
        ))

    if not has_version_column:
        issues.append(_description_issue(
            "collection-documentation-structure",
            '🔢 Tableau de documentation manquant : colonne "Version de collection" non présente',
        ))
    elif metadata.collection_version is None:
        issues.append(_description_issue(
            "collection-documentation-structure",
            '🔢 Version de collection manquante : la colonne "Version de collection" est présente mais vide',
        ))

    if len(description.encode("utf-8")) < MIN_DESCRIPTION_BYTES:
        issues.append(_description_issue(
            "collection-documentation-structure",
            "📝 Description de collection trop courte (minimum 100 caractères requis)",
        ))

    return issues


def _description_issue(rule_id: str, message: str) -> LintIssue:
    return LintIssue(rule_id=rule_id, severity=Severity.ERROR, message=message, path=DESCRIPTION_PATH)


def check_request_examples(collection: Collection) -> list[LintIssue]:
    """Requests need named, non-empty response examples and documented query params."""
    issues = []
    for context in iter_requests(collection):
        item, item_name = context.item, context.name()

        if not item.responses:
            issues.append(LintIssue(
                rule_id="request-examples-required",
                severity=Severity.ERROR,
                message=f'📋 Request "{item_name}" has no response examples',
                path=context.path,
            ))
        for index, response in enumerate(item.responses):
            example_path = context.path.at(f"response[{index}]")
            if not response.name:
                issues.append(LintIssue(
                    rule_id="documentation-completeness",
                    severity=Severity.ERROR,
                    message=f'🏷️ Example #{index + 1} for "{item_name}" is missing name',
                    path=example_path,
                ))
            if not response.body and not response.is_no_content:
                issues.append(LintIssue(
                    rule_id="documentation-completeness",
                    severity=Severity.ERROR,
                    message=f'📄 Example #{index + 1} for "{item_name}" is missing content',
                    path=example_path,
                ))

        query = item.query_params
        if query is None:
            continue
        undocumented = [
            param.key if param.key is not None else "paramètre sans nom"
            for param in query
            if not param.documented
        ]
        if undocumented:
            issues.append(LintIssue(
                rule_id="documentation-completeness",
                severity=Severity.ERROR,
                message=f'📝 Request "{item_name}" has undocumented parameters: {", ".join(undocumented)}',
                path=context.path.at("request/url/query"),
            ))
    return issues
