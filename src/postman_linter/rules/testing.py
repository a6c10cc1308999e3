"""Testing rules: what each request's test scripts must assert."""

import logging
import re
from urllib.parse import urlsplit

from postman_linter.models import (
    AddSchemaValidationFix,
    AddTestFix,
    LintIssue,
    Severity,
    UpdateTestDescriptionFix,
)
from postman_linter.parser.base import Collection, Item
from postman_linter.scope import iter_requests

from .helpers import compile_patterns, matches_any

logger = logging.getLogger(__name__)

STATUS_PATTERNS = compile_patterns([
    r"pm\.response\.to\.have\.status\(",
    r"pm\.response\.to\.be\.success",
    r"pm\.expect\(pm\.response\.code\)",
    r"pm\.response\.code\s*===",
    r"responseCode\.code\s*===",
])

RESPONSE_TIME_PATTERNS = compile_patterns([
    r"responseTime",
    r"response_time",
    r"pm\.response\.responseTime",
    r"pm\.expect\(.*responseTime.*\)",
    r"responseTime.*\.to\.be\.below",
    r"responseTime.*\.to\.be\.lessThan",
    r"(?i)temps de réponse",
    r"(?i)response time",
])

BODY_PATTERNS = compile_patterns([
    r"pm\.response\.json\(\)",
    r"pm\.response\.to\.have\.jsonSchema",
    r"responseJson",
    r"jsonData",
    r"pm\.response\.text\(\)",
    r"\.to\.have\.property\(",
    r"\.to\.include\(",
    r"\.to\.eql\(",
    r"\.to\.equal\(",
    r"\.to\.be\.",
])

NO_BODY_PATTERNS = compile_patterns([
    r"204",
    r"(?i)no.*content",
    r"(?i)delete",
])

SCHEMA_PATTERNS = compile_patterns([
    r"pm\.response\.to\.have\.jsonSchema\s*\(",
    r"jsonSchema",
    r"Schema_Validation",
])

FOLDER_TEST_PATTERN = re.compile(r"pm\.test\s*\(")
TEST_CALL_PATTERN = re.compile(r"pm\.test\s*\(\s*([^,]+?)(?:,|\))")
QUOTED_PATTERN = re.compile(r"[\"']([^\"']+)[\"']")
URL_VARIABLE_PATTERN = re.compile(r"\{\{[^}]+\}\}")
PATH_FALLBACK_PATTERN = re.compile(r"/[^?#]*")

PATH_VARIABLE_PATTERNS = compile_patterns([
    r"pm\.environment\.set\s*\(\s*[\"']([^\"']+)[\"']\s*,\s*[^)]*(?:path|location|uri|url)",
    r"pm\.variables\.set\s*\(\s*[\"']([^\"']+)[\"']\s*,\s*[^)]*(?:path|location|uri|url)",
    r"let\s+(\w+)\s*=\s*[^;]*(?:path|location|uri|url)",
    r"const\s+(\w+)\s*=\s*[^;]*(?:path|location|uri|url)",
])

STATUS_TEST_CODE = (
    "pm.test(location + ' - Status code is 2xx', function() {\n"
    "    pm.response.to.be.success;\n"
    "});"
)

RESPONSE_TIME_TEST_CODE = (
    'pm.test(location + " - Response time is less than 200ms", function () {\n'
    "    pm.expect(pm.response.responseTime).to.be.below(200);\n"
    "});"
)

SCHEMA_TEST_CODE = (
    "// Définir le schéma JSON attendu\n"
    "const schema = {\n"
    '    "type": "object",\n'
    '    "properties": {\n'
    "        // Définir les propriétés attendues\n"
    "    },\n"
    '    "required": []\n'
    "};\n"
    "\n"
    "// Test de validation de schéma\n"
    "if (pm.response.code === 200) {\n"
    '    pm.test(requestName + " - Schema_Validation", () => {\n'
    "        pm.response.to.have.jsonSchema(schema);\n"
    "    });\n"
    "}"
)


def check_http_status(collection: Collection) -> list[LintIssue]:
    """Every request must assert the HTTP status in its own test script."""
    issues = []
    for context in iter_requests(collection):
        if any(matches_any(STATUS_PATTERNS, script) for script in context.item.scripts("test")):
            continue
        issues.append(LintIssue(
            rule_id="test-http-status-mandatory",
            severity=Severity.ERROR,
            message=f"La requête '{context.name('unknown')}' ne teste pas le code de statut HTTP",
            path=context.path,
            fix=AddTestFix(test_code=STATUS_TEST_CODE),
        ))
    return issues


def check_description_with_uri(collection: Collection) -> list[LintIssue]:
    """Test descriptions must name part of the request path.

    Requests under a folder that defines tests are skipped: a folder-level
    test cannot mention every child's URI.
    """
    issues = []
    for context in iter_requests(collection):
        if context.scope.has_pattern(FOLDER_TEST_PATTERN):
            continue
        issues.extend(_check_test_descriptions(context.item, context.path, context.name()))
    return issues


def _check_test_descriptions(item: Item, path, item_name: str) -> list[LintIssue]:
    test_script = item.first_script("test")
    if not test_script:
        return []

    uri_path = _uri_path(item.url)
    if uri_path is None:
        return []

    segments = [
        segment for segment in uri_path.split("/")
        if segment and not segment.startswith(":") and "{" not in segment
    ]
    if not segments:
        return []

    path_variables = _path_variables(item.first_script("prerequest"), test_script)

    issues = []
    for match in TEST_CALL_PATTERN.finditer(test_script):
        raw_description = match.group(1).strip()
        if (
            any(var in raw_description for var in path_variables)
            or "location" in raw_description
            or "requestName" in raw_description
        ):
            continue

        quoted = QUOTED_PATTERN.search(raw_description)
        if quoted is None:
            continue
        description = quoted.group(1)
        lowered = description.lower()
        if any(segment.lower() in lowered for segment in segments):
            continue

        suggested_path = "/" + "/".join(segments[-3:])
        if path_variables:
            suggestion = (
                f'inclure un segment du chemin (ex: "{suggested_path}") '
                f"ou utiliser la variable {' ou '.join(path_variables)}"
            )
        else:
            suggestion = (
                f'inclure un segment du chemin (ex: "{suggested_path}") '
                "ou utiliser la variable location/requestName"
            )
        issues.append(LintIssue(
            rule_id="test-description-with-uri",
            severity=Severity.ERROR,
            message=f'🎯 Test "{description}" dans "{item_name}" devrait {suggestion}',
            path=path,
            fix=UpdateTestDescriptionFix(
                old_description=description,
                new_description=f"location + ' - {description}'",
            ),
        ))
    return issues


def _uri_path(url: str) -> str | None:
    """Path component of a request URL, None when there is none."""
    if not url:
        return None
    cleaned = URL_VARIABLE_PATTERN.sub("http://example.com", url)
    try:
        parts = urlsplit(cleaned)
    except ValueError:
        logger.debug("cannot split URL %r, falling back to path search", url)
        parts = None
    if parts is not None and parts.scheme and parts.netloc:
        return parts.path or "/"
    match = PATH_FALLBACK_PATTERN.search(url)
    return match.group(0) if match else None


def _path_variables(prerequest_script: str, test_script: str) -> list[str]:
    names = set()
    for pattern in PATH_VARIABLE_PATTERNS:
        for script in (prerequest_script, test_script):
            names.update(match.group(1) for match in pattern.finditer(script))
    return sorted(names)


def check_response_time(collection: Collection) -> list[LintIssue]:
    """Every request needs a response-time assertion, its own or a folder's."""
    issues = []
    for context in iter_requests(collection):
        if matches_any(RESPONSE_TIME_PATTERNS, context.item.test_script):
            continue
        if context.scope.has_any(RESPONSE_TIME_PATTERNS):
            continue
        issues.append(LintIssue(
            rule_id="test-response-time-mandatory",
            severity=Severity.WARNING,
            message=f'⏱️ Request "{context.name()}" is missing response time test',
            path=context.path,
            fix=AddTestFix(test_code=RESPONSE_TIME_TEST_CODE),
        ))
    return issues


def check_body_content(collection: Collection) -> list[LintIssue]:
    """Tested requests should assert on the response body.

    Requests without any test (own or inherited) are left to other rules,
    and requests that probably return no body are skipped.
    """
    issues = []
    for context in iter_requests(collection):
        item, scope = context.item, context.scope
        test_script = item.test_script
        if not test_script and not scope.has_tests:
            continue

        if matches_any(BODY_PATTERNS, test_script) or scope.has_any(BODY_PATTERNS):
            continue

        item_name = context.name()
        probably_no_body = any(
            pattern.search(test_script)
            or pattern.search(item.method)
            or pattern.search(item_name)
            or scope.has_pattern(pattern)
            for pattern in NO_BODY_PATTERNS
        )
        if probably_no_body:
            continue

        issues.append(LintIssue(
            rule_id="test-body-content-validation",
            severity=Severity.WARNING,
            message=f'⚠️ Request "{item_name}" should validate response content (body, properties, schema)',
            path=context.path,
        ))
    return issues


def check_schema_validation(collection: Collection) -> list[LintIssue]:
    """GET/POST requests returning JSON should validate it against a schema."""
    issues = []
    for context in iter_requests(collection):
        item = context.item
        url = item.url
        likely_json = item.method in ("GET", "POST") and "/download" not in url and "/file" not in url
        if not likely_json:
            continue
        if matches_any(SCHEMA_PATTERNS, item.test_script) or context.scope.has_any(SCHEMA_PATTERNS):
            continue
        issues.append(LintIssue(
            rule_id="test-schema-validation-recommended",
            severity=Severity.WARNING,
            message=(
                f'🛡️ Requête "{context.name()}" : validation de schéma JSON recommandée '
                "pour améliorer la robustesse des tests"
            ),
            path=context.path,
            fix=AddSchemaValidationFix(suggested_code=SCHEMA_TEST_CODE),
        ))
    return issues
