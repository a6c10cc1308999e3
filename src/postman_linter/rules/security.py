"""Security rules: credentials written directly into requests."""

import json
from dataclasses import dataclass

from postman_linter.models import LintIssue, Severity
from postman_linter.parser.base import Collection, Request
from postman_linter.scope import iter_requests

from .helpers import compile_patterns

PREVIEW_LENGTH = 50


@dataclass(frozen=True)
class SecretKind:
    pattern: str
    label: str
    variable: str


SECRET_KINDS = [
    SecretKind(r"""api[_-]?key\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""", "API Key", "{{api_key}}"),
    SecretKind(r"""apikey\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""", "API Key", "{{api_key}}"),
    SecretKind(r"bearer\s+([a-zA-Z0-9_\-\.]{20,})", "Bearer Token", "{{auth_token}}"),
    SecretKind(r"""token\s*[=:]\s*["']?([a-zA-Z0-9_\-\.]{20,})["']?""", "Token", "{{auth_token}}"),
    SecretKind(r"AKIA[0-9A-Z]{16}", "AWS Access Key", "{{aws_access_key}}"),
    SecretKind(
        r"""aws[_-]?secret[_-]?access[_-]?key\s*[=:]\s*["']?([a-zA-Z0-9/\+]{40})["']?""",
        "AWS Secret Key",
        "{{aws_secret_key}}",
    ),
    SecretKind(r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----", "Private Key", "{{private_key}}"),
    SecretKind(r"password=(?!\{\{)[a-zA-Z0-9]{3,}", "Password", "{{password}}"),
    SecretKind(r"pwd=(?!\{\{)[a-zA-Z0-9]{3,}", "Password", "{{password}}"),
    SecretKind(r"""secret\s*[=:]\s*["']([^"'\s]{8,})["']""", "Secret", "{{secret}}"),
    SecretKind(
        r"""client[_-]?secret\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""",
        "Client Secret",
        "{{client_secret}}",
    ),
    SecretKind(r"jdbc:.*password=([^&\s]+)", "Database Password", "{{db_password}}"),
    SecretKind(r"mongodb(?:\+srv)?://[^:]+:([^@]+)@", "MongoDB Password", "{{mongo_password}}"),
    SecretKind(
        r"""client_id\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""",
        "OAuth Client ID",
        "{{client_id}}",
    ),
    SecretKind(r"xox[baprs]-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24,}", "Slack Token", "{{slack_token}}"),
    SecretKind(r"gh[pousr]_[A-Za-z0-9_]{36,}", "GitHub Token", "{{github_token}}"),
    SecretKind(r"sk_live_[a-zA-Z0-9]{24,}", "Stripe Secret Key", "{{stripe_secret_key}}"),
    SecretKind(r"pk_live_[a-zA-Z0-9]{24,}", "Stripe Publishable Key", "{{stripe_public_key}}"),
]

_COMPILED = [
    (compiled, kind)
    for kind in SECRET_KINDS
    for compiled in compile_patterns([kind.pattern])
]


def request_text(request: Request | str | None) -> str:
    """Compact JSON text of a request, keys sorted, as the patterns see it."""
    if isinstance(request, Request):
        data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        data = request
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def check_hardcoded_secrets(collection: Collection) -> list[LintIssue]:
    """Report the first hardcoded credential found in each request."""
    issues = []
    for context in iter_requests(collection):
        text = request_text(context.item.request)
        for pattern, kind in _COMPILED:
            match = pattern.search(text)
            if match is None or "{{" in match.group(0):
                continue
            matched = match.group(0)
            preview = matched[:PREVIEW_LENGTH] + "..." if len(matched) > PREVIEW_LENGTH else matched
            issues.append(LintIssue(
                rule_id="hardcoded-secrets",
                severity=Severity.ERROR,
                message=(
                    f'🔒 {kind.label} hardcodé détecté "{preview}" dans \'{context.name("unknown")}\' '
                    f"- Utilisez des variables d'environnement ({kind.variable})"
                ),
                path=context.path.at("request"),
            ))
            break
    return issues
