"""CLI entry point for postman-linter."""

import json
import logging
import sys
from pathlib import Path

import click

from postman_linter.config import LintConfig, load_config, select_rules
from postman_linter.errors import LinterError
from postman_linter.linter import lint, lint_and_fix
from postman_linter.models import LintResult
from postman_linter.parser.base import Collection
from postman_linter.parser.postman import parse_collection
from postman_linter.rules.registry import RULES


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )


def _load_collection(collection_path: Path | None) -> Collection:
    if collection_path is None:
        return parse_collection(click.get_text_stream("stdin").read())
    return parse_collection(collection_path)


def _build_config(config_path: Path | None, rules: str | None) -> LintConfig:
    """Config file first, then ``--rules`` overrides its rule selection."""
    config = load_config(config_path) if config_path is not None else LintConfig()
    if rules is not None:
        rule_ids = [rule_id.strip() for rule_id in rules.split(",") if rule_id.strip()]
        config.rules = select_rules(rule_ids)
    return config


def _render_text(result: LintResult) -> str:
    stats = result.stats
    lines = [
        f"Score: {result.score}/100",
        f"Requests: {stats.total_requests}  Folders: {stats.total_folders}  Tests: {stats.total_tests}",
        f"Errors: {stats.errors}  Warnings: {stats.warnings}  Infos: {stats.infos}",
    ]
    if result.issues:
        lines.append("")
    for issue in result.issues:
        lines.append(f"[{issue.severity.value}] {issue.rule_id} {issue.path}: {issue.message}")
    return "\n".join(lines)


config_option = click.option(
    "-c", "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Exported rule configuration (JSON or YAML).",
)
rules_option = click.option(
    "-r", "--rules", default=None,
    help="Comma-separated rule ids to run; overrides the config. An empty value runs none.",
)
verbose_option = click.option("--verbose", is_flag=True, help="Log debug output to stderr.")


@click.group()
def main():
    """Postman Linter: check Postman collections for testing and documentation defects."""
    pass


@main.command("lint")
@click.argument("collection_path", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@rules_option
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json"]), help="Output format.")
@click.option("--fail-under", type=int, default=None, help="Exit with status 1 when the score is below this value.")
@verbose_option
def lint_cmd(
    collection_path: Path | None,
    config_path: Path | None,
    rules: str | None,
    fmt: str,
    fail_under: int | None,
    verbose: bool,
):
    """Lint COLLECTION_PATH (standard input when omitted)."""
    _setup_logging(verbose)
    try:
        config = _build_config(config_path, rules)
        collection = _load_collection(collection_path)
    except LinterError as e:
        raise click.ClickException(str(e)) from e

    result = lint(collection, config)
    if fmt == "json":
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(_render_text(result))

    if fail_under is not None and result.score < fail_under:
        sys.exit(1)


@main.command("fix")
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Where to write the fixed collection.")
@config_option
@rules_option
@verbose_option
def fix_cmd(collection_path: Path, output: Path, config_path: Path | None, rules: str | None, verbose: bool):
    """Apply automatic fixes to COLLECTION_PATH and write the result."""
    _setup_logging(verbose)
    try:
        config = _build_config(config_path, rules)
        collection = _load_collection(collection_path)
    except LinterError as e:
        raise click.ClickException(str(e)) from e

    result = lint_and_fix(collection, config)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps(result.fixed_collection.to_dict(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    click.echo(f"Fixes applied: {result.fixes_applied}")
    click.echo(f"Score: {result.before.score} -> {result.after.score}")
    click.echo(f"Issues: {result.before.issues} -> {result.after.issues}")
    click.echo(f"Fixed collection saved to {output}")


@main.command("rules")
def rules_cmd():
    """List the available rules."""
    for rule in RULES:
        click.echo(f"{rule.id:<36} {rule.category.value:<15} {rule.severity.value:<8} {rule.description}")
