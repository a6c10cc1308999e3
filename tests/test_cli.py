import json
from pathlib import Path

from click.testing import CliRunner

from postman_linter.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliLint:
    def test_lint_json(self):
        runner = CliRunner()
        result = runner.invoke(main, ["lint", str(FIXTURES / "perfect.postman.json"), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["score"] == 100
        assert data["issues"] == []
        assert data["stats"]["total_requests"] == 2

    def test_lint_text(self):
        runner = CliRunner()
        result = runner.invoke(main, ["lint", str(FIXTURES / "defective.postman.json")])

        assert result.exit_code == 0
        assert "Score:" in result.output
        assert "[error] test-http-status-mandatory /item[0]:" in result.output

    def test_lint_from_stdin(self):
        runner = CliRunner()
        text = (FIXTURES / "perfect.postman.json").read_text(encoding="utf-8")
        result = runner.invoke(main, ["lint", "--format", "json"], input=text)

        assert result.exit_code == 0
        assert json.loads(result.output)["score"] == 100

    def test_rules_option(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "lint", str(FIXTURES / "defective.postman.json"),
            "--rules", "request-naming-convention",
            "--format", "json",
        ])

        assert result.exit_code == 0
        issues = json.loads(result.output)["issues"]
        assert [issue["rule_id"] for issue in issues] == ["request-naming-convention"]
        assert issues[0]["fix"] == {"type": "rename_request", "suggested_name": "GET Users List"}

    def test_empty_rules_option(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "lint", str(FIXTURES / "defective.postman.json"), "-r", "", "--format", "json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.output)["issues"] == []

    def test_config_option(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "lint", str(FIXTURES / "defective.postman.json"),
            "--config", str(FIXTURES / "config.yaml"),
            "--format", "json",
        ])

        assert result.exit_code == 0
        rule_ids = {issue["rule_id"] for issue in json.loads(result.output)["issues"]}
        assert rule_ids == {"hardcoded-secrets", "environment-variables-usage"}

    def test_fail_under(self):
        runner = CliRunner()
        result = runner.invoke(main, ["lint", str(FIXTURES / "defective.postman.json"), "--fail-under", "100"])

        assert result.exit_code == 1

    def test_invalid_collection(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json: [", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["lint", str(broken)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCliFix:
    def test_fix_writes_collection(self, tmp_path):
        output_file = tmp_path / "out" / "fixed.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "fix", str(FIXTURES / "defective.postman.json"),
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert "Fixes applied: 4" in result.output
        fixed = json.loads(output_file.read_text(encoding="utf-8"))
        assert fixed["item"][0]["name"] == "GET Users List"
        assert fixed["info"]["_postman_id"] == "0b5e7d31-9a2c-4f18-b6e4-2d7c9f3a1e50"

    def test_fix_requires_output(self):
        runner = CliRunner()
        result = runner.invoke(main, ["fix", str(FIXTURES / "defective.postman.json")])

        assert result.exit_code != 0


class TestCliRules:
    def test_lists_rules(self):
        runner = CliRunner()
        result = runner.invoke(main, ["rules"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 12
        assert lines[0].startswith("test-http-status-mandatory")
        assert "security" in lines[-1]
