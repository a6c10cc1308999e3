from pathlib import Path

from postman_linter.parser.base import Collection
from postman_linter.parser.postman import parse_collection
from postman_linter.rules.documentation import (
    check_overview_template,
    check_request_examples,
    extract_metadata,
)

FIXTURES = Path(__file__).parent / "fixtures"

SECTIONS = (
    "## Présentation\nAPI de gestion des commandes.\n\n"
    "## Prérequis\nUn environnement avec base_url.\n\n"
    "## Mode d'emploi\nLancer la collection.\n\n"
    "## Reste à faire\nRien.\n"
)


def _described(description) -> Collection:
    return Collection.model_validate({"info": {"name": "Test", "description": description}, "item": []})


def _messages(issues) -> list[str]:
    return [issue.message for issue in issues]


class TestOverviewTemplate:
    def test_complete_overview(self):
        assert check_overview_template(parse_collection(FIXTURES / "perfect.postman.json")) == []

    def test_empty_description(self):
        issues = check_overview_template(_described(""))
        assert [issue.rule_id for issue in issues] == (
            ["collection-overview-template"] * 4 + ["collection-documentation-structure"] * 3
        )
        assert _messages(issues)[:4] == [
            '❌ Section de documentation manquante : "Prérequis"',
            '❌ Section de documentation manquante : "Présentation"',
            '❌ Section de documentation manquante : "Mode d\'emploi"',
            '❌ Section de documentation manquante : "Reste à faire"',
        ]
        assert all(str(issue.path) == "/info/description" for issue in issues)

    def test_non_string_description(self):
        issues = check_overview_template(_described({"content": "Prérequis", "type": "text/markdown"}))
        assert len(issues) == 7

    def test_english_synonyms(self):
        description = "Requirements, overview, how to use, next steps. " * 3
        issues = check_overview_template(_described(description))
        assert not any(issue.rule_id == "collection-overview-template" for issue in issues)

    def test_key_value_lines(self):
        description = SECTIONS + "\nRéférent : Jane Roe\nVersion de collection : 1.2.3\n"
        assert check_overview_template(_described(description)) == []

    def test_columns_present_but_empty(self):
        description = (
            SECTIONS
            + "\n| Champ | Valeur |\n|---|---|\n| Référent | |\n| Version de collection | |\n"
        )
        assert _messages(check_overview_template(_described(description))) == [
            '👤 Référent manquant : la colonne "Référent" est présente mais vide',
            '🔢 Version de collection manquante : la colonne "Version de collection" est présente mais vide',
        ]

    def test_short_description(self):
        description = "Prérequis, présentation, usage, todo"
        assert "📝 Description de collection trop courte (minimum 100 caractères requis)" in _messages(
            check_overview_template(_described(description))
        )

    def test_length_counted_in_bytes(self):
        messages = _messages(check_overview_template(_described("é" * 60)))
        assert not any("trop courte" in message for message in messages)


class TestExtractMetadata:
    def test_key_value_table(self):
        metadata = extract_metadata(
            "| Champ | Valeur |\n|---|---|\n| **Référent** | **John Doe** |\n| Version de collection | 2.0.0 |\n"
        )
        assert metadata.referent == "John Doe"
        assert metadata.collection_version == "v2.0.0"

    def test_header_table(self):
        metadata = extract_metadata(
            "| Référent | Version de collection | Statut |\n|---|---|---|\n| Jane Roe | v1.4.0 | actif |\n"
        )
        assert metadata.referent == "Jane Roe"
        assert metadata.collection_version == "v1.4.0"

    def test_free_text(self):
        metadata = extract_metadata("Collection version: 3.1.4\nContact : ops team")
        assert metadata.collection_version == "v3.1.4"
        assert metadata.referent == "ops team"

    def test_links(self):
        metadata = extract_metadata(
            "[Collection GitLab](https://gitlab.example.com/qa/collection.json)\n"
            "[Rapport Newman](null)"
        )
        assert metadata.gitlab_collection_link == "https://gitlab.example.com/qa/collection.json"
        assert metadata.gitlab_newman_report_link is None

    def test_nothing_found(self):
        metadata = extract_metadata("")
        assert metadata.referent is None
        assert metadata.collection_version is None


def _request(name="GET Users", responses=None, url=None):
    request = {"method": "GET"}
    if url is not None:
        request["url"] = url
    item = {"name": name, "request": request}
    if responses is not None:
        item["response"] = responses
    return item


def _collection(*items) -> Collection:
    return Collection.model_validate({"item": list(items)})


class TestRequestExamples:
    def test_no_examples(self):
        issues = check_request_examples(_collection({"name": "Users", "item": [_request()]}))
        assert len(issues) == 1
        assert issues[0].rule_id == "request-examples-required"
        assert issues[0].message == '📋 Request "GET Users" has no response examples'
        assert str(issues[0].path) == "/item[0]/item[0]"

    def test_example_without_name_and_body(self):
        issues = check_request_examples(_collection(_request(responses=[{"code": 200, "status": "OK"}])))
        assert [issue.rule_id for issue in issues] == ["documentation-completeness"] * 2
        assert _messages(issues) == [
            '🏷️ Example #1 for "GET Users" is missing name',
            '📄 Example #1 for "GET Users" is missing content',
        ]
        assert all(str(issue.path) == "/item[0]/response[0]" for issue in issues)

    def test_no_content_examples(self):
        collection = _collection(_request(responses=[
            {"name": "Deleted", "code": 204},
            {"name": "Gone", "code": 200, "status": "No Content"},
            {"name": "Empty - No Content", "code": 200},
        ]))
        assert check_request_examples(collection) == []

    def test_second_example_index(self):
        collection = _collection(_request(responses=[
            {"name": "OK", "code": 200, "body": "{}"},
            {"name": "Error", "code": 500, "body": ""},
        ]))
        issues = check_request_examples(collection)
        assert _messages(issues) == ['📄 Example #2 for "GET Users" is missing content']
        assert str(issues[0].path) == "/item[0]/response[1]"

    def test_undocumented_query_params(self):
        collection = _collection(_request(
            responses=[{"name": "OK", "code": 200, "body": "[]"}],
            url={"raw": "{{base_url}}/users?page=1&size=10&x", "query": [
                {"key": "page", "value": "1"},
                {"key": "size", "value": "10", "description": "  "},
                {"value": "x", "description": {"content": "rich text"}},
                {"key": "sort", "description": "Ordre de tri"},
            ]},
        ))
        issues = check_request_examples(collection)
        assert len(issues) == 1
        assert issues[0].message == (
            '📝 Request "GET Users" has undocumented parameters: page, size, paramètre sans nom'
        )
        assert str(issues[0].path) == "/item[0]/request/url/query"
