import pytest

from postman_linter.parser.base import Collection
from postman_linter.paths import NodePath, ancestors, resolve


def _tree() -> Collection:
    return Collection.model_validate({"item": [
        {"name": "Users", "item": [
            {"name": "GET List users", "request": {"method": "GET"}},
            {"name": "Admin", "item": [
                {"name": "DELETE Purge", "request": {"method": "DELETE"}},
            ]},
        ]},
        {"name": "GET Health", "request": {"method": "GET"}},
    ]})


class TestNodePath:
    def test_string_form(self):
        assert str(NodePath()) == "/"
        assert str(NodePath((0, 1))) == "/item[0]/item[1]"
        assert str(NodePath((2,)).at("request/url")) == "/item[2]/request/url"
        assert str(NodePath(field="info/description")) == "/info/description"

    @pytest.mark.parametrize("text", [
        "/", "/item[0]", "/item[0]/item[13]", "/item[1]/response[0]", "/info/description",
    ])
    def test_parse_inverts_str(self, text):
        assert str(NodePath.parse(text)) == text

    @pytest.mark.parametrize("text", ["/item[x]", "/item[-1]", "/item[", "/items[0]"])
    def test_parse_malformed(self, text):
        assert NodePath.parse(text) is None

    def test_child_and_node(self):
        path = NodePath((0,)).child(3).at("request")
        assert path.items == (0, 3)
        assert path.node == NodePath((0, 3))


class TestResolve:
    def test_root(self):
        tree = _tree()
        assert resolve(tree, "/") is tree
        assert resolve(tree, "/info/description") is tree

    def test_nested_item(self):
        assert resolve(_tree(), "/item[0]/item[1]/item[0]").name == "DELETE Purge"

    def test_field_tail_ignored(self):
        tree = _tree()
        assert resolve(tree, "/item[1]/request/url") is resolve(tree, "/item[1]")

    def test_out_of_range(self):
        assert resolve(_tree(), "/item[5]") is None
        assert resolve(_tree(), "/item[0]/item[0]/item[0]") is None

    def test_malformed(self):
        assert resolve(_tree(), "/item[abc]") is None

    def test_same_node_as_structured_path(self):
        tree = _tree()
        path = NodePath((0, 1, 0))
        assert resolve(tree, path) is resolve(tree, str(path))


class TestAncestors:
    def test_chain_excludes_node(self):
        chain = ancestors(_tree(), NodePath((0, 1, 0)))
        assert [item.name for item in chain] == ["Users", "Admin"]

    def test_top_level(self):
        assert ancestors(_tree(), NodePath((1,))) == []

    def test_unresolvable(self):
        assert ancestors(_tree(), NodePath((9,))) is None
