"""End-to-end tests for the graphweaver command line."""

import json
from pathlib import Path

from click.testing import CliRunner

from graphweaver.__main__ import main

EXAMPLES_DIR = Path(__file__).parent.parent.parent / "examples"

FLAT_DOC = json.dumps(
    {
        "nodes": [
            {"id": "a", "label": "Alice", "type": "ACTOR"},
            {"id": "g", "label": "System", "type": "GROUPING"},
            {"id": "u1", "label": "Log in", "type": "ACTIVITY", "parentId": "g"},
            {"id": "u2", "label": "Log out", "type": "ACTIVITY", "parentId": "g"},
        ],
        "edges": [
            {"id": "e1", "source": "a", "target": "u1"},
            {"id": "e2", "source": "u1", "target": "u2", "type": "INCLUDE"},
        ],
        "groupings": {"g": {"grid": True}},
    }
)


def run(args: list[str], stdin: str | None = FLAT_DOC):
    return CliRunner().invoke(main, args, input=stdin)


class TestOutput:
    def test_json_from_stdin(self):
        """Reading stdin and writing JSON is the default."""
        result = run([])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert sorted(n["id"] for n in data["nodes"]) == ["a", "g", "u1", "u2"]
        assert [e["id"] for e in data["edges"]] == ["e1", "e2"]

    def test_svg(self):
        """--format svg emits an SVG document."""
        result = run(["--format", "svg"])
        assert result.exit_code == 0
        assert result.stdout.startswith("<svg")
        assert "Log in" in result.stdout

    def test_input_file(self):
        """A path argument is read instead of stdin."""
        result = run([str(EXAMPLES_DIR / "shop.tree.json")], stdin=None)
        assert result.exit_code == 0
        assert "customer" in {n["id"] for n in json.loads(result.stdout)["nodes"]}

    def test_output_file(self, tmp_path):
        """--output writes the rendering to a file and nothing to stdout."""
        target = tmp_path / "out.svg"
        result = run(["-f", "svg", "-o", str(target)])
        assert result.exit_code == 0
        assert result.stdout == ""
        assert target.read_text().startswith("<svg")

    def test_direction_aliases(self):
        """TD and DOWN are the same direction."""
        assert run(["-d", "TD"]).stdout == run(["-d", "DOWN"]).stdout


class TestOptions:
    def test_no_layout_uses_grid_placements(self):
        """Without the layered pass, root nodes sit at the origin."""
        result = run(["--no-layout"])
        assert result.exit_code == 0
        nodes = {n["id"]: n for n in json.loads(result.stdout)["nodes"]}
        assert (nodes["a"]["x"], nodes["a"]["y"]) == (0, 0)

    def test_flat_and_no_grid(self):
        """--flat and --no-grid still produce a complete layout."""
        result = run(["--flat", "--no-grid"])
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["nodes"]) == 4

    def test_verbose(self):
        """--verbose does not change the output."""
        assert run(["-v"]).stdout == run([]).stdout


class TestErrors:
    def test_invalid_json(self):
        """Malformed input is a parse error."""
        result = run([], stdin="{not json")
        assert result.exit_code == 1
        assert "parse error" in result.output

    def test_unknown_kind(self):
        """Unknown node kinds are parse errors."""
        doc = json.dumps({"nodes": [{"id": "x", "type": "ROBOT"}], "edges": []})
        result = run([], stdin=doc)
        assert result.exit_code == 1
        assert "Unknown node kind" in result.output

    def test_unknown_direction(self):
        """Only RIGHT and DOWN (and their aliases) are accepted."""
        result = run(["-d", "SIDEWAYS"])
        assert result.exit_code == 1
        assert "unknown direction" in result.output

    def test_missing_input_file(self):
        """A path that does not exist is rejected by click."""
        result = run(["does-not-exist.json"], stdin=None)
        assert result.exit_code == 2

    def test_malformed_grid_options(self):
        """Non-numeric grid options are reported as a parse error, not a crash."""
        doc = json.dumps(
            {
                "nodes": [{"id": "G", "type": "GROUPING"}],
                "edges": [],
                "groupings": {"G": {"grid": {"columns": "wide"}}},
            }
        )
        result = run([], stdin=doc)
        assert result.exit_code == 1
        assert "parse error" in result.output
        assert "grid columns" in result.output

    def test_node_entry_not_an_object(self):
        """A non-object node entry is a parse error."""
        result = run([], stdin=json.dumps({"nodes": ["a"], "edges": []}))
        assert result.exit_code == 1
        assert "parse error" in result.output
