"""Smoke tests: imports work, CLI --help works."""

from click.testing import CliRunner

from graphweaver.__main__ import main


def test_import():
    import graphweaver

    assert graphweaver.layout_graph is not None


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "Lay out a JSON diagram" in result.output
