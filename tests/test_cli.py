# UI Duplicates - Find near-duplicate components, hooks and functions
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

# tests/test_cli.py
"""
Tests for the uidup command.

Tests verify:
1. Duplicate groups are reported in every format
2. --similar and --query run nearest-neighbour search
3. Bad options are usage errors
4. Model status works without a model on disk

The embedding model is replaced by a keyword-count embedder.
"""

import json

import numpy as np
import pytest
from click.testing import CliRunner

from ui_duplicates import cli, languages
from ui_duplicates.cli import main, parse_location
from ui_duplicates.languages.typescript import TypeScriptParser


CARD = """\
export function {name}({{ title }}: Props) {{
  return (
    <div className="card">
      <h2>{{title}}</h2>
    </div>
  );
}}
"""

TOGGLE = """\
export function useToggle(initial = false) {
  const [on, setOn] = useState(initial);
  const toggle = () => setOn(v => !v);
  return [on, toggle] as const;
}
"""

FEATURES = ["<div", "<h2", "useState", "=>"]


class KeywordEmbedder:
    """Counts a few tokens; identical markup gives identical vectors."""

    def __call__(self, text):
        return np.array([text.count(f) for f in FEATURES] + [1.0], dtype=np.float32)

    def embed_query(self, text):
        return self(text)


@pytest.fixture
def requires_grammar():
    pytest.importorskip("tree_sitter_typescript", reason="tree-sitter-typescript not installed")


@pytest.fixture
def project(tmp_path, monkeypatch, requires_grammar):
    (tmp_path / "src" / "a").mkdir(parents=True)
    (tmp_path / "src" / "b").mkdir(parents=True)
    (tmp_path / "src" / "a" / "Card.tsx").write_text(CARD.format(name="CardA"))
    (tmp_path / "src" / "b" / "Card.tsx").write_text(CARD.format(name="CardB"))
    (tmp_path / "src" / "useToggle.ts").write_text(TOGGLE)

    monkeypatch.setattr(cli, "load_embedder", lambda model_path, verbose=False: KeywordEmbedder())
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


# =============================================================================
# Grouping
# =============================================================================


class TestGroups:
    def test_json_to_stdout_is_quiet(self, runner, project):
        result = runner.invoke(main, [str(project), "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["meta"]["group_count"] == 1
        group = data["groups"][0]
        assert group["kind"] == "component"
        assert sorted(m["file_path"] for m in group["members"]) == ["src/a/Card.tsx", "src/b/Card.tsx"]

    def test_text_report(self, runner, project):
        result = runner.invoke(main, [str(project)])

        assert result.exit_code == 0, result.output
        assert "Stage 1: Indexing codebase" in result.stdout
        assert "Group #1 (component)" in result.stdout

    def test_output_file_format_from_extension(self, runner, project):
        out = project / "report.md"
        result = runner.invoke(main, [str(project), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("# UI Duplicates Report")

    def test_bad_output_extension(self, runner, project):
        result = runner.invoke(main, [str(project), "-o", str(project / "report.html")])
        assert result.exit_code == 1

    def test_kind_filter_can_leave_nothing_to_group(self, runner, project):
        result = runner.invoke(main, [str(project), "-k", "hook"])

        assert result.exit_code == 0, result.output
        assert "No duplicates found" in result.stdout

    def test_config_file_is_read(self, runner, project):
        (project / ".uiduprc").write_text("[duplicates]\nmin_group = 3\n")

        result = runner.invoke(main, [str(project)])

        assert result.exit_code == 0, result.output
        assert "No duplicates found" in result.stdout


# =============================================================================
# Nearest-neighbour search
# =============================================================================


class TestSearch:
    def test_similar_to_location(self, runner, project):
        result = runner.invoke(main, [str(project), "--similar", "src/a/Card.tsx:3", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["title"] == "Similar to src/a/Card.tsx:3"
        assert [m["file_path"] for m in data["matches"]] == ["src/b/Card.tsx"]

    def test_similar_outside_any_chunk(self, runner, project):
        result = runner.invoke(main, [str(project), "--similar", "src/a/Card.tsx:99"])
        assert result.exit_code == 1

    def test_query(self, runner, project):
        result = runner.invoke(main, [str(project), "--query", "<div><h2>", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert sorted(m["name"] for m in data["matches"]) == ["CardA", "CardB"]

    def test_similar_and_query_conflict(self, runner, project):
        result = runner.invoke(main, [str(project), "--similar", "src/a/Card.tsx:3", "--query", "card"])
        assert result.exit_code == 2


# =============================================================================
# Option handling
# =============================================================================


class TestOptions:
    def test_threshold_out_of_range(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path), "-t", "1.5"])

        assert result.exit_code == 2
        assert "threshold" in result.output

    def test_max_lines_below_min_lines(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path), "--min-lines", "10", "--max-lines", "5"])
        assert result.exit_code == 2

    def test_path_required(self, runner):
        result = runner.invoke(main, [])
        assert result.exit_code == 1

    def test_empty_directory(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path)])
        assert result.exit_code == 1

    def test_missing_grammar(self, runner, tmp_path, monkeypatch):
        class MissingGrammarParser(TypeScriptParser):
            def parse(self, content):
                raise ImportError("tree-sitter-typescript not installed")

        monkeypatch.setitem(languages._PARSER_REGISTRY, "tsx", MissingGrammarParser)
        (tmp_path / "Card.tsx").write_text(CARD.format(name="Card"))

        result = runner.invoke(main, [str(tmp_path)])

        assert result.exit_code == 1
        assert "Indexing failed" in result.output
        assert "tree-sitter-typescript" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_model_status(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("UIDUP_MODELS_DIR", str(tmp_path))

        result = runner.invoke(main, ["--model-status"])

        assert result.exit_code == 0
        assert "not downloaded" in result.output
        assert str(tmp_path) in result.output


class TestParseLocation:
    def test_valid(self):
        assert parse_location("src/Card.tsx:12") == ("src/Card.tsx", 12)

    @pytest.mark.parametrize("value", ["src/Card.tsx", "src/Card.tsx:abc", "src/Card.tsx:0", ":3"])
    def test_invalid(self, value):
        import click

        with pytest.raises(click.BadParameter):
            parse_location(value)
