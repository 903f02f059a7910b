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

# tests/test_reporter.py
"""Tests for report formatting."""

import json

import pytest

from ui_duplicates.models import ChunkKind, DuplicateGroup, DuplicateMember, LocationMatch, SimilarityResult
from ui_duplicates.reporter import OutputFormat, report_groups, report_matches


@pytest.fixture
def group(make_metadata):
    return DuplicateGroup(
        kind=ChunkKind.COMPONENT,
        members=[
            DuplicateMember(id="a", metadata=make_metadata(file_path="src/a/Card.tsx", end_line=3, name="CardA")),
            DuplicateMember(id="b", metadata=make_metadata(file_path="src/b/Card.tsx", end_line=3, name="CardB")),
        ],
        avg_similarity=0.93,
    )


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src" / "a"
    src.mkdir(parents=True)
    (src / "Card.tsx").write_text("export function CardA() {\n  return <div />;\n}\n")
    return tmp_path


class TestReportGroups:
    def test_text(self, group, project):
        report = report_groups([group], project, 0.85, OutputFormat.TEXT)

        assert "Found 1 duplicate groups" in report
        assert "Group #1 (component): Similarity 93%" in report
        assert "src/b/Card.tsx:1-3" in report
        assert "│ export function CardA() {" in report

    def test_markdown(self, group, project):
        report = report_groups([group], project, 0.85, "markdown")

        assert report.startswith("# UI Duplicates Report")
        assert "| `src/a/Card.tsx` | 1-3 | CardA | - | - |" in report
        assert "```tsx" in report

    def test_json(self, group, project):
        data = json.loads(report_groups([group], project, 0.85, OutputFormat.JSON))

        assert data["meta"]["group_count"] == 1
        g = data["groups"][0]
        assert g["kind"] == "component"
        assert g["member_count"] == 2
        assert [m["id"] for m in g["members"]] == ["a", "b"]
        assert g["members"][1]["file_path"] == "src/b/Card.tsx"

    def test_scores_with_vector_store(self, stores, add_chunk, project):
        vector_store, metadata_store = stores
        add_chunk("a", [1.0, 0.0], file_path="src/a/Card.tsx", end_line=3)
        add_chunk("b", [1.0, 0.0], file_path="src/b/Card.tsx", end_line=3)
        group = DuplicateGroup(
            kind=ChunkKind.COMPONENT,
            members=[DuplicateMember(id=i, metadata=metadata_store.get(i)) for i in ("a", "b")],
            avg_similarity=1.0,
        )

        data = json.loads(report_groups([group], project, 0.85, "json", vector_store=vector_store))

        members = data["groups"][0]["members"]
        assert "score" not in members[0]
        assert members[1]["score"]["combined_score"] == pytest.approx(1.0)

    def test_missing_source_file_is_fine(self, group, tmp_path):
        report = report_groups([group], tmp_path, 0.85, OutputFormat.TEXT)
        assert "Representative Code" not in report

    def test_unknown_format(self, group, project):
        with pytest.raises(ValueError):
            report_groups([group], project, 0.85, "html")


class TestReportMatches:
    def test_text_with_metadata(self, make_metadata):
        matches = [LocationMatch(id="x", similarity=0.91, metadata=make_metadata(name="Card"))]
        report = report_matches(matches, "Similar to src/Card.tsx:3")

        assert "Similar to src/Card.tsx:3" in report
        assert "91%" in report
        assert "component: Card" in report

    def test_plain_results_show_ids(self):
        report = report_matches([SimilarityResult(id="abc", similarity=0.5)], "Query", "markdown")
        assert "`abc`" in report

    def test_json(self, make_metadata):
        matches = [LocationMatch(id="x", similarity=0.91, metadata=make_metadata())]
        data = json.loads(report_matches(matches, "t", OutputFormat.JSON))

        assert data["matches"][0]["id"] == "x"
        assert data["matches"][0]["kind"] == "component"

    def test_no_matches(self):
        assert "No matches." in report_matches([], "Query")
