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

"""
Report generator - formats duplicate groups and similarity matches.

Supports text, markdown, and json output formats.
"""

from typing import List, Optional, Sequence, Union
from pathlib import Path
from enum import Enum
import json
from datetime import datetime

from .models import DuplicateGroup, LocationMatch, SimilarityResult, StoredChunkMetadata
from .scorer import score_group_members
from .vector_store import VectorStore


class OutputFormat(Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


Match = Union[LocationMatch, SimilarityResult]


def report_groups(
    groups: List[DuplicateGroup],
    root_path: Path,
    threshold: float,
    output_format: Union[OutputFormat, str] = OutputFormat.TEXT,
    vector_store: Optional[VectorStore] = None,
) -> str:
    """
    Generate a report of duplicate groups.

    Args:
        groups: Groups from find_duplicate_groups
        root_path: Root path (for display, and to read representative code)
        threshold: Similarity threshold used
        output_format: Desired output format
        vector_store: When given, members are scored against the representative

    Returns:
        Formatted report string

    Raises:
        ValueError: Unknown output format
    """
    output_format = OutputFormat(output_format)
    root_path = Path(root_path)

    if output_format == OutputFormat.TEXT:
        return _format_text(groups, root_path, threshold, vector_store)
    elif output_format == OutputFormat.MARKDOWN:
        return _format_markdown(groups, root_path, threshold, vector_store)
    elif output_format == OutputFormat.JSON:
        return _format_json(groups, root_path, threshold, vector_store)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def _read_snippet(root_path: Path, meta: StoredChunkMetadata) -> Optional[List[str]]:
    """Source lines of a stored chunk, or None if the file is gone."""
    try:
        text = (root_path / meta.file_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return text.split("\n")[meta.start_line - 1:meta.end_line]


def _member_line(meta: StoredChunkMetadata) -> str:
    if meta.section_label is not None:
        return f"{meta.kind.value}: {meta.name} [{meta.section_label}]"
    return f"{meta.kind.value}: {meta.name}"


def _format_text(
    groups: List[DuplicateGroup],
    root_path: Path,
    threshold: float,
    vector_store: Optional[VectorStore],
) -> str:
    """Plain text format with unicode decorations."""
    lines = []

    total_lines = sum(g.total_lines() for g in groups)
    lines.append(f"🔍 Found {len(groups)} duplicate groups in {root_path}")
    lines.append(f"   Threshold: {threshold:.0%} | Total duplicated lines: ~{total_lines}")
    lines.append("")

    for number, group in enumerate(groups, 1):
        lines.append("━" * 70)
        lines.append(f"Group #{number} ({group.kind.value}): Similarity {group.avg_similarity:.0%}")
        lines.append(f"Files: {group.file_count} | Members: {group.size} | Lines: ~{group.total_lines()}")
        lines.append("━" * 70)
        lines.append("")

        scores = score_group_members(group, vector_store) if vector_store is not None else None

        lines.append("📍 Members:")
        for i, member in enumerate(group.members):
            meta = member.metadata
            lines.append(f"   • {meta.location}")
            lines.append(f"     └─ {_member_line(meta)}")
            if scores is not None and i > 0:
                score = scores[i - 1]
                lines.append(
                    f"     └─ vs #1: similarity {score.similarity:.0%}, "
                    f"size ratio {score.size_ratio:.0%}, score {score.combined_score:.2f}"
                )
        lines.append("")

        rep = group.representative.metadata
        snippet = _read_snippet(root_path, rep)
        if snippet:
            lines.append("📝 Representative Code:")
            lines.append(f"   {rep.location}")
            lines.append("")
            for code_line in snippet[:15]:
                lines.append(f"   │ {code_line}")
            if len(snippet) > 15:
                lines.append("   │ ...")
            lines.append("")

    return "\n".join(lines)


def _format_markdown(
    groups: List[DuplicateGroup],
    root_path: Path,
    threshold: float,
    vector_store: Optional[VectorStore],
) -> str:
    """Markdown format for documentation."""
    lines = []

    total_lines = sum(g.total_lines() for g in groups)
    lines.append("# UI Duplicates Report")
    lines.append("")
    lines.append(f"**Path:** `{root_path}`  ")
    lines.append(f"**Threshold:** {threshold:.0%}  ")
    lines.append(f"**Groups Found:** {len(groups)}  ")
    lines.append(f"**Total Duplicated Lines:** ~{total_lines}")
    lines.append("")

    lines.append("## Table of Contents")
    lines.append("")
    for number, group in enumerate(groups, 1):
        label = group.representative.metadata.name
        lines.append(
            f"- [{label}](#group-{number}) — {group.kind.value}, "
            f"{group.size} members, ~{group.total_lines()} lines"
        )
    lines.append("")
    lines.append("---")
    lines.append("")

    for number, group in enumerate(groups, 1):
        lines.append(f"<a id=\"group-{number}\"></a>")
        lines.append("")
        lines.append(f"## Group {number}: {group.avg_similarity:.0%} Similarity")
        lines.append("")
        lines.append(
            f"**{group.size} {group.kind.value} chunks** across "
            f"**{group.file_count} files** (~{group.total_lines()} lines)"
        )
        lines.append("")

        scores = score_group_members(group, vector_store) if vector_store is not None else None

        lines.append("| File | Lines | Name | Section | Score |")
        lines.append("|------|-------|------|---------|-------|")
        for i, member in enumerate(group.members):
            meta = member.metadata
            section = meta.section_label or "-"
            score = f"{scores[i - 1].combined_score:.2f}" if scores is not None and i > 0 else "-"
            lines.append(
                f"| `{meta.file_path}` | {meta.start_line}-{meta.end_line} "
                f"| {meta.name} | {section} | {score} |"
            )
        lines.append("")

        rep = group.representative.metadata
        snippet = _read_snippet(root_path, rep)
        if snippet:
            lines.append("### Representative Code")
            lines.append("")
            lines.append(f"From `{rep.location}`:")
            lines.append("")
            lines.append("```tsx")
            lines.append("\n".join(snippet[:20]))
            if len(snippet) > 20:
                lines.append("// ... (truncated)")
            lines.append("```")
            lines.append("")

        lines.append("[↑ Back to Table of Contents](#table-of-contents)")
        lines.append("")
        lines.append("---")
        lines.append("")

    return "\n".join(lines)


def _format_json(
    groups: List[DuplicateGroup],
    root_path: Path,
    threshold: float,
    vector_store: Optional[VectorStore],
) -> str:
    """JSON format for programmatic use."""
    data = {
        "meta": {
            "path": str(root_path),
            "threshold": threshold,
            "group_count": len(groups),
            "total_duplicated_lines": sum(g.total_lines() for g in groups),
            "timestamp": datetime.now().isoformat(),
        },
        "groups": [],
    }

    for number, group in enumerate(groups, 1):
        scores = score_group_members(group, vector_store) if vector_store is not None else None

        members = []
        for i, member in enumerate(group.members):
            entry = {"id": member.id}
            entry.update(member.metadata.to_dict())
            if scores is not None and i > 0:
                score = scores[i - 1]
                entry["score"] = {
                    "similarity": round(score.similarity, 4),
                    "size_ratio": round(score.size_ratio, 4),
                    "combined_score": round(score.combined_score, 4),
                }
            members.append(entry)

        data["groups"].append({
            "id": number,
            "kind": group.kind.value,
            "avg_similarity": round(group.avg_similarity, 4),
            "file_count": group.file_count,
            "member_count": group.size,
            "total_lines": group.total_lines(),
            "members": members,
        })

    return json.dumps(data, indent=2)


def report_matches(
    matches: Sequence[Match],
    title: str,
    output_format: Union[OutputFormat, str] = OutputFormat.TEXT,
) -> str:
    """
    Format nearest-neighbour results (--similar / --query).

    Matches without metadata (plain SimilarityResult) are shown by id.
    """
    output_format = OutputFormat(output_format)

    if output_format == OutputFormat.JSON:
        results = []
        for match in matches:
            entry = {"id": match.id, "similarity": round(match.similarity, 4)}
            meta = getattr(match, "metadata", None)
            if meta is not None:
                entry.update(meta.to_dict())
            results.append(entry)
        return json.dumps({"title": title, "matches": results}, indent=2)

    lines = []
    if output_format == OutputFormat.MARKDOWN:
        lines.append(f"# {title}")
        lines.append("")
        if not matches:
            lines.append("_No matches._")
            return "\n".join(lines)
        lines.append("| Similarity | Location | Kind | Name |")
        lines.append("|------------|----------|------|------|")
        for match in matches:
            meta = getattr(match, "metadata", None)
            if meta is None:
                lines.append(f"| {match.similarity:.0%} | `{match.id}` | - | - |")
            else:
                lines.append(
                    f"| {match.similarity:.0%} | `{meta.location}` "
                    f"| {meta.kind.value} | {meta.name} |"
                )
        return "\n".join(lines)

    lines.append(f"🔎 {title}")
    lines.append("")
    if not matches:
        lines.append("   No matches.")
        return "\n".join(lines)
    for match in matches:
        meta = getattr(match, "metadata", None)
        if meta is None:
            lines.append(f"   {match.similarity:.0%}  {match.id}")
        else:
            lines.append(f"   {match.similarity:.0%}  {meta.location}")
            lines.append(f"         └─ {_member_line(meta)}")
    return "\n".join(lines)
