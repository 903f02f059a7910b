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
Duplicate scoring - pure functions, no shared state.

Similarity dominates the combined score; agreement in size is a secondary
signal that separates a real copy from a small helper that happens to
embed close to a large component.
"""

from typing import List, Sequence, TypeVar, TYPE_CHECKING

from .models import DuplicateGroup, DuplicateScore

if TYPE_CHECKING:
    from .vector_store import VectorStore


SIMILARITY_WEIGHT = 0.85
SIZE_WEIGHT = 0.15

G = TypeVar("G")


def _lines_of(span) -> int:
    return span.end_line - span.start_line + 1


def calculate_size_ratio(a, b) -> float:
    """
    Ratio of the shorter span to the longer one, in (0, 1].

    Works with anything carrying start_line/end_line (chunks or stored
    metadata).
    """
    lines_a = _lines_of(a)
    lines_b = _lines_of(b)
    if lines_a == lines_b:
        return 1.0
    return min(lines_a, lines_b) / max(lines_a, lines_b)


def calculate_duplicate_score(similarity: float, a, b) -> DuplicateScore:
    """Combine cosine similarity with the size ratio of the two spans."""
    size_ratio = calculate_size_ratio(a, b)
    return DuplicateScore(
        similarity=similarity,
        size_ratio=size_ratio,
        combined_score=similarity * SIMILARITY_WEIGHT + size_ratio * SIZE_WEIGHT,
    )


def calculate_group_average_similarity(similarities: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for no input."""
    if len(similarities) == 0:
        return 0.0
    return float(sum(similarities) / len(similarities))


def sort_duplicate_groups(groups: Sequence[G]) -> List[G]:
    """Largest groups first, then highest average similarity. Stable."""
    return sorted(
        groups,
        key=lambda g: (-len(g.members), -g.avg_similarity),
    )


def score_group_members(
    group: DuplicateGroup,
    vector_store: "VectorStore",
) -> List[DuplicateScore]:
    """
    Score every member after the first against the group's representative.

    Returns one DuplicateScore per non-representative member, in member order.
    """
    rep = group.representative
    scores = []
    for member in group.members[1:]:
        similarity = vector_store.similarity(rep.id, member.id)
        scores.append(calculate_duplicate_score(similarity, rep.metadata, member.metadata))
    return scores
