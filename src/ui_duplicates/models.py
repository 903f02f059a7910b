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
Data models for ui-duplicates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
import hashlib
import re


HOOK_NAME = re.compile(r"^use[A-Z]")


class ChunkKind(str, Enum):
    """Closed set of chunk categories."""

    COMPONENT = "component"
    HOOK = "hook"
    FUNCTION = "function"
    JSX_FRAGMENT = "jsx-fragment"
    COMPONENT_SUMMARY = "component-summary"
    JSX_SECTION = "jsx-section"
    FUNCTION_SUMMARY = "function-summary"
    FUNCTION_SECTION = "function-section"

    def __str__(self) -> str:
        return self.value

    @property
    def is_summary(self) -> bool:
        return self in (ChunkKind.COMPONENT_SUMMARY, ChunkKind.FUNCTION_SUMMARY)

    @property
    def is_section(self) -> bool:
        return self in (ChunkKind.JSX_SECTION, ChunkKind.FUNCTION_SECTION)

    @property
    def is_markup(self) -> bool:
        """Units whose body returns markup."""
        return self in (ChunkKind.COMPONENT, ChunkKind.JSX_FRAGMENT)


def is_hook_name(name: Optional[str]) -> bool:
    """Hooks are named use + capital letter (useState, useCart)."""
    return bool(name) and HOOK_NAME.match(name) is not None


def summary_kind_for(kind: ChunkKind) -> ChunkKind:
    """Summary kind used when a unit of this kind is split."""
    if kind.is_markup:
        return ChunkKind.COMPONENT_SUMMARY
    return ChunkKind.FUNCTION_SUMMARY


def section_kind_for(kind: ChunkKind) -> ChunkKind:
    """Section kind used when a unit of this kind is split."""
    if kind.is_markup:
        return ChunkKind.JSX_SECTION
    return ChunkKind.FUNCTION_SECTION


def content_hash(content: str) -> str:
    """SHA-256 of chunk content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def make_chunk_id(file_path: str, content: str) -> str:
    """
    Stable chunk identifier from file path and exact content.

    Identical content under two paths gives two ids; the same path and
    content always give the same id.
    """
    digest = hashlib.sha256(f"{file_path}\0{content}".encode("utf-8"))
    return digest.hexdigest()[:16]


@dataclass
class ChunkMetadata:
    """Structural facts about a chunk. None means absent, never an empty list."""

    props: Optional[List[str]] = None
    jsx_elements: Optional[List[str]] = None
    hooks: Optional[List[str]] = None
    is_exported: bool = False
    is_default_export: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "is_exported": self.is_exported,
            "is_default_export": self.is_default_export,
        }
        if self.props is not None:
            data["props"] = list(self.props)
        if self.jsx_elements is not None:
            data["jsx_elements"] = list(self.jsx_elements)
        if self.hooks is not None:
            data["hooks"] = list(self.hooks)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkMetadata":
        return cls(
            props=data.get("props"),
            jsx_elements=data.get("jsx_elements"),
            hooks=data.get("hooks"),
            is_exported=bool(data.get("is_exported", False)),
            is_default_export=bool(data.get("is_default_export", False)),
        )


@dataclass
class StoredChunkMetadata:
    """The subset of a chunk kept next to its vector."""

    file_path: str
    start_line: int
    end_line: int
    start_column: int
    end_column: int
    kind: ChunkKind
    name: str
    content_hash: str
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)
    parent_id: Optional[str] = None
    section_index: Optional[int] = None
    section_label: Optional[str] = None

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.start_line}-{self.end_line}"

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_column": self.start_column,
            "end_column": self.end_column,
            "kind": self.kind.value,
            "name": self.name,
            "content_hash": self.content_hash,
            "metadata": self.metadata.to_dict(),
        }
        if self.parent_id is not None:
            data["parent_id"] = self.parent_id
            data["section_index"] = self.section_index
            data["section_label"] = self.section_label
        return data


@dataclass
class CodeChunk:
    """A named, located, self-contained unit of source text."""

    id: str
    kind: ChunkKind
    name: str
    file_path: str           # Relative, posix style
    start_line: int          # 1-indexed
    end_line: int            # Inclusive
    start_column: int        # 1-indexed
    end_column: int
    content: str
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)
    parent_id: Optional[str] = None
    section_index: Optional[int] = None
    section_label: Optional[str] = None

    @property
    def line_count(self) -> int:
        """Number of lines in this chunk."""
        return self.end_line - self.start_line + 1

    @property
    def location(self) -> str:
        """Human-readable location string."""
        return f"{self.file_path}:{self.start_line}-{self.end_line}"

    @property
    def content_hash(self) -> str:
        return content_hash(self.content)

    def preview(self, max_chars: int = 60) -> str:
        """Short preview of the content."""
        first_line = self.content.split("\n")[0].strip()
        if len(first_line) > max_chars:
            return first_line[:max_chars - 3] + "..."
        return first_line

    def to_stored(self) -> StoredChunkMetadata:
        """Descriptor written to the metadata store once the chunk is embedded."""
        return StoredChunkMetadata(
            file_path=self.file_path,
            start_line=self.start_line,
            end_line=self.end_line,
            start_column=self.start_column,
            end_column=self.end_column,
            kind=self.kind,
            name=self.name,
            content_hash=self.content_hash,
            metadata=self.metadata,
            parent_id=self.parent_id,
            section_index=self.section_index,
            section_label=self.section_label,
        )


@dataclass
class DuplicateScore:
    """Pairwise score, computed on demand and never stored."""

    similarity: float
    size_ratio: float
    combined_score: float


@dataclass
class SimilarityResult:
    """A nearest-neighbour hit."""

    id: str
    similarity: float


@dataclass
class LocationMatch:
    """A nearest-neighbour hit with its stored descriptor."""

    id: str
    similarity: float
    metadata: StoredChunkMetadata


@dataclass
class DuplicateMember:
    id: str
    metadata: StoredChunkMetadata


@dataclass
class DuplicateGroup:
    """A connected set of same-kind chunks above the similarity threshold."""

    kind: ChunkKind
    members: List[DuplicateMember]
    avg_similarity: float

    @property
    def size(self) -> int:
        """Number of members in this group."""
        return len(self.members)

    @property
    def file_paths(self) -> List[str]:
        """Unique files in this group, in member order."""
        return list(dict.fromkeys(m.metadata.file_path for m in self.members))

    @property
    def file_count(self) -> int:
        return len(self.file_paths)

    @property
    def representative(self) -> DuplicateMember:
        """First member; groups keep candidate order."""
        return self.members[0]

    def total_lines(self) -> int:
        """Total lines of duplicated code."""
        return sum(m.metadata.line_count for m in self.members)
