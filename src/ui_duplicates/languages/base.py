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
Base structural parser interface.

A parser turns one file's text into candidate units. Nodes are whatever the
underlying grammar produces; the chunker only touches them through the
parser's helper methods, so it never depends on the grammar's node types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional, Set


class Span(NamedTuple):
    """1-based line span; end_column is inclusive."""

    start_line: int
    end_line: int
    start_column: int
    end_column: int

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


class MarkupRoot(NamedTuple):
    """The markup a function returns at its top level."""

    return_line: int    # Line the return (or arrow expression body) starts on
    node: Any


@dataclass
class ParsedUnit:
    """A named function-like unit found in a file."""

    name: str
    node: Any                 # The function node itself
    span: Span                # Span of the declaration holding it
    parser: "StructuralParser" = field(repr=False)

    def contains_markup(self) -> bool:
        return self.parser.contains_markup(self.node)

    def markup_tags(self) -> List[str]:
        return self.parser.markup_tags(self.node)

    def hook_calls(self) -> List[str]:
        return self.parser.hook_calls(self.node)

    def param_names(self) -> List[str]:
        return self.parser.param_names(self.node)

    def markup_root(self) -> Optional[MarkupRoot]:
        return self.parser.markup_root(self.node)

    def body_open_line(self) -> Optional[int]:
        return self.parser.body_open_line(self.node)

    def body_statements(self) -> List[Any]:
        return self.parser.body_statements(self.node)


@dataclass
class ParsedFile:
    """Everything the chunker needs from one parsed file."""

    units: List[ParsedUnit] = field(default_factory=list)
    exported_names: Set[str] = field(default_factory=set)
    default_export_name: Optional[str] = None


class StructuralParser(ABC):
    """Abstract base class for language-specific structural parsers."""

    @abstractmethod
    def parse(self, content: str) -> Optional[ParsedFile]:
        """
        Parse file content into candidate units.

        Args:
            content: Full file content

        Returns:
            ParsedFile, or None if the text does not parse cleanly
        """
        pass

    @abstractmethod
    def span(self, node: Any) -> Span:
        pass

    @abstractmethod
    def contains_markup(self, node: Any) -> bool:
        """True if any markup element appears under node."""
        pass

    @abstractmethod
    def markup_tags(self, node: Any) -> List[str]:
        """Distinct element tag names under node, first-seen order."""
        pass

    @abstractmethod
    def hook_calls(self, node: Any) -> List[str]:
        """Distinct hook call names under node, first-seen order."""
        pass

    @abstractmethod
    def param_names(self, func_node: Any) -> List[str]:
        pass

    @abstractmethod
    def markup_root(self, func_node: Any) -> Optional[MarkupRoot]:
        pass

    @abstractmethod
    def markup_children(self, node: Any) -> List[Any]:
        """Significant children of a markup node (elements and expressions)."""
        pass

    @abstractmethod
    def markup_label(self, node: Any, index: int) -> str:
        pass

    @abstractmethod
    def body_open_line(self, func_node: Any) -> Optional[int]:
        """Line of the opening brace, None for expression bodies."""
        pass

    @abstractmethod
    def body_statements(self, func_node: Any) -> List[Any]:
        pass

    @abstractmethod
    def statement_shape(self, node: Any) -> str:
        """Coarse description of a statement, used in section labels."""
        pass
