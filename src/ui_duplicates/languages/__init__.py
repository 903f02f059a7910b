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
Language-specific structural parsing.

Uses tree-sitter grammars for TypeScript and TSX. Plain JavaScript and JSX
go through the TSX grammar, which accepts both.
"""

from pathlib import Path
from typing import Dict, Optional, Type

from .base import MarkupRoot, ParsedFile, ParsedUnit, Span, StructuralParser


# Language registry - maps language name to parser class
_PARSER_REGISTRY: Dict[str, Type[StructuralParser]] = {}

# Extension to language mapping
EXTENSION_MAP = {
    ".tsx": "tsx",
    ".jsx": "tsx",
    ".js": "tsx",
    ".mjs": "tsx",
    ".cjs": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
}

SUPPORTED_LANGUAGES = {"tsx", "typescript"}


def register_parser(language: str, parser_class: Type[StructuralParser]) -> None:
    """Register a parser for a language."""
    _PARSER_REGISTRY[language.lower()] = parser_class


def get_parser(language: str) -> StructuralParser:
    """
    Get a fresh parser instance for the given language.

    Unknown languages get the TSX parser. Instances are not shared, so each
    worker thread can hold its own.
    """
    language = language.lower()

    if language in _PARSER_REGISTRY:
        return _PARSER_REGISTRY[language]()

    from .typescript import TypeScriptParser
    return TypeScriptParser(tsx=(language != "typescript"))


def detect_language(file_path: Path) -> Optional[str]:
    """Detect language from file extension."""
    ext = Path(file_path).suffix.lower()
    return EXTENSION_MAP.get(ext)


__all__ = [
    "EXTENSION_MAP",
    "SUPPORTED_LANGUAGES",
    "MarkupRoot",
    "ParsedFile",
    "ParsedUnit",
    "Span",
    "StructuralParser",
    "detect_language",
    "get_parser",
    "register_parser",
]
