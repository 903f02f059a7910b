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
Chunk extraction - turns one file's text into comparable units.

Every named function-like unit becomes a chunk. Units longer than
max_lines are replaced by a summary chunk plus section chunks so that no
single embedding input has to describe a whole page component.
"""

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, Iterable, List, Optional, Union
import logging

from .languages import ParsedFile, ParsedUnit, Span, StructuralParser, detect_language, get_parser
from .models import (
    ChunkKind,
    ChunkMetadata,
    CodeChunk,
    is_hook_name,
    make_chunk_id,
    section_kind_for,
    summary_kind_for,
)


logger = logging.getLogger(__name__)

DEFAULT_MIN_LINES = 3
DEFAULT_MAX_LINES = 100

SPLIT_STRATEGIES = ("auto", "none")


@dataclass
class _Piece:
    """A section-to-be: its span plus what to label it by."""

    span: Span
    node: Any = None              # Markup child, for jsx sections
    shape: Optional[str] = None   # Statement shape, for statement groups


def extract_chunks(
    file_path: Union[str, PurePath],
    content: str,
    min_lines: int = DEFAULT_MIN_LINES,
    max_lines: Optional[int] = DEFAULT_MAX_LINES,
    kinds: Optional[Iterable[Union[str, ChunkKind]]] = None,
    split_strategy: str = "auto",
    parser: Optional[StructuralParser] = None,
) -> List[CodeChunk]:
    """
    Extract chunks from one file.

    Args:
        file_path: Path recorded on each chunk (and hashed into its id)
        content: Full file content
        min_lines: Drop units (and sections) shorter than this
        max_lines: Split units longer than this; None disables splitting
        kinds: Only keep these kinds (default: all)
        split_strategy: "auto" to split oversized units, "none" to keep them whole
        parser: Structural parser (default: picked from the file extension)

    Returns:
        List of CodeChunk objects in source order; [] if the text does not parse
    """
    if isinstance(file_path, PurePath):
        file_path = file_path.as_posix()

    if not content or not content.strip():
        return []

    if parser is None:
        parser = get_parser(detect_language(Path(file_path)) or "tsx")

    try:
        parsed = parser.parse(content)
    except ImportError:
        raise
    except Exception as e:
        logger.warning("Failed to parse %s: %s", file_path, e)
        return []

    if parsed is None:
        logger.warning("Failed to parse %s: syntax errors", file_path)
        return []

    kind_filter = {ChunkKind(k) for k in kinds} if kinds is not None else None
    lines = content.split("\n")
    chunks: List[CodeChunk] = []

    for unit in parsed.units:
        if unit.span.line_count < min_lines:
            continue

        chunk = _unit_chunk(unit, parsed, file_path, lines)
        should_split = (
            split_strategy != "none"
            and max_lines is not None
            and chunk.line_count > max_lines
        )

        if should_split:
            emitted = _split_unit(unit, chunk, file_path, lines, min_lines, max_lines)
        else:
            emitted = [chunk]

        # Split chunks carry their own kinds
        chunks.extend(c for c in emitted if kind_filter is None or c.kind in kind_filter)

    return chunks


def classify_unit(name: str, has_markup: bool) -> ChunkKind:
    """Kind of a whole unit from its name and whether it renders markup."""
    if is_hook_name(name):
        return ChunkKind.HOOK
    if has_markup:
        if name[:1].isupper():
            return ChunkKind.COMPONENT
        return ChunkKind.JSX_FRAGMENT
    return ChunkKind.FUNCTION


def _unit_chunk(
    unit: ParsedUnit,
    parsed: ParsedFile,
    file_path: str,
    lines: List[str],
) -> CodeChunk:
    span = unit.span
    content = "\n".join(lines[span.start_line - 1:span.end_line])

    is_default = (
        parsed.default_export_name is not None
        and unit.name == parsed.default_export_name
    )
    metadata = ChunkMetadata(
        props=unit.param_names() or None,
        jsx_elements=unit.markup_tags() or None,
        hooks=unit.hook_calls() or None,
        is_exported=is_default or unit.name in parsed.exported_names,
        is_default_export=is_default,
    )

    return CodeChunk(
        id=make_chunk_id(file_path, content),
        kind=classify_unit(unit.name, unit.contains_markup()),
        name=unit.name,
        file_path=file_path,
        start_line=span.start_line,
        end_line=span.end_line,
        start_column=span.start_column,
        end_column=span.end_column,
        content=content,
        metadata=metadata,
    )


def _split_unit(
    unit: ParsedUnit,
    chunk: CodeChunk,
    file_path: str,
    lines: List[str],
    min_lines: int,
    max_lines: int,
) -> List[CodeChunk]:
    """Replace an oversized chunk with a summary and its sections."""
    parser = unit.parser
    pieces: List[_Piece] = []
    summary_end = chunk.start_line

    if chunk.kind.is_markup:
        root = unit.markup_root()
        if root is not None:
            children = parser.markup_children(root.node)
            if len(children) >= 2:
                pieces = _keep(_markup_pieces(parser, children, max_lines), min_lines)
                summary_end = root.return_line

    if not pieces:
        summary_end = unit.body_open_line() or chunk.start_line
        pieces = _keep(
            _statement_pieces(unit, chunk, lines, max_lines, summary_end),
            min_lines,
        )

    if not pieces:
        logger.debug("Nothing to split %s into, keeping it whole", chunk.location)
        return [chunk]

    summary_end = max(chunk.start_line, min(summary_end, chunk.end_line))
    summary_content = "\n".join(lines[chunk.start_line - 1:summary_end])
    flags = chunk.metadata

    summary = CodeChunk(
        id=make_chunk_id(file_path, summary_content),
        kind=summary_kind_for(chunk.kind),
        name=chunk.name,
        file_path=file_path,
        start_line=chunk.start_line,
        end_line=summary_end,
        start_column=chunk.start_column,
        end_column=max(len(lines[summary_end - 1]), 1),
        content=summary_content,
        metadata=ChunkMetadata(
            props=flags.props,
            hooks=flags.hooks,
            is_exported=flags.is_exported,
            is_default_export=flags.is_default_export,
        ),
    )

    section_kind = section_kind_for(chunk.kind)
    result = [summary]
    for index, piece in enumerate(pieces):
        span = piece.span
        content = "\n".join(lines[span.start_line - 1:span.end_line])
        jsx = parser.markup_tags(piece.node) if piece.node is not None else None

        result.append(CodeChunk(
            id=make_chunk_id(file_path, content),
            kind=section_kind,
            name=chunk.name,
            file_path=file_path,
            start_line=span.start_line,
            end_line=span.end_line,
            start_column=span.start_column,
            end_column=span.end_column,
            content=content,
            metadata=ChunkMetadata(
                jsx_elements=jsx or None,
                is_exported=flags.is_exported,
                is_default_export=flags.is_default_export,
            ),
            parent_id=summary.id,
            section_index=index,
            section_label=_piece_label(parser, piece, index),
        ))

    return result


def _markup_pieces(parser: StructuralParser, children: List[Any], max_lines: int) -> List[_Piece]:
    """One piece per markup child; descend into children over twice max_lines."""
    pieces = []
    for child in children:
        span = parser.span(child)
        if span.line_count > 2 * max_lines:
            inner = parser.markup_children(child)
            if len(inner) >= 2:
                pieces.extend(_markup_pieces(parser, inner, max_lines))
                continue
        pieces.append(_Piece(span=span, node=child))
    return pieces


def _statement_pieces(
    unit: ParsedUnit,
    chunk: CodeChunk,
    lines: List[str],
    max_lines: int,
    summary_end: int,
) -> List[_Piece]:
    """Contiguous runs of top-level statements, each at most max_lines long."""
    parser = unit.parser
    statements = unit.body_statements()
    if not statements:
        # Expression body: nothing to group, cut the lines after the signature
        return _windows(summary_end + 1, chunk.end_line, max_lines, lines)

    groups: List[List[Any]] = []
    for stmt in statements:
        if groups:
            group_start = parser.span(groups[-1][0]).start_line
            if parser.span(stmt).end_line - group_start + 1 <= max_lines:
                groups[-1].append(stmt)
                continue
        groups.append([stmt])

    pieces = []
    for group in groups:
        first = parser.span(group[0])
        last = parser.span(group[-1])
        if len(group) == 1 and first.line_count > 2 * max_lines:
            pieces.extend(_windows(first.start_line, first.end_line, max_lines, lines))
            continue
        pieces.append(_Piece(
            span=Span(first.start_line, last.end_line, first.start_column, last.end_column),
            shape=parser.statement_shape(group[0]),
        ))
    return pieces


def _windows(start: int, end: int, size: int, lines: List[str]) -> List[_Piece]:
    pieces = []
    for window_start in range(start, end + 1, size):
        window_end = min(window_start + size - 1, end)
        pieces.append(_Piece(span=Span(
            window_start, window_end, 1, max(len(lines[window_end - 1]), 1),
        )))
    return pieces


def _keep(pieces: List[_Piece], min_lines: int) -> List[_Piece]:
    return [p for p in pieces if p.span.line_count >= min_lines]


def _piece_label(parser: StructuralParser, piece: _Piece, index: int) -> str:
    if piece.node is not None:
        return parser.markup_label(piece.node, index)
    if piece.shape:
        return f"{piece.shape}-{index}"
    return f"lines-{piece.span.start_line}-{piece.span.end_line}"
