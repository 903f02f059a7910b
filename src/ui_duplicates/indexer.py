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
Code indexer - finds source files, extracts chunks, and fills the stores.

Chunking runs file-parallel; embedding runs one chunk at a time through
whatever embed function the caller hands in.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
from concurrent.futures import ThreadPoolExecutor, as_completed
import fnmatch
import logging
import os

from .chunker import DEFAULT_MAX_LINES, DEFAULT_MIN_LINES, extract_chunks
from .embedder import DEFAULT_MAX_CHARS, EmbedFn, prepare_embedding_input
from .languages import EXTENSION_MAP, detect_language, get_parser
from .metadata_store import MetadataStore
from .models import ChunkKind, CodeChunk
from .vector_store import VectorStore


logger = logging.getLogger(__name__)

# Default patterns to always exclude
DEFAULT_EXCLUDES = [
    "*.git/*",
    "*node_modules/*",
    "*.next/*",
    "*.nuxt/*",
    "*.turbo/*",
    "*.vercel/*",
    "*build/*",
    "*dist/*",
    "*coverage/*",
    "*storybook-static/*",
    "*.cache/*",
    "*.d.ts",
    "*.min.js",
]

DEFAULT_MAX_CHUNKS = 10000


def find_source_files(
    root_path: Path,
    exclude_patterns: Optional[List[str]] = None,
    focus_patterns: Optional[List[str]] = None,
) -> List[Path]:
    """
    Find all TS/JS source files under root_path, sorted.

    Args:
        root_path: Root directory to scan
        exclude_patterns: Glob patterns to exclude (added to defaults)
        focus_patterns: Only include files matching at least one of these

    Returns:
        List of absolute file paths
    """
    root_path = Path(root_path)
    all_excludes = DEFAULT_EXCLUDES + (exclude_patterns or [])
    source_files = []

    for file_path in root_path.rglob("*"):
        if not file_path.is_file():
            continue

        if file_path.suffix.lower() not in EXTENSION_MAP:
            continue

        # Make relative for pattern matching
        rel_path = file_path.relative_to(root_path).as_posix()

        if any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(file_path.as_posix(), pat)
               for pat in all_excludes):
            continue

        if focus_patterns:
            if not any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(file_path.name, pat)
                       for pat in focus_patterns):
                continue

        source_files.append(file_path)

    return sorted(source_files)


def index_codebase(
    root_path: Path,
    exclude_patterns: Optional[List[str]] = None,
    focus_patterns: Optional[List[str]] = None,
    min_lines: int = DEFAULT_MIN_LINES,
    max_lines: Optional[int] = DEFAULT_MAX_LINES,
    kinds: Optional[Iterable[Union[str, ChunkKind]]] = None,
    split_strategy: str = "auto",
    max_chunks: int = DEFAULT_MAX_CHUNKS,
    verbose: bool = False,
    max_workers: Optional[int] = None,
) -> List[CodeChunk]:
    """
    Index a codebase and extract chunks.

    Args:
        root_path: Root directory to scan
        exclude_patterns: Glob patterns to exclude (added to defaults)
        focus_patterns: Only include files matching these patterns
        min_lines: Minimum lines per chunk
        max_lines: Split units longer than this
        kinds: Only keep these chunk kinds
        split_strategy: "auto" or "none"
        max_chunks: Stop after this many chunks (safety limit)
        verbose: Print progress
        max_workers: Chunking threads (default: CPU count)

    Returns:
        List of CodeChunk objects, grouped by file in path order
    """
    root_path = Path(root_path)
    kinds = list(kinds) if kinds is not None else None
    source_files = find_source_files(root_path, exclude_patterns, focus_patterns)

    if verbose:
        print(f"   Found {len(source_files)} source files")

    per_file: Dict[Path, List[CodeChunk]] = {}
    processed = 0

    with ThreadPoolExecutor(max_workers=max_workers or os.cpu_count()) as executor:
        futures = {
            executor.submit(
                _process_file,
                file_path,
                root_path,
                min_lines,
                max_lines,
                kinds,
                split_strategy,
            ): file_path
            for file_path in source_files
        }

        for future in as_completed(futures):
            file_path = futures[future]
            try:
                per_file[file_path] = future.result()
                processed += 1

                if verbose and processed % 50 == 0:
                    print(f"   Processed {processed}/{len(source_files)} files...")

            except ImportError:
                raise
            except Exception as e:
                logger.warning("Failed to process %s: %s", file_path, e)
                if verbose:
                    print(f"   Warning: Failed to process {file_path}: {e}")

    all_chunks: List[CodeChunk] = []
    for file_path in source_files:
        all_chunks.extend(per_file.get(file_path, []))
        if len(all_chunks) >= max_chunks:
            logger.warning("Reached max_chunks=%d, ignoring the rest", max_chunks)
            break

    return all_chunks[:max_chunks]


def _process_file(
    file_path: Path,
    root_path: Path,
    min_lines: int,
    max_lines: Optional[int],
    kinds: Optional[List[Union[str, ChunkKind]]],
    split_strategy: str,
) -> List[CodeChunk]:
    """Process a single file and extract chunks."""
    content = file_path.read_text(encoding="utf-8", errors="replace")

    # One parser per file, tree-sitter parsers are not shared across threads
    parser = get_parser(detect_language(file_path) or "tsx")

    return extract_chunks(
        file_path=file_path.relative_to(root_path).as_posix(),
        content=content,
        min_lines=min_lines,
        max_lines=max_lines,
        kinds=kinds,
        split_strategy=split_strategy,
        parser=parser,
    )


def build_index(
    chunks: List[CodeChunk],
    embed_fn: EmbedFn,
    vector_store: Optional[VectorStore] = None,
    metadata_store: Optional[MetadataStore] = None,
    max_chars: int = DEFAULT_MAX_CHARS,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> Tuple[VectorStore, MetadataStore]:
    """
    Embed chunks and write them into the stores.

    The vector goes in first; metadata is written only once the chunk has
    a vector, so every stored descriptor is backed by one.

    Args:
        chunks: Chunks to index
        embed_fn: text -> vector
        vector_store: Store to fill (default: a new one)
        metadata_store: Store to fill (default: a new one)
        max_chars: Passed to prepare_embedding_input
        on_progress: Called with (done, total) after each chunk

    Returns:
        (vector_store, metadata_store)
    """
    if vector_store is None:
        vector_store = VectorStore()
    if metadata_store is None:
        metadata_store = MetadataStore()

    total = len(chunks)
    for i, chunk in enumerate(chunks):
        text = prepare_embedding_input(chunk, max_chars=max_chars)
        vector_store.add(chunk.id, embed_fn(text))
        metadata_store.set(chunk.id, chunk.to_stored())

        if on_progress is not None:
            on_progress(i + 1, total)

    return vector_store, metadata_store
