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
In-memory metadata store keyed by chunk id.

Pure storage: nothing here derives or mutates the stored descriptors.
"""

from typing import Dict, Iterator, List, Optional, Tuple, Iterable

from .models import ChunkKind, StoredChunkMetadata


class MetadataStore:
    """Keyed collection of StoredChunkMetadata, in insertion order."""

    def __init__(self):
        self._chunks: Dict[str, StoredChunkMetadata] = {}

    def set(self, chunk_id: str, metadata: StoredChunkMetadata) -> None:
        """Add or replace the descriptor for chunk_id."""
        self._chunks[chunk_id] = metadata

    def set_batch(self, items: Iterable[Tuple[str, StoredChunkMetadata]]) -> None:
        for chunk_id, metadata in items:
            self.set(chunk_id, metadata)

    def get(self, chunk_id: str) -> Optional[StoredChunkMetadata]:
        return self._chunks.get(chunk_id)

    def has(self, chunk_id: str) -> bool:
        return chunk_id in self._chunks

    def delete(self, chunk_id: str) -> bool:
        """Remove a descriptor. Returns False if it was not there."""
        return self._chunks.pop(chunk_id, None) is not None

    def clear(self) -> None:
        self._chunks.clear()

    def size(self) -> int:
        return len(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._chunks

    def entries(self) -> Iterator[Tuple[str, StoredChunkMetadata]]:
        """Iterate (id, metadata) pairs in insertion order."""
        # Snapshot so callers may delete while iterating
        yield from list(self._chunks.items())

    def ids(self) -> List[str]:
        return list(self._chunks)

    def file_paths(self) -> List[str]:
        """Unique file paths, in first-seen order."""
        return list(dict.fromkeys(m.file_path for m in self._chunks.values()))

    def get_by_file_path(self, file_path: str) -> List[Tuple[str, StoredChunkMetadata]]:
        return [
            (chunk_id, meta)
            for chunk_id, meta in self._chunks.items()
            if meta.file_path == file_path
        ]

    def remove_by_file_path(self, file_path: str) -> List[str]:
        """Drop every chunk of a file. Returns the removed ids."""
        removed = [chunk_id for chunk_id, _ in self.get_by_file_path(file_path)]
        for chunk_id in removed:
            del self._chunks[chunk_id]
        return removed

    def get_by_content_hash(
        self, content_hash: str
    ) -> Optional[Tuple[str, StoredChunkMetadata]]:
        for chunk_id, meta in self._chunks.items():
            if meta.content_hash == content_hash:
                return chunk_id, meta
        return None

    def get_at_location(
        self, file_path: str, line: int
    ) -> Optional[Tuple[str, StoredChunkMetadata]]:
        """
        Resolve the chunk covering file_path:line.

        A chunk starting exactly on the line wins; otherwise the first chunk
        (in insertion order) whose span contains the line.
        """
        first_containing = None
        for chunk_id, meta in self._chunks.items():
            if meta.file_path != file_path or not meta.contains_line(line):
                continue
            if meta.start_line == line:
                return chunk_id, meta
            if first_containing is None:
                first_containing = (chunk_id, meta)
        return first_containing

    def filter_by_kind(self, kind: ChunkKind) -> List[Tuple[str, StoredChunkMetadata]]:
        kind = ChunkKind(kind)
        return [
            (chunk_id, meta)
            for chunk_id, meta in self._chunks.items()
            if meta.kind == kind
        ]

    def search_by_name(self, query: str) -> List[Tuple[str, StoredChunkMetadata]]:
        """Case-insensitive substring match on chunk names."""
        needle = query.lower()
        return [
            (chunk_id, meta)
            for chunk_id, meta in self._chunks.items()
            if meta.name and needle in meta.name.lower()
        ]
