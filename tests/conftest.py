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

# tests/conftest.py
"""Shared fixtures: store builders and metadata factories."""

import pytest

from ui_duplicates.metadata_store import MetadataStore
from ui_duplicates.models import ChunkKind, ChunkMetadata, StoredChunkMetadata, content_hash
from ui_duplicates.vector_store import VectorStore


def _make_metadata(
    file_path: str = "src/components/Card.tsx",
    start_line: int = 1,
    end_line: int = 10,
    kind: ChunkKind = ChunkKind.COMPONENT,
    name: str = "Card",
    **kwargs,
) -> StoredChunkMetadata:
    metadata = kwargs.pop("metadata", None) or ChunkMetadata()
    return StoredChunkMetadata(
        file_path=file_path,
        start_line=start_line,
        end_line=end_line,
        start_column=1,
        end_column=2,
        kind=kind,
        name=name,
        content_hash=content_hash(f"{file_path}:{start_line}:{name}"),
        metadata=metadata,
        **kwargs,
    )


@pytest.fixture
def make_metadata():
    """Factory for StoredChunkMetadata with sensible defaults."""
    return _make_metadata


@pytest.fixture
def stores():
    """A fresh (VectorStore, MetadataStore) pair."""
    return VectorStore(), MetadataStore()


@pytest.fixture
def add_chunk(stores):
    """Insert one chunk into both stores: vector first, then metadata."""
    vector_store, metadata_store = stores

    def add(chunk_id, vector, **meta_kwargs):
        meta = _make_metadata(**meta_kwargs)
        vector_store.add(chunk_id, vector)
        metadata_store.set(chunk_id, meta)
        return meta

    return add
