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
Duplicate finder - groups similar chunks using the vector index.

Groups are connected components of a similarity graph: two chunks of the
same kind are linked when their cosine similarity meets the threshold.
Kinds are never mixed, so a hook that happens to embed close to a
component does not pull the two into one group.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from .metadata_store import MetadataStore
from .models import (
    ChunkKind,
    DuplicateGroup,
    DuplicateMember,
    LocationMatch,
    SimilarityResult,
    StoredChunkMetadata,
)
from .scorer import calculate_group_average_similarity, sort_duplicate_groups
from .vector_store import VectorStore, VectorLike


logger = logging.getLogger(__name__)

DEFAULT_GROUP_THRESHOLD = 0.85
DEFAULT_QUERY_THRESHOLD = 0.5
DEFAULT_TOP = 10

Candidate = Tuple[str, StoredChunkMetadata]


def find_duplicate_groups(
    vector_store: VectorStore,
    metadata_store: MetadataStore,
    threshold: float = DEFAULT_GROUP_THRESHOLD,
    min_group_size: int = 2,
    kind: Optional[ChunkKind] = None,
    exclude_paths: Optional[Sequence[str]] = None,
    max_workers: int = 1,
) -> List[DuplicateGroup]:
    """
    Find groups of semantically similar chunks.

    Args:
        vector_store: Store holding one vector per chunk id
        metadata_store: Store holding one descriptor per chunk id
        threshold: Minimum cosine similarity for an edge
        min_group_size: Minimum members per group
        kind: Only look at this kind (default: every kind, separately)
        exclude_paths: Drop chunks whose file path contains any of these
        max_workers: Threads used to process kind partitions

    Returns:
        DuplicateGroups, largest and most similar first
    """
    exclude_paths = list(exclude_paths or [])
    if kind is not None:
        kind = ChunkKind(kind)

    partitions: Dict[ChunkKind, List[Candidate]] = {}
    for chunk_id, meta in metadata_store.entries():
        if any(p in meta.file_path for p in exclude_paths):
            continue
        if kind is not None and meta.kind != kind:
            continue
        if not vector_store.has(chunk_id):
            logger.debug("No vector for %s, skipping", chunk_id)
            continue
        partitions.setdefault(meta.kind, []).append((chunk_id, meta))

    def run(item):
        part_kind, candidates = item
        return _group_partition(vector_store, part_kind, candidates, threshold, min_group_size)

    groups: List[DuplicateGroup] = []
    if max_workers > 1 and len(partitions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for part_groups in executor.map(run, partitions.items()):
                groups.extend(part_groups)
    else:
        for item in partitions.items():
            groups.extend(run(item))

    return sort_duplicate_groups(groups)


def _group_partition(
    vector_store: VectorStore,
    kind: ChunkKind,
    candidates: List[Candidate],
    threshold: float,
    min_group_size: int,
) -> List[DuplicateGroup]:
    """Connected components of the threshold graph within one kind."""
    if not candidates or len(candidates) < min_group_size:
        return []

    ids = [chunk_id for chunk_id, _ in candidates]
    sim_matrix = vector_store.similarity_matrix(ids)

    adjacency = sim_matrix >= threshold
    np.fill_diagonal(adjacency, False)
    n_components, labels = connected_components(
        csr_matrix(adjacency), directed=False, return_labels=True
    )

    # Component -> member indices, ordered by first appearance
    components: Dict[int, List[int]] = {}
    for idx, label in enumerate(labels):
        components.setdefault(int(label), []).append(idx)

    groups = []
    for indices in components.values():
        if len(indices) < min_group_size:
            continue

        sub = sim_matrix[np.ix_(indices, indices)]
        upper = sub[np.triu_indices(len(indices), k=1)]

        groups.append(DuplicateGroup(
            kind=kind,
            members=[DuplicateMember(id=ids[i], metadata=candidates[i][1]) for i in indices],
            avg_similarity=calculate_group_average_similarity([float(s) for s in upper]),
        ))

    logger.debug(
        "%s: %d candidates, %d components, %d groups",
        kind.value, len(ids), n_components, len(groups),
    )
    return groups


def find_similar_to_location(
    vector_store: VectorStore,
    metadata_store: MetadataStore,
    file_path: str,
    line: int,
    top: int = DEFAULT_TOP,
    threshold: float = DEFAULT_QUERY_THRESHOLD,
) -> List[LocationMatch]:
    """
    Find code similar to the chunk at file_path:line.

    Returns an empty list when no stored chunk covers the location.
    """
    resolved = metadata_store.get_at_location(file_path, line)
    if resolved is None:
        return []

    chunk_id, _ = resolved
    vector = vector_store.get(chunk_id)
    if vector is None:
        return []

    similar = vector_store.top_k(vector, threshold=threshold)

    matches = []
    for hit in similar:
        if hit.id == chunk_id:
            continue
        meta = metadata_store.get(hit.id)
        if meta is None:
            continue
        matches.append(LocationMatch(id=hit.id, similarity=hit.similarity, metadata=meta))

    return matches[:top]


def find_similar_to_query(
    vector_store: VectorStore,
    query_vector: VectorLike,
    top: int = DEFAULT_TOP,
    threshold: float = DEFAULT_QUERY_THRESHOLD,
) -> List[SimilarityResult]:
    """Nearest stored chunks to an already-embedded query."""
    return vector_store.top_k(query_vector, k=top, threshold=threshold)
