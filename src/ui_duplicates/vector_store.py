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
In-memory vector store with brute-force cosine similarity search.

Vectors are kept as float64 numpy arrays in insertion order. When every
stored vector has the same dimension, queries run against one stacked
matrix; otherwise they fall back to pairwise comparisons over the common
prefix of each pair.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .models import SimilarityResult


VectorLike = Union[Sequence[float], np.ndarray]


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero magnitude. Vectors of different
    length are compared over their common prefix.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    a = a[:n]
    b = b[:n]

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class VectorStore:
    """Keyed collection of embedding vectors."""

    def __init__(self):
        self._vectors: Dict[str, np.ndarray] = {}
        self._matrix: Optional[np.ndarray] = None  # Stacked rows, rebuilt lazily

    def add(self, chunk_id: str, vector: VectorLike) -> None:
        """Insert or replace. Dimensions are not checked against other entries."""
        self._vectors[chunk_id] = np.array(vector, dtype=np.float64).ravel()
        self._matrix = None

    def add_batch(self, items: Iterable[Tuple[str, VectorLike]]) -> None:
        for chunk_id, vector in items:
            self.add(chunk_id, vector)

    def get(self, chunk_id: str) -> Optional[np.ndarray]:
        return self._vectors.get(chunk_id)

    def has(self, chunk_id: str) -> bool:
        return chunk_id in self._vectors

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._vectors

    def remove(self, chunk_id: str) -> bool:
        if chunk_id not in self._vectors:
            return False
        del self._vectors[chunk_id]
        self._matrix = None
        return True

    def clear(self) -> None:
        self._vectors.clear()
        self._matrix = None

    def size(self) -> int:
        return len(self._vectors)

    def __len__(self) -> int:
        return len(self._vectors)

    def ids(self) -> List[str]:
        return list(self._vectors)

    def entries(self) -> Iterator[Tuple[str, np.ndarray]]:
        """Iterate (id, vector) pairs in insertion order."""
        yield from list(self._vectors.items())

    @property
    def dimension(self) -> Optional[int]:
        """Shared vector length, or None when empty or mixed."""
        dims = {len(v) for v in self._vectors.values()}
        if len(dims) == 1:
            return dims.pop()
        return None

    def similarity(
        self,
        a: Union[str, VectorLike],
        b: Union[str, VectorLike],
    ) -> float:
        """Cosine similarity between two ids and/or vectors. Unknown ids score 0."""
        vec_a = self._resolve(a)
        vec_b = self._resolve(b)
        if vec_a is None or vec_b is None:
            return 0.0
        return cosine(vec_a, vec_b)

    def similarity_matrix(self, chunk_ids: Sequence[str]) -> np.ndarray:
        """
        Pairwise cosine similarities for the given ids.

        Unknown ids get an all-zero row and column.
        """
        n = len(chunk_ids)
        vectors = [self._vectors.get(chunk_id) for chunk_id in chunk_ids]
        if n == 0:
            return np.zeros((0, 0))

        dims = {len(v) for v in vectors if v is not None}
        if len(dims) == 1 and all(v is not None for v in vectors):
            # zero rows normalize to zero, so they score 0 against everything
            return cosine_similarity(np.vstack(vectors))

        matrix = np.zeros((n, n))
        for i in range(n):
            if vectors[i] is None:
                continue
            for j in range(i, n):
                if vectors[j] is None:
                    continue
                score = cosine(vectors[i], vectors[j])
                matrix[i, j] = score
                matrix[j, i] = score
        return matrix

    def top_k(
        self,
        query: VectorLike,
        k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[SimilarityResult]:
        """
        Nearest neighbours of a query vector.

        Ordered by similarity descending; ties keep insertion order. Entries
        below threshold are excluded. k=None returns every match.
        """
        if not self._vectors:
            return []

        query_vec = np.array(query, dtype=np.float64).ravel()
        scores = self._score_all(query_vec)

        results = [
            SimilarityResult(id=chunk_id, similarity=score)
            for chunk_id, score in zip(self._vectors, scores)
            if threshold is None or score >= threshold
        ]
        # sorted() is stable, so equal scores stay in insertion order
        results = sorted(results, key=lambda r: r.similarity, reverse=True)

        if k is not None:
            results = results[:max(k, 0)]
        return results

    def stats(self) -> dict:
        """Size, shared dimension and a rough memory estimate."""
        memory_bytes = sum(v.nbytes for v in self._vectors.values())
        return {
            "size": len(self._vectors),
            "dimension": self.dimension,
            "memory_bytes": memory_bytes,
        }

    def _resolve(self, ref: Union[str, VectorLike]) -> Optional[np.ndarray]:
        if isinstance(ref, str):
            return self._vectors.get(ref)
        return np.array(ref, dtype=np.float64).ravel()

    def _score_all(self, query_vec: np.ndarray) -> List[float]:
        dim = self.dimension
        if dim is not None and dim == len(query_vec) and dim > 0:
            if self._matrix is None:
                self._matrix = np.vstack(list(self._vectors.values()))
            if not np.any(query_vec):
                return [0.0] * len(self._vectors)
            return [float(s) for s in cosine_similarity(query_vec.reshape(1, -1), self._matrix)[0]]

        return [cosine(query_vec, vector) for vector in self._vectors.values()]
