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

# tests/test_vector_store.py
"""Tests for the in-memory vector store."""

import numpy as np
import pytest

from ui_duplicates.vector_store import VectorStore, cosine


class TestCosine:
    def test_identical_vectors(self):
        v = np.array([0.3, 0.4, 0.5])
        assert cosine(v, v) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(0.0)

    def test_zero_vector_scores_zero(self):
        assert cosine(np.zeros(3), np.array([1.0, 2.0, 3.0])) == 0.0

    def test_mismatched_lengths_use_common_prefix(self):
        # [1, 0] vs [1, 0] after truncation
        assert cosine(np.array([1.0, 0.0]), np.array([1.0, 0.0, 5.0])) == pytest.approx(1.0)

    def test_empty_vectors(self):
        assert cosine(np.array([]), np.array([])) == 0.0


class TestBasicOperations:
    def test_add_and_get(self):
        store = VectorStore()
        store.add("a", [1.0, 2.0])

        assert store.has("a")
        assert "a" in store
        np.testing.assert_allclose(store.get("a"), [1.0, 2.0])

    def test_get_missing_returns_none(self):
        assert VectorStore().get("nope") is None

    def test_replace_keeps_position(self):
        store = VectorStore()
        store.add("a", [1.0])
        store.add("b", [2.0])
        store.add("a", [3.0])

        assert store.ids() == ["a", "b"]
        np.testing.assert_allclose(store.get("a"), [3.0])

    def test_remove(self):
        store = VectorStore()
        store.add("a", [1.0])

        assert store.remove("a") is True
        assert store.remove("a") is False
        assert len(store) == 0

    def test_clear_and_size(self):
        store = VectorStore()
        store.add_batch([("a", [1.0]), ("b", [2.0])])
        assert store.size() == 2

        store.clear()
        assert store.size() == 0
        assert store.ids() == []

    def test_dimension(self):
        store = VectorStore()
        assert store.dimension is None

        store.add("a", [1.0, 0.0, 0.0])
        assert store.dimension == 3

        store.add("b", [1.0, 0.0])
        assert store.dimension is None

    def test_stats(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        stats = store.stats()

        assert stats["size"] == 1
        assert stats["dimension"] == 2
        assert stats["memory_bytes"] == 16


class TestSimilarity:
    def test_by_ids(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        store.add("b", [1.0, 1.0])
        assert store.similarity("a", "b") == pytest.approx(1 / np.sqrt(2))

    def test_id_against_vector(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        assert store.similarity("a", [2.0, 0.0]) == pytest.approx(1.0)

    def test_unknown_id_scores_zero(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        assert store.similarity("a", "missing") == 0.0

    def test_matrix_matches_pairwise(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        store.add("b", [0.0, 1.0])
        store.add("c", [1.0, 1.0])

        matrix = store.similarity_matrix(["a", "b", "c"])

        assert matrix.shape == (3, 3)
        assert matrix[0, 1] == pytest.approx(0.0)
        assert matrix[0, 2] == pytest.approx(store.similarity("a", "c"))
        assert matrix[2, 1] == pytest.approx(matrix[1, 2])

    def test_matrix_with_mixed_dimensions(self):
        store = VectorStore()
        store.add("a", [1.0, 0.0])
        store.add("b", [1.0, 0.0, 9.0])

        matrix = store.similarity_matrix(["a", "b", "missing"])

        assert matrix[0, 1] == pytest.approx(1.0)
        assert matrix[2].tolist() == [0.0, 0.0, 0.0]


class TestTopK:
    @pytest.fixture
    def store(self):
        store = VectorStore()
        store.add("x", [1.0, 0.0])
        store.add("y", [0.8, 0.6])
        store.add("z", [0.0, 1.0])
        return store

    def test_descending_order(self, store):
        results = store.top_k([1.0, 0.0])
        assert [r.id for r in results] == ["x", "y", "z"]

    def test_k_limits_results(self, store):
        assert len(store.top_k([1.0, 0.0], k=2)) == 2

    def test_threshold_excludes(self, store):
        results = store.top_k([1.0, 0.0], threshold=0.5)
        assert [r.id for r in results] == ["x", "y"]

    def test_ties_keep_insertion_order(self):
        store = VectorStore()
        store.add("first", [1.0, 0.0])
        store.add("second", [2.0, 0.0])
        results = store.top_k([1.0, 0.0])
        assert [r.id for r in results] == ["first", "second"]

    def test_empty_store(self):
        assert VectorStore().top_k([1.0]) == []

    def test_zero_query_scores_zero(self, store):
        results = store.top_k([0.0, 0.0])
        assert all(r.similarity == 0.0 for r in results)

    def test_sees_vectors_added_after_a_query(self, store):
        store.top_k([1.0, 0.0])
        store.add("w", [1.0, 0.0])
        assert "w" in [r.id for r in store.top_k([1.0, 0.0], k=2)]
