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
UI Duplicates - Find near-duplicate React components, hooks and functions.

Splits TSX/JSX/TS/JS files into semantic units, embeds them with a local
model, and groups units of the same kind whose embeddings are close.

No telemetry. Models cached locally after first download.
"""

__version__ = "0.1.0"

from .chunker import extract_chunks
from .embedder import prepare_embedding_input, embed_chunks
from .vector_store import VectorStore
from .metadata_store import MetadataStore
from .duplicate_finder import (
    find_duplicate_groups,
    find_similar_to_location,
    find_similar_to_query,
)
from .indexer import index_codebase, build_index
from .reporter import report_groups, report_matches
from .config import load_config, find_config_file

__all__ = [
    "__version__",
    "extract_chunks",
    "prepare_embedding_input",
    "embed_chunks",
    "VectorStore",
    "MetadataStore",
    "find_duplicate_groups",
    "find_similar_to_location",
    "find_similar_to_query",
    "index_codebase",
    "build_index",
    "report_groups",
    "report_matches",
    "load_config",
    "find_config_file",
]
