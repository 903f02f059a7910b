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
Code embedder - turns chunks into semantic vectors.

prepare_embedding_input() renders a chunk as the text the model sees: a
header naming what the chunk is, a few structural facts, then the code.
LlamaEmbedder runs a local GGUF model through llama-cpp-python for fully
offline operation. Anything with the shape text -> vector can stand in for
it.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence
import logging

import numpy as np

from .models import ChunkKind, CodeChunk


logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 6000
TRUNCATION_MARKER = "[... content truncated for embedding ...]"

EmbedFn = Callable[[str], Sequence[float]]

# Every kind needs an entry here
_HEADERS: Dict[ChunkKind, str] = {
    ChunkKind.COMPONENT: "UI component: {name}",
    ChunkKind.HOOK: "Stateful binding: {name}",
    ChunkKind.FUNCTION: "Function: {name}",
    ChunkKind.JSX_FRAGMENT: "UI fragment: {name}",
    ChunkKind.COMPONENT_SUMMARY: "UI component summary: {name} — large component, see sections for detail",
    ChunkKind.FUNCTION_SUMMARY: "Function summary: {name} — large function, split into sections",
    ChunkKind.JSX_SECTION: "Section from {name}: {label}",
    ChunkKind.FUNCTION_SECTION: "Section from {name}: {label}",
}


def prepare_embedding_input(chunk: CodeChunk, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """
    Prepare a chunk for embedding.

    Args:
        chunk: The chunk to render
        max_chars: Upper bound on the result; content is cut to fit

    Returns:
        Header and metadata lines followed by the raw content. Header lines
        are never cut, so the result can exceed max_chars only when they
        alone do.
    """
    label = chunk.section_label or f"section-{chunk.section_index}"
    header = [_HEADERS[chunk.kind].format(name=chunk.name, label=label)]

    meta = chunk.metadata
    if meta.props:
        header.append(f"Props: {', '.join(meta.props)}")
    if meta.hooks and not chunk.kind.is_section:
        header.append(f"Hooks used: {', '.join(meta.hooks)}")
    if meta.jsx_elements and not chunk.kind.is_summary:
        header.append(f"JSX elements: {', '.join(meta.jsx_elements)}")

    header_text = "\n".join(header)
    text = f"{header_text}\n{chunk.content}"
    if len(text) <= max_chars:
        return text

    # header + "\n" + content + "\n" + marker
    budget = max_chars - len(header_text) - len(TRUNCATION_MARKER) - 2
    content = chunk.content[:max(budget, 0)]
    return f"{header_text}\n{content}\n{TRUNCATION_MARKER}"


def find_embedding_model(model_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find GGUF embedding model file.

    Args:
        model_path: Explicit path to model file

    Returns:
        Path to model file or None if not found
    """
    if model_path and Path(model_path).exists():
        return Path(model_path)

    from .model_manager import get_model_path
    return get_model_path("embedding")


class LlamaEmbedder:
    """
    Local GGUF embedding model.

    The model is loaded on first use. Calling the instance embeds one text
    and returns an L2-normalized float32 vector.
    """

    def __init__(
        self,
        model_path: Optional[Path] = None,
        n_ctx: int = 2048,
        n_threads: int = 4,
    ):
        model_file = find_embedding_model(model_path)
        if not model_file:
            raise FileNotFoundError(
                "No embedding model found. Download with:\n"
                "  uidup --download-models"
            )

        from .model_manager import MODELS

        self.model_path = model_file
        self.n_ctx = n_ctx
        self.n_threads = n_threads
        info = MODELS["embedding"]
        # Task prefixes only apply to the registry model
        if model_file.name == info.filename:
            self.document_prefix = info.document_prefix
            self.query_prefix = info.query_prefix
        else:
            self.document_prefix = ""
            self.query_prefix = ""
        self._llm = None

    def _ensure_model(self):
        if self._llm is not None:
            return

        try:
            from llama_cpp import Llama
        except ImportError:
            raise ImportError(
                "llama-cpp-python not installed. Install with:\n"
                "  pip install 'ui-duplicates[llm]'"
            )

        logger.debug("Loading embedding model %s", self.model_path)
        self._llm = Llama(
            model_path=str(self.model_path),
            embedding=True,      # Enable embedding extraction
            n_ctx=self.n_ctx,
            n_threads=self.n_threads,
            n_gpu_layers=-1,     # Use GPU if available
            verbose=False,       # Suppress llama.cpp output
        )

    def _embed(self, text: str) -> np.ndarray:
        self._ensure_model()

        embedding = np.array(self._llm.embed(text), dtype=np.float32)
        if embedding.ndim == 2:
            # Unpooled model: one row per token
            embedding = embedding.mean(axis=0)

        norm = np.linalg.norm(embedding)
        if norm > 1e-9:
            embedding = embedding / norm
        return embedding

    def embed(self, text: str) -> np.ndarray:
        """Embed indexed text (a prepared chunk)."""
        return self._embed(self.document_prefix + text)

    def embed_query(self, text: str) -> np.ndarray:
        """Embed a free-text search query."""
        return self._embed(self.query_prefix + text)

    __call__ = embed


def embed_chunks(
    chunks: List[CodeChunk],
    embed_fn: EmbedFn,
    max_chars: int = DEFAULT_MAX_CHARS,
    batch_size: int = 32,
    verbose: bool = False,
) -> np.ndarray:
    """
    Embed chunks in order.

    Args:
        chunks: List of CodeChunk objects
        embed_fn: text -> vector
        max_chars: Passed to prepare_embedding_input
        batch_size: Chunks per progress update
        verbose: Print progress

    Returns:
        NumPy array of shape (n_chunks, embedding_dim)
    """
    vectors = []
    for i, chunk in enumerate(chunks):
        text = prepare_embedding_input(chunk, max_chars=max_chars)
        vectors.append(np.asarray(embed_fn(text), dtype=np.float32))

        if verbose and (i + 1) % batch_size == 0:
            print(f"   Embedded {i + 1}/{len(chunks)} chunks...")

    if verbose and len(chunks) % batch_size != 0:
        print(f"   Embedded {len(chunks)}/{len(chunks)} chunks")

    if not vectors:
        return np.zeros((0, 0), dtype=np.float32)
    return np.vstack(vectors)
