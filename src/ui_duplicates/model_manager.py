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
Model manager for ui-duplicates.

Downloads and caches the GGUF embedding model from HuggingFace.
Models are stored in ~/.cache/uidup/models/ unless UIDUP_MODELS_DIR is set.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict
import os
import logging

logger = logging.getLogger(__name__)


@dataclass
class ModelInfo:
    """Information about a downloadable model."""
    name: str               # Human-readable name
    repo_id: str            # HuggingFace repo ID
    filename: str           # File to download
    size_mb: int            # Approximate size in MB
    purpose: str            # What it's used for
    document_prefix: str = ""   # Task prefix for indexed text
    query_prefix: str = ""      # Task prefix for free-text queries


MODELS: Dict[str, ModelInfo] = {
    "embedding": ModelInfo(
        name="nomic-embed-text-v1.5",
        repo_id="nomic-ai/nomic-embed-text-v1.5-GGUF",
        filename="nomic-embed-text-v1.5.Q8_0.gguf",
        size_mb=146,
        purpose="Chunk embeddings (semantic similarity)",
        document_prefix="search_document: ",
        query_prefix="search_query: ",
    ),
}


def get_models_dir() -> Path:
    """Get the models directory, creating it if needed."""
    override = os.environ.get("UIDUP_MODELS_DIR")
    if override:
        cache_dir = Path(override).expanduser()
    else:
        cache_dir = Path.home() / ".cache" / "uidup" / "models"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def get_model_path(model_key: str = "embedding") -> Optional[Path]:
    """Path to a downloaded model, or None if it is not there yet."""
    if model_key not in MODELS:
        return None

    cache_path = get_models_dir() / MODELS[model_key].filename
    if cache_path.exists():
        return cache_path
    return None


def is_model_available(model_key: str = "embedding") -> bool:
    """Check if a model is available locally."""
    return get_model_path(model_key) is not None


def download_model(
    model_key: str = "embedding",
    force: bool = False,
    verbose: bool = True,
) -> Optional[Path]:
    """
    Download a model from HuggingFace.

    Args:
        model_key: Key into MODELS
        force: Re-download even if exists
        verbose: Print progress

    Returns:
        Path to downloaded model, or None if failed
    """
    if model_key not in MODELS:
        if verbose:
            print(f"   ❌ Unknown model: {model_key}")
        return None

    model = MODELS[model_key]
    dest_path = get_models_dir() / model.filename

    if dest_path.exists() and not force:
        if verbose:
            print(f"   ✅ {model.name} already downloaded")
        return dest_path

    try:
        from huggingface_hub import hf_hub_download
    except ImportError:
        if verbose:
            print("   ❌ huggingface_hub not installed")
            print("   💡 Install with: pip install 'ui-duplicates[llm]'")
        return None

    if verbose:
        print(f"   📥 Downloading {model.name} ({model.size_mb} MB)...")
        print(f"      From: {model.repo_id}")

    try:
        os.environ["HF_HUB_DISABLE_TELEMETRY"] = "1"

        path = hf_hub_download(
            repo_id=model.repo_id,
            filename=model.filename,
            local_dir=get_models_dir(),
        )

        if verbose:
            print(f"   ✅ Downloaded to: {path}")

        return Path(path)

    except Exception as e:
        logger.warning("Download of %s failed: %s", model.repo_id, e)
        if verbose:
            print(f"   ❌ Download failed: {e}")
        return None


def print_model_status():
    """Print status of every known model."""
    print("\n📊 Model Status\n")
    print(f"   Cache directory: {get_models_dir()}\n")

    for key, model in MODELS.items():
        path = get_model_path(key)
        if path:
            size_mb = path.stat().st_size / (1024 * 1024)
            print(f"   ✅ {model.name}")
            print(f"      Purpose: {model.purpose}")
            print(f"      Path: {path}")
            print(f"      Size: {size_mb:.1f} MB")
        else:
            print(f"   ❌ {model.name} (not downloaded)")
            print(f"      Purpose: {model.purpose}")
            print(f"      Size: ~{model.size_mb} MB")
        print()
