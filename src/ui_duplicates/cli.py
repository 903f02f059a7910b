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
CLI entry point for ui-duplicates.

Usage:
    uidup <path> [options]
    uidup <path> --similar src/components/Card.tsx:12
    uidup <path> --query "modal with a close button"
    uidup --download-models
    uidup --model-status
    uidup --help
"""

import sys
import os
import contextlib
import logging

import click
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import Settings, load_config, validate_settings
from .duplicate_finder import (
    find_duplicate_groups,
    find_similar_to_location,
    find_similar_to_query,
)
from .embedder import LlamaEmbedder, find_embedding_model
from .indexer import build_index, index_codebase
from .model_manager import download_model, print_model_status
from .models import ChunkKind, LocationMatch
from .reporter import OutputFormat, report_groups, report_matches


# Extension to output format mapping for -o FILE.EXT
EXTENSION_FORMAT_MAP = {
    ".md": "markdown",
    ".json": "json",
    ".txt": "text",
}


@contextlib.contextmanager
def suppress_stderr():
    """
    Suppress stderr at the OS level (captures C library output like llama.cpp).

    Redirects file descriptor 2 to /dev/null, which catches output from C
    extensions that bypass Python's sys.stderr.
    """
    stderr_fd = 2
    saved_stderr = os.dup(stderr_fd)

    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, stderr_fd)
        os.close(devnull)
        sys.stderr.flush()
        yield
    finally:
        os.dup2(saved_stderr, stderr_fd)
        os.close(saved_stderr)


def merge_config_with_cli(
    config: dict,
    cli_value,
    config_key: str,
    default_value,
):
    """
    Merge config file value with CLI value.

    If CLI value differs from default, use CLI (user explicitly set it).
    Otherwise, use config value if present, else use default.

    Args:
        config: Config dict from file
        cli_value: Value from CLI argument
        config_key: Key to look up in config
        default_value: Default value for this option

    Returns:
        Final value to use
    """
    if cli_value != default_value:
        return cli_value

    return config.get(config_key, default_value)


def print_progress(current: int, total: int, message: str, width: int = 30):
    """Print a progress bar with message."""
    filled = int(width * current / max(total, 1))
    bar = "=" * filled + ">" + " " * (width - filled - 1) if filled < width else "=" * width
    # \r overwrites the line, \033[K clears to end of line
    click.echo(f"\r   [{bar}] {current}/{total} {message}\033[K", nl=False)
    if current >= total:
        click.echo()


def load_embedder(model_path: Optional[str], verbose: bool = False) -> LlamaEmbedder:
    """Local embedding model, downloading the default one on first use."""
    if model_path is None and find_embedding_model() is None:
        click.echo("   No embedding model found, downloading...")
        if download_model("embedding", verbose=verbose) is None:
            raise FileNotFoundError(
                "Failed to download embedding model.\n"
                "   Run: uidup --download-models"
            )
    return LlamaEmbedder(Path(model_path) if model_path else None)


def parse_location(value: str) -> Tuple[str, int]:
    """Split FILE:LINE."""
    file_part, sep, line_part = value.rpartition(":")
    if not sep or not file_part:
        raise click.BadParameter(f"expected FILE:LINE, got {value!r}", param_hint="--similar")
    try:
        line = int(line_part)
    except ValueError:
        raise click.BadParameter(f"line must be a number, got {line_part!r}", param_hint="--similar")
    if line < 1:
        raise click.BadParameter("line numbers start at 1", param_hint="--similar")
    return file_part, line


def _relative_to_root(file_part: str, root_path: Path) -> str:
    path = Path(file_part)
    if path.is_absolute():
        try:
            path = path.resolve().relative_to(root_path)
        except ValueError:
            pass
    return path.as_posix()


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, dir_okay=True), required=False)
@click.option(
    "-t", "--threshold",
    type=float,
    default=0.85,
    help="Similarity threshold 0.0-1.0 for grouping (default: 0.85)"
)
@click.option(
    "-m", "--min-group",
    type=int,
    default=2,
    help="Minimum chunks per group (default: 2)"
)
@click.option(
    "-k", "--kind",
    type=click.Choice([k.value for k in ChunkKind]),
    default=None,
    help="Only look at chunks of this kind"
)
@click.option(
    "-e", "--exclude",
    multiple=True,
    help="Glob patterns to exclude (repeatable)"
)
@click.option(
    "--exclude-path",
    multiple=True,
    help="Drop chunks whose path contains this text (repeatable)"
)
@click.option(
    "-f", "--focus",
    multiple=True,
    help="Only analyze matching paths (repeatable)"
)
@click.option(
    "--min-lines",
    type=int,
    default=3,
    help="Minimum lines per chunk (default: 3)"
)
@click.option(
    "--max-lines",
    type=int,
    default=100,
    help="Split units longer than this (default: 100)"
)
@click.option(
    "--no-split",
    is_flag=True,
    help="Keep oversized units whole instead of splitting them"
)
@click.option(
    "--max-chunks",
    type=int,
    default=10000,
    help="Maximum chunks to process (default: 10000)"
)
@click.option(
    "--similar",
    type=str,
    default=None,
    metavar="FILE:LINE",
    help="Find code similar to the chunk at this location"
)
@click.option(
    "--query",
    type=str,
    default=None,
    help="Find code matching a free-text description"
)
@click.option(
    "--top",
    type=int,
    default=10,
    help="Results for --similar/--query (default: 10)"
)
@click.option(
    "--model",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to embedding GGUF model (auto-detected)"
)
@click.option(
    "-o", "--output",
    type=str,
    default=None,
    help="Write the report to this file (report.md, groups.json, ...)"
)
@click.option(
    "--format", "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Report format (default: from -o extension, else text)"
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show progress for all stages"
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Only print the report"
)
@click.option(
    "--download-models",
    is_flag=True,
    help="Download the embedding model and exit"
)
@click.option(
    "--model-status",
    is_flag=True,
    help="Show model status and exit"
)
@click.version_option(version=__version__)
def main(
    path: Optional[str],
    threshold: float,
    min_group: int,
    kind: Optional[str],
    exclude: tuple,
    exclude_path: tuple,
    focus: tuple,
    min_lines: int,
    max_lines: int,
    no_split: bool,
    max_chunks: int,
    similar: Optional[str],
    query: Optional[str],
    top: int,
    model: Optional[str],
    output: Optional[str],
    output_format: Optional[str],
    verbose: bool,
    quiet: bool,
    download_models: bool,
    model_status: bool,
):
    """
    Find near-duplicate React components, hooks and functions.

    PATH is the root directory to analyze.

    Examples:

      # Duplicate groups across a codebase
      uidup ./src

      # Only components, stricter threshold, markdown report
      uidup ./src -k component -t 0.9 -o duplicates.md

      # What else looks like this component?
      uidup ./src --similar components/ProductCard.tsx:8

      # Download the embedding model first
      uidup --download-models
    """
    if model_status:
        print_model_status()
        sys.exit(0)

    if download_models:
        click.echo("📦 Downloading embedding model for ui-duplicates...")
        if download_model("embedding", verbose=True) is None:
            click.echo("\n❌ Failed to download embedding model", err=True)
            sys.exit(1)
        click.echo("\n✅ Model downloaded successfully!")
        sys.exit(0)

    if path is None:
        click.echo("❌ Error: PATH is required for analysis.", err=True)
        click.echo("   Use --help for usage information.", err=True)
        click.echo("   Use --download-models to download the model.", err=True)
        sys.exit(1)

    if similar and query:
        raise click.UsageError("--similar and --query cannot be combined")

    root_path = Path(path).resolve()

    # Config values override defaults, but explicit CLI args override config
    config = load_config(root_path)
    defaults = Settings()

    settings = Settings(
        threshold=merge_config_with_cli(config, threshold, "threshold", defaults.threshold),
        query_threshold=config.get("query_threshold", defaults.query_threshold),
        min_group=merge_config_with_cli(config, min_group, "min_group", defaults.min_group),
        kind=kind if kind is not None else config.get("kind"),
        exclude=list(exclude) or list(config.get("exclude", [])),
        exclude_paths=list(exclude_path) or list(config.get("exclude_paths", [])),
        focus=list(focus) or list(config.get("focus", [])),
        min_lines=merge_config_with_cli(config, min_lines, "min_lines", defaults.min_lines),
        max_lines=merge_config_with_cli(config, max_lines, "max_lines", defaults.max_lines),
        split="none" if no_split else config.get("split", defaults.split),
        top=merge_config_with_cli(config, top, "top", defaults.top),
        max_chunks=merge_config_with_cli(config, max_chunks, "max_chunks", defaults.max_chunks),
        max_chars=config.get("max_chars", defaults.max_chars),
        model=model if model is not None else config.get("model"),
        verbose=merge_config_with_cli(config, verbose, "verbose", defaults.verbose),
    )
    try:
        validate_settings(settings)
    except ValueError as e:
        raise click.UsageError(str(e))

    location = parse_location(similar) if similar else None
    # Keep stdout parseable when the JSON report goes there
    quiet = quiet or (output is None and output_format == "json")
    verbose = settings.verbose and not quiet

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    def status(message: str):
        if not quiet:
            click.echo(message)

    if verbose:
        if config:
            click.echo("📝 Loaded config from .uiduprc/.uidup.toml")
        click.echo(f"🔍 Analyzing: {root_path}")
        click.echo(f"   Threshold: {settings.threshold}")
        click.echo(f"   Min group size: {settings.min_group}")
        if settings.kind:
            click.echo(f"   Kind: {settings.kind}")

    # Stage 1: Index
    status("📂 Stage 1: Indexing codebase...")
    try:
        chunks = index_codebase(
            root_path=root_path,
            exclude_patterns=settings.exclude,
            focus_patterns=settings.focus,
            min_lines=settings.min_lines,
            max_lines=settings.max_lines,
            kinds=[settings.kind] if settings.kind else None,
            split_strategy=settings.split,
            max_chunks=settings.max_chunks,
            verbose=verbose,
        )
    except ImportError as e:
        click.echo(f"❌ Indexing failed: {e}", err=True)
        sys.exit(1)

    if not chunks:
        click.echo("❌ No chunks found. Check your path and filters.", err=True)
        sys.exit(1)

    status(f"   Found {len(chunks)} chunks")

    # Stage 2: Embed
    status("\n🧠 Stage 2: Generating embeddings...")
    try:
        if verbose:
            embedder = load_embedder(settings.model, verbose=True)
        else:
            with suppress_stderr():
                embedder = load_embedder(settings.model)

        progress = None
        if not quiet:
            progress = lambda done, total: print_progress(done, total, "chunks embedded")

        vector_store, metadata_store = build_index(
            chunks,
            embedder,
            max_chars=settings.max_chars,
            on_progress=progress,
        )
    except (ImportError, FileNotFoundError) as e:
        click.echo(f"❌ Embedding failed: {e}", err=True)
        sys.exit(1)

    # Stage 3: Search
    if location is not None:
        file_part, line = location
        rel_file = _relative_to_root(file_part, root_path)
        status(f"\n🔗 Stage 3: Finding code similar to {rel_file}:{line}...")

        if metadata_store.get_at_location(rel_file, line) is None:
            click.echo(f"❌ No chunk covers {rel_file}:{line}", err=True)
            sys.exit(1)

        matches = find_similar_to_location(
            vector_store, metadata_store, rel_file, line,
            top=settings.top, threshold=settings.query_threshold,
        )
        title = f"Similar to {rel_file}:{line}"

    elif query is not None:
        status(f"\n🔗 Stage 3: Searching for \"{query}\"...")
        embed_query = getattr(embedder, "embed_query", embedder)
        hits = find_similar_to_query(
            vector_store, embed_query(query),
            top=settings.top, threshold=settings.query_threshold,
        )
        matches = [
            LocationMatch(id=hit.id, similarity=hit.similarity, metadata=metadata_store.get(hit.id))
            for hit in hits
            if metadata_store.has(hit.id)
        ]
        title = f"Matches for \"{query}\""

    else:
        status("\n🔗 Stage 3: Grouping duplicates...")
        groups = find_duplicate_groups(
            vector_store,
            metadata_store,
            threshold=settings.threshold,
            min_group_size=settings.min_group,
            kind=settings.kind,
            exclude_paths=settings.exclude_paths,
            max_workers=os.cpu_count() or 1,
        )

        if not groups:
            status("✨ No duplicates found above threshold. Your code is unique!")
            sys.exit(0)

        status(f"   Found {len(groups)} groups")
        matches = None
        title = None

    # Final Stage: Report
    if output_format is None and output:
        ext = Path(output).suffix.lower()
        if ext not in EXTENSION_FORMAT_MAP:
            valid_exts = ", ".join(EXTENSION_FORMAT_MAP)
            click.echo(f"❌ Invalid output extension '{ext}'. Valid: {valid_exts}", err=True)
            sys.exit(1)
        output_format = EXTENSION_FORMAT_MAP[ext]
    fmt = OutputFormat(output_format or "text")

    if matches is None:
        report = report_groups(groups, root_path, settings.threshold, fmt, vector_store=vector_store)
    else:
        report = report_matches(matches, title, fmt)

    if output:
        output_path = Path(output)
        output_path.write_text(report, encoding="utf-8")
        status(f"\n📝 Report written to: {output_path}")
    else:
        if not quiet:
            click.echo()
        click.echo(report)


if __name__ == "__main__":
    main()
