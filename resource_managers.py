#!/usr/bin/env python3
"""
Resource management context managers for Lecture Transcriber.
Provides guaranteed cleanup for temporary upload and chunk directories.
"""

import shutil
import tempfile
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, List, Optional

if TYPE_CHECKING:
    from transcription.audio_processor import ChunkPlanner
    from transcription.models import ChunkSpec


logger = logging.getLogger(__name__)


def remove_directory(path: str) -> None:
    """
    Remove a directory tree, logging instead of raising on failure.

    Args:
        path: Directory to remove. Missing directories are ignored.
    """
    try:
        shutil.rmtree(path)
        logger.debug(f"Removed temporary directory: {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary directory {path}: {e}")


@contextmanager
def temporary_directory(prefix: str = "tmp-", base_dir: Optional[str] = None) -> Iterator[str]:
    """
    Context manager for a randomized temporary directory with guaranteed cleanup.

    The directory name is unique per call so concurrent requests never share
    storage.

    Args:
        prefix: Name prefix for the directory (e.g. 'upload-', 'chunks-')
        base_dir: Parent directory (defaults to the system temp dir)

    Yields:
        str: Path to the created directory

    Example:
        with temporary_directory('upload-') as upload_dir:
            save_upload(upload_dir)
            transcribe(upload_dir)
        # Directory and its contents guaranteed to be deleted here
    """
    path = tempfile.mkdtemp(prefix=prefix, dir=base_dir)
    logger.debug(f"Created temporary directory: {path}")
    try:
        yield path
    finally:
        remove_directory(path)


@contextmanager
def chunked_audio(
    planner: 'ChunkPlanner',
    audio_path: str,
    window_seconds: float,
    overlap_seconds: float
) -> Iterator[List['ChunkSpec']]:
    """
    Context manager that splits audio into chunks and always removes them.

    The chunk directory is acquired before planning starts, so chunk files
    written before an extraction failure are removed as well.

    Args:
        planner: ChunkPlanner used for probing and extraction
        audio_path: Path to the source audio file
        window_seconds: Nominal chunk length
        overlap_seconds: Overlap between consecutive chunks

    Yields:
        List[ChunkSpec]: Chunks in index order

    Example:
        with chunked_audio(planner, 'lecture.mp3', 600, 2) as chunks:
            parts = service.transcribe_chunks(chunks, config)
        # Chunk files guaranteed to be deleted here
    """
    with temporary_directory(prefix="chunks-") as chunk_dir:
        yield planner.make_chunks(
            audio_path,
            window_seconds=window_seconds,
            overlap_seconds=overlap_seconds,
            output_dir=chunk_dir
        )
