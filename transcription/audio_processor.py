#!/usr/bin/env python3
"""
Audio processing utilities for transcription.
Handles duration probing and splitting audio into overlapping chunks.
"""

import math
import os
import subprocess
import tempfile
import logging
from typing import List, Optional, Tuple

from exceptions import DurationProbeError, ChunkExtractionError
from resource_managers import remove_directory
from services.ffmpeg_command_builder import FFmpegCommandBuilder
from .models import ChunkSpec

DEFAULT_WINDOW_SECONDS = 600
DEFAULT_OVERLAP_SECONDS = 2


def plan_chunk_ranges(
    duration: float,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    overlap_seconds: float = DEFAULT_OVERLAP_SECONDS
) -> List[Tuple[float, float]]:
    """
    Compute the nominal (start, end) range of every chunk.

    Each chunk starts ``overlap_seconds`` before the previous one ended. The
    last chunk ends exactly at ``duration`` and may be shorter than the window.

    Args:
        duration: Total audio length in seconds
        window_seconds: Nominal chunk length
        overlap_seconds: Overlap between consecutive chunks

    Returns:
        List of (start, end) tuples in order; empty when duration <= 0

    Raises:
        ValueError: If the window is not positive or the overlap is outside [0, window)
    """
    if window_seconds <= 0:
        raise ValueError(f"window_seconds must be positive (got {window_seconds})")
    if not (0 <= overlap_seconds < window_seconds):
        raise ValueError(
            f"overlap_seconds must be in [0, {window_seconds}) (got {overlap_seconds})"
        )

    ranges = []
    start = 0.0
    while start < duration:
        end = min(start + window_seconds, duration)
        ranges.append((start, end))
        if end >= duration:
            break
        start = end - overlap_seconds

    return ranges


class ChunkPlanner:
    """Splits an audio file into overlapping chunk files using ffmpeg."""

    def __init__(self, command_builder: Optional[FFmpegCommandBuilder] = None):
        """
        Initialize chunk planner.

        Args:
            command_builder: Builder for ffprobe/ffmpeg commands (defaults to configured binaries)
        """
        self.logger = logging.getLogger(__name__)
        self.command_builder = command_builder or FFmpegCommandBuilder()

    def get_duration_seconds(self, audio_path: str) -> float:
        """
        Get the audio duration in seconds via ffprobe.

        Args:
            audio_path: Path to audio file

        Returns:
            Duration in seconds

        Raises:
            DurationProbeError: If ffprobe fails or prints a non-numeric duration
        """
        cmd = self.command_builder.build_duration_probe_command(audio_path)
        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            stderr_output = e.stderr if e.stderr else ""
            self.logger.error(f"ffprobe failed with return code {e.returncode} for '{audio_path}'")
            if stderr_output:
                self.logger.error(f"ffprobe stderr:\n{stderr_output}")
            raise DurationProbeError(audio_path, f"ffprobe failed: {stderr_output}") from e
        except OSError as e:
            raise DurationProbeError(audio_path, f"Could not run ffprobe: {e}") from e

        output = (result.stdout or "").strip()
        try:
            duration = float(output)
        except ValueError as e:
            raise DurationProbeError(audio_path, f"Unexpected ffprobe output: {output!r}") from e

        if not math.isfinite(duration) or duration < 0:
            raise DurationProbeError(audio_path, f"Unexpected ffprobe output: {output!r}")

        self.logger.info(f"Audio duration: {duration:.1f}s ({audio_path})")
        return duration

    def extract_chunk(self, audio_path: str, start: float, duration: float, output_path: str, index: int) -> None:
        """
        Copy a slice of the source audio into ``output_path``.

        Raises:
            ChunkExtractionError: If ffmpeg exits non-zero or cannot be started
        """
        cmd = self.command_builder.build_chunk_command(audio_path, start, duration, output_path)
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            stderr_output = e.stderr if e.stderr else ""
            self.logger.error(
                f"ffmpeg failed with return code {e.returncode} extracting chunk {index} of '{audio_path}'"
            )
            if stderr_output:
                self.logger.error(f"ffmpeg stderr:\n{stderr_output}")
            raise ChunkExtractionError(audio_path, index, f"ffmpeg failed: {stderr_output}") from e
        except OSError as e:
            raise ChunkExtractionError(audio_path, index, f"Could not run ffmpeg: {e}") from e

    def make_chunks(
        self,
        audio_path: str,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        overlap_seconds: float = DEFAULT_OVERLAP_SECONDS,
        output_dir: Optional[str] = None
    ) -> List[ChunkSpec]:
        """
        Split an audio file into chunk files.

        Each chunk file holds ``(end - start) + overlap_seconds`` of audio
        starting at the chunk's nominal start.

        Args:
            audio_path: Path to the source audio file
            window_seconds: Nominal chunk length
            overlap_seconds: Overlap between consecutive chunks
            output_dir: Directory for chunk files (a fresh temp directory when omitted)

        Returns:
            List of ChunkSpec in index order

        Raises:
            DurationProbeError: If the duration cannot be determined
            ChunkExtractionError: If any chunk fails to extract. Chunk files
                written so far are left in place; callers must clean up.
        """
        duration = self.get_duration_seconds(audio_path)
        ranges = plan_chunk_ranges(duration, window_seconds, overlap_seconds)

        if output_dir is None:
            output_dir = tempfile.mkdtemp(prefix="chunks-")

        extension = os.path.splitext(audio_path)[1] or ".mp3"
        chunks = []
        self.logger.info(
            f"Splitting {duration:.1f}s of audio into {len(ranges)} chunk(s) "
            f"(window={window_seconds}s, overlap={overlap_seconds}s)"
        )

        for index, (start, end) in enumerate(ranges):
            output_path = os.path.join(output_dir, f"chunk-{index}{extension}")
            self.extract_chunk(audio_path, start, (end - start) + overlap_seconds, output_path, index)
            chunks.append(ChunkSpec(path=output_path, start=start, end=end, index=index))
            self.logger.debug(f"Chunk {index}: {start:.1f}s - {end:.1f}s -> {output_path}")

        return chunks

    def cleanup_chunks(self, chunks: List[ChunkSpec]) -> None:
        """
        Remove the temporary directory that holds the chunk files.

        Best effort: removal errors are logged, never raised.
        """
        if not chunks:
            return
        remove_directory(os.path.dirname(chunks[0].path))
