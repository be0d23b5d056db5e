#!/usr/bin/env python3
"""
FFmpeg/ffprobe command builder for duration probing and chunk extraction.
"""

from config import FFMPEG_COMMAND, FFPROBE_COMMAND


def format_seconds(seconds: float) -> str:
    """Format a time offset for ffmpeg with at most millisecond precision."""
    text = f"{seconds:.3f}".rstrip('0').rstrip('.')
    return text or "0"


class FFmpegCommandBuilder:
    """Builds ffprobe and ffmpeg argument vectors."""

    def __init__(self, ffmpeg_command: str = FFMPEG_COMMAND, ffprobe_command: str = FFPROBE_COMMAND):
        self.ffmpeg_command = ffmpeg_command
        self.ffprobe_command = ffprobe_command

    def build_duration_probe_command(self, input_path: str) -> list[str]:
        """Build an ffprobe command that prints only ``format.duration``.

        Args:
            input_path: Path to the media file

        Returns:
            List of command arguments for ffprobe
        """
        if not input_path:
            raise ValueError("input_path cannot be empty")
        return [
            self.ffprobe_command,
            '-v', 'error',
            '-show_entries', 'format=duration',
            '-of', 'default=noprint_wrappers=1:nokey=1',
            input_path
        ]

    def build_chunk_command(
        self,
        input_path: str,
        start: float,
        duration: float,
        output_path: str
    ) -> list[str]:
        """Build an ffmpeg command that copies a time slice without re-encoding.

        Args:
            input_path: Path to the source media file
            start: Offset in seconds to seek to
            duration: Length of the slice in seconds
            output_path: Path of the chunk file to write

        Returns:
            List of command arguments for ffmpeg
        """
        if not input_path:
            raise ValueError("input_path cannot be empty")
        if duration <= 0:
            raise ValueError(f"duration must be positive (got {duration})")

        return [
            self.ffmpeg_command,
            '-hide_banner',
            '-ss', format_seconds(start),
            '-t', format_seconds(duration),
            '-i', input_path,
            '-c', 'copy',  # Copy streams without re-encoding
            output_path
        ]
