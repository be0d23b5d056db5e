#!/usr/bin/env python3
"""
Services module for Lecture Transcriber.
Provides helpers for building external media tool invocations.
"""

from .ffmpeg_command_builder import FFmpegCommandBuilder, format_seconds

__all__ = [
    'FFmpegCommandBuilder',
    'format_seconds',
]
