#!/usr/bin/env python3
"""
Transcription package for Lecture Transcriber.

This package provides modular transcription services:
- Splitting audio into overlapping chunks with ffmpeg
- Hosted Whisper speech-to-text (Groq or OpenAI)
- Transcript stitching and Arabic transliteration
"""

from .audio_processor import ChunkPlanner, plan_chunk_ranges
from .whisper_service import WhisperApiService
from .merger import TranscriptMerger
from .models import ChunkSpec, TranscribedPart, ScriptRun, TranscriptResult

__all__ = [
    'ChunkPlanner',
    'plan_chunk_ranges',
    'WhisperApiService',
    'TranscriptMerger',
    'ChunkSpec',
    'TranscribedPart',
    'ScriptRun',
    'TranscriptResult',
]
