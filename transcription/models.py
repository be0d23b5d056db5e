#!/usr/bin/env python3
"""
Data records passed between the chunking, transcription and merge steps.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ChunkSpec:
    """A time window of the source audio extracted to its own file.

    ``start`` and ``end`` are the nominal boundaries; the file at ``path``
    may run up to the configured overlap past ``end``.
    """

    path: str
    start: float
    end: float
    index: int


@dataclass(frozen=True)
class TranscribedPart:
    """Text returned by the speech-to-text provider for one chunk."""

    text: str
    start: float
    end: float


@dataclass(frozen=True)
class ScriptRun:
    """A maximal run of characters sharing the same script classification."""

    text: str
    is_target_script: bool


@dataclass
class TranscriptResult:
    """Final transcript for a whole audio file."""

    transcript: str
    parts: List[TranscribedPart] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def word_count(self) -> int:
        return len(self.transcript.split())
