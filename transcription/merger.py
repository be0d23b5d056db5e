#!/usr/bin/env python3
"""
Utilities for stitching chunk transcriptions into a single transcript.
"""

import re
import logging
from typing import List

from .models import TranscribedPart
from .transliteration import contains_arabic, transliterate_arabic

_BLANK_LINES_RE = re.compile(r"\n{2,}")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


class TranscriptMerger:
    """Handles stitching of chunk texts and transliteration annotation."""

    def __init__(self):
        """Initialize transcript merger."""
        self.logger = logging.getLogger(__name__)

    def stitch(self, parts: List[TranscribedPart]) -> str:
        """
        Join chunk texts in order, one chunk per line.

        Empty chunk results do not leave blank lines behind.

        Args:
            parts: Transcribed parts in chronological order

        Returns:
            Stitched transcript text
        """
        joined = "\n".join(part.text.strip() for part in parts)
        return _BLANK_LINES_RE.sub("\n", joined)

    def interleave_transliterations(self, transcript: str) -> str:
        """
        Add a parenthesized transliteration line under every Arabic line.

        Args:
            transcript: Stitched transcript text

        Returns:
            Transcript with annotation lines inserted
        """
        lines = []
        annotated = 0

        for line in _LINE_SPLIT_RE.split(transcript):
            lines.append(line)
            if contains_arabic(line):
                lines.append(f"({transliterate_arabic(line)})")
                annotated += 1

        if annotated:
            self.logger.debug(f"Added transliteration to {annotated} line(s)")

        return "\n".join(lines)
