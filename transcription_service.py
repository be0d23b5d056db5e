#!/usr/bin/env python3
"""
Transcription service for Lecture Transcriber.
Splits audio into chunks, transcribes them one at a time through a hosted
Whisper API, and stitches the results into an annotated transcript.
"""

import logging
from collections import deque
from typing import List, Optional

from tqdm import tqdm

from config import TranscriptionConfig
from exceptions import MissingCredentialsError
from resource_managers import chunked_audio
from transcription.audio_processor import ChunkPlanner, DEFAULT_WINDOW_SECONDS, DEFAULT_OVERLAP_SECONDS
from transcription.merger import TranscriptMerger
from transcription.models import ChunkSpec, TranscribedPart, TranscriptResult
from transcription.whisper_service import WhisperApiService


class TranscriptionService:
    """Service for transcribing uploaded audio files chunk by chunk."""

    def __init__(
        self,
        speech_service: Optional[WhisperApiService] = None,
        chunk_planner: Optional[ChunkPlanner] = None,
        merger: Optional[TranscriptMerger] = None,
        show_progress: bool = False
    ):
        """
        Initialize transcription service.

        Args:
            speech_service: Speech-to-text client (defaults to WhisperApiService)
            chunk_planner: Chunk planner (defaults to ChunkPlanner with configured binaries)
            merger: Transcript merger (defaults to TranscriptMerger)
            show_progress: Whether to show a tqdm progress bar over chunks
        """
        self.logger = logging.getLogger(__name__)
        self.speech_service = speech_service or WhisperApiService()
        self.chunk_planner = chunk_planner or ChunkPlanner()
        self.merger = merger or TranscriptMerger()
        self.show_progress = show_progress

        # Number of provider requests currently running; never exceeds 1
        self.in_flight = 0

    def _require_credentials(self, config: TranscriptionConfig) -> None:
        if not config.api_key:
            self.logger.error(f"No API key configured for provider '{config.provider}'")
            raise MissingCredentialsError(config.provider)

    def transcribe_chunks(self, chunks: List[ChunkSpec], config: TranscriptionConfig) -> List[TranscribedPart]:
        """
        Transcribe chunks strictly one after another in index order.

        Args:
            chunks: Chunks produced by the chunk planner
            config: Speech-to-text settings for this run

        Returns:
            One TranscribedPart per chunk, in index order

        Raises:
            MissingCredentialsError: If the API key is empty (no chunk is sent)
            TranscriptionProviderError: If any chunk fails; no partial result is returned
        """
        self._require_credentials(config)

        queue = deque(sorted(chunks, key=lambda chunk: chunk.index))
        parts = []

        pbar = tqdm(
            total=len(queue),
            desc="Transcribing",
            unit=" chunk",
            disable=not self.show_progress
        )

        try:
            while queue:
                chunk = queue.popleft()
                self.logger.info(
                    f"Transcribing chunk {chunk.index + 1}/{len(chunks)} "
                    f"({chunk.start:.1f}s - {chunk.end:.1f}s)"
                )

                self.in_flight += 1
                try:
                    text = self.speech_service.transcribe_file(chunk.path, config)
                finally:
                    self.in_flight -= 1

                parts.append(TranscribedPart(text=text, start=chunk.start, end=chunk.end))
                pbar.update(1)
        finally:
            pbar.close()

        return parts

    def build_transcript(self, parts: List[TranscribedPart]) -> str:
        """Stitch parts and annotate Arabic lines with a transliteration."""
        stitched = self.merger.stitch(parts)
        return self.merger.interleave_transliterations(stitched)

    def transcribe_file(
        self,
        audio_path: str,
        config: TranscriptionConfig,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        overlap_seconds: float = DEFAULT_OVERLAP_SECONDS
    ) -> TranscriptResult:
        """
        Transcribe a whole audio file.

        Chunk files live in a temporary directory that is removed when this
        method returns or raises.

        Args:
            audio_path: Path to the uploaded audio file
            config: Speech-to-text settings for this run
            window_seconds: Nominal chunk length
            overlap_seconds: Overlap between consecutive chunks

        Returns:
            TranscriptResult with the annotated transcript

        Raises:
            MissingCredentialsError: Before any chunking if the API key is empty
            DurationProbeError, ChunkExtractionError: If chunking fails
            TranscriptionProviderError: If any chunk fails to transcribe
        """
        self._require_credentials(config)

        self.logger.info(f"Transcribing {audio_path} with {config.provider}")

        with chunked_audio(self.chunk_planner, audio_path, window_seconds, overlap_seconds) as chunks:
            parts = self.transcribe_chunks(chunks, config)

        transcript = self.build_transcript(parts)
        duration = chunks[-1].end if chunks else 0.0

        result = TranscriptResult(transcript=transcript, parts=parts, duration_seconds=duration)
        self.logger.info(
            f"Transcription complete: {len(parts)} chunk(s), {result.word_count} words"
        )
        return result
