"""Pytest configuration and shared fixtures."""

import os
import pytest

from config import AppConfig, TranscriptionConfig
from transcription.models import ChunkSpec


class RecordingSpeechService:
    """Fake speech-to-text client that records calls in order."""

    def __init__(self, texts=None, owner=None, fail_on=None, error=None):
        self.texts = list(texts or [])
        self.owner = owner
        self.fail_on = fail_on
        self.error = error
        self.calls = []
        self.in_flight_seen = []

    def transcribe_file(self, audio_path, config):
        self.calls.append(audio_path)
        if self.owner is not None:
            self.in_flight_seen.append(self.owner.in_flight)
        if self.fail_on is not None and len(self.calls) - 1 == self.fail_on:
            raise self.error
        return self.texts[len(self.calls) - 1] if self.texts else f"text for {os.path.basename(audio_path)}"


@pytest.fixture
def groq_config():
    """Provide a speech-to-text config with an API key."""
    return TranscriptionConfig(provider='groq', api_key='gsk_test', model='whisper-large-v3', language='en')


@pytest.fixture
def keyless_config():
    """Provide a speech-to-text config with no API key."""
    return TranscriptionConfig(provider='openai', api_key='', model='whisper-1', language='en')


@pytest.fixture
def sample_chunks(tmp_path):
    """Provide three chunk files laid out like a 1500s lecture."""
    chunk_dir = tmp_path / "chunks-test"
    chunk_dir.mkdir()
    ranges = [(0.0, 600.0), (598.0, 1198.0), (1196.0, 1500.0)]
    chunks = []
    for index, (start, end) in enumerate(ranges):
        path = chunk_dir / f"chunk-{index}.mp3"
        path.write_bytes(b"fake audio")
        chunks.append(ChunkSpec(path=str(path), start=start, end=end, index=index))
    return chunks


@pytest.fixture
def audio_file(tmp_path):
    """Provide a small fake audio file on disk."""
    path = tmp_path / "lecture.mp3"
    path.write_bytes(b"ID3 fake mp3 data")
    return str(path)


@pytest.fixture
def speech_service_factory():
    """Provide the RecordingSpeechService class for tests that need a fake client."""
    return RecordingSpeechService


@pytest.fixture
def app_config(tmp_path):
    """Provide a valid application config that does not depend on the environment."""
    return AppConfig(
        asr_provider='groq',
        transcription_language='en',
        asr_timeout_seconds=300,
        chunk_window_seconds=600.0,
        chunk_overlap_seconds=2.0,
        ffmpeg_command='ffmpeg',
        ffprobe_command='ffprobe',
        gemini_api_key='test_key',
        gemini_model='gemini-1.5-flash',
        enable_analysis=True,
        web_host='0.0.0.0',
        web_port=5000,
        max_upload_mb=200,
        log_dir=str(tmp_path / "logs"),
    )
