#!/usr/bin/env python3
"""
Hosted Whisper speech-to-text client (Groq or OpenAI audio transcription API).
"""

import os
import logging
import requests

from config import ASR_TIMEOUT_SECONDS, DEFAULT_ASR_MODELS, TranscriptionConfig
from exceptions import ConfigurationError, TranscriptionProviderError

ASR_ENDPOINTS = {
    "groq": "https://api.groq.com/openai/v1/audio/transcriptions",
    "openai": "https://api.openai.com/v1/audio/transcriptions",
}


class WhisperApiService:
    """Service for transcribing single audio files through a hosted Whisper API."""

    def __init__(self, timeout: int = ASR_TIMEOUT_SECONDS, session: requests.Session = None):
        """
        Initialize speech-to-text client.

        Args:
            timeout: Request timeout in seconds for each upload
            session: Optional requests session (a new one is created if omitted)
        """
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self.session = session or requests.Session()

    def transcribe_file(self, audio_path: str, config: TranscriptionConfig) -> str:
        """
        Transcribe one audio file and return plain text.

        Args:
            audio_path: Path to the audio file (one chunk)
            config: Provider, API key, model and language hint

        Returns:
            Raw transcribed text as returned by the provider

        Raises:
            ConfigurationError: If the provider is not supported
            TranscriptionProviderError: On non-2xx responses or transport failures
        """
        endpoint = ASR_ENDPOINTS.get(config.provider)
        if endpoint is None:
            raise ConfigurationError(
                f"Unsupported ASR provider: {config.provider}",
                f"Expected one of {sorted(ASR_ENDPOINTS)}"
            )

        data = {
            "model": config.model or DEFAULT_ASR_MODELS[config.provider],
            "response_format": "text",
        }
        if config.language:
            data["language"] = config.language

        self.logger.info(f"Uploading {os.path.basename(audio_path)} to {config.provider} ({data['model']})")

        try:
            with open(audio_path, "rb") as audio_file:
                response = self.session.post(
                    endpoint,
                    headers={"Authorization": f"Bearer {config.api_key}"},
                    data=data,
                    files={"file": (os.path.basename(audio_path), audio_file)},
                    timeout=self.timeout
                )
        except requests.RequestException as e:
            self.logger.error(f"{config.provider} request failed for {audio_path}: {e}")
            raise TranscriptionProviderError(config.provider, None, str(e)) from e

        if not response.ok:
            self.logger.error(
                f"{config.provider} returned {response.status_code} for {audio_path}: {response.text[:500]}"
            )
            raise TranscriptionProviderError(config.provider, response.status_code, response.text)

        # Replies are UTF-8 even when the Content-Type carries no charset
        return response.content.decode("utf-8")
