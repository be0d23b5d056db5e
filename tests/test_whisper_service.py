"""Tests for the hosted Whisper speech-to-text client."""

import pytest
import requests
import responses

from config import TranscriptionConfig
from exceptions import ConfigurationError, TranscriptionProviderError
from transcription.whisper_service import ASR_ENDPOINTS, WhisperApiService


@pytest.mark.unit
class TestWhisperApiService:
    """Test chunk uploads to Groq and OpenAI."""

    @responses.activate
    def test_groq_success(self, audio_file, groq_config):
        responses.add(responses.POST, ASR_ENDPOINTS['groq'], body="Assalamu alaikum everyone.\n", status=200)

        text = WhisperApiService().transcribe_file(audio_file, groq_config)

        assert text == "Assalamu alaikum everyone.\n"
        request = responses.calls[0].request
        assert request.headers['Authorization'] == 'Bearer gsk_test'
        body = request.body if isinstance(request.body, bytes) else request.body.encode()
        assert b'whisper-large-v3' in body
        assert b'name="response_format"' in body
        assert b'name="language"' in body
        assert b'filename="lecture.mp3"' in body

    @responses.activate
    def test_openai_default_model(self, audio_file):
        responses.add(responses.POST, ASR_ENDPOINTS['openai'], body="hello", status=200)
        config = TranscriptionConfig(provider='openai', api_key='sk-test', model=None, language=None)

        assert WhisperApiService().transcribe_file(audio_file, config) == "hello"

        body = responses.calls[0].request.body
        body = body if isinstance(body, bytes) else body.encode()
        assert b'whisper-1' in body
        assert b'name="language"' not in body

    @responses.activate
    def test_error_status(self, audio_file, groq_config):
        responses.add(
            responses.POST, ASR_ENDPOINTS['groq'],
            json={'error': {'message': 'Invalid API Key'}}, status=401
        )

        with pytest.raises(TranscriptionProviderError) as exc_info:
            WhisperApiService().transcribe_file(audio_file, groq_config)

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == 'groq'
        assert exc_info.value.message == "GROQ ASR error: 401"
        assert 'Invalid API Key' in exc_info.value.details

    @responses.activate
    def test_connection_error(self, audio_file, groq_config):
        responses.add(
            responses.POST, ASR_ENDPOINTS['groq'],
            body=requests.exceptions.ConnectionError("connection refused")
        )

        with pytest.raises(TranscriptionProviderError) as exc_info:
            WhisperApiService().transcribe_file(audio_file, groq_config)

        assert exc_info.value.status_code is None
        assert 'connection refused' in exc_info.value.details

    @responses.activate
    def test_arabic_reply_without_charset(self, audio_file, groq_config):
        responses.add(
            responses.POST, ASR_ENDPOINTS["groq"],
            body="قال يا محمد".encode("utf-8"), headers={"Content-Type": "text/plain"}, status=200
        )

        text = WhisperApiService().transcribe_file(audio_file, groq_config)

        assert text == "قال يا محمد"

    def test_unknown_provider(self, audio_file):
        config = TranscriptionConfig(provider='azure', api_key='key')

        with pytest.raises(ConfigurationError):
            WhisperApiService().transcribe_file(audio_file, config)

    def test_uses_given_timeout(self, audio_file, groq_config):
        session = requests.Session()
        service = WhisperApiService(timeout=42, session=session)

        with responses.RequestsMock() as rsps:
            rsps.add(responses.POST, ASR_ENDPOINTS['groq'], body="ok", status=200)
            service.transcribe_file(audio_file, groq_config)

        assert service.timeout == 42
        assert service.session is session
