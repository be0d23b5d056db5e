#!/usr/bin/env python3
"""
Web server module for Lecture Transcriber.
Accepts an uploaded audio file, transcribes it and returns the transcript
together with a structured analysis.
"""

import logging
import os
import re
from typing import Any, Dict, Tuple, Union

from flask import Flask, jsonify, request, Response

import analysis_service
from config import (
    CHUNK_WINDOW_SECONDS,
    CHUNK_OVERLAP_SECONDS,
    ENABLE_ANALYSIS,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    MAX_UPLOAD_MB,
    WEB_HOST,
    WEB_PORT,
    TranscriptionConfig,
)
from exceptions import (
    TranscriberError,
    MissingCredentialsError,
)
from resource_managers import temporary_directory
from transcription_service import TranscriptionService

logger = logging.getLogger(__name__)
app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_MB * 1024 * 1024

ALLOWED_AUDIO_TYPES = {
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/mp4",
    "audio/x-m4a",
    "audio/aac",
    "audio/webm",
}

# Extension for uploads whose filename has none; chunks are stream-copied into
# a container matching the source extension
AUDIO_TYPE_EXTENSIONS = {
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/mp4": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/aac": ".aac",
    "audio/webm": ".webm",
}

_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [a-zA-Z0-9._-] with an underscore."""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", filename or "")
    if cleaned.strip(".") == "":
        return "upload"
    return cleaned


def upload_filename(filename: str, mimetype: str) -> str:
    """Sanitized upload name, with an extension derived from the MIME type when missing."""
    name = sanitize_filename(filename)
    if not os.path.splitext(name)[1]:
        name += AUDIO_TYPE_EXTENSIONS.get(mimetype, "")
    return name


def _is_allowed_content_type(mimetype: str) -> bool:
    # Browsers and CLI clients often omit the type or send a generic one
    if not mimetype or mimetype == "application/octet-stream":
        return True
    return mimetype in ALLOWED_AUDIO_TYPES


def create_transcription_service() -> TranscriptionService:
    """Build the transcription service used by request handlers."""
    return TranscriptionService()


def run_analysis(transcript: str, glossary: str, variant: str, duration_seconds: float) -> Dict[str, Any]:
    """Run the configured analysis, or return the default structure when disabled."""
    if not ENABLE_ANALYSIS:
        logger.info("Analysis disabled in config; returning default structure")
        return analysis_service.default_analysis(variant, transcript, duration_seconds / 60)

    return analysis_service.request_analysis(
        transcript,
        glossary,
        api_key=GEMINI_API_KEY,
        model=GEMINI_MODEL,
        variant=variant,
        duration_seconds=duration_seconds
    )


@app.route('/api/status')
def api_status() -> Response:
    """API endpoint for service status."""
    return jsonify({
        'status': 'ok',
        'provider': TranscriptionConfig.from_env().provider,
        'analysis_enabled': ENABLE_ANALYSIS,
    })


@app.route('/api/transcribe', methods=['POST'])
def api_transcribe() -> Union[Response, Tuple[Response, int]]:
    """API endpoint to transcribe and analyze an uploaded audio file."""
    audio = request.files.get('audio')
    if audio is None or not audio.filename:
        return jsonify({'success': False, 'error': 'No audio file'}), 400

    if not _is_allowed_content_type(audio.mimetype):
        return jsonify({'success': False, 'error': f'Unsupported audio type: {audio.mimetype}'}), 415

    glossary = request.form.get('glossary', '')
    variant = request.form.get('analysis', analysis_service.SUMMARY_VARIANT)
    if variant not in analysis_service.ANALYSIS_VARIANTS:
        return jsonify({'success': False, 'error': f'Unknown analysis type: {variant}'}), 400

    # Built per request so no provider settings survive between requests
    asr_config = TranscriptionConfig.from_env()

    try:
        with temporary_directory(prefix="upload-") as upload_dir:
            file_path = os.path.join(upload_dir, upload_filename(audio.filename, audio.mimetype))
            audio.save(file_path)
            logger.info(f"Saved upload {audio.filename} ({os.path.getsize(file_path)} bytes)")

            service = create_transcription_service()
            result = service.transcribe_file(
                file_path,
                asr_config,
                window_seconds=CHUNK_WINDOW_SECONDS,
                overlap_seconds=CHUNK_OVERLAP_SECONDS
            )

        analysis = run_analysis(result.transcript, glossary, variant, result.duration_seconds)

    except MissingCredentialsError as e:
        logger.warning(str(e))
        return jsonify({'success': False, 'error': e.message}), 400
    except TranscriberError as e:
        logger.error(f"Transcription failed: {e}", exc_info=True)
        return jsonify({'success': False, 'error': e.message, 'details': e.details}), 500
    except Exception as e:
        logger.error(f"Unexpected transcription error: {e}", exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to process audio file'}), 500

    return jsonify({
        'success': True,
        'transcript': result.transcript,
        'analysis': analysis,
        'duration': result.duration_seconds,
        'wordCount': result.word_count,
    })


@app.errorhandler(413)
def upload_too_large(error: Exception) -> Tuple[Response, int]:
    """Return JSON instead of HTML when the upload exceeds MAX_UPLOAD_MB."""
    return jsonify({'success': False, 'error': f'File too large (max {MAX_UPLOAD_MB} MB)'}), 413


def run_server(host: str = WEB_HOST, port: int = WEB_PORT) -> None:
    """Run the Flask development server."""
    logger.info(f"Starting web server on {host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=True)
