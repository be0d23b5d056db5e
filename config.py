#!/usr/bin/env python3
"""
Configuration module for Lecture Transcriber.
Centralizes all configuration values for easier testing and maintenance.
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Speech-to-text providers
SUPPORTED_ASR_PROVIDERS = ("groq", "openai")
DEFAULT_ASR_MODELS = {
    "groq": "whisper-large-v3",
    "openai": "whisper-1",
}

# Speech-to-text settings
ASR_PROVIDER = os.getenv("ASR_PROVIDER", "groq").lower()
TRANSCRIPTION_LANGUAGE = os.getenv("TRANSCRIPTION_LANGUAGE", "en")  # Language hint sent with every chunk
ASR_TIMEOUT_SECONDS = int(os.getenv("ASR_TIMEOUT_SECONDS", "300"))

# Chunking settings (in seconds)
CHUNK_WINDOW_SECONDS = float(os.getenv("CHUNK_WINDOW_SECONDS", "600"))  # 10 minutes per chunk
CHUNK_OVERLAP_SECONDS = float(os.getenv("CHUNK_OVERLAP_SECONDS", "2"))

# External command settings
FFMPEG_COMMAND = os.getenv("FFMPEG_COMMAND", "ffmpeg")
FFPROBE_COMMAND = os.getenv("FFPROBE_COMMAND", "ffprobe")

# Gemini API settings (for transcript analysis)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", None)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
ENABLE_ANALYSIS = os.getenv("ENABLE_ANALYSIS", "true").lower() == "true"

# Web server settings
WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WEB_PORT", "5000"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "200"))

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "./logs")


@dataclass(frozen=True)
class TranscriptionConfig:
    """
    Speech-to-text settings for a single transcription run.

    Built once per request so that no provider state outlives the request
    that created it.
    """

    provider: str
    api_key: str
    model: Optional[str] = None
    language: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'TranscriptionConfig':
        """
        Build a TranscriptionConfig from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            TranscriptionConfig for the selected provider. The API key may be
            empty; callers are expected to check it before transcribing.
        """
        env = os.environ if environ is None else environ
        provider = env.get("ASR_PROVIDER", "groq").lower()

        if provider == "openai":
            api_key = env.get("OPENAI_API_KEY", "")
            model = env.get("OPENAI_ASR_MODEL", DEFAULT_ASR_MODELS["openai"])
        else:
            api_key = env.get("GROQ_API_KEY", "")
            model = env.get("GROQ_ASR_MODEL", DEFAULT_ASR_MODELS["groq"])

        return cls(
            provider=provider,
            api_key=api_key,
            model=model,
            language=env.get("TRANSCRIPTION_LANGUAGE", "en") or None,
        )


@dataclass
class AppConfig:
    """
    Type-safe configuration with validation.

    This dataclass provides a validated, type-safe interface to the application
    configuration. It ensures all required settings are present and valid before
    the application starts.
    """

    # Speech-to-text settings
    asr_provider: str
    transcription_language: str
    asr_timeout_seconds: int

    # Chunking settings
    chunk_window_seconds: float
    chunk_overlap_seconds: float

    # External command settings
    ffmpeg_command: str
    ffprobe_command: str

    # Gemini API settings
    gemini_api_key: Optional[str]
    gemini_model: str
    enable_analysis: bool

    # Web server settings
    web_host: str
    web_port: int
    max_upload_mb: int

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "./logs"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """
        Create an AppConfig instance from environment variables.

        Returns:
            AppConfig: Validated configuration instance

        Raises:
            ValueError: If any configuration validation fails
        """
        config = cls(
            asr_provider=ASR_PROVIDER,
            transcription_language=TRANSCRIPTION_LANGUAGE,
            asr_timeout_seconds=ASR_TIMEOUT_SECONDS,
            chunk_window_seconds=CHUNK_WINDOW_SECONDS,
            chunk_overlap_seconds=CHUNK_OVERLAP_SECONDS,
            ffmpeg_command=FFMPEG_COMMAND,
            ffprobe_command=FFPROBE_COMMAND,
            gemini_api_key=GEMINI_API_KEY,
            gemini_model=GEMINI_MODEL,
            enable_analysis=ENABLE_ANALYSIS,
            web_host=WEB_HOST,
            web_port=WEB_PORT,
            max_upload_mb=MAX_UPLOAD_MB,
            log_level=LOG_LEVEL,
            log_dir=LOG_DIR,
        )

        config.validate()

        return config

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: If any validation check fails with a descriptive message
        """
        errors = []

        # Validate speech-to-text settings
        if self.asr_provider not in SUPPORTED_ASR_PROVIDERS:
            errors.append(
                f"ASR_PROVIDER must be one of {list(SUPPORTED_ASR_PROVIDERS)} "
                f"(got '{self.asr_provider}')"
            )

        if self.asr_timeout_seconds <= 0:
            errors.append(
                f"ASR_TIMEOUT_SECONDS must be positive (got {self.asr_timeout_seconds})"
            )

        # Validate chunk window and overlap
        if self.chunk_window_seconds <= 0:
            errors.append(
                f"CHUNK_WINDOW_SECONDS must be positive (got {self.chunk_window_seconds})"
            )
        if self.chunk_overlap_seconds < 0:
            errors.append(
                f"CHUNK_OVERLAP_SECONDS must be non-negative (got {self.chunk_overlap_seconds})"
            )
        elif self.chunk_overlap_seconds >= self.chunk_window_seconds > 0:
            errors.append(
                f"CHUNK_OVERLAP_SECONDS ({self.chunk_overlap_seconds}) must be less than "
                f"CHUNK_WINDOW_SECONDS ({self.chunk_window_seconds})"
            )

        # Validate external commands
        if not self.ffmpeg_command:
            errors.append("FFMPEG_COMMAND must not be empty")
        if not self.ffprobe_command:
            errors.append("FFPROBE_COMMAND must not be empty")

        # Validate web server settings
        if self.web_port < 1 or self.web_port > 65535:
            errors.append(
                f"WEB_PORT must be between 1 and 65535 (got {self.web_port})"
            )

        if self.max_upload_mb <= 0:
            errors.append(f"MAX_UPLOAD_MB must be positive (got {self.max_upload_mb})")

        # If there are any errors, raise a ValueError with all error messages
        if errors:
            error_message = "Configuration validation failed:\n" + "\n".join(
                f"  - {error}" for error in errors
            )
            logger.error(error_message)
            raise ValueError(error_message)

        if self.enable_analysis and not self.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set; analysis will use the default structure")

        logger.info("Configuration validation passed")


def validate_config() -> AppConfig:
    """
    Convenience function to validate configuration from environment.

    Returns:
        AppConfig: Validated configuration instance

    Raises:
        ValueError: If any configuration validation fails
    """
    return AppConfig.from_env()
