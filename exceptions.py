"""Custom exception types for the Lecture Transcriber application.

This module defines a hierarchy of domain-specific exceptions that provide
clear error handling and improved debugging capabilities.

Exception Hierarchy:
    TranscriberError (base)
    ├── ConfigurationError
    ├── MediaError
    │   ├── DurationProbeError
    │   └── ChunkExtractionError
    ├── TranscriptionError
    │   ├── MissingCredentialsError
    │   └── TranscriptionProviderError
    └── AnalysisError
        └── AnalysisParseError
"""


class TranscriberError(Exception):
    """Base exception for all Lecture Transcriber errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception with a message and optional details.

        Args:
            message: Human-readable error message
            details: Additional technical details about the error
        """
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


# Configuration Errors
class ConfigurationError(TranscriberError):
    """Raised when there's an issue with application configuration."""
    pass


# Media Errors
class MediaError(TranscriberError):
    """Base class for ffprobe/ffmpeg related errors."""
    pass


class DurationProbeError(MediaError):
    """Raised when the duration of an audio file cannot be determined."""

    def __init__(self, file_path: str, error: str = None):
        """Initialize with file path and optional error details.

        Args:
            file_path: Path to the audio file being probed
            error: stderr output or parse failure from ffprobe
        """
        self.file_path = file_path
        message = f"Could not determine duration of: {file_path}"
        super().__init__(message, error)


class ChunkExtractionError(MediaError):
    """Raised when ffmpeg fails to extract a chunk from the source audio."""

    def __init__(self, file_path: str, chunk_index: int = None, error: str = None):
        """Initialize with file path, chunk index, and optional error.

        Args:
            file_path: Path to the source audio file
            chunk_index: Index of the chunk that failed
            error: stderr output from ffmpeg
        """
        self.file_path = file_path
        self.chunk_index = chunk_index
        message = f"Failed to extract chunk from: {file_path}"
        if chunk_index is not None:
            message += f" (chunk {chunk_index})"
        super().__init__(message, error)


# Transcription Errors
class TranscriptionError(TranscriberError):
    """Base class for speech-to-text errors."""
    pass


class MissingCredentialsError(TranscriptionError):
    """Raised when the speech-to-text provider has no API key configured."""

    def __init__(self, provider: str):
        """Initialize with the provider whose key is missing.

        Args:
            provider: Speech-to-text provider name (e.g. 'groq', 'openai')
        """
        self.provider = provider
        super().__init__(f"{provider.upper()} API key missing")


class TranscriptionProviderError(TranscriptionError):
    """Raised when the speech-to-text provider rejects or fails a request."""

    def __init__(self, provider: str, status_code: int = None, error: str = None):
        """Initialize with provider, HTTP status, and optional error body.

        Args:
            provider: Speech-to-text provider name
            status_code: HTTP status returned by the provider, if any
            error: Response body or transport error message
        """
        self.provider = provider
        self.status_code = status_code
        message = f"{provider.upper()} ASR error"
        if status_code is not None:
            message += f": {status_code}"
        super().__init__(message, error)


# Analysis Errors
class AnalysisError(TranscriberError):
    """Raised when the language model analysis request fails."""

    def __init__(self, operation: str = None, error: str = None):
        """Initialize with optional operation and error details.

        Args:
            operation: The operation that failed (e.g., 'summary request')
            error: Error details from the model API
        """
        self.operation = operation
        message = "Transcript analysis failed"
        if operation:
            message += f" during {operation}"
        super().__init__(message, error)


class AnalysisParseError(AnalysisError):
    """Raised when the model response is not a usable JSON object."""

    def __init__(self, error: str = None):
        super().__init__('response parsing', error)
