#!/usr/bin/env python3
"""
Command-line entrypoint for Lecture Transcriber.

Usage:
    python main.py transcribe lecture.mp3 --glossary "Iman, Ihsan" --analysis lecture
    python main.py serve
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import analysis_service
from config import AppConfig, TranscriptionConfig, validate_config
from exceptions import TranscriberError
from logging_config import setup_logging
from transcription_service import TranscriptionService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transcribe lecture audio and summarize it with a language model."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transcribe = subparsers.add_parser("transcribe", help="Transcribe a local audio file")
    transcribe.add_argument("audio_path", help="Path to the audio file")
    transcribe.add_argument("--glossary", default="", help="Domain terms to keep stable")
    transcribe.add_argument("--glossary-file", help="Read glossary terms from a text file")
    transcribe.add_argument(
        "--analysis",
        choices=analysis_service.ANALYSIS_VARIANTS,
        default=analysis_service.SUMMARY_VARIANT,
        help="Analysis structure to request (default: summary)"
    )
    transcribe.add_argument("--no-analysis", action="store_true", help="Skip the language model step")
    transcribe.add_argument("--window", type=float, help="Chunk length in seconds")
    transcribe.add_argument("--overlap", type=float, help="Chunk overlap in seconds")
    transcribe.add_argument("--output", help="Write the JSON result to this file instead of stdout")

    serve = subparsers.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Port to listen on")

    return parser


def _read_glossary(args: argparse.Namespace) -> str:
    if args.glossary_file:
        with open(args.glossary_file, "r", encoding="utf-8") as f:
            return f.read()
    return args.glossary


def run_transcribe(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Transcribe a file and print (or save) the JSON result."""
    window = args.window if args.window is not None else app_config.chunk_window_seconds
    overlap = args.overlap if args.overlap is not None else app_config.chunk_overlap_seconds

    try:
        glossary = _read_glossary(args)
    except OSError as e:
        logger.error(f"Could not read glossary file {args.glossary_file}: {e}")
        return 1

    service = TranscriptionService(show_progress=True)
    try:
        result = service.transcribe_file(
            args.audio_path,
            TranscriptionConfig.from_env(),
            window_seconds=window,
            overlap_seconds=overlap
        )
    except (TranscriberError, ValueError) as e:
        logger.error(f"Transcription failed: {e}")
        return 1

    if args.no_analysis or not app_config.enable_analysis:
        analysis = analysis_service.default_analysis(
            args.analysis, result.transcript, result.duration_seconds / 60
        )
    else:
        analysis = analysis_service.request_analysis(
            result.transcript,
            glossary,
            api_key=app_config.gemini_api_key,
            model=app_config.gemini_model,
            variant=args.analysis,
            duration_seconds=result.duration_seconds
        )

    payload = json.dumps({
        'success': True,
        'transcript': result.transcript,
        'analysis': analysis,
        'duration': result.duration_seconds,
        'wordCount': result.word_count,
    }, indent=2, ensure_ascii=False)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info(f"Saved result to {args.output}")
    else:
        print(payload)

    return 0


def run_serve(args: argparse.Namespace, app_config: AppConfig) -> int:
    from web_server import run_server

    run_server(
        host=args.host or app_config.web_host,
        port=args.port or app_config.web_port
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        app_config = validate_config()
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    setup_logging(log_level=app_config.log_level, log_dir=app_config.log_dir)

    if args.command == "transcribe":
        return run_transcribe(args, app_config)
    return run_serve(args, app_config)


if __name__ == '__main__':
    sys.exit(main())
