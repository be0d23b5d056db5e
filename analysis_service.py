#!/usr/bin/env python3
"""
Analysis Service for Lecture Transcriber.
Uses Google Gemini API to turn a finished transcript into structured JSON
(summary, key points, Q&A, quotes). The model output is treated as untrusted:
anything that is not a JSON object is replaced by a default structure.
"""

import asyncio
import copy
import json
import logging
import re
import time
from typing import Any, Dict, Optional

from google import genai

from exceptions import AnalysisError, AnalysisParseError
from transcription.transliteration import arabic_ratio

logger = logging.getLogger(__name__)

SUMMARY_VARIANT = "summary"
LECTURE_VARIANT = "lecture"
ANALYSIS_VARIANTS = (SUMMARY_VARIANT, LECTURE_VARIANT)

SUMMARY_SYSTEM_PROMPT = """You analyze a lecture transcript (mostly English with some Arabic phrases, Qur'anic verses, and hadith).
Return a compact JSON with fields: summary (string, <= 200 words), bullets (string[]), qa ({question:string,answer:string}[]), quotes (string[] Arabic quotes only, as-is).
Do not invent content; rely only on the transcript.
Return ONLY the JSON object (no markdown, no explanation)."""

LECTURE_SYSTEM_PROMPT = """You are an expert in analyzing mixed English-Arabic lecture transcriptions, particularly those containing Islamic content like Quranic verses and hadiths.

Your task is to:
1. Identify key topics and themes
2. Extract main points and supporting arguments
3. Identify any Quranic verses or hadiths quoted in the transcript
4. Extract Q&A sessions with questions and answers
5. Calculate statistics (word count, duration, etc.)

Do not invent content; rely only on the transcript.

IMPORTANT: Return ONLY a valid JSON object with no additional text or formatting. The JSON must have this exact structure:
{
  "mainTopic": "string",
  "keyThemes": ["array of themes"],
  "mainPoints": [{"point": "string", "details": "string", "arabicContent": "any Arabic text or null"}],
  "quranVerses": [{"verse": "Arabic text", "translation": "English", "reference": "Surah:Ayah"}],
  "hadiths": [{"arabic": "Arabic text if available", "english": "English text", "source": "source if mentioned"}],
  "qaSessions": [{"question": "string", "answer": "string", "timestamp": "string", "category": "string"}],
  "summary": "comprehensive summary",
  "statistics": {
    "wordCount": number,
    "estimatedDuration": number,
    "arabicPercentage": number,
    "questionsCount": number
  },
  "mindMapStructure": {
    "centralTopic": "string",
    "branches": [{"title": "string", "subBranches": ["array of sub-topics"]}]
  }
}"""

SYSTEM_PROMPTS = {
    SUMMARY_VARIANT: SUMMARY_SYSTEM_PROMPT,
    LECTURE_VARIANT: LECTURE_SYSTEM_PROMPT,
}

_LEADING_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\s*```$")


def default_summary() -> Dict[str, Any]:
    """Fallback for the summary variant: every key present, every collection empty."""
    return {
        'summary': '',
        'bullets': [],
        'qa': [],
        'quotes': [],
    }


def default_lecture_analysis(transcript: str = "", duration_minutes: Optional[float] = None) -> Dict[str, Any]:
    """
    Fallback for the lecture variant.

    Statistics are computed from the transcript so they stay meaningful even
    when the model response is unusable.
    """
    analysis = {
        'mainTopic': 'Lecture',
        'keyThemes': [],
        'mainPoints': [],
        'quranVerses': [],
        'hadiths': [],
        'qaSessions': [],
        'summary': '',
        'mindMapStructure': {
            'centralTopic': 'Lecture',
            'branches': [],
        },
    }
    fill_statistics(analysis, transcript, duration_minutes)
    return analysis


def default_analysis(variant: str, transcript: str = "", duration_minutes: Optional[float] = None) -> Dict[str, Any]:
    """Return the fallback structure for ``variant``."""
    if variant == LECTURE_VARIANT:
        return default_lecture_analysis(transcript, duration_minutes)
    return default_summary()


def build_prompt(transcript: str, glossary: str = "") -> str:
    """Build the user prompt; the glossary is passed through unmodified."""
    return (
        f"GLOSSARY (domain terms to keep stable):\n{glossary}\n\n"
        f"TRANSCRIPT:\n{transcript}\n\n"
        "Return only JSON."
    )


def strip_code_fence(response_text: str) -> str:
    """
    Remove a Markdown code fence around a model response.

    Gemini sometimes wraps JSON in ```json ... ``` even when told not to.
    """
    cleaned = response_text.strip()
    cleaned = _LEADING_FENCE_RE.sub("", cleaned)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned)
    return cleaned


def _parse_json_object(response_text: str) -> Dict[str, Any]:
    """
    Parse a model response into a JSON object.

    Raises:
        AnalysisParseError: If the text is not JSON or not a JSON object
    """
    cleaned = strip_code_fence(response_text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(str(e)) from e

    if not isinstance(parsed, dict):
        raise AnalysisParseError(f"Expected a JSON object, got {type(parsed).__name__}")

    return parsed


def parse_analysis_response(response_text: str, fallback: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse a model response, falling back to ``fallback`` on any parse failure.

    Keys missing from a successfully parsed object are left missing.

    Args:
        response_text: Raw model output, optionally fenced
        fallback: Structure to return (copied) when parsing fails

    Returns:
        Parsed analysis dictionary, never None
    """
    try:
        return _parse_json_object(response_text)
    except AnalysisParseError as e:
        logger.warning(f"Failed to parse analysis JSON, using fallback structure: {e.details}")
        logger.debug(f"Response preview (first 500 chars): {response_text[:500]}")
        return copy.deepcopy(fallback)


def fill_statistics(analysis: Dict[str, Any], transcript: str, duration_minutes: Optional[float] = None) -> Dict[str, Any]:
    """
    Make sure the lecture analysis carries usable statistics.

    A missing ``statistics`` object is computed from the transcript. When the
    model did return one, only ``wordCount`` and ``estimatedDuration`` are
    back-filled.

    Args:
        analysis: Parsed lecture analysis (modified in place)
        transcript: Final transcript text
        duration_minutes: Audio length in minutes, if known

    Returns:
        The same ``analysis`` dictionary
    """
    word_count = len(transcript.split())
    estimated_duration = round(duration_minutes) if duration_minutes is not None else 0

    statistics = analysis.get('statistics')
    if not isinstance(statistics, dict):
        qa_sessions = analysis.get('qaSessions')
        analysis['statistics'] = {
            'wordCount': word_count,
            'estimatedDuration': estimated_duration,
            'arabicPercentage': arabic_ratio(transcript),
            'questionsCount': len(qa_sessions) if isinstance(qa_sessions, list) else 0,
        }
        return analysis

    if not statistics.get('wordCount'):
        statistics['wordCount'] = word_count
    if not statistics.get('estimatedDuration') and duration_minutes is not None:
        statistics['estimatedDuration'] = estimated_duration

    return analysis


async def request_analysis_async(
    transcript: str,
    glossary: str = "",
    api_key: Optional[str] = None,
    model: str = "gemini-1.5-flash",
    variant: str = SUMMARY_VARIANT,
    duration_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """
    Async version: Request a structured analysis of a transcript from Gemini.

    Args:
        transcript: Final transcript text
        glossary: Domain terms to keep stable (passed through unmodified)
        api_key: Gemini API key
        model: Gemini model to use (default: gemini-1.5-flash)
        variant: 'summary' or 'lecture'
        duration_seconds: Audio length, used for lecture statistics

    Returns:
        Analysis dictionary. On a missing key, API failure or malformed
        response the variant's default structure is returned instead.

    Raises:
        ValueError: If ``variant`` is unknown
    """
    if variant not in ANALYSIS_VARIANTS:
        raise ValueError(f"Unknown analysis variant: {variant!r}")

    duration_minutes = duration_seconds / 60 if duration_seconds is not None else None
    fallback = default_analysis(variant, transcript, duration_minutes)

    if not api_key:
        logger.warning("No Gemini API key provided, returning default analysis")
        return fallback

    if not transcript.strip():
        logger.info("Transcript is empty; skipping analysis")
        return fallback

    try:
        response_text = await _generate(
            model=model,
            api_key=api_key,
            system_prompt=SYSTEM_PROMPTS[variant],
            prompt=build_prompt(transcript, glossary)
        )
    except AnalysisError as e:
        logger.error(f"Analysis request failed, returning default analysis: {e}")
        return fallback

    analysis = parse_analysis_response(response_text, fallback)

    if variant == LECTURE_VARIANT:
        fill_statistics(analysis, transcript, duration_minutes)

    return analysis


async def _generate(model: str, api_key: str, system_prompt: str, prompt: str) -> str:
    """
    Send one request to Gemini and return the response text.

    Raises:
        AnalysisError: If the call fails or no text comes back
    """
    start_time = time.time()
    logger.info(f"Requesting transcript analysis from {model} ({len(prompt)} prompt chars)")

    try:
        client = genai.Client(api_key=api_key)
        async with client.aio as async_client:
            response = await async_client.models.generate_content(
                model=model,
                contents=prompt,
                config={
                    'system_instruction': system_prompt,
                    'temperature': 0.2
                }
            )
    except Exception as e:
        logger.error(f"Gemini API error: {e}", exc_info=True)
        raise AnalysisError('analysis request', str(e)) from e

    response_text = getattr(response, 'text', None)
    if not response_text:
        raise AnalysisError('analysis request', 'Could not extract text from response')

    logger.info(f"Analysis response received in {time.time() - start_time:.1f}s")
    logger.debug(f"Raw response (first 2000 chars): {response_text[:2000]}")
    return response_text


def request_analysis(
    transcript: str,
    glossary: str = "",
    api_key: Optional[str] = None,
    model: str = "gemini-1.5-flash",
    variant: str = SUMMARY_VARIANT,
    duration_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """
    Synchronous wrapper for request_analysis_async.

    Args:
        transcript: Final transcript text
        glossary: Domain terms to keep stable
        api_key: Gemini API key
        model: Gemini model to use
        variant: 'summary' or 'lecture'
        duration_seconds: Audio length, used for lecture statistics

    Returns:
        Analysis dictionary (never None)
    """
    return asyncio.run(request_analysis_async(
        transcript,
        glossary,
        api_key,
        model,
        variant,
        duration_seconds
    ))
