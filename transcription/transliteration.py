#!/usr/bin/env python3
"""
Arabic script detection and romanization.

Transliteration is character by character: every occurrence of a letter maps
to the same Latin form regardless of its position in the word.
"""

import re
from typing import List, Optional

from .models import ScriptRun

# Inclusive code point ranges treated as Arabic script
ARABIC_RANGES = [
    (0x0600, 0x06FF),  # Arabic
    (0x0750, 0x077F),  # Arabic Supplement
    (0x08A0, 0x08FF),  # Arabic Extended-A
    (0xFB50, 0xFDFF),  # Arabic Presentation Forms-A
    (0xFE70, 0xFEFF),  # Arabic Presentation Forms-B
]

# Simplified academic transliteration
TRANSLITERATION_MAP = {
    # Letters
    "ا": "ā", "أ": "a", "إ": "i", "آ": "ā", "ب": "b", "ت": "t", "ث": "th",
    "ج": "j", "ح": "ḥ", "خ": "kh", "د": "d", "ذ": "dh", "ر": "r", "ز": "z",
    "س": "s", "ش": "sh", "ص": "ṣ", "ض": "ḍ", "ط": "ṭ", "ظ": "ẓ", "ع": "ʿ",
    "غ": "gh", "ف": "f", "ق": "q", "ك": "k", "ل": "l", "م": "m", "ن": "n",
    "ه": "h", "و": "w", "ي": "y", "ء": "ʾ", "ؤ": "ʾ", "ئ": "ʾ", "ة": "h",
    "ى": "ā",
    # Short vowels
    "َ": "a",   # fatha
    "ِ": "i",   # kasra
    "ُ": "u",   # damma
    # Tanwin
    "ً": "an",  # fathatan
    "ٍ": "in",  # kasratan
    "ٌ": "un",  # dammatan
    # Silent marks
    "ْ": "",    # sukun
    "ّ": "",    # shadda
}

_WHITESPACE_RE = re.compile(r"\s+")


def is_arabic_char(ch: str) -> bool:
    """Return True if the first character of ``ch`` is in an Arabic block."""
    if not ch:
        return False
    code = ord(ch[0])
    return any(low <= code <= high for low, high in ARABIC_RANGES)


def contains_arabic(text: str) -> bool:
    """Return True if any character of ``text`` is Arabic script."""
    return any(is_arabic_char(ch) for ch in text)


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def transliterate_arabic(text: str) -> str:
    """
    Romanize Arabic characters in ``text``.

    Characters without a mapping (Latin text, digits, punctuation, unmapped
    Arabic letters) pass through unchanged.

    Args:
        text: Input string, possibly mixing scripts

    Returns:
        Transliterated string with whitespace normalized
    """
    romanized = "".join(TRANSLITERATION_MAP.get(ch, ch) for ch in text)
    return normalize_whitespace(romanized)


def split_arabic_runs(text: str) -> List[ScriptRun]:
    """
    Partition ``text`` into maximal Arabic and non-Arabic runs.

    Joining the ``text`` of the returned runs gives back the input exactly.
    An empty string yields an empty list.
    """
    runs: List[ScriptRun] = []
    buffer: List[str] = []
    mode: Optional[bool] = None

    for ch in text:
        arabic = is_arabic_char(ch)
        if mode is None or arabic == mode:
            buffer.append(ch)
        else:
            runs.append(ScriptRun("".join(buffer), mode))
            buffer = [ch]
        mode = arabic

    if buffer:
        runs.append(ScriptRun("".join(buffer), bool(mode)))

    return runs


def arabic_ratio(text: str) -> int:
    """
    Percentage of non-whitespace characters that are Arabic script.

    Returns:
        Integer between 0 and 100; 0 when there are no visible characters
    """
    visible = 0
    arabic = 0
    for run in split_arabic_runs(text):
        count = sum(1 for ch in run.text if not ch.isspace())
        visible += count
        if run.is_target_script:
            arabic += count
    if visible == 0:
        return 0
    return round(100 * arabic / visible)
