"""
Trigger keyword handling.

Skills declare the words that activate them either explicitly (a
``triggers`` list in the frontmatter) or implicitly through their
description. This module extracts keywords from descriptions and
normalizes keywords and intent text for comparison.
"""

from __future__ import annotations

import re as _re
import typing as _typing

import skillselect.constants as constants

# Quoted phrases: "..." '...' and their typographic variants
_QUOTED_RE = _re.compile(r"\"([^\"]+)\"|“([^”]+)”|(?<!\w)'([^']+)'(?!\w)|‘([^’]+)’")

# Candidate words: letters first, then letters/digits and a few joiners
# so that "C#", "Vue.js" and "two-factor" survive as single words.
_WORD_RE = _re.compile(r"[A-Za-z][A-Za-z0-9+#._-]*")

_WHITESPACE_RE = _re.compile(r"\s+")

STOP_WORDS: frozenset[str] = frozenset(
    {
        # English function words
        "a", "about", "above", "after", "again", "all", "also", "an", "and",
        "any", "are", "as", "at", "be", "been", "before", "being", "between",
        "both", "but", "by", "can", "could", "did", "do", "does", "doing",
        "each", "etc", "for", "from", "further", "had", "has", "have",
        "having", "here", "how", "if", "in", "into", "is", "it", "its",
        "just", "like", "more", "most", "must", "no", "not", "now", "of",
        "on", "once", "only", "or", "other", "our", "out", "over", "own",
        "same", "should", "so", "some", "such", "than", "that", "the",
        "their", "them", "then", "there", "these", "they", "this", "those",
        "through", "to", "too", "under", "until", "up", "very", "via", "was",
        "we", "were", "what", "where", "which", "while", "who", "whom", "why",
        "will", "with", "within", "without", "would", "you", "your",
        # Instruction filler common in skill descriptions
        "activate", "activates", "activated", "apply", "applies", "asks",
        "covers", "describes", "e.g", "guide", "guidance", "help", "helps",
        "i.e", "including", "instructions", "involves", "need", "needs",
        "new", "provides", "related", "request", "requests", "skill",
        "skills", "task", "tasks", "use", "used", "uses", "using", "user",
        "users", "want", "wants", "when", "whenever", "working", "works",
    }
)


def normalize(text: str) -> str:
    """Case-fold text and collapse runs of whitespace to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip().casefold()


def dedupe_keywords(keywords: _typing.Iterable[str]) -> tuple[str, ...]:
    """
    Drop blank and case-insensitively repeated keywords.

    The first spelling of each keyword is kept, in its original order.
    """
    seen: set[str] = set()
    result: list[str] = []
    for keyword in keywords:
        cleaned = _WHITESPACE_RE.sub(" ", keyword).strip()
        key = cleaned.casefold()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return tuple(result)


def extract_keywords(description: str) -> tuple[str, ...]:
    """
    Extract trigger keywords from a skill description.

    Quoted phrases are kept whole. Every other word of at least
    MIN_EXTRACTED_KEYWORD_LENGTH characters that is not a stop word
    becomes a keyword.

    Args:
        description: Free-text skill description.

    Returns:
        Distinct keywords in order of first appearance.
    """
    keywords: list[str] = []

    for match in _QUOTED_RE.finditer(description):
        phrase = next(g for g in match.groups() if g is not None)
        keywords.append(phrase)
    remainder = _QUOTED_RE.sub(" ", description)

    for match in _WORD_RE.finditer(remainder):
        word = match.group(0).rstrip("._-")
        if len(word) < constants.MIN_EXTRACTED_KEYWORD_LENGTH:
            continue
        if word.casefold() in STOP_WORDS:
            continue
        keywords.append(word)

    return dedupe_keywords(keywords)


def keyword_pattern(keyword: str) -> _re.Pattern[str]:
    """Compile a whole-word pattern for an already normalized keyword."""
    return _re.compile(r"(?<![0-9a-z])" + _re.escape(keyword) + r"(?![0-9a-z])")
