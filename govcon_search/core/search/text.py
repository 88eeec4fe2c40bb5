"""
Text Normalization
Lowercasing, tokenization, stop-word filtering and phrase extraction
"""
import re
from typing import List, Tuple

_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")
_OR_DELIMITER = re.compile(r"\s+or\s+", re.IGNORECASE)
_QUOTES = "\"'`“”‘’"

# Generic English function words plus domain filler common to solicitations
STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "should", "could",
    "may", "might", "must", "can", "this", "that", "these", "those", "shall",
    "from", "not", "any", "all", "such", "other", "than", "more", "also",
    "including", "under",
    # Domain filler
    "services", "contract", "contractor", "required", "provide", "government", "work",
})

MAX_STOP_WORD_RATIO = 0.6
MIN_PHRASE_CHARS = 3


def normalize(text: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace"""
    if not text:
        return ""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def tokenize(text: str) -> List[str]:
    """Split normalized text on whitespace, dropping single-character tokens"""
    return [token for token in normalize(text).split(" ") if len(token) > 1]


def is_quality_phrase(phrase: str) -> bool:
    """
    Check whether a candidate phrase is worth suggesting

    Rejects single stop words, phrases that are mostly stop words,
    all-numeric phrases and very short phrases.
    """
    words = phrase.split()
    if not words or len(phrase) < MIN_PHRASE_CHARS:
        return False
    if len(words) == 1 and words[0] in STOP_WORDS:
        return False

    stop_count = sum(1 for word in words if word in STOP_WORDS)
    if stop_count / len(words) > MAX_STOP_WORD_RATIO:
        return False

    if phrase.replace(" ", "").isdigit():
        return False

    return True


def extract_phrases(text: str, length_range: Tuple[int, int] = (1, 5)) -> List[str]:
    """
    Extract every contiguous n-gram in a length range

    Args:
        text: Source text (normalized internally)
        length_range: (min_words, max_words), inclusive

    Returns:
        Quality phrases, deduplicated in first-seen order
    """
    min_len, max_len = length_range
    words = tokenize(text)
    seen = set()
    phrases = []

    for start in range(len(words)):
        for length in range(min_len, max_len + 1):
            end = start + length
            if end > len(words):
                break
            phrase = " ".join(words[start:end])
            if phrase in seen:
                continue
            seen.add(phrase)
            if is_quality_phrase(phrase):
                phrases.append(phrase)

    return phrases


def contains_or_delimiter(query: str) -> bool:
    """True when the query uses the case-insensitive " or " separator"""
    return bool(query) and _OR_DELIMITER.search(query) is not None


def parse_or_terms(query: str) -> List[str]:
    """
    Split a query on the " or " delimiter

    Each segment is trimmed, stripped of surrounding quotes and lowercased;
    empty segments are dropped. A query without the delimiter yields a
    single term.
    """
    if not query:
        return []
    terms = []
    for segment in _OR_DELIMITER.split(query):
        term = segment.strip().strip(_QUOTES).strip().lower()
        if term:
            terms.append(term)
    return terms


def contains_phrase(haystack: str, needle: str) -> bool:
    """Whole-word containment of one normalized phrase inside another"""
    haystack = normalize(haystack)
    needle = normalize(needle)
    if not haystack or not needle:
        return False
    return f" {needle} " in f" {haystack} "
