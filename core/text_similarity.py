"""
Text Similarity Module
Edit-distance and term-frequency similarity used for fuzzy field validation
and topic relevance scoring.

Both families of scores lie in [0.0, 1.0] but are not comparable with each other.
"""

import math
import re
from collections import Counter
from typing import Dict, Iterable, List, Optional

TermFrequency = Dict[str, int]

# Common English function words ignored by relevance scoring
STOP_WORDS = frozenset([
    "a", "an", "the", "and", "or", "but", "if", "then", "else", "when",
    "at", "by", "for", "with", "about", "against", "between", "into",
    "through", "during", "before", "after", "above", "below", "to",
    "from", "up", "down", "in", "out", "on", "off", "over", "under",
    "again", "further", "once", "here", "there", "where",
    "why", "how", "all", "any", "both", "each", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same",
    "so", "than", "too", "very", "s", "t", "can", "will", "just", "don",
    "should", "now", "d", "ll", "m", "o", "re", "ve", "y", "ain", "aren",
    "couldn", "didn", "doesn", "hadn", "hasn", "haven", "isn", "ma",
    "mightn", "mustn", "needn", "shan", "shouldn", "wasn", "weren", "won",
    "wouldn", "of", "is", "are", "am", "was", "were", "be", "been", "being"
])

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions or substitutions turning a into b."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost
            ))
        previous = current
    return previous[-1]

def levenshtein_similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Normalized edit-distance similarity.

    Args:
        a: First string, None is treated as maximally dissimilar
        b: Second string

    Returns:
        1 - distance / max(len(a), len(b)); 1.0 when both are empty, 0.0 when either is None
    """
    if a is None or b is None:
        return 0.0

    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0

    return 1.0 - levenshtein_distance(a, b) / max_length

def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase, replace anything outside [a-zA-Z0-9] with spaces and split."""
    if not text:
        return []
    return _NON_ALNUM.sub(" ", text.lower()).split()

def remove_stop_words(tokens: Iterable[str], stop_words: Iterable[str] = STOP_WORDS) -> List[str]:
    stop_words = stop_words if isinstance(stop_words, (set, frozenset)) else set(stop_words)
    return [token for token in tokens if token not in stop_words]

def term_frequency(tokens: Iterable[str]) -> TermFrequency:
    return dict(Counter(tokens))

def cosine_similarity(tf1: TermFrequency, tf2: TermFrequency) -> float:
    """Cosine of the angle between two sparse count vectors, 0.0 when either is empty."""
    if not tf1 or not tf2:
        return 0.0

    if len(tf2) < len(tf1):
        tf1, tf2 = tf2, tf1
    dot_product = sum(count * tf2[term] for term, count in tf1.items() if term in tf2)

    squared_norm1 = sum(count * count for count in tf1.values())
    squared_norm2 = sum(count * count for count in tf2.values())
    if squared_norm1 <= 0 or squared_norm2 <= 0:
        return 0.0

    # sqrt of the product keeps identical vectors at exactly 1.0
    return min(1.0, dot_product / math.sqrt(squared_norm1 * squared_norm2))

def relevance(content: Optional[str], topic: Optional[str], stop_words: Iterable[str] = STOP_WORDS) -> float:
    """Cosine similarity of content and topic after tokenizing and dropping stop words."""
    content_tf = term_frequency(remove_stop_words(tokenize(content), stop_words))
    topic_tf = term_frequency(remove_stop_words(tokenize(topic), stop_words))
    return cosine_similarity(content_tf, topic_tf)
