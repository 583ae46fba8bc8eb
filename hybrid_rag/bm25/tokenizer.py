"""
Tokenizer for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Replace punctuation with whitespace
3. Split on whitespace
4. Drop single-character terms
5. Filter stopwords (common English function words)
6. Optional Snowball stemming ("campaigns" → "campaign")

Order and duplicates are preserved: term frequency is counted downstream
by the scorer, not here.
"""

import re
from typing import List, Optional

from .stemmer import stem as stem_word

# Common English function words that carry no ranking signal
STOPWORDS = frozenset([
    'a', 'about', 'above', 'after', 'all', 'an', 'and', 'any', 'are', 'as',
    'at', 'be', 'been', 'before', 'but', 'by', 'can', 'could', 'did', 'do',
    'does', 'for', 'from', 'had', 'has', 'have', 'he', 'her', 'his', 'how',
    'if', 'in', 'into', 'is', 'it', 'its', 'my', 'no', 'not', 'of', 'on',
    'or', 'our', 'she', 'so', 'than', 'that', 'the', 'their', 'them', 'then',
    'there', 'these', 'they', 'this', 'to', 'was', 'we', 'were', 'what',
    'when', 'which', 'who', 'will', 'with', 'would', 'you', 'your',
])

_PUNCTUATION = re.compile(r'[^\w\s]|_')


def tokenize(text: Optional[str], stem: bool = False) -> List[str]:
    """
    Tokenize text for BM25 scoring with stopword removal.

    Args:
        text: Input text to tokenize (None and empty strings are allowed)
        stem: Apply Snowball stemming to surviving terms

    Returns:
        List of lowercase terms in original order, duplicates kept

    Examples:
        >>> tokenize("The quick fox")
        ['quick', 'fox']

        >>> tokenize("Eco-friendly packaging, eco-friendly brand!")
        ['eco', 'friendly', 'packaging', 'eco', 'friendly', 'brand']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    text = _PUNCTUATION.sub(' ', text.lower())

    tokens = [
        t for t in text.split()
        if len(t) > 1 and t not in STOPWORDS
    ]

    if stem:
        tokens = [stem_word(t) for t in tokens]

    return tokens
