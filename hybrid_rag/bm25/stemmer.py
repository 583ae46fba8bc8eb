"""
Snowball Stemmer for English (via NLTK).

Used by the tokenizer when stemming is switched on (RAG_BM25_STEM=true).
Off by default: marketing copy is short and exact brand terms matter more
than recall across word forms.

Examples:
- "campaigns" → "campaign"
- "launching" → "launch"
- "innovation" → "innov"
"""

from nltk.stem.snowball import SnowballStemmer

# Initialize stemmer once (thread-safe, reusable)
_stemmer = SnowballStemmer('english')


def stem(word: str) -> str:
    """
    Stem a single word using Snowball algorithm.

    Examples:
        >>> stem("campaigns")
        'campaign'
        >>> stem("launching")
        'launch'
    """
    return _stemmer.stem(word)
