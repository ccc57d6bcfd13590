"""Tokenization, stop-word filtering and stemming of review text.

The tokenizer splits on a fixed set of punctuation and whitespace
characters rather than a word regex, so tokens such as ``don't`` or
``5star`` survive intact until the strip step removes apostrophes and
brackets. Processing order for every raw token:

1. split on :data:`DELIMITERS` and drop empty/whitespace-only pieces
2. lowercase
3. drop stop-words (matched before stripping)
4. strip ``' ( ) [ ] { }`` and drop tokens that become empty
5. stem
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Callable, Optional

from .stemmer import PorterStemmer

# ---------------------------------------------------------------------------
# Character sets
# ---------------------------------------------------------------------------

DELIMITERS: frozenset[str] = frozenset(
    " ,\":;.\t\n!-?@%()`/=\\~#$^&*_|[]{}<>+"
    # CRLF corpora: a stray carriage return is whitespace, not a letter
    "\r"
)

STRIP_CHARS = "'()[]{}"

_SPLIT_RE = re.compile("[" + "".join(re.escape(c) for c in sorted(DELIMITERS)) + "]+")
_STRIP_TABLE = str.maketrans("", "", STRIP_CHARS)


def split_tokens(text: str) -> list[str]:
    """Split raw text into lowercase tokens on :data:`DELIMITERS`.

    Empty and whitespace-only pieces are discarded.
    """
    return [piece.lower() for piece in _SPLIT_RE.split(text) if piece.strip()]


def strip_token(token: str) -> str:
    """Remove apostrophes and bracket characters from a token."""
    return token.translate(_STRIP_TABLE)


# ---------------------------------------------------------------------------
# Stop-words
# ---------------------------------------------------------------------------


class StopWords:
    """Immutable stop-word set.

    Example::

        stopwords = StopWords(["the", "a", "and"])
        stopwords.is_stopword("the")  # True
    """

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._words: frozenset[str] = frozenset(
            w.strip().lower() for w in words if w and w.strip()
        )

    def is_stopword(self, token: str) -> bool:
        return token in self._words

    def __contains__(self, token: object) -> bool:
        return token in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self):
        return iter(sorted(self._words))

    def __repr__(self) -> str:
        return f"StopWords({len(self._words)} words)"


def load_stopwords(path: str | Path) -> StopWords:
    """Load a stop-word list with one word per line.

    Blank lines are ignored; words are lowercased.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stop-word file not found: {path}")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return StopWords(f.read().splitlines())


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class TextNormalizer:
    """Turn raw review text into the stems the model is trained on.

    Example::

        normalizer = TextNormalizer(StopWords(["the"]))
        normalizer.normalize("The batteries died!")  # ['batteri', 'di']

    Args:
        stopwords: Words to discard. Defaults to an empty set.
        stemmer: Callable mapping a token to its stem. Defaults to a
            caching :class:`PorterStemmer`.
        stem: Whether to stem tokens at all. With ``stem=False`` the
            ``stemmer`` argument is ignored.
    """

    def __init__(
        self,
        stopwords: Optional[StopWords] = None,
        stemmer: Optional[Callable[[str], str]] = None,
        stem: bool = True,
    ) -> None:
        self.stopwords = stopwords if stopwords is not None else StopWords()
        self._stemmer: Optional[Callable[[str], str]] = None
        if stem:
            self._stemmer = stemmer or PorterStemmer()

    def tokenize(self, text: str) -> list[str]:
        """Split, lowercase, drop stop-words and strip tokens (no stemming)."""
        tokens: list[str] = []
        for token in split_tokens(text):
            if self.stopwords.is_stopword(token):
                continue
            token = strip_token(token)
            if token:
                tokens.append(token)
        return tokens

    def normalize(self, text: str) -> list[str]:
        """Return the document's stems in order, duplicates included."""
        tokens = self.tokenize(text)
        if self._stemmer is None:
            return tokens
        return [self._stemmer(t) for t in tokens]

    __call__ = normalize
