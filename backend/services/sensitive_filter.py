"""Sensitive-word filter for user comments.

The word list is a UTF-8 text file with one entry per line. Blank lines
and lines starting with ``#`` are ignored. Matching is case-insensitive
and every hit is replaced by the mask character repeated to the length of
the matched text.
"""

import logging
from pathlib import Path
from typing import Optional, Set, Union

from services.errors import FilterError

logger = logging.getLogger(__name__)

MIN_MATCH = 1
MAX_MATCH = 2


class SensitiveFilter:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._words: Optional[Set[str]] = None
        self._max_length = 0

    @classmethod
    def from_words(cls, words) -> "SensitiveFilter":
        """Build a filter from an in-memory word list instead of a file."""
        instance = cls("<memory>")
        instance._index(words)
        return instance

    def _index(self, words):
        self._words = {w.strip().casefold() for w in words if w.strip() and not w.strip().startswith("#")}
        # Case folding never shortens text, so no match spans more source
        # characters than the longest folded entry
        self._max_length = max((len(w) for w in self._words), default=0)

    def load(self) -> Set[str]:
        """Read the word list once. Raises FilterError when it is unavailable."""
        if self._words is None:
            try:
                lines = self.path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Cannot load sensitive word list {self.path}: {e}")
                raise FilterError(f"sensitive word list unavailable: {self.path.name}") from e
            self._index(lines)
            logger.info(f"Loaded {len(self._words)} sensitive words from {self.path}")
        return self._words

    def _match_at(self, text: str, start: int, mode: int) -> int:
        """Number of source characters matched at ``start``, or 0."""
        longest = min(self._max_length, len(text) - start)
        lengths = range(1, longest + 1) if mode == MIN_MATCH else range(longest, 0, -1)
        for length in lengths:
            if text[start:start + length].casefold() in self._words:
                return length
        return 0

    def contains_sensitive_word(self, text: Optional[str], mode: int = MIN_MATCH) -> bool:
        words = self.load()
        if not text or not words:
            return False
        return any(self._match_at(text, i, mode) for i in range(len(text)))

    def replace_sensitive_word(self, text: Optional[str], mode: int = MIN_MATCH, mask_char: str = "*") -> Optional[str]:
        """Mask every sensitive entry found in ``text``."""
        words = self.load()
        if not text or not words:
            return text
        out = []
        i = 0
        while i < len(text):
            length = self._match_at(text, i, mode)
            if length:
                out.append(mask_char * length)
                i += length
            else:
                out.append(text[i])
                i += 1
        return "".join(out)
