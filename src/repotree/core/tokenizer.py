"""
Token estimation for repotree.

Two deterministic estimators are always available: a character-density
estimate (the default) and a word-boundary count. An exact count through
OpenAI's tiktoken can be selected with the "tiktoken" strategy.
"""

import logging
import math
import re
from typing import Any, Callable, Dict, Optional

import tiktoken

logger = logging.getLogger(__name__)

STRATEGY_CHARS = "chars"
STRATEGY_WORDS = "words"
STRATEGY_TIKTOKEN = "tiktoken"

# Average English text has ~4 characters per token in GPT models
CHARS_PER_TOKEN = 4

_WORD_BOUNDARY = re.compile(r'\b', re.ASCII)


def estimate_by_chars(text: Optional[str]) -> int:
    """Character-density estimate: ceil(len / 4)."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_by_words(text: Optional[str]) -> int:
    """Count the non-empty segments produced by splitting on word boundaries."""
    if not text:
        return 0
    return sum(1 for segment in _WORD_BOUNDARY.split(text) if segment)


ESTIMATORS: Dict[str, Callable[[Optional[str]], int]] = {
    STRATEGY_CHARS: estimate_by_chars,
    STRATEGY_WORDS: estimate_by_words,
}


def estimate_tokens(text: Optional[str], strategy: str = STRATEGY_CHARS) -> int:
    """
    Estimate the token count of already-read text.

    Unknown strategy keys fall back to the character-based estimator.
    """
    estimator = ESTIMATORS.get(strategy, estimate_by_chars)
    return estimator(text)


class TokenCounter:
    """
    Counts tokens with a configured strategy.

    For the "tiktoken" strategy the encoder is loaded once; if it cannot be
    loaded (unknown encoding, no network for the BPE download) the counter
    logs a warning and uses the character estimate instead.
    """

    def __init__(self, strategy: str = STRATEGY_CHARS, encoding_name: str = "cl100k_base"):
        """
        Initialize the token counter.

        Args:
            strategy: Strategy key ("chars", "words" or "tiktoken").
            encoding_name: tiktoken encoding used by the "tiktoken" strategy.
        """
        self.strategy = strategy
        self.encoding_name = encoding_name
        self.encoder: Optional[Any] = None

        if strategy == STRATEGY_TIKTOKEN:
            try:
                self.encoder = tiktoken.get_encoding(encoding_name)
            except Exception as e:
                logger.warning(f"Failed to initialize token encoder '{encoding_name}': {e}")
                self.strategy = STRATEGY_CHARS

    @property
    def uses_encoder(self) -> bool:
        """Check if exact encoder counting is active."""
        return self.encoder is not None

    def count(self, text: Optional[str]) -> int:
        """
        Count tokens in the given text.

        Returns:
            Number of tokens, 0 for empty text.
        """
        if not text:
            return 0

        if self.uses_encoder:
            try:
                return len(self.encoder.encode(text, disallowed_special=()))
            except Exception as e:
                logger.debug(f"Error counting tokens, using estimate: {e}")
                return estimate_by_chars(text)

        return estimate_tokens(text, self.strategy)

    def count_batch(self, texts: Dict[str, str]) -> Dict[str, int]:
        """
        Count tokens for multiple texts.

        Args:
            texts: Dictionary mapping identifiers to text content.

        Returns:
            Dictionary mapping identifiers to token counts.
        """
        return {key: self.count(text) for key, text in texts.items()}
