from __future__ import annotations

"""
Token Estimation.

Estimates how many language model tokens the condensed output occupies.
Counting uses tiktoken's BPE encodings; when an encoding cannot be loaded
(offline machine, missing cache) the character density heuristic takes over
so a run never fails because of token accounting.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Dict

import tiktoken

from codecontext.domain.constants import DEFAULT_MODEL_KEY

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN_AVG = 4

_MODERN_ENCODING = "o200k_base"
_LEGACY_ENCODING = "cl100k_base"
_LEGACY_MARKERS = ("gpt-4-", "gpt-3.5", "legacy")

# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------

class TokenizerStrategy(ABC):
    """Counting algorithm for one family of encodings."""

    @abstractmethod
    def count(self, text: str, model_id: str) -> int:
        """
        Count the tokens of a text segment.

        Args:
            text: Input text.
            model_id: Target model identifier.

        Returns:
            int: Token count.
        """


class HeuristicStrategy(TokenizerStrategy):
    """Character density estimate."""

    def count(self, text: str, model_id: str) -> int:
        return math.ceil(len(text) / CHARS_PER_TOKEN_AVG)


class TiktokenStrategy(TokenizerStrategy):
    """BPE encoding with tiktoken; encodings are loaded once and cached."""

    def __init__(self) -> None:
        self._encodings: Dict[str, tiktoken.Encoding] = {}

    def count(self, text: str, model_id: str) -> int:
        encoding = self._encoding(encoding_for_model(model_id))
        return len(encoding.encode(text, disallowed_special=()))

    def _encoding(self, name: str) -> tiktoken.Encoding:
        if name not in self._encodings:
            self._encodings[name] = tiktoken.get_encoding(name)
        return self._encodings[name]

# -----------------------------------------------------------------------------
# SERVICE
# -----------------------------------------------------------------------------

class TokenizerService:
    """
    Routes counting to tiktoken and falls back to the heuristic on failure.

    After the first failure the service stays on the heuristic for the rest
    of the process instead of retrying the encoding load for every file.
    """

    def __init__(self) -> None:
        self.heuristic = HeuristicStrategy()
        self.primary: TokenizerStrategy = TiktokenStrategy()
        self._degraded = False

    def count(self, text: str, model: str = DEFAULT_MODEL_KEY) -> int:
        """
        Count tokens of a text for the target model.

        Args:
            text: Text to measure.
            model: Target model identifier (e.g. 'gpt-4o').

        Returns:
            int: Token count, exact or estimated.
        """
        if not text:
            return 0

        if not self._degraded:
            try:
                return self.primary.count(text, model)
            except Exception as e:
                logger.warning(f"Tokenizer unavailable ({e}). Using heuristic estimate.")
                self._degraded = True

        return self.heuristic.count(text, model)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

_SERVICE_INSTANCE = TokenizerService()


def encoding_for_model(model_id: str) -> str:
    """Name of the tiktoken encoding used for a model identifier."""
    lowered = (model_id or "").lower()
    if any(marker in lowered for marker in _LEGACY_MARKERS):
        return _LEGACY_ENCODING
    return _MODERN_ENCODING


def count_tokens(text: str, model: str = DEFAULT_MODEL_KEY) -> int:
    """
    Estimate the number of tokens of a text for the target model.

    Args:
        text: Input text.
        model: Target model identifier.

    Returns:
        int: Token count.
    """
    return _SERVICE_INSTANCE.count(text, model)
