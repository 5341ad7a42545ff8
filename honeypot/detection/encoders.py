"""
Decode normalization for detection analysis.

This module reverses the nested evasion encodings attackers use to slip
payloads past literal pattern matches: percent-encoding (including the
plus-as-space form used by query strings) and HTML entities. Decoding is
iterative with a fixed maximum depth and stops at the first fixpoint.
"""

import html
import logging
import urllib.parse
from typing import Callable, List

logger = logging.getLogger(__name__)

MAX_DECODE_ITERATIONS = 3


class DecodeNormalizer:
    """
    Collapses nested evasion encodings into a canonical form.

    Never raises: a step that fails leaves the value unchanged for that step.
    """

    def __init__(self, max_decode_iterations: int = MAX_DECODE_ITERATIONS):
        """
        Initialize normalizer.

        Args:
            max_decode_iterations: Maximum decode passes (prevents decode loops)
        """
        self.max_decode_iterations = max_decode_iterations

    def normalize(self, value: str) -> str:
        """
        Percent-decode then HTML-entity-decode until a fixpoint or the depth limit.

        Args:
            value: Raw target value

        Returns:
            Normalized value
        """
        return self._iterate(value, self._percent_then_entity)

    def url_decode(self, value: str, depth: int = None) -> str:
        """
        Percent-decode only, treating '+' as a space.

        Args:
            value: Raw target value
            depth: Maximum passes, defaults to max_decode_iterations

        Returns:
            URL decoded value
        """
        return self._iterate(value, self._unquote_plus, depth)

    def entity_then_url(self, value: str) -> str:
        """
        HTML-entity-decode then raw percent-decode until a fixpoint.

        Args:
            value: Raw target value

        Returns:
            Normalized value
        """
        return self._iterate(value, self._entity_then_percent)

    def variants(self, value: str) -> List[str]:
        """
        Raw value plus its normalized form, without duplicates.

        Args:
            value: Raw target value

        Returns:
            List of values to match patterns against
        """
        if not value:
            return []
        normalized = self.normalize(value)
        if normalized == value:
            return [value]
        return [value, normalized]

    def _iterate(self, value: str, step: Callable[[str], str], depth: int = None) -> str:
        if not value:
            return value or ''

        limit = self.max_decode_iterations if depth is None else depth
        current = value

        for _ in range(limit):
            decoded = step(current)
            if decoded == current:
                break  # Fixpoint
            current = decoded

        return current

    def _percent_then_entity(self, value: str) -> str:
        return self._unescape(self._unquote(value))

    def _entity_then_percent(self, value: str) -> str:
        return self._unquote(self._unescape(value))

    def _unquote(self, value: str) -> str:
        try:
            return urllib.parse.unquote(value, errors='replace')
        except Exception as e:
            logger.debug(f"URL decode failed: {e}")
            return value

    def _unquote_plus(self, value: str) -> str:
        try:
            return urllib.parse.unquote_plus(value, errors='replace')
        except Exception as e:
            logger.debug(f"URL plus decode failed: {e}")
            return value

    def _unescape(self, value: str) -> str:
        try:
            return html.unescape(value)
        except Exception as e:
            logger.debug(f"HTML decode failed: {e}")
            return value


_default_normalizer = DecodeNormalizer()


def normalize(value: str) -> str:
    """Normalize a value with the shared default normalizer."""
    return _default_normalizer.normalize(value)


def get_normalizer() -> DecodeNormalizer:
    """Return the shared default normalizer."""
    return _default_normalizer
