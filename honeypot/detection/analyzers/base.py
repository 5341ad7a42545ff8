"""
Common analyzer contract.

Every analyzer is a leaf class with a stable ``name``, a fixed category
list and a single ``analyze`` operation returning ``None`` when there is
nothing to report.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Sequence

from ..encoders import DecodeNormalizer, get_normalizer
from ..request_view import RequestView
from ..result import DetectionResult

BROWSER_INDICATORS = ("Mozilla/", "Chrome/", "Safari/", "Firefox/", "Edge/", "Opera/", "MSIE ", "Trident/")


class Analyzer(ABC):
    """Abstract base class for request analyzers."""

    name: str = ""
    categories: Sequence[int] = ()

    def __init__(self, normalizer: Optional[DecodeNormalizer] = None):
        self.normalizer = normalizer or get_normalizer()

    @abstractmethod
    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        """
        Inspect one request.

        Args:
            request: Read-only request view

        Returns:
            DetectionResult if anything was found, None otherwise
        """
        pass

    def _result(
        self,
        findings: List[str],
        score: int,
        prefix: str,
        limit: Optional[int] = 3,
        separator: str = "; ",
        suffix: str = "",
    ) -> Optional[DetectionResult]:
        """Build the result from the first findings, or None when there are none."""
        if not findings:
            return None
        shown = findings if limit is None else findings[:limit]
        comment = f"{prefix}{separator.join(shown)}{suffix}"
        return DetectionResult.create(self.categories, comment, score, self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


def param_targets(label: str, params: Mapping[str, str]) -> Dict[str, str]:
    """Named targets for every non-empty value of a parameter map."""
    return {f"{label} '{key}'": value for key, value in params.items() if isinstance(value, str) and value != ""}


def is_browser_user_agent(user_agent: str) -> bool:
    """True when the user agent carries a mainstream browser token."""
    lowered = user_agent.lower()
    return bool(user_agent) and any(indicator.lower() in lowered for indicator in BROWSER_INDICATORS)


EMAIL_ADDRESS = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9-]{1,63})+$"
)


def is_valid_email(value: str) -> bool:
    """Loose address syntax check (local part, ``@``, dotted domain)."""
    return bool(value) and EMAIL_ADDRESS.match(value) is not None
