"""Search feature abuse detection."""

from __future__ import annotations

from typing import Optional

from .. import pattern_library
from ..pattern_engine import count_matches, matches_any
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

MAX_SEARCH_LENGTH = 200
SUSPICIOUS_CHARS = ("<", ">", "{", "}", "|", "\\")
SEARCH_PARAMS = ("s", "q", "query", "search", "keyword", "keywords", "searchword")


class SearchSpamAnalyzer(Analyzer):
    """Injection payloads, oversize queries, spam keywords and markup in site search terms."""

    name = "SearchSpam"
    categories = (53,)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_get or not request.query_params:
            return None

        search_param = next((param for param in SEARCH_PARAMS if request.query_param(param)), None)
        if search_param is None:
            return None

        query = request.query_param(search_param)
        findings = []
        max_score = 0

        if matches_any(pattern_library.sql_injection_patterns(), query):
            findings.append("SQL injection pattern in search query")
            max_score = max(max_score, 75)

        if matches_any(pattern_library.xss_patterns(), query):
            findings.append("XSS pattern in search query")
            max_score = max(max_score, 70)

        if matches_any(pattern_library.path_traversal_patterns(), query):
            findings.append("Path traversal attempt in search query")
            max_score = max(max_score, 70)

        if len(query) > MAX_SEARCH_LENGTH:
            findings.append(f"Excessively long search query ({len(query)} chars)")
            max_score = max(max_score, 55)

        spam_matches = count_matches(pattern_library.spam_keywords(), query)
        if spam_matches >= 2:
            findings.append(f"Multiple spam keywords in search ({spam_matches} matches)")
            max_score = max(max_score, 60)
        elif spam_matches == 1:
            findings.append("Spam keyword in search query")
            max_score = max(max_score, 40)

        special_chars = sum(query.count(char) for char in SUSPICIOUS_CHARS)
        if special_chars >= 3:
            findings.append(f"Multiple special characters in search query ({special_chars})")
            max_score = max(max_score, 55)

        unique = list(dict.fromkeys(findings))
        return self._result(unique, max_score, f"Search abuse detected ({search_param}={query[:100]}): ")
