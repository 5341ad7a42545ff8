"""Resource exhaustion and denial-of-service pattern detection."""

from __future__ import annotations

import re
from typing import Optional

from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

MAX_CONTENT_LENGTH = 102400
MAX_QUERY_STRING_LENGTH = 2048
MAX_QUERY_PARAMS = 50

HEAVY_ENDPOINT = re.compile(r"/wp-admin/admin-ajax\.php.{0,256}?action=heartbeat", re.IGNORECASE)

# Nested quantifier shapes submitted as parameter values
REDOS_PATTERNS = (
    re.compile(r"\([^()]*\+\)\+"),
    re.compile(r"\(\([^()]*\+\)\+\)\+"),
    re.compile(r"\([^()]*\*\)\*"),
    re.compile(r"\([^()]*\+\)\{"),
)

XXE_PATTERNS = (
    re.compile(r"<!ENTITY", re.IGNORECASE),
    re.compile(r"<!DOCTYPE[^>\[]{0,256}\[", re.IGNORECASE),
    re.compile(r"SYSTEM\s+[\"']file:", re.IGNORECASE),
    re.compile(r"SYSTEM\s+[\"']https?:", re.IGNORECASE),
    re.compile(r"SYSTEM\s+[\"']php:", re.IGNORECASE),
    re.compile(r"SYSTEM\s+[\"']expect:", re.IGNORECASE),
)

LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def parse_content_length(value: str) -> int:
    """Leading integer of a header value, 0 when there is none."""
    match = LEADING_INTEGER.match(value)
    return int(match.group(1)) if match else 0


def format_kilobytes(length: int) -> str:
    return f"{round(length / 1024, 1):.1f}".removesuffix(".0")


class ResourceExhaustionAnalyzer(Analyzer):
    """
    Flags requests built to burn server resources.

    Covers oversized bodies, heartbeat flooding, very long query strings,
    ReDoS payloads, XML entity expansion and parameter flooding.
    """

    name = "ResourceExhaustion"
    categories = (51, 4)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        if request.has_header("Content-Length"):
            length = parse_content_length(request.header("Content-Length"))
            if length > MAX_CONTENT_LENGTH:
                findings.append(f"Oversized request body ({format_kilobytes(length)} KB)")
                if length > MAX_CONTENT_LENGTH * 10:
                    max_score = max(max_score, 80)
                elif length > MAX_CONTENT_LENGTH * 5:
                    max_score = max(max_score, 65)
                else:
                    max_score = max(max_score, 50)

        if request.is_post and HEAVY_ENDPOINT.search(request.uri):
            findings.append("POST to resource-heavy endpoint (heartbeat)")
            max_score = max(max_score, 45)

        query_length = len(request.query_string.encode("utf-8"))
        if query_length > MAX_QUERY_STRING_LENGTH:
            findings.append(f"Excessively long query string ({query_length} chars)")
            max_score = max(max_score, 70 if query_length > MAX_QUERY_STRING_LENGTH * 4 else 55)

        redos_key = self._find_redos(request)
        if redos_key is not None:
            findings.append(f'Regex DoS pattern in parameter "{redos_key}"')
            max_score = max(max_score, 60)

        if request.body:
            body = bounded(request.body)
            if any(pattern.search(body) for pattern in XXE_PATTERNS):
                findings.append("XML entity expansion/XXE indicator in request body")
                max_score = max(max_score, 75)

        param_count = len(request.query_params)
        if param_count > MAX_QUERY_PARAMS:
            findings.append(f"Excessive query parameters ({param_count} params)")
            max_score = max(max_score, 70 if param_count > MAX_QUERY_PARAMS * 4 else 50)

        unique = list(dict.fromkeys(findings))
        return self._result(unique, max_score, "Resource exhaustion attempt: ")

    def _find_redos(self, request: RequestView) -> Optional[str]:
        params = {**request.query_params, **request.post_data}
        for key, value in params.items():
            if len(value) < 5:
                continue
            value = bounded(value)
            if any(pattern.search(value) for pattern in REDOS_PATTERNS):
                return key
        return None
