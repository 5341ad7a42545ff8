"""Unusual HTTP method and method-override detection."""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

SAFE_METHODS = frozenset({"GET", "POST", "HEAD", "OPTIONS"})

SUSPICIOUS_METHODS = MappingProxyType({
    "TRACE": 60,
    "TRACK": 60,
    "DEBUG": 65,
    "CONNECT": 70,
    "PROPFIND": 50,
    "PROPPATCH": 55,
    "MKCOL": 55,
    "COPY": 50,
    "MOVE": 55,
    "LOCK": 50,
    "UNLOCK": 50,
    "PUT": 40,
    "DELETE": 45,
    "PATCH": 40,
    "SEARCH": 45,
    "PURGE": 50,
    "MKCALENDAR": 55,
    "REPORT": 45,
})

MAX_METHOD_LENGTH = 10
OVERRIDE_HEADERS = ("X-HTTP-Method-Override", "X-Method-Override", "X-HTTP-Method")


class HttpVerbAnalyzer(Analyzer):
    name = "HttpVerb"
    categories = (21,)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        method = request.method.upper()
        findings = []
        max_score = 0

        if len(method) > MAX_METHOD_LENGTH:
            findings.append(f"Excessively long HTTP method ({len(method)} chars)")
            max_score = max(max_score, 65)

        if method in SUSPICIOUS_METHODS:
            findings.append(f"Non-standard HTTP method: {method}")
            max_score = max(max_score, SUSPICIOUS_METHODS[method])
        elif method not in SAFE_METHODS and len(method) <= MAX_METHOD_LENGTH:
            findings.append(f"Unknown HTTP method: {method}")
            max_score = max(max_score, 55)

        for header in OVERRIDE_HEADERS:
            value = request.header(header)
            if not value:
                continue
            override = value.strip().upper()
            if override in SUSPICIOUS_METHODS:
                findings.append(f"Method override via {header} header to {override}")
                max_score = max(max_score, SUSPICIOUS_METHODS[override])

        return self._result(findings, max_score, "Suspicious HTTP method detected: ", limit=None)
