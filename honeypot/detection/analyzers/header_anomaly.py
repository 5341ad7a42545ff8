"""Malformed, oversized and injected HTTP header detection."""

from __future__ import annotations

import re
from typing import Optional

from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

MAX_HEADER_SIZE = 8192

CRLF_INJECTION = re.compile(r"%0[dD]%0[aA]|\r\n|\\r\\n")
LOOPBACK = re.compile(r"127\.0\.0\.1|localhost|::1|0\.0\.0\.0")
REFERER_PAYLOAD = re.compile(r"<script|javascript:|onerror=|union\s+select|\.\./|%3[cC]script", re.IGNORECASE)
DUPLICATE_KEEP_ALIVE = re.compile(r"keep-alive[^,]{0,256},.{0,256}?keep-alive", re.IGNORECASE)
ACCEPT_PAYLOAD = re.compile(r"\.\./|<script", re.IGNORECASE)


class HeaderAnomalyAnalyzer(Analyzer):
    name = "HeaderAnomaly"
    categories = (15, 21)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        if not request.header("Host"):
            findings.append("Missing or empty Host header")
            max_score = max(max_score, 50)

        for name, value in request.headers.items():
            if CRLF_INJECTION.search(bounded(value)):
                findings.append(f'CRLF injection in header "{name}"')
                max_score = max(max_score, 70)

            if len(value) > MAX_HEADER_SIZE:
                findings.append(f'Abnormally large header "{name}" ({len(value)} bytes)')
                max_score = max(max_score, 50)

        if request.has_header("X-Forwarded-For"):
            xff = request.header("X-Forwarded-For")
            if LOOPBACK.search(xff):
                findings.append("Suspicious X-Forwarded-For with loopback address")
                max_score = max(max_score, 45)
            if xff.count(",") > 5:
                findings.append("Excessive X-Forwarded-For chain (possible header injection)")
                max_score = max(max_score, 40)

        referer = request.header("Referer")
        if referer and REFERER_PAYLOAD.search(bounded(referer)):
            findings.append("Attack payload detected in Referer header")
            max_score = max(max_score, 65)

        connection = request.header("Connection")
        if connection and DUPLICATE_KEEP_ALIVE.search(bounded(connection)):
            findings.append("Connection header manipulation detected")
            max_score = max(max_score, 35)

        accept = request.header("Accept")
        if accept and ACCEPT_PAYLOAD.search(bounded(accept)):
            findings.append("Attack payload in Accept header")
            max_score = max(max_score, 60)

        if request.has_header("X-HTTP-Method-Override") or request.has_header("X-Method-Override"):
            override = request.header("X-HTTP-Method-Override") or request.header("X-Method-Override")
            findings.append(f"HTTP method override header present: {override}")
            max_score = max(max_score, 40)

        return self._result(findings, max_score, "HTTP header anomaly detected: ")
