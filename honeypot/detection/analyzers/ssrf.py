"""Server-side request forgery detection."""

from __future__ import annotations

import re
from typing import Dict, Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets

MIN_TARGET_LENGTH = 4

URL_PARAM_NAMES = frozenset({
    "url", "redirect", "next", "target", "dest", "return", "goto",
    "link", "proxy", "site", "path", "uri", "callback",
})

INTERNAL_URLS = (
    re.compile(
        r"^https?://(127\.|10\.|192\.168\.|172\.(1[6-9]|2\d|3[01])\.|localhost|0\.0\.0\.0|\[?::1\]?|169\.254\.169\.254)",
        re.IGNORECASE,
    ),
    re.compile(r"^(file|dict|gopher|ldap|sftp|tftp)://", re.IGNORECASE),
)

RULE_SCORES = (
    (re.compile(r"169\.254\.169\.254|metadata\.(google|aws)", re.IGNORECASE), 85),
    (re.compile(r"file://|gopher://|dict://|ldap://", re.IGNORECASE), 80),
    (re.compile(r"127\.|localhost|0\.0\.0\.0|::1", re.IGNORECASE), 70),
    (re.compile(r"10\.|192\.168\.|172\.", re.IGNORECASE), 65),
    (re.compile(r"url|redirect|next|target", re.IGNORECASE), 60),
)
DEFAULT_RULE_SCORE = 65

RULE_DESCRIPTIONS = (
    (re.compile(r"169\.254\.169\.254|metadata", re.IGNORECASE), "cloud metadata endpoint access"),
    (re.compile(r"127\.|localhost|0\.0\.0\.0|::1", re.IGNORECASE), "loopback/localhost access"),
    (re.compile(r"10\.|192\.168\.|172\.", re.IGNORECASE), "private network access"),
    (re.compile(r"169\.254\.", re.IGNORECASE), "link-local address access"),
    (re.compile(r"file://", re.IGNORECASE), "file protocol access"),
    (re.compile(r"gopher://", re.IGNORECASE), "gopher protocol abuse"),
    (re.compile(r"dict://", re.IGNORECASE), "dict protocol abuse"),
    (re.compile(r"ldap://", re.IGNORECASE), "LDAP protocol abuse"),
    (re.compile(r"sftp://|tftp://", re.IGNORECASE), "file transfer protocol abuse"),
    (re.compile(r"url|redirect|next|target|dest", re.IGNORECASE), "URL parameter with redirect"),
    (re.compile(r"0x[0-9a-f]|0[0-7]", re.IGNORECASE), "encoded IP address"),
    (re.compile(r"http://0/", re.IGNORECASE), "shortened localhost variant"),
)
DEFAULT_DESCRIPTION = "SSRF indicator"


def score_rule(rule: re.Pattern) -> int:
    for scorer, score in RULE_SCORES:
        if scorer.search(rule_literal(rule)):
            return score
    return DEFAULT_RULE_SCORE


def describe_rule(rule: re.Pattern) -> str:
    for matcher, description in RULE_DESCRIPTIONS:
        if matcher.search(rule_literal(rule)):
            return description
    return DEFAULT_DESCRIPTION


def is_internal_url(url: str) -> bool:
    return any(pattern.search(url) for pattern in INTERNAL_URLS)


class SsrfAnalyzer(Analyzer):
    name = "SSRF"
    categories = (21,)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = tuple(
            (rule, score_rule(rule), describe_rule(rule))
            for rule in pattern_library.ssrf_patterns()
        )

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        for label, value in self._collect_targets(request).items():
            if not value or len(value) < MIN_TARGET_LENGTH:
                continue

            raw = bounded(value)
            decoded = bounded(self.normalizer.url_decode(value, depth=1))

            for rule, score, description in self._rules:
                if rule.search(raw) or rule.search(decoded):
                    max_score = max(max_score, score)
                    findings.append(f"SSRF indicator in {label}: {description}")
                    break

        # URL-valued parameters pointing at internal resources
        for key, value in request.query_params.items():
            if key.lower() not in URL_PARAM_NAMES or not value:
                continue
            decoded_value = self.normalizer.url_decode(value, depth=1)
            if is_internal_url(decoded_value):
                findings.append(f'URL parameter "{key}" points to internal resource: {decoded_value[:100]}')
                max_score = max(max_score, 80)

        return self._result(findings, max_score, "SSRF attempt detected: ")

    def _collect_targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))
        return targets
