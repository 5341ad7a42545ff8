"""Cross-site scripting detection."""

from __future__ import annotations

import re
from typing import Dict, Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets

MIN_TARGET_LENGTH = 4

RULE_SCORES = (
    (re.compile(r"script", re.IGNORECASE), 90),
    (re.compile(r"on\w.{0,256}?(alert|eval|function|javascript)", re.IGNORECASE), 85),
    (re.compile(r"javascript\s*:", re.IGNORECASE), 85),
    (re.compile(r"svg|img", re.IGNORECASE), 80),
    (re.compile(r"iframe", re.IGNORECASE), 80),
    (re.compile(r"eval|Function", re.IGNORECASE), 75),
    (re.compile(r"\{|\$", re.IGNORECASE), 60),
    (re.compile(r"on(error|load|click|focus|mouse)", re.IGNORECASE), 70),
)
DEFAULT_RULE_SCORE = 65

RULE_DESCRIPTIONS = (
    (re.compile(r"script", re.IGNORECASE), "script tag injection"),
    (re.compile(r"onerror|onload|onclick|onfocus|onmouse|onchange|onsubmit|onkey", re.IGNORECASE), "event handler injection"),
    (re.compile(r"javascript\s*:", re.IGNORECASE), "javascript protocol handler"),
    (re.compile(r"data\s*:", re.IGNORECASE), "data URI injection"),
    (re.compile(r"svg", re.IGNORECASE), "SVG-based XSS"),
    (re.compile(r"img", re.IGNORECASE), "IMG-based XSS"),
    (re.compile(r"iframe", re.IGNORECASE), "iframe injection"),
    (re.compile(r"expression|eval|Function|setTimeout|setInterval", re.IGNORECASE), "code execution attempt"),
    (re.compile(r"\{\{|\$\{", re.IGNORECASE), "template injection"),
    (re.compile(r"object|embed|applet", re.IGNORECASE), "embedded object injection"),
    (re.compile(r"&#|%3[cC]", re.IGNORECASE), "encoded XSS payload"),
    (re.compile(r"document\.|window\.", re.IGNORECASE), "DOM manipulation attempt"),
    (re.compile(r"XMLHttpRequest|fetch", re.IGNORECASE), "data exfiltration attempt"),
)
DEFAULT_DESCRIPTION = "XSS pattern"


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


class XssAnalyzer(Analyzer):
    name = "XSS"
    categories = (44, 45)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = tuple(
            (rule, score_rule(rule), describe_rule(rule))
            for rule in pattern_library.xss_patterns()
        )

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        for label, value in self._collect_targets(request).items():
            if not value or len(value) < MIN_TARGET_LENGTH:
                continue

            raw = bounded(value)
            decoded = bounded(self.normalizer.entity_then_url(value))

            for rule, score, description in self._rules:
                if rule.search(raw) or rule.search(decoded):
                    max_score = max(max_score, score)
                    findings.append(f"XSS pattern in {label}: {description}")
                    break

        return self._result(findings, max_score, "Cross-site scripting (XSS) attempt detected: ")

    def _collect_targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))

        if request.has_header("Referer"):
            targets["Referer header"] = request.header("Referer")

        return targets
