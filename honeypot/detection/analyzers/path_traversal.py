"""Directory traversal, system file and stream wrapper detection."""

from __future__ import annotations

import re
from typing import Dict, Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets

MIN_TARGET_LENGTH = 3

RULE_SCORES = (
    (re.compile(r"etc/passwd|etc/shadow|proc/self|windows.{0,64}system32|boot\.ini", re.IGNORECASE), 95),
    (re.compile(r"php://|expect://|phar://|zip://", re.IGNORECASE), 90),
    (re.compile(r"%00", re.IGNORECASE), 85),
    (re.compile(r"%25", re.IGNORECASE), 85),
    (re.compile(r"\.\./", re.IGNORECASE), 75),
    (re.compile(r"%2e|%2f|%5c", re.IGNORECASE), 80),
)
DEFAULT_RULE_SCORE = 75

RULE_DESCRIPTIONS = (
    (re.compile(r"etc/passwd|etc/shadow", re.IGNORECASE), "system password file access"),
    (re.compile(r"proc/self", re.IGNORECASE), "process environment access"),
    (re.compile(r"windows|winnt|boot\.ini", re.IGNORECASE), "Windows system file access"),
    (re.compile(r"php://filter", re.IGNORECASE), "PHP filter wrapper abuse"),
    (re.compile(r"php://input", re.IGNORECASE), "PHP input wrapper abuse"),
    (re.compile(r"expect://", re.IGNORECASE), "expect wrapper RCE"),
    (re.compile(r"phar://", re.IGNORECASE), "phar deserialization attack"),
    (re.compile(r"zip://", re.IGNORECASE), "zip wrapper abuse"),
    (re.compile(r"%00", re.IGNORECASE), "null byte injection"),
    (re.compile(r"%252e|%255c", re.IGNORECASE), "double-encoded traversal"),
    (re.compile(r"%2e|%2f|%5c", re.IGNORECASE), "URL-encoded traversal"),
    (re.compile(r"\.\./", re.IGNORECASE), "directory traversal sequence"),
    (re.compile(r"\.\.\\", re.IGNORECASE), "Windows directory traversal"),
    (re.compile(r"data://", re.IGNORECASE), "data wrapper abuse"),
)
DEFAULT_DESCRIPTION = "path traversal pattern"


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


class PathTraversalAnalyzer(Analyzer):
    name = "PathTraversal"
    categories = (21,)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = tuple(
            (rule, score_rule(rule), describe_rule(rule))
            for rule in pattern_library.path_traversal_patterns()
        )

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        for label, value in self._collect_targets(request).items():
            if not value or len(value) < MIN_TARGET_LENGTH:
                continue

            raw = bounded(value)
            decoded = bounded(self.normalizer.url_decode(value))

            for rule, score, description in self._rules:
                if rule.search(raw) or rule.search(decoded):
                    max_score = max(max_score, score)
                    findings.append(f"Path traversal in {label}: {description}")
                    break

        return self._result(findings, max_score, "Path traversal attempt detected: ")

    def _collect_targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri, "path": request.path}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))
        return targets
