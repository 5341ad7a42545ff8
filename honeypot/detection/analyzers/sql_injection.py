"""SQL injection detection across URI, parameters and carrier headers."""

from __future__ import annotations

import re
from typing import Dict, Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets

SQLMAP_SIGNATURE = re.compile(r"sqlmap", re.IGNORECASE)
CARRIER_HEADERS = ("Cookie", "Referer", "X-Forwarded-For", "Authorization")
MIN_TARGET_LENGTH = 3

# Scored against the rule source, first hit wins
RULE_SCORES = (
    (re.compile(r"union.{0,64}select|sleep|benchmark|waitfor|into\s+(out|dump)file", re.IGNORECASE), 90),
    (re.compile(r"drop|truncate|alter", re.IGNORECASE), 85),
    (re.compile(r"information_schema|load_file|group_concat", re.IGNORECASE), 80),
    (re.compile(r"\bor\b.{0,64}?=|having|order\s+by", re.IGNORECASE), 70),
)
DEFAULT_RULE_SCORE = 75

RULE_DESCRIPTIONS = (
    (re.compile(r"union", re.IGNORECASE), "UNION-based injection"),
    (re.compile(r"sleep|benchmark|waitfor|pg_sleep", re.IGNORECASE), "time-based blind injection"),
    (re.compile(r"drop|insert|update|delete|truncate", re.IGNORECASE), "stacked query injection"),
    (re.compile(r"having|group.{0,64}by|order.{0,64}by", re.IGNORECASE), "error-based injection"),
    (re.compile(r"if\s*\(|case\s+when|substring|ascii|char", re.IGNORECASE), "blind injection"),
    (re.compile(r"information_schema", re.IGNORECASE), "schema enumeration"),
    (re.compile(r"load_file|into.{0,64}file", re.IGNORECASE), "file operation injection"),
    (re.compile(r"%27|%22|%3b|%25", re.IGNORECASE), "encoded injection"),
    (re.compile(r"concat|group_concat", re.IGNORECASE), "data extraction"),
    (re.compile(r"0x[0-9a-f]", re.IGNORECASE), "hex-encoded injection"),
)
DEFAULT_DESCRIPTION = "SQL injection pattern"


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


class SqlInjectionAnalyzer(Analyzer):
    name = "SqlInjection"
    categories = (16, 45)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = tuple(
            (rule, score_rule(rule), describe_rule(rule))
            for rule in pattern_library.sql_injection_patterns()
        )

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        user_agent = request.user_agent
        if user_agent and SQLMAP_SIGNATURE.search(user_agent):
            findings.append("sqlmap tool signature detected in User-Agent")
            max_score = max(max_score, 95)

        for label, value in self._collect_targets(request).items():
            if not value or len(value) < MIN_TARGET_LENGTH:
                continue

            raw = bounded(value)
            decoded = bounded(self.normalizer.url_decode(value))

            for rule, score, description in self._rules:
                if rule.search(raw) or rule.search(decoded):
                    max_score = max(max_score, score)
                    findings.append(f"SQL injection pattern in {label}: matched {description}")
                    break  # One match per target

        return self._result(findings, max_score, "SQL injection attempt detected: ")

    def _collect_targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri, "path": request.path}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))

        for header in CARRIER_HEADERS:
            if request.has_header(header):
                targets[f"header '{header}'"] = request.header(header)

        return targets
