"""Known vulnerable plugin, module and component path detection."""

from __future__ import annotations

import logging
from typing import Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 75

# Ordered: the first matching marker decides the score
RULE_SCORES = (
    ("uploads/", 85),
    ("timthumb", 85),
    ("element_parents", 85),
    ("user/password", 85),
    ("hal_json", 85),
    ("readme", 55),
    ("changelog", 55),
)

RULE_DESCRIPTIONS = (
    ("revslider", "Revolution Slider exploit"),
    ("wp-file-manager", "WP File Manager exploit"),
    ("dup", "Duplicator installer exploit"),
    ("easy-wp-smtp", "Easy WP SMTP exploit"),
    ("uploads/", "PHP execution in uploads"),
    ("404", "Theme 404 shell"),
    ("timthumb", "TimThumb exploit"),
    ("gravityforms", "Gravity Forms exploit"),
    ("debug", "Debug log exposure"),
    ("element_parents", "Drupalgeddon RCE"),
    ("user/password", "Drupal password form injection"),
    ("hal_json", "Drupal REST RCE"),
    ("sites/", "Drupal module scan"),
    ("com_", "Joomla component exploit"),
    ("libraries/joomla", "Joomla library access"),
    ("readme", "Plugin readme probe"),
    ("changelog", "Plugin changelog probe"),
)


def score_rule(literal: str) -> int:
    lowered = literal.lower()
    for marker, score in RULE_SCORES:
        if marker in lowered:
            return score
    return DEFAULT_SCORE


def describe_rule(literal: str) -> str:
    lowered = literal.lower()
    for marker, description in RULE_DESCRIPTIONS:
        if marker in lowered:
            return description
    return "Known exploit path"


class PluginExploitAnalyzer(Analyzer):
    name = "PluginExploit"
    categories = (57, 15)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = []
        for rule in pattern_library.plugin_exploit_paths():
            literal = rule_literal(rule)
            self._rules.append((rule, describe_rule(literal), score_rule(literal)))

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        if path in ("", "/"):
            return None

        targets = [bounded(request.uri), bounded(path)]
        findings = []
        max_score = 0

        for rule, description, score in self._rules:
            if any(rule.search(target) for target in targets):
                if description not in findings:
                    findings.append(description)
                max_score = max(max_score, score)

        if findings:
            logger.debug(f"Plugin exploit paths matched for {path[:100]}: {findings}")

        return self._result(
            findings,
            max_score,
            "Plugin/component exploit attempt: ",
            suffix=f" (path: {path[:200]})",
        )
