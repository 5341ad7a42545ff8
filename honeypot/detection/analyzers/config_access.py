"""Configuration file access detection (wp-config, .env, settings files)."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

CONFIG_VARIANTS = (
    (re.compile(r"wp-config\.php[.~]?", re.IGNORECASE), "WordPress configuration file", 90),
    (re.compile(r"wp-config\.(bak|old|save|orig|txt|tmp|copy|swp)", re.IGNORECASE), "WordPress config backup", 85),
    (re.compile(r"sites/default/settings\.(php|local\.php)", re.IGNORECASE), "Drupal settings file", 85),
    (re.compile(r"configuration\.php(\.(bak|old|save|orig|txt))?", re.IGNORECASE), "Joomla configuration file", 80),
    (
        re.compile(r"\.env(\.(local|production|staging|development|backup|old|save|example|sample|bak|dist))?$", re.IGNORECASE),
        "Environment configuration file",
        85,
    ),
    (re.compile(r"\b(db|database)\.(php|yml|yaml|json|ini)", re.IGNORECASE), "Database configuration file", 80),
    (re.compile(r"app/etc/(local\.xml|env\.php)", re.IGNORECASE), "Magento configuration file", 80),
    (re.compile(r"parameters\.(yml|yaml)", re.IGNORECASE), "Symfony parameters file", 75),
    (re.compile(r"\bsecrets?\.(json|yml|yaml|php|xml)", re.IGNORECASE), "Secrets configuration file", 85),
    (re.compile(r"\bcredentials?\.(json|yml|yaml|php|xml)", re.IGNORECASE), "Credentials file", 85),
    (re.compile(r"config\.(inc\.php|php)", re.IGNORECASE), "PHP configuration file", 70),
)


def score_config_path(config_path: str) -> int:
    lowered = config_path.lower()
    if "wp-config" in lowered:
        return 90
    if lowered.startswith(".env"):
        return 85
    if "secret" in lowered or "credential" in lowered:
        return 85
    if "settings.php" in lowered or "configuration.php" in lowered:
        return 85
    if "database" in lowered or "db.php" in lowered:
        return 80
    return 70


class ConfigAccessAnalyzer(Analyzer):
    name = "ConfigAccess"
    categories = (58, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path.lower()
        uri = request.uri.lower()

        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        for config_path in pattern_library.config_file_paths():
            needle = config_path.lower()
            if needle in path or needle in uri:
                max_score = max(max_score, score_config_path(config_path))
                findings.append(f"Config file access attempt: {config_path}")

        for pattern, description, score in CONFIG_VARIANTS:
            if pattern.search(path) and not any(description.lower() in finding.lower() for finding in findings):
                findings.append(description)
                max_score = max(max_score, score)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Configuration file access attempt: ",
            suffix=f" (path: {request.path[:200]})",
        )
