"""Backup file, sensitive file and scanner path probing detection."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

BACKUP_FILES = (
    (re.compile(r"\.(bak|old|orig|save|swp|copy|tmp|temp)$", re.IGNORECASE), "Backup file probe", 55),
    (re.compile(r"~$"), "Editor backup file probe", 50),
    (re.compile(r"\.(sql|sqlite|db)$", re.IGNORECASE), "Database file probe", 65),
    (re.compile(r"\.(log|logs)$", re.IGNORECASE), "Log file probe", 50),
    (re.compile(r"\.(tar|tar\.gz|tgz|zip|rar|7z|gz|bz2)$", re.IGNORECASE), "Archive file probe", 55),
)

SCANNER_PATHS = (
    (re.compile(r"/(admin|administrator|manager|panel|console|dashboard|backend)/?$", re.IGNORECASE), "Admin panel probe", 45),
    (re.compile(r"/(login|signin|auth|authenticate)/?$", re.IGNORECASE), "Authentication endpoint probe", 40),
    (re.compile(r"/(phpmyadmin|pma|myadmin|mysqladmin|dbadmin|adminer)/?", re.IGNORECASE), "Database admin panel probe", 65),
    (re.compile(r"/(cgi-bin|cgi)/", re.IGNORECASE), "CGI directory probe", 50),
    (re.compile(r"/(wp-admin|wp-includes)/?", re.IGNORECASE), "WordPress admin probe", 45),
    (re.compile(r"/(xmlrpc\.php|wp-cron\.php)$", re.IGNORECASE), "WordPress system file probe", 50),
    (re.compile(r"/server-(status|info)$", re.IGNORECASE), "Server status page probe", 55),
    (re.compile(r"/(\.well-known|crossdomain\.xml|clientaccesspolicy\.xml)", re.IGNORECASE), "Policy file probe", 40),
    (re.compile(r"/(robots\.txt|sitemap\.xml)$", re.IGNORECASE), "Reconnaissance (robots/sitemap)", 40),
    (re.compile(r"/(actuator|health|metrics|prometheus)/?", re.IGNORECASE), "Application monitoring endpoint probe", 55),
    (re.compile(r"/(api|v1|v2|v3)/(admin|debug|test)/", re.IGNORECASE), "API admin/debug endpoint probe", 55),
)

SOURCE_CONTROL = re.compile(r"/\.(git|svn|hg|bzr)(/|$)", re.IGNORECASE)
IDE_DIRECTORY = re.compile(r"/\.(idea|vscode|project|settings)(/|$)", re.IGNORECASE)
INFO_SCRIPT = re.compile(r"/(phpinfo|info|test|pi|i)\.php$", re.IGNORECASE)

SENSITIVE_DESCRIPTIONS = (
    (re.compile(r"\.env", re.IGNORECASE), "environment file"),
    (re.compile(r"\.git", re.IGNORECASE), "Git repository"),
    (re.compile(r"\.svn", re.IGNORECASE), "SVN repository"),
    (re.compile(r"\.htaccess|\.htpasswd", re.IGNORECASE), "Apache configuration"),
    (re.compile(r"composer|package|Gemfile|requirements|Pipfile", re.IGNORECASE), "dependency manifest"),
    (re.compile(r"error.{0,64}log|access.{0,64}log|debug.{0,64}log|\.log", re.IGNORECASE), "log file"),
    (re.compile(r"\.sql|\.sqlite|\.db|dump", re.IGNORECASE), "database file"),
    (re.compile(r"phpinfo|info\.php|test\.php", re.IGNORECASE), "PHP info/test file"),
    (re.compile(r"phpmyadmin|adminer", re.IGNORECASE), "database admin panel"),
    (re.compile(r"web\.config", re.IGNORECASE), "IIS configuration"),
    (re.compile(r"DS_Store|Thumbs|desktop\.ini", re.IGNORECASE), "OS metadata file"),
    (re.compile(r"\.idea|\.vscode|\.project", re.IGNORECASE), "IDE configuration"),
)

SENSITIVE_SCORES = (
    (re.compile(r"\.env|\.htpasswd|\.git", re.IGNORECASE), 70),
    (re.compile(r"phpmyadmin|adminer|phpinfo", re.IGNORECASE), 65),
    (re.compile(r"\.sql|\.db|dump", re.IGNORECASE), 65),
    (re.compile(r"error.{0,64}log|access.{0,64}log", re.IGNORECASE), 55),
)
DEFAULT_SENSITIVE_SCORE = 50


def describe_sensitive(rule: re.Pattern) -> str:
    literal = rule_literal(rule)
    for matcher, description in SENSITIVE_DESCRIPTIONS:
        if matcher.search(literal):
            return description
    return "sensitive file"


def score_sensitive(rule: re.Pattern) -> int:
    literal = rule_literal(rule)
    for scorer, score in SENSITIVE_SCORES:
        if scorer.search(literal):
            return score
    return DEFAULT_SENSITIVE_SCORE


class PathScanningAnalyzer(Analyzer):
    name = "PathScanning"
    categories = (14, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        if path in ("", "/"):
            return None

        target = bounded(path)
        findings = []
        max_score = 0

        for pattern, description, score in BACKUP_FILES:
            if pattern.search(target):
                findings.append(description)
                max_score = max(max_score, score)
                break

        for rule in pattern_library.sensitive_file_paths():
            if rule.search(target):
                findings.append(f"Sensitive file access: {describe_sensitive(rule)}")
                max_score = max(max_score, score_sensitive(rule))
                break

        for pattern, description, score in SCANNER_PATHS:
            if pattern.search(target):
                findings.append(description)
                max_score = max(max_score, score)
                break

        if SOURCE_CONTROL.search(target):
            findings.append("Source control directory probe")
            max_score = max(max_score, 70)

        if IDE_DIRECTORY.search(target):
            findings.append("IDE/editor configuration probe")
            max_score = max(max_score, 50)

        if INFO_SCRIPT.search(target):
            findings.append("PHP info/test file probe")
            max_score = max(max_score, 60)

        return self._result(
            findings, max_score, "Path scanning/probing detected: ", suffix=f" (path: {path[:200]})"
        )
