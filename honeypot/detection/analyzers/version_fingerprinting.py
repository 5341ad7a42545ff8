"""CMS version fingerprinting detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer


def _rules(*entries):
    return tuple((re.compile(pattern, re.IGNORECASE), description, score) for pattern, description, score in entries)


FINGERPRINT_PATHS = _rules(
    # WordPress version disclosure
    (r"^/readme\.html$", "WordPress readme.html access", 55),
    (r"^/license\.txt$", "WordPress license.txt access", 40),
    (r"/wp-includes/version\.php", "Direct wp-includes/version.php access", 65),
    # WordPress static assets
    (r"/wp-includes/js/[^/]+\.js", "WordPress JS file scanning", 45),
    (r"/wp-admin/css/[^/]+\.css", "WordPress admin CSS scanning", 50),
    (r"/wp-admin/js/[^/]+\.js", "WordPress admin JS scanning", 50),
    (r"/wp-includes/images/[^/]+", "WordPress images directory scanning", 45),
    # Drupal
    (r"^/CHANGELOG\.txt$", "Drupal CHANGELOG.txt access", 55),
    (r"^/core/CHANGELOG\.txt$", "Drupal core CHANGELOG.txt access", 55),
    # Joomla
    (r"/administrator/manifests/files/joomla\.xml", "Joomla version manifest access", 55),
)

VERSION_PARAMETER = re.compile(r"[?&](v|ver|version)=", re.IGNORECASE)
CMS_ASSET_PATH = re.compile(r"/(wp-content|wp-includes|wp-admin|sites|components|modules|libraries)/", re.IGNORECASE)


class VersionFingerprintingAnalyzer(Analyzer):
    name = "VersionFingerprinting"
    categories = (56, 57)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        for pattern, description, score in FINGERPRINT_PATHS:
            if pattern.search(path):
                findings.append(description)
                max_score = max(max_score, score)

        if VERSION_PARAMETER.search(request.uri) and CMS_ASSET_PATH.search(path):
            findings.append("Version parameter probing on CMS asset")
            max_score = max(max_score, 50)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Version fingerprinting detected: ",
            suffix=f" (path: {path[:200]})",
        )
