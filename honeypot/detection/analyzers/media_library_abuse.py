"""Upload directory and media endpoint abuse detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer


def _rule(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


UPLOADS_ROOT = _rule(r"/wp-content/uploads/?$")
UPLOADS_PHP = _rule(r"/wp-content/uploads/.{0,256}?\.php")
UPLOADS_YEAR_MONTH = _rule(r"/wp-content/uploads/\d{4}/\d{1,2}/?$")
UPLOADS_YEAR = _rule(r"/wp-content/uploads/\d{4}/?$")
REST_MEDIA = _rule(r"/wp-json/wp/v2/media")
DRUPAL_FILES = _rule(r"/sites/default/files/?")
DRUPAL_FILES_PHP = _rule(r"/sites/default/files/.{0,256}?\.php")
DRUPAL_PRIVATE = _rule(r"/system/files/")
JOOMLA_MEDIA = _rule(r"/images/stories/|/media/com_")

UPLOAD_ENDPOINTS = (
    (_rule(r"/wp-admin/async-upload\.php"), "POST to async-upload.php (media upload endpoint)", 65),
    (_rule(r"/wp-admin/media-upload\.php"), "POST to media-upload.php", 60),
    (_rule(r"/wp-admin/upload\.php"), "POST to upload.php", 55),
)


class MediaLibraryAbuseAnalyzer(Analyzer):
    name = "MediaLibraryAbuse"
    categories = (52, 21)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path.lower()
        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        def flag(description: str, score: int) -> None:
            nonlocal max_score
            findings.append(description)
            max_score = max(max_score, score)

        if UPLOADS_ROOT.search(path):
            flag("Upload directory listing attempt: /wp-content/uploads/", 55)

        if UPLOADS_PHP.search(path):
            flag("PHP file access in upload directory (webshell indicator)", 70)

        if request.is_post:
            for pattern, description, score in UPLOAD_ENDPOINTS:
                if pattern.search(path):
                    flag(description, score)

        if UPLOADS_YEAR_MONTH.search(path):
            flag("Upload directory enumeration by year/month", 50)

        if UPLOADS_YEAR.search(path):
            flag("Upload directory enumeration by year", 45)

        if REST_MEDIA.search(path):
            flag("WordPress REST API media endpoint access", 55)

        if DRUPAL_FILES.search(path):
            flag("Drupal file directory scanning: /sites/default/files/", 55)
            if DRUPAL_FILES_PHP.search(path):
                flag("PHP file access in Drupal files directory (webshell indicator)", 70)

        if DRUPAL_PRIVATE.search(path):
            flag("Drupal private file system access attempt", 50)

        if JOOMLA_MEDIA.search(path) and path.endswith(".php"):
            flag("PHP file in Joomla media directory (webshell indicator)", 70)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Media library abuse detected: ",
            suffix=f" (path: {request.path[:200]})",
        )
