"""WordPress theme directory abuse detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

THEME_PHP = re.compile(r"/wp-content/themes/([^/]+)/(?:[^?#]{0,256}/)?([^/]+\.php\d?)$", re.IGNORECASE)
THEME_THUMB = re.compile(r"/wp-content/themes/[^/]+/.{0,256}?(timthumb|thumb)\.php", re.IGNORECASE)
THEME_STYLESHEET = re.compile(r"/wp-content/themes/([^/]+)/style\.css$", re.IGNORECASE)
THEME_EDITOR = re.compile(r"/wp-admin/theme-editor\.php", re.IGNORECASE)
VULNERABLE_THEMES = re.compile(
    r"/wp-content/themes/(avada|divi|enfold|jupiter|bridge|newspaper|flatsome|salient|the7|betheme|pagelines|dessign)/",
    re.IGNORECASE,
)

TEMPLATE_FILES = frozenset(
    (
        "index.php", "functions.php", "single.php", "page.php", "archive.php",
        "search.php", "sidebar.php", "footer.php", "comments.php", "category.php",
        "home.php", "front-page.php", "attachment.php", "author.php", "tag.php",
        "404.php", "header.php",
    )
)
DIRECT_HIT_TEMPLATES = ("404.php", "header.php")


class ThemeExploitAnalyzer(Analyzer):
    name = "ThemeExploit"
    categories = (36, 21)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        findings = []
        max_score = 0

        if THEME_THUMB.search(path):
            findings.append("TimThumb script access in theme")
            max_score = max(max_score, 85)

        php_match = THEME_PHP.search(path)
        if php_match:
            theme, filename = php_match.group(1), php_match.group(2).lower()
            if filename in DIRECT_HIT_TEMPLATES:
                findings.append(f"Direct theme template access: {theme}/{filename}")
                max_score = max(max_score, 70)
            elif filename not in TEMPLATE_FILES and "thumb" not in filename:
                findings.append(f"PHP execution in theme directory: {theme}/{filename}")
                max_score = max(max_score, 80)

        if request.is_post and (
            THEME_EDITOR.search(path) or request.post_data.get("action", "") == "edit-theme-plugin-file"
        ):
            findings.append("Theme file modification via editor")
            max_score = max(max_score, 80)

        vulnerable = VULNERABLE_THEMES.search(path)
        if vulnerable:
            findings.append(f"Known vulnerable theme targeted: {vulnerable.group(1)}")
            max_score = max(max_score, 60)

        stylesheet = THEME_STYLESHEET.search(path)
        if stylesheet and not request.has_header("Referer"):
            findings.append(f"Theme version fingerprinting via style.css ({stylesheet.group(1)})")
            max_score = max(max_score, 40)

        return self._result(
            findings,
            max_score,
            "Theme exploit attempt: ",
            suffix=f" (path: {path[:200]})",
        )
