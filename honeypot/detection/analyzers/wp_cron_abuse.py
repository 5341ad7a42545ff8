"""wp-cron.php, heartbeat and REST API write abuse detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

BROWSER_USER_AGENT = re.compile(r"(Mozilla|Chrome|Firefox|Safari|Edge|Opera)/\d", re.IGNORECASE)
WP_CRON = re.compile(r"/wp-cron\.php", re.IGNORECASE)
HEARTBEAT_URI = re.compile(r"/wp-admin/admin-ajax\.php.{0,256}?action=heartbeat", re.IGNORECASE)
ADMIN_AJAX = re.compile(r"/wp-admin/admin-ajax\.php", re.IGNORECASE)
REST_API = re.compile(r"/wp-json/wp/v2/", re.IGNORECASE)

WRITE_METHODS = ("POST", "DELETE", "PUT", "PATCH")


def looks_like_browser(user_agent: str) -> bool:
    return bool(user_agent) and BROWSER_USER_AGENT.search(user_agent) is not None


class WpCronAbuseAnalyzer(Analyzer):
    name = "WpCronAbuse"
    categories = (54, 4)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        user_agent = request.user_agent
        findings = []
        max_score = 0

        if WP_CRON.search(path):
            if request.is_post:
                if request.body:
                    findings.append("POST to wp-cron.php with body content")
                    max_score = max(max_score, 65)
                else:
                    findings.append("POST to wp-cron.php")
                    max_score = max(max_score, 50)
            elif not looks_like_browser(user_agent):
                findings.append(f"Direct wp-cron.php access with non-browser UA: {user_agent[:80]}")
                max_score = max(max_score, 55)
            else:
                findings.append("Direct wp-cron.php access")
                max_score = max(max_score, 40)

        if HEARTBEAT_URI.search(request.uri) or ADMIN_AJAX.search(path):
            action = request.query_param("action")
            if action is None:
                action = request.post_field("action")
            if action == "heartbeat" and not looks_like_browser(user_agent):
                findings.append(f"Heartbeat endpoint accessed by non-browser UA: {user_agent[:80]}")
                max_score = max(max_score, 55)

        if REST_API.search(path) and request.method in WRITE_METHODS:
            findings.append(f"REST API write operation ({request.method} {path[:100]})")
            max_score = max(max_score, 60)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "WP cron/API abuse detected: ",
            suffix=f" (path: {path[:200]})",
        )
