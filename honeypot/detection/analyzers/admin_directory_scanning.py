"""CMS admin directory scanning detection (WordPress, Drupal, Joomla)."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer


def _rules(*entries):
    return tuple((re.compile(pattern, re.IGNORECASE), description, score) for pattern, description, score in entries)


WP_ADMIN_SENSITIVE_PATHS = _rules(
    (r"/wp-admin/install\.php", "WordPress install.php probe", 70),
    (r"/wp-admin/setup-config\.php", "WordPress setup-config.php probe", 75),
    (r"/wp-admin/upgrade\.php", "WordPress upgrade.php probe", 65),
    (r"/wp-admin/maint/repair\.php", "WordPress database repair probe", 70),
    (r"/wp-admin/import\.php", "WordPress import tool probe", 55),
    (r"/wp-admin/export\.php", "WordPress export tool probe", 55),
    (r"/wp-admin/includes/", "Direct access to wp-admin/includes/", 65),
    (r"/wp-admin/network/", "WordPress multisite network admin probe", 60),
)

DRUPAL_ADMIN_PATHS = _rules(
    (r"^/admin/config", "Drupal admin config access", 55),
    (r"^/admin/modules", "Drupal admin modules access", 60),
    (r"^/admin/people", "Drupal admin people/users access", 60),
)

JOOMLA_ADMIN_PATHS = _rules(
    (r"/administrator/components/", "Joomla administrator components scanning", 60),
    (r"/administrator/modules/", "Joomla administrator modules scanning", 60),
)

ADMIN_AJAX = re.compile(r"/wp-admin/admin-ajax\.php", re.IGNORECASE)


class AdminDirectoryScanningAnalyzer(Analyzer):
    name = "AdminDirectoryScanning"
    categories = (32, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        for pattern, description, score in WP_ADMIN_SENSITIVE_PATHS:
            if pattern.search(path):
                findings.append(description)
                max_score = max(max_score, score)

        if ADMIN_AJAX.search(path) and request.is_get and not request.query_param("action"):
            findings.append("admin-ajax.php GET without action parameter (scanning)")
            max_score = max(max_score, 50)

        for pattern, description, score in DRUPAL_ADMIN_PATHS + JOOMLA_ADMIN_PATHS:
            if pattern.search(path):
                findings.append(description)
                max_score = max(max_score, score)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Admin directory scanning detected: ",
            suffix=f" (path: {path[:200]})",
        )
