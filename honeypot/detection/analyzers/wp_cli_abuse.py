"""WP-CLI and admin-ajax exploitation detection."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional, Tuple

from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

DANGEROUS_ACTIONS = frozenset(
    (
        "revslider_show_image",
        "revslider_ajax_action",
        "duplicator_download",
        "duplicator_package_build",
        "upload-attachment",
        "upload_attachment",
        "editeditor",
        "wp_ajax_upload_file",
        "elementor_upload",
        "wooco_save_option",
        "formcraft3_save_form_progress",
    )
)

SHELL_KEYWORDS = ("shell", "exec", "eval", "system", "passthru", "popen", "proc_open", "pcntl_exec", "cmd", "command")

WP_CLI_COMMANDS = (
    "wp core", "wp plugin", "wp theme", "wp user", "wp db",
    "wp config", "wp option", "wp cron", "wp eval", "wp shell",
)

BASE64_VALUE = re.compile(r"^[A-Za-z0-9+/]{40,}={0,2}$")
CODE_CALL = re.compile(r"\b(eval|exec|system|passthru|shell_exec|base64_decode)\s*\(", re.IGNORECASE)

SERIALIZED_PATTERNS = (
    re.compile(r"O:\d+:\"[^\"]+\"", re.IGNORECASE),
    re.compile(r"a:\d+:\{", re.IGNORECASE),
    re.compile(r"s:\d+:\"[^\"]*\";", re.IGNORECASE),
)


def decode_base64(value: str) -> Optional[bytes]:
    """Strictly decode a base64 value, tolerating missing padding."""
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return None


class WpCliAbuseAnalyzer(Analyzer):
    name = "WpCliAbuse"
    categories = (21, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post:
            return None

        path = request.path.lower()
        is_admin_ajax = "admin-ajax.php" in path
        if not is_admin_ajax and "/wp-admin/" not in path:
            return None

        post_data = request.post_data
        body = bounded(request.body)
        findings = []
        max_score = 0

        if is_admin_ajax:
            action = post_data.get("action", "")
            lowered_action = action.lower()

            if lowered_action.startswith("wp_ajax_nopriv_"):
                findings.append(f"Unauthenticated admin-ajax action: {action}")
                max_score = max(max_score, 65)

            if lowered_action in DANGEROUS_ACTIONS:
                findings.append(f"Dangerous admin-ajax action: {action}")
                max_score = max(max_score, 75)

            keyword = next((keyword for keyword in SHELL_KEYWORDS if keyword in lowered_action), None)
            if keyword is not None:
                findings.append(f"Shell keyword in action parameter: {keyword}")
                max_score = max(max_score, 80)

        lowered_body = body.lower()
        command = next((command for command in WP_CLI_COMMANDS if command in lowered_body), None)
        if command is not None:
            findings.append(f"WP-CLI command pattern in POST body: {command}")
            max_score = max(max_score, 80)

        encoded = self._find_base64(post_data)
        if encoded is not None:
            finding, score = encoded
            findings.append(finding)
            max_score = max(max_score, score)

        haystack = body + " " + " ".join(post_data.values())
        if any(pattern.search(haystack) for pattern in SERIALIZED_PATTERNS):
            findings.append("PHP serialized object detected (object injection)")
            max_score = max(max_score, 75)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "WP-CLI/admin-ajax abuse detected: ",
            suffix=f" (path: {request.path[:200]})",
        )

    def _find_base64(self, post_data) -> Optional[Tuple[str, int]]:
        for key, value in post_data.items():
            if not BASE64_VALUE.match(value):
                continue
            decoded = decode_base64(value)
            if decoded is None or len(decoded) <= 10:
                continue
            if CODE_CALL.search(decoded.decode("utf-8", errors="replace")):
                return f'Base64-encoded code in POST field "{key}"', 85
            return f'Base64-encoded content in POST field "{key}"', 65
        return None
