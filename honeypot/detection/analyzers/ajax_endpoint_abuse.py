"""WordPress admin-ajax.php and admin-post.php abuse detection."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..pattern_engine import bounded, matches_any
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, is_browser_user_agent

ADMIN_AJAX = re.compile(r"/wp-admin/admin-ajax\.php", re.IGNORECASE)
ADMIN_POST = re.compile(r"/wp-admin/admin-post\.php", re.IGNORECASE)
FILE_MANAGER_ACTION = re.compile(r"^wp_file_manager", re.IGNORECASE)

DANGEROUS_ACTIONS = frozenset(
    (
        "revslider_show_image",
        "revslider_ajax_action",
        "duplicator_download",
        "duplicator_package_build",
        "wp_file_manager_upload",
        "wp_file_manager_get_file",
        "wp_file_manager_rename",
        "wp_file_manager_delete",
        "wp_file_manager_copy",
        "wp_file_manager_move",
        "upload-attachment",
        "editpost",
        "delete-post",
        "delete-page",
        "trash-post",
        "inline-save",
        "upload-plugin",
        "upload-theme",
        "install-plugin",
        "install-theme",
        "update-plugin",
        "update-theme",
        "edit-theme-plugin-file",
        "wp-remove-post-lock",
        "wp_ajax_crop_image",
        "wp_ajax_save_attachment",
    )
)

MAX_ACTION_LENGTH = 100


class AjaxEndpointAbuseAnalyzer(Analyzer):
    name = "AjaxEndpointAbuse"
    categories = (21, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        is_ajax = bool(ADMIN_AJAX.search(path))
        is_admin_post = bool(ADMIN_POST.search(path))

        if not is_ajax and not is_admin_post:
            return None

        action = request.query_param("action") or request.post_field("action") or ""
        non_browser = not is_browser_user_agent(request.user_agent)
        findings = []
        max_score = 0

        if is_ajax:
            if not action:
                findings.append("AJAX endpoint accessed without action parameter")
                max_score = max(max_score, 50)
            else:
                if action.lower() in DANGEROUS_ACTIONS:
                    findings.append(f"Dangerous AJAX action requested: {action}")
                    max_score = max(max_score, 75)

                if FILE_MANAGER_ACTION.search(action):
                    findings.append(f"WP File Manager AJAX action: {action}")
                    max_score = max(max_score, 75)

                if len(action) > MAX_ACTION_LENGTH:
                    findings.append(f"AJAX action parameter fuzzing detected ({len(action)} chars)")
                    max_score = max(max_score, 60)

                injected = self._find_sql_injection(request)
                if injected is not None:
                    findings.append(f'SQL injection in AJAX parameter "{injected}"')
                    max_score = max(max_score, 80)

            if non_browser:
                findings.append(f"Non-browser User-Agent accessing AJAX endpoint: {request.user_agent[:80]}")
                max_score = max(max_score, 55)

        if is_admin_post:
            findings.append("POST to wp-admin/admin-post.php endpoint")
            max_score = max(max_score, 55)

            if request.post_data or request.body:
                combined = request.body + "".join(" " + value for value in request.post_data.values())
                if matches_any(pattern_library.sql_injection_patterns(), combined):
                    findings.append("SQL injection payload in admin-post.php data")
                    max_score = max(max_score, 80)

            if non_browser:
                findings.append("Non-browser User-Agent accessing admin-post.php")
                max_score = max(max_score, 55)

        return self._result(findings, max_score, "AJAX/admin endpoint abuse detected: ")

    def _find_sql_injection(self, request: RequestView) -> Optional[str]:
        rules = pattern_library.sql_injection_patterns()
        params = {**request.query_params, **request.post_data}
        for key, value in params.items():
            if key == "action" or len(value) < 4:
                continue
            value = bounded(value)
            if matches_any(rules, value) or matches_any(rules, self.normalizer.url_decode(value, depth=1)):
                return key
        return None
