"""Password reset abuse and Host header poisoning detection."""

from __future__ import annotations

import re
from typing import Optional

from ..pattern_library import is_common_username
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

WP_LOGIN = re.compile(r"/wp-login\.php", re.IGNORECASE)
DRUPAL_RESET = re.compile(r"/user/password/?$", re.IGNORECASE)
JOOMLA_USERS = re.compile(r"option=com_users", re.IGNORECASE)
JOOMLA_REMIND = re.compile(r"task=user\.remind", re.IGNORECASE)

HOST_INJECTION = re.compile(r"[,\s@]")
HOST_IP_OR_PORT = re.compile(r":\d{5,}|^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}")

WP_RESET_ACTIONS = ("lostpassword", "retrievepassword", "resetpass", "rp")
USERNAME_FIELDS = ("user_login", "log", "username", "user", "email", "name", "login")


class PasswordResetAbuseAnalyzer(Analyzer):
    """
    Reset endpoints for WordPress, Drupal and Joomla.

    Only reset requests are inspected further, for common account names
    and for Host / X-Forwarded-Host values that would poison reset links.
    """

    name = "PasswordResetAbuse"
    categories = (18, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        uri = request.uri
        findings = []
        max_score = 0
        is_reset = False

        if WP_LOGIN.search(path):
            action = request.query_param("action")
            if action is not None and action.lower() in WP_RESET_ACTIONS:
                is_reset = True
                findings.append(f"WordPress password reset request (action={action})")
                max_score = max(max_score, 50)

            if request.is_post and request.post_data.get("action", "").lower() in WP_RESET_ACTIONS:
                is_reset = True
                findings.append("WordPress password reset POST submission")
                max_score = max(max_score, 55)

        if DRUPAL_RESET.search(path):
            is_reset = True
            findings.append("Drupal password reset endpoint accessed")
            max_score = max(max_score, 50)
            if request.is_post:
                findings.append("Drupal password reset POST submission")
                max_score = max(max_score, 55)

        if JOOMLA_USERS.search(uri) and JOOMLA_REMIND.search(uri):
            is_reset = True
            findings.append("Joomla password reset endpoint accessed")
            max_score = max(max_score, 50)
            if request.is_post:
                findings.append("Joomla password reset POST submission")
                max_score = max(max_score, 55)

        if not is_reset:
            return None

        if request.is_post:
            username = next(
                (request.post_data[name] for name in USERNAME_FIELDS if request.post_data.get(name)),
                None,
            )
            if username is not None and is_common_username(username):
                findings.append(f"Password reset for common username: {username}")
                max_score = max(max_score, 65)

        if request.has_header("Host"):
            host = request.header("Host")
            if HOST_INJECTION.search(host):
                findings.append(f"Suspicious Host header in password reset: {host[:80]}")
                max_score = max(max_score, 70)
            if HOST_IP_OR_PORT.search(host):
                findings.append("Host header with IP or unusual port in password reset")
                max_score = max(max_score, 60)

        forwarded_host = request.header("X-Forwarded-Host")
        if forwarded_host:
            findings.append(f"X-Forwarded-Host present in password reset: {forwarded_host[:80]}")
            max_score = max(max_score, 65)

        if len(findings) >= 3:
            max_score = max(max_score, 70)

        return self._result(findings, max_score, "Password reset abuse detected: ")
