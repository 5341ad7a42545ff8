"""Credential stuffing detection over form, JSON and Authorization credentials."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from typing import List, Optional, Tuple

from ..pattern_library import is_common_password, is_common_username
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

logger = logging.getLogger(__name__)

USERNAME_FIELDS = (
    "log", "username", "user", "user_login", "email", "login",
    "name", "usr", "account", "userid", "user_id",
)
PASSWORD_FIELDS = (
    "pwd", "password", "pass", "user_pass", "passwd",
    "user_password", "secret", "passw", "pass_word",
)
JSON_USERNAME_KEYS = ("username", "user", "login", "email", "account")
JSON_PASSWORD_KEYS = ("password", "pass", "passwd", "secret", "pwd")

BASIC_AUTH = re.compile(r"^Basic\s+(.+)$", re.IGNORECASE)
BEARER_AUTH = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)
MIN_BEARER_LENGTH = 10


def _first_value(data, keys) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value != "":
            return value
    return None


class CredentialStuffingAnalyzer(Analyzer):
    name = "CredentialStuffing"
    categories = (18, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post:
            findings, score = self._check_authorization(request)
            return self._result(findings, score, "", limit=None)

        findings: List[str] = []
        max_score = 0

        max_score = self._check_form(request.post_data, findings, max_score)

        if "json" in request.content_type.lower() and request.body:
            max_score = self._check_json(request.body, findings, max_score)

        auth_findings, auth_score = self._check_authorization(request)
        if auth_findings:
            findings.append("; ".join(auth_findings))
            max_score = max(max_score, auth_score)

        return self._result(findings, max_score, "Credential stuffing detected: ")

    def _check_form(self, post_data, findings: List[str], max_score: int) -> int:
        username = _first_value(post_data, USERNAME_FIELDS)
        password = _first_value(post_data, PASSWORD_FIELDS)

        if username is not None and password is not None:
            common_user = is_common_username(username)
            common_pass = is_common_password(password)

            if common_user and common_pass:
                findings.append(f"Default credential pair: {username} with common password")
                return max(max_score, 90)
            if common_user:
                findings.append(f"Common username in credential attempt: {username}")
                return max(max_score, 75)
            if common_pass:
                findings.append("Common/default password in credential attempt")
                return max(max_score, 70)
            findings.append("Credential submission detected")
            return max(max_score, 65)

        if username is not None and is_common_username(username):
            findings.append(f"Common username submitted: {username}")
            return max(max_score, 65)

        return max_score

    def _check_json(self, body: str, findings: List[str], max_score: int) -> int:
        try:
            data = json.loads(body)
        except ValueError:
            logger.debug("Ignoring non-JSON body with JSON content type")
            return max_score

        if not isinstance(data, dict):
            return max_score

        username = next((data[key] for key in JSON_USERNAME_KEYS if isinstance(data.get(key), str)), None)
        password = next((data[key] for key in JSON_PASSWORD_KEYS if isinstance(data.get(key), str)), None)

        if username is None or password is None:
            return max_score

        common_user = is_common_username(username)
        common_pass = is_common_password(password)

        if common_user and common_pass:
            findings.append(f"JSON credential stuffing: default pair {username}")
            return max(max_score, 90)
        if common_user or common_pass:
            findings.append("JSON credential attempt with common credentials")
            return max(max_score, 75)
        findings.append("JSON credential submission detected")
        return max(max_score, 65)

    def _check_authorization(self, request: RequestView) -> Tuple[List[str], int]:
        auth_header = request.header("Authorization")
        if not auth_header:
            return [], 0

        findings: List[str] = []
        max_score = 0

        basic = BASIC_AUTH.match(auth_header)
        if basic:
            try:
                decoded = base64.b64decode(basic.group(1), validate=True).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError):
                decoded = ""

            if ":" in decoded:
                user, _, password = decoded.partition(":")
                common_user = is_common_username(user)

                if common_user and is_common_password(password):
                    findings.append(f"Basic auth with default credentials: {user}")
                    max_score = 90
                elif common_user:
                    findings.append(f"Basic auth with common username: {user}")
                    max_score = 75
                else:
                    findings.append("Basic auth credential attempt")
                    max_score = 65

        bearer = BEARER_AUTH.match(auth_header)
        if bearer and len(bearer.group(1)) < MIN_BEARER_LENGTH:
            findings.append("Suspicious Bearer token (too short)")
            max_score = max(max_score, 50)

        return findings, max_score
