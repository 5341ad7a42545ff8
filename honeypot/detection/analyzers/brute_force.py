"""Login brute force detection backed by a shared attempt counter."""

from __future__ import annotations

import logging
import re
from typing import Optional

from ...config import Settings, get_settings
from ..counter_store import AttemptCounter, InMemoryAttemptCounter
from ..pattern_library import is_common_password, is_common_username
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

logger = logging.getLogger(__name__)

LOGIN_PATHS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"/wp-login\.php",
        r"/wp-admin/?$",
        r"/administrator/?$",
        r"/admin/login",
        r"/user/login",
        r"/login/?$",
        r"/signin/?$",
        r"/auth/login",
        r"/account/login",
        r"/api/auth",
        r"/api/login",
    )
)

USERNAME_FIELDS = ("log", "username", "user", "user_login", "email", "login", "name", "usr")
PASSWORD_FIELDS = ("pwd", "password", "pass", "user_pass", "passwd", "user_password", "secret")


def first_field(post_data, fields) -> str:
    for field_name in fields:
        value = post_data.get(field_name, "")
        if value:
            return value
    return ""


class BruteForceAnalyzer(Analyzer):
    """
    Flags login endpoint traffic.

    POSTs are checked for well-known credentials and counted per client IP
    in a sliding window. The counter is injected so that several workers
    can share one Redis-backed store.
    """

    name = "BruteForce"
    categories = (18, 31)

    def __init__(
        self,
        counter_store: Optional[AttemptCounter] = None,
        settings: Optional[Settings] = None,
        normalizer=None,
    ):
        super().__init__(normalizer)
        settings = settings or get_settings()
        self.counter_store = counter_store or InMemoryAttemptCounter()
        self.window_seconds = settings.BRUTE_FORCE_WINDOW_SECONDS
        self.attempt_threshold = settings.BRUTE_FORCE_ATTEMPT_THRESHOLD

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        if not any(pattern.search(path) for pattern in LOGIN_PATHS):
            return None

        findings = []
        max_score = 0

        if request.is_post:
            findings.append(f"POST to login endpoint: {path}")
            max_score = 60

            username = first_field(request.post_data, USERNAME_FIELDS)
            password = first_field(request.post_data, PASSWORD_FIELDS)

            if username:
                if is_common_username(username):
                    findings.append(f"Common username attempted: {username}")
                    max_score = max(max_score, 75)
                else:
                    findings.append(f"Login username: {username[:50]}")
                    max_score = max(max_score, 65)

            if password and is_common_password(password):
                findings.append("Common/default password attempted")
                max_score = max(max_score, 80)

            attempts = self.counter_store.record_attempt(request.ip, self.window_seconds)
            if attempts > self.attempt_threshold:
                logger.info(f"Repeated login attempts from {request.ip}: {attempts} in {self.window_seconds}s")
                findings.append(f"Repeated login attempts from same IP ({attempts} attempts)")
                max_score = max(max_score, 85)
        elif request.is_get:
            findings.append(f"Login page probe: {path}")
            max_score = 40

            if request.query_params:
                findings.append("Login endpoint probed with query parameters")
                max_score = max(max_score, 50)
            else:
                return None
        else:
            return None

        return self._result(findings, max_score, "Brute force attempt detected: ")
