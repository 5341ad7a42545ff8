"""Session hijacking, fixation and cookie manipulation detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

MAX_COOKIE_SIZE = 4096

# (pattern, description); the first match is reported
PRIVILEGE_COOKIES = tuple(
    (re.compile(pattern, re.IGNORECASE), description)
    for pattern, description in (
        (r"\badmin\s*=\s*(1|true|yes)\b", "admin flag cookie"),
        (r"\brole\s*=\s*(admin|administrator|root|superadmin)\b", "role elevation cookie"),
        (r"\bis_admin\s*=\s*(1|true|yes)\b", "is_admin flag cookie"),
        (r"\bisadmin\s*=\s*(1|true|yes)\b", "isadmin flag cookie"),
        (r"\buser_role\s*=\s*(admin|administrator|root)\b", "user_role elevation cookie"),
        (r"\baccess_level\s*=\s*(admin|root|super)\b", "access_level elevation cookie"),
        (r"\bprivileged\s*=\s*(1|true|yes)\b", "privileged flag cookie"),
        (r"\bstaff\s*=\s*(1|true)\b", "staff flag cookie"),
    )
)

SESSION_PARAMS = frozenset(
    name.lower() for name in ("PHPSESSID", "session_id", "sid", "sessid", "JSESSIONID", "ASP.NET_SessionId")
)

WP_LOGGED_IN = re.compile(r"^wordpress_logged_in_", re.IGNORECASE)
CRAFTED_LOGIN_USER = re.compile(r"^(admin|administrator|root)\|", re.IGNORECASE)
ZEROED_EXPIRY = re.compile(r"\|0{5,}\|")
SET_COOKIE_INJECTION = re.compile(r"(\r\n|\r|\n|%0[dD]%0[aA])Set-Cookie\s*:", re.IGNORECASE)
JWT_PREFIX = re.compile(r"^[A-Za-z0-9_\-]+\.")
JWT_PART = re.compile(r"^[A-Za-z0-9_\-]+$")


def looks_like_jwt(value: str) -> bool:
    return len(value) > 20 and "." in value and JWT_PREFIX.match(value) is not None


def is_valid_jwt_structure(value: str) -> bool:
    """Three non-empty base64url segments separated by dots."""
    parts = value.split(".")
    return len(parts) == 3 and all(JWT_PART.match(part) for part in parts)


class SessionHijackingAnalyzer(Analyzer):
    name = "SessionHijacking"
    categories = (14, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0
        cookie_header = request.header("Cookie")

        if cookie_header:
            description = next(
                (description for pattern, description in PRIVILEGE_COOKIES if pattern.search(cookie_header)),
                None,
            )
            if description is not None:
                findings.append(f"Suspicious privilege cookie pattern: {description}")
                max_score = max(max_score, 65)

            login_cookie = next((name for name in request.cookies if WP_LOGGED_IN.match(name)), None)
            if login_cookie is not None:
                value = request.cookies[login_cookie]
                if CRAFTED_LOGIN_USER.match(value) or ZEROED_EXPIRY.search(value) or len(value) < 10:
                    findings.append(f'Suspicious wordpress_logged_in cookie value for cookie "{login_cookie[:50]}"')
                    max_score = max(max_score, 70)

            if len(cookie_header) > MAX_COOKIE_SIZE:
                findings.append(f"Abnormally large Cookie header ({len(cookie_header)} bytes)")
                max_score = max(max_score, 55)

        fixation = next((key for key in request.query_params if key.lower() in SESSION_PARAMS), None)
        if fixation is not None:
            findings.append(f'Session fixation attempt via URL parameter "{fixation}"')
            max_score = max(max_score, 70)

        injected = next((name for name, value in request.headers.items() if SET_COOKIE_INJECTION.search(value)), None)
        if injected is not None:
            findings.append(f'Cookie injection via CRLF in header "{injected}"')
            max_score = max(max_score, 75)

        malformed = next(
            (
                name
                for name, value in request.cookies.items()
                if looks_like_jwt(value) and not is_valid_jwt_structure(value)
            ),
            None,
        )
        if malformed is not None:
            findings.append(f'Malformed JWT token in cookie "{malformed[:50]}"')
            max_score = max(max_score, 55)

        return self._result(findings, max_score, "Session hijacking/manipulation detected: ")
