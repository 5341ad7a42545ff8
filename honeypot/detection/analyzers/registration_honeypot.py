"""Automated registration and registration spam detection."""

from __future__ import annotations

import re
import time
from typing import Callable, Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, is_valid_email

REGISTRATION_PATHS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"/wp-login\.php\?action=register",
        r"/wp-signup\.php",
        r"/user/register",
        r"/index\.php\?option=com_users&view=registration",
        r"/index\.php\?option=com_users&task=registration",
        r"/component/users/\?view=registration",
        r"/register/?$",
        r"/signup/?$",
        r"/create[_-]?account",
        r"/join/?$",
    )
)

DISPOSABLE_DOMAINS = (
    "tempmail", "10minutemail", "guerrillamail", "mailinator", "throwaway",
    "yopmail", "sharklasers", "guerrillamailblock", "grr.la", "dispostable",
    "tempail", "fakeinbox", "trashmail", "getnada", "maildrop", "temp-mail",
    "emailondeck", "mohmal",
)

USERNAME_FIELDS = ("user_login", "username", "user", "login", "nickname", "name")
EMAIL_FIELDS = ("user_email", "email", "mail", "e-mail", "email_address")
TIMING_FIELDS = ("_form_time", "form_timestamp", "registration_time", "timestamp")

SPAM_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\b(admin|test|root|guest)\d{2,}",
        r"^[a-z]{1,3}\d{5,}$",
        r"\b(buy|sell|cheap|free|click)\b",
        r"\b(viagra|cialis|casino|poker|lottery)\b",
        r"[a-z]{20,}",
    )
)
RANDOM_USERNAME = re.compile(r"^[a-z0-9]{15,}$", re.IGNORECASE)

MAX_REGISTRATION_SCORE = 75


def _extract_field(post_data, field_names) -> Optional[str]:
    for field_name in field_names:
        value = post_data.get(field_name, "")
        if value:
            return value
    return None


def _as_number(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


class RegistrationHoneypotAnalyzer(Analyzer):
    """
    Flags POSTs to CMS registration endpoints.

    Disposable mailboxes, bogus addresses, spammy or random user names,
    instant submissions and empty-field bot frameworks raise the score,
    which is capped well below the exploit tiers.
    """

    name = "RegistrationHoneypot"
    categories = (41, 15)

    def __init__(self, normalizer=None, clock: Callable[[], float] = time.time):
        super().__init__(normalizer)
        self._clock = clock

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post:
            return None

        path = request.path
        uri = request.uri
        if not any(pattern.search(uri) or pattern.search(path) for pattern in REGISTRATION_PATHS):
            return None

        post_data = request.post_data
        findings = [f"Registration attempt: {path}"]
        max_score = 50

        email = _extract_field(post_data, EMAIL_FIELDS)
        if email is not None:
            lowered = email.lower()
            domain = next((domain for domain in DISPOSABLE_DOMAINS if domain in lowered), None)
            if domain is not None:
                findings.append(f"Disposable email domain: {domain}")
                max_score = max(max_score, 70)

            if not is_valid_email(email):
                findings.append("Invalid email format in registration")
                max_score = max(max_score, 60)

        username = _extract_field(post_data, USERNAME_FIELDS)
        combined = f"{username or ''} {email or ''}"
        if any(pattern.search(combined) for pattern in SPAM_PATTERNS):
            findings.append("Spam pattern in registration fields")
            max_score = max(max_score, 65)

        for field_name in TIMING_FIELDS:
            form_time = _as_number(post_data.get(field_name, ""))
            if form_time is None:
                continue
            elapsed = int(self._clock()) - int(form_time)
            if 0 <= elapsed < 5:
                findings.append(f"Registration submitted too quickly ({elapsed} seconds)")
                max_score = max(max_score, 70)
            break

        if username is not None and email is not None:
            local_part = email.split("@", 1)[0]
            if local_part and username.lower() == local_part.lower():
                max_score = max(max_score, 55)

            if RANDOM_USERNAME.match(username):
                findings.append("Random-looking username pattern")
                max_score = max(max_score, 65)

        present = [field_name for field_name in USERNAME_FIELDS + EMAIL_FIELDS if field_name in post_data]
        empty_count = sum(1 for field_name in present if post_data[field_name] == "")
        if present and empty_count >= 2:
            findings.append(f"Multiple empty registration fields ({empty_count} empty)")
            max_score = max(max_score, 60)

        unique = list(dict.fromkeys(findings))
        return self._result(unique, min(MAX_REGISTRATION_SCORE, max_score), "Registration spam detected: ")
