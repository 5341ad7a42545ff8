"""Score-based spam detection on POST form data."""

from __future__ import annotations

import re
import time
from typing import Callable, Optional

from .. import pattern_library
from ..pattern_engine import bounded, count_matches
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, is_valid_email

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
HTML_MARKUP = re.compile(r"<\s*(a\s+href|img\s|script|iframe|div|span|style)\s*", re.IGNORECASE)
BBCODE_MARKUP = re.compile(r"\[url=|\[img\]|\[b\]|\[i\]|\[color=", re.IGNORECASE)

MAX_URLS_ALLOWED = 2
MAX_FIELD_LENGTH = 5000
MAX_SPAM_SCORE = 80
REPORT_THRESHOLD = 30

HONEYPOT_FIELDS = ("honeypot", "hp_field", "url_verify", "website_url", "fax_number", "middle_name_2")
RICH_TEXT_FIELDS = ("content", "body", "message", "description")
EMAIL_FIELDS = ("email", "mail", "e-mail", "email_address", "contact_email")
NAME_FIELDS = ("name", "first_name", "last_name", "author")


def non_ascii_ratio(text: str) -> float:
    if not text:
        return 0.0
    ascii_count = sum(1 for char in text if ord(char) < 128)
    return 1.0 - ascii_count / len(text)


class FormSpamAnalyzer(Analyzer):
    """
    Additive spam score over POST form fields.

    Filled trap fields, instant submissions, markup in plain fields, spam
    keywords, link stuffing, malformed emails and non-Latin names each add
    to the score. The total is capped and weak signals are not reported.
    """

    name = "FormSpam"
    categories = (40, 12, 10)

    def __init__(self, normalizer=None, clock: Callable[[], float] = time.time):
        super().__init__(normalizer)
        self._clock = clock

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post or not request.post_data:
            return None

        post_data = request.post_data
        spam_score = 0
        findings = []

        for field_name in HONEYPOT_FIELDS:
            if post_data.get(field_name, "") != "":
                findings.append(f'Honeypot field "{field_name}" was filled')
                spam_score += 40

        form_time = post_data.get("_form_time", "")
        if form_time.isdigit():
            elapsed = int(self._clock()) - int(form_time)
            if 0 <= elapsed < 3:
                findings.append(f"Form submitted too quickly ({elapsed} seconds)")
                spam_score += 30

        combined = ""
        for key, value in post_data.items():
            if not value:
                continue

            combined += " " + value

            if len(value) > MAX_FIELD_LENGTH:
                findings.append(f'Excessively long form field "{key}" ({len(value)} chars)')
                spam_score += 15

            if key not in RICH_TEXT_FIELDS:
                if HTML_MARKUP.search(value):
                    findings.append(f'HTML injection in field "{key}"')
                    spam_score += 20
                if BBCODE_MARKUP.search(value):
                    findings.append(f'BBCode in field "{key}"')
                    spam_score += 15

        if not combined:
            return None

        keyword_matches = count_matches(pattern_library.spam_keywords(), combined)
        if keyword_matches >= 3:
            findings.append(f"Multiple spam keywords detected ({keyword_matches} matches)")
            spam_score += 30
        elif keyword_matches >= 1:
            findings.append(f"Spam keywords detected ({keyword_matches} matches)")
            spam_score += 15

        url_count = len(URL_PATTERN.findall(bounded(combined)))
        if url_count > MAX_URLS_ALLOWED:
            findings.append(f"Excessive URLs in form data ({url_count} URLs)")
            spam_score += min(30, (url_count - MAX_URLS_ALLOWED) * 10)

        for field_name in EMAIL_FIELDS:
            value = post_data.get(field_name, "")
            if value and not is_valid_email(value):
                findings.append(f'Invalid email format in field "{field_name}"')
                spam_score += 15

        for field_name in NAME_FIELDS:
            value = post_data.get(field_name, "")
            if len(value) > 3:
                ratio = non_ascii_ratio(value)
                if ratio > 0.7:
                    findings.append(f'High non-ASCII ratio in field "{field_name}" ({ratio * 100:.0f}%)')
                    spam_score += 10

        spam_score = min(MAX_SPAM_SCORE, spam_score)
        if spam_score < REPORT_THRESHOLD:
            return None

        return self._result(findings, spam_score, f"Form spam detected (score: {spam_score}): ")
