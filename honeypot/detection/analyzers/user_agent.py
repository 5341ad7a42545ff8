"""Scanner, automated client and spoofed browser user-agent detection."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..bot_detector import GENERIC_BOT, BotDetector, tool_name
from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

AUTOMATED_CLIENTS = (
    (re.compile(r"^curl/", re.IGNORECASE), "curl", 50),
    (re.compile(r"^wget/", re.IGNORECASE), "wget", 50),
    (re.compile(r"^python-requests/", re.IGNORECASE), "python-requests", 45),
    (re.compile(r"^python-urllib", re.IGNORECASE), "python-urllib", 50),
    (re.compile(r"^Go-http-client", re.IGNORECASE), "Go-http-client", 45),
    (re.compile(r"^Java/", re.IGNORECASE), "Java HTTP client", 45),
    (re.compile(r"^PHP/", re.IGNORECASE), "PHP HTTP client", 50),
    (re.compile(r"^Ruby", re.IGNORECASE), "Ruby HTTP client", 40),
    (re.compile(r"^axios/", re.IGNORECASE), "axios", 40),
    (re.compile(r"^node-fetch", re.IGNORECASE), "node-fetch", 40),
    (re.compile(r"^okhttp", re.IGNORECASE), "OkHttp", 40),
    (re.compile(r"^libwww-perl", re.IGNORECASE), "libwww-perl", 55),
    (re.compile(r"^lwp-", re.IGNORECASE), "LWP", 50),
    (re.compile(r"^Wget", re.IGNORECASE), "Wget", 50),
    (re.compile(r"^Mechanize", re.IGNORECASE), "Mechanize", 55),
    (re.compile(r"^Scrapy", re.IGNORECASE), "Scrapy", 60),
)

OLD_BROWSERS = (
    (re.compile(r"MSIE\s*[1-7]\.", re.IGNORECASE), "Internet Explorer 7 or older"),
    (re.compile(r"Chrome/[1-3]\d\.", re.IGNORECASE), "Chrome version below 40"),
    (re.compile(r"Firefox/[1-3]\d\.", re.IGNORECASE), "Firefox version below 40"),
)


class UserAgentAnalyzer(Analyzer):
    name = "UserAgent"
    categories = (19, 49)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        user_agent = bounded(request.user_agent)

        if user_agent == "":
            return self._result(["Empty User-Agent header"], 30, "Suspicious User-Agent: ", limit=None)

        findings = []
        max_score = 0

        for rule in pattern_library.suspicious_user_agents():
            if rule.search(user_agent):
                findings.append(f"Known scanning tool detected: {tool_name(rule)}")
                max_score = max(max_score, 80)
                break

        for pattern, client, score in AUTOMATED_CLIENTS:
            if pattern.search(user_agent):
                findings.append(f"Automated HTTP client: {client}")
                max_score = max(max_score, score)
                break

        for pattern, description in OLD_BROWSERS:
            if pattern.search(user_agent):
                findings.append(f"Very old browser: {description}")
                max_score = max(max_score, 35)
                break

        if GENERIC_BOT.search(user_agent) and not BotDetector.is_legitimate_bot(user_agent):
            findings.append("Generic bot/crawler/scanner indicator in User-Agent")
            max_score = max(max_score, 40)

        return self._result(findings, max_score, "Suspicious User-Agent detected: ")
