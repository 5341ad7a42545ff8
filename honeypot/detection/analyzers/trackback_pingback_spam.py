"""Trackback and pingback spam detection."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..pattern_engine import bounded, count_matches
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
PINGBACK_TARGET = re.compile(r"<string>\s*(https?://[^<]+)\s*</string>", re.IGNORECASE)
TRACKBACK_SCRIPT = re.compile(r"/wp-trackback\.php", re.IGNORECASE)
TRACKBACK_PATH = re.compile(r"/trackback/?$", re.IGNORECASE)
PINGBACK_PATH = re.compile(r"/pingback/?$", re.IGNORECASE)
PINGBACK_ELEMENT = re.compile(r"<pingback>", re.IGNORECASE)
TRACKBACK_ELEMENT = re.compile(r"<trackback>", re.IGNORECASE)

MAX_URLS_ALLOWED = 3
MAX_TRACKBACK_SCORE = 75


class TrackbackPingbackSpamAnalyzer(Analyzer):
    name = "TrackbackPingbackSpam"
    categories = (42, 12)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post:
            return None

        path = request.path.lower()
        body = bounded(request.body)

        is_trackback = bool(TRACKBACK_SCRIPT.search(path))
        is_pingback = "xmlrpc.php" in path and "pingback.ping" in body.lower()
        trackback_path = bool(TRACKBACK_PATH.search(path))

        if not (is_trackback or is_pingback or trackback_path or PINGBACK_PATH.search(path)):
            return None

        findings = []
        max_score = 0

        if is_trackback or trackback_path:
            findings.append(f"POST to trackback endpoint: {path}")
            max_score = max(max_score, 55)

        if is_pingback:
            findings.append("pingback.ping request via XML-RPC")
            max_score = max(max_score, 60)

        url_count = len(URL_PATTERN.findall(body))
        if url_count > MAX_URLS_ALLOWED:
            findings.append(f"Excessive URLs in trackback/pingback data ({url_count} URLs)")
            max_score = max(max_score, 65)

        if is_pingback and url_count:
            target = PINGBACK_TARGET.search(body)
            if target:
                findings.append(f"Pingback to external URL (DDoS amplification): {target.group(1)[:100]}")
                max_score = max(max_score, 75)

        if PINGBACK_ELEMENT.search(body):
            findings.append("XML <pingback> element detected")
            max_score = max(max_score, 55)

        if TRACKBACK_ELEMENT.search(body):
            findings.append("XML <trackback> element detected")
            max_score = max(max_score, 55)

        spam_matches = count_matches(pattern_library.spam_keywords(), body)
        if spam_matches >= 2:
            findings.append(f"Spam keywords in trackback/pingback content ({spam_matches} matches)")
            max_score = max(max_score, 70)
        elif spam_matches == 1:
            findings.append("Spam keyword in trackback/pingback content")
            max_score = max(max_score, 55)

        unique = list(dict.fromkeys(findings))
        return self._result(unique, min(MAX_TRACKBACK_SCORE, max_score), "Trackback/pingback spam detected: ")
