"""Open redirect detection on redirect-style parameters."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

REDIRECT_PARAMS = frozenset(
    (
        "redirect", "redirect_to", "return", "returnto", "next", "url", "goto",
        "destination", "continue", "rurl", "return_url", "redirect_url", "forward",
        "forward_to", "target", "to", "out", "view", "ref", "redir",
    )
)

HTTP_URL = re.compile(r"https?://", re.IGNORECASE)
JAVASCRIPT_PROTOCOL = re.compile(r"^\s*javascript\s*:", re.IGNORECASE)
DATA_PROTOCOL = re.compile(r"^\s*data\s*:", re.IGNORECASE)
ENCODED_HTTP = re.compile(r"%68%74%74%70", re.IGNORECASE)
DOUBLE_ENCODED = re.compile(r"%25[0-9a-fA-F]{2}%25[0-9a-fA-F]{2}")
PROTOCOL_RELATIVE = re.compile(r"^\s*//[^/]")
WP_LOGIN = re.compile(r"/wp-login\.php", re.IGNORECASE)


def target_host(value: str) -> Optional[str]:
    try:
        return urlsplit(value.strip()).hostname
    except ValueError:
        return None


class OpenRedirectAnalyzer(Analyzer):
    name = "OpenRedirect"
    categories = (50, 7, 21)

    def is_external_url(self, value: str, request: RequestView) -> bool:
        """True when ``value`` is an absolute http(s) URL for a host other than the request's own."""
        if not HTTP_URL.search(value):
            return False

        host = target_host(value)
        if not host:
            return False

        host_header = request.header("Host")
        if not host_header:
            return True

        return host_header.split(":", 1)[0].lower() != host.lower()

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0
        params = {**request.query_params, **request.post_data}

        for name, value in params.items():
            if not value or name.lower() not in REDIRECT_PARAMS:
                continue

            decoded = self.normalizer.entity_then_url(value)

            if self.is_external_url(decoded, request):
                findings.append(f'External URL in redirect param "{name}": {decoded[:100]}')
                max_score = max(max_score, 70)

            if JAVASCRIPT_PROTOCOL.search(decoded):
                findings.append(f'JavaScript protocol in redirect param "{name}"')
                max_score = max(max_score, 80)

            if DATA_PROTOCOL.search(decoded):
                findings.append(f'Data URI in redirect param "{name}"')
                max_score = max(max_score, 75)

            if ENCODED_HTTP.search(value):
                findings.append(f'URL-encoded HTTP protocol in redirect param "{name}"')
                max_score = max(max_score, 70)

            if DOUBLE_ENCODED.search(value):
                findings.append(f'Double-encoded redirect in param "{name}"')
                max_score = max(max_score, 75)

            if PROTOCOL_RELATIVE.search(decoded):
                findings.append(f'Protocol-relative URL in redirect param "{name}"')
                max_score = max(max_score, 65)

        if WP_LOGIN.search(request.path):
            redirect_to = request.query_param("redirect_to") or request.post_field("redirect_to")
            if redirect_to:
                decoded = self.normalizer.entity_then_url(redirect_to)
                if self.is_external_url(decoded, request):
                    findings.append(f"WordPress login redirect to external URL: {decoded[:100]}")
                    max_score = max(max_score, 75)

        destination = request.query_param("destination") or request.post_field("destination")
        if destination:
            decoded = self.normalizer.entity_then_url(destination)
            if (
                self.is_external_url(decoded, request)
                or JAVASCRIPT_PROTOCOL.search(decoded)
                or DATA_PROTOCOL.search(decoded)
            ):
                findings.append(f"Drupal destination redirect abuse: {decoded[:100]}")
                max_score = max(max_score, 70)

        return self._result(findings, max_score, "Open redirect attempt detected: ")
