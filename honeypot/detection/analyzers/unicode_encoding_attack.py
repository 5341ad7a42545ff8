"""Unicode and encoding-based filter bypass detection."""

from __future__ import annotations

import re
from typing import Dict, Optional

from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer


def _alternation(*encoded: str) -> re.Pattern:
    return re.compile("|".join(re.escape(item) for item in encoded), re.IGNORECASE)


OVERLONG_UTF8 = _alternation(
    "%c0%af",  # /
    "%c0%ae",  # .
    "%c1%9c",  # backslash
    "%c0%2f",
    "%c0%5c",
    "%c0%a0",  # space
    "%e0%80%af",
    "%e0%80%ae",
    "%f0%80%80%af",
)

FULLWIDTH = _alternation("%ef%bc%8e", "%ef%bc%8f", "%ef%bc%bc", "%ef%bc%9a", "%ef%bc%9c", "%ef%bc%9e")

UNICODE_CONTROL = _alternation(
    "%e2%80%ae",  # RTL override
    "%e2%80%ad",  # LTR override
    "%e2%80%8b",  # zero-width space
    "%e2%80%8c",
    "%e2%80%8d",
    "%e2%80%8f",
    "%e2%80%8e",
    "%e2%80%aa",
    "%e2%80%ab",
    "%e2%81%a0",  # word joiner
    "%ef%bb%bf",  # BOM
)

NULL_BYTE = re.compile(r"%00|%u0000|%25%30%30|\\x00|\\0", re.IGNORECASE)
BOM = re.compile(r"%ef%bb%bf", re.IGNORECASE)

URL_ENCODING = re.compile(r"%[0-9a-fA-F]{2}")
DOUBLE_URL_ENCODING = re.compile(r"%25[0-9a-fA-F]{2}")
PERCENT_U_ENCODING = re.compile(r"%u[0-9a-fA-F]{4}", re.IGNORECASE)
HTML_ENTITY = re.compile(r"&#x?[0-9a-fA-F]+;")
BACKSLASH_U_ENCODING = re.compile(r"\\u[0-9a-fA-F]{4}")
ENCODING_SCHEMES = (URL_ENCODING, DOUBLE_URL_ENCODING, PERCENT_U_ENCODING, HTML_ENTITY, BACKSLASH_U_ENCODING)

NON_PRINTABLE_HOST = re.compile(r"[^\x20-\x7E]")
ENCODED_HOST = re.compile(r"%[cC][0-9a-fA-F]%[0-9a-fA-F]{2}")
PUNYCODE_HOST = re.compile(r"xn--", re.IGNORECASE)

# (pattern, finding label, score)
TARGET_CHECKS = (
    (OVERLONG_UTF8, "Overlong UTF-8 encoding", 70),
    (FULLWIDTH, "Fullwidth Unicode character bypass", 65),
    (UNICODE_CONTROL, "Unicode control character injection", 60),
    (NULL_BYTE, "Null byte injection", 70),
)


def has_mixed_encoding(value: str) -> bool:
    """True when at least three distinct encoding schemes appear in one value."""
    return sum(1 for scheme in ENCODING_SCHEMES if scheme.search(value)) >= 3


class UnicodeEncodingAttackAnalyzer(Analyzer):
    name = "UnicodeEncodingAttack"
    categories = (15, 45)

    def _targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri, "path": request.path}
        for key, value in request.query_params.items():
            targets[f"query param '{key}'"] = value
            targets[f"query key '{key}'"] = key
        for key, value in request.post_data.items():
            targets[f"POST field '{key}'"] = value
        if request.body:
            targets["request body"] = request.body
        return targets

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        for label, value in self._targets(request).items():
            if len(value) < 3:
                continue
            value = bounded(value)

            for pattern, description, score in TARGET_CHECKS:
                if pattern.search(value):
                    findings.append(f"{description} in {label}")
                    max_score = max(max_score, score)

            if has_mixed_encoding(value):
                findings.append(f"Mixed encoding bypass attempt in {label}")
                max_score = max(max_score, 55)

        if BOM.search(request.uri):
            findings.append("Byte Order Mark (BOM) injection in URI")
            max_score = max(max_score, 60)

        host = request.header("Host")
        if host and (NON_PRINTABLE_HOST.search(host) or ENCODED_HOST.search(host) or PUNYCODE_HOST.search(host)):
            findings.append(f"IRI/Unicode in hostname: {host[:80]}")
            max_score = max(max_score, 60)

        if len(findings) >= 3:
            max_score = max(max_score, 75)

        return self._result(findings, max_score, "Unicode/encoding attack detected: ")
