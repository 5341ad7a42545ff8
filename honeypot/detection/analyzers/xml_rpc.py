"""XML-RPC abuse detection for xmlrpc.php."""

from __future__ import annotations

import re
from typing import Optional

from .. import pattern_library
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

XMLRPC_PATH = re.compile(r"/xmlrpc\.php$", re.IGNORECASE)
EXTERNAL_URL = re.compile(r"https?://[^\s<]+", re.IGNORECASE)
CREDENTIAL_PAIR = re.compile(r"<string>[^<]+</string>\s*<string>[^<]+</string>", re.IGNORECASE)
WRITE_METHOD = re.compile(r"\.(new|edit|delete|upload|set)", re.IGNORECASE)
READ_METHOD = re.compile(r"\.(get|list)", re.IGNORECASE)

MAX_PAYLOAD_SIZE = 10240
AMPLIFICATION_METHODS = ("system.multicall", "pingback.ping", "wp.getusersblogs")


def score_method(method: str) -> int:
    if method.lower() in AMPLIFICATION_METHODS:
        return 85
    if WRITE_METHOD.search(method):
        return 80
    if READ_METHOD.search(method):
        return 65
    return 60


class XmlRpcAnalyzer(Analyzer):
    name = "XmlRpc"
    categories = (33,)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not XMLRPC_PATH.search(request.path):
            return None

        findings = []
        max_score = 0

        if not request.is_post:
            findings.append("XML-RPC endpoint probe (GET)")
            return self._result(findings, 40, "XML-RPC abuse detected: ")

        findings.append("POST request to xmlrpc.php")
        max_score = 60

        body = request.body
        lowered = body.lower()
        body_size = len(body.encode("utf-8"))

        if body_size > MAX_PAYLOAD_SIZE:
            findings.append(f"Large XML-RPC payload ({body_size} bytes)")
            max_score = max(max_score, 75)

        for method in pattern_library.xmlrpc_methods():
            if method.lower() in lowered:
                max_score = max(max_score, score_method(method))
                findings.append(f"Dangerous XML-RPC method: {method}")

        if "system.multicall" in lowered:
            call_count = lowered.count("<methodcall>")
            if call_count > 1:
                findings.append(f"system.multicall with {call_count} method calls (amplification)")
                max_score = max(max_score, 85)

        if "pingback.ping" in lowered and EXTERNAL_URL.search(body):
            findings.append("pingback.ping with external URL (DDoS amplification)")
            max_score = max(max_score, 85)

        if "wp.getusersblogs" in lowered and CREDENTIAL_PAIR.search(body):
            findings.append("wp.getUsersBlogs credential brute force attempt")
            max_score = max(max_score, 90)

        if "wp.getauthors" in lowered:
            findings.append("wp.getAuthors user enumeration attempt")
            max_score = max(max_score, 70)

        return self._result(findings, max_score, "XML-RPC abuse detected: ")
