"""Rate limit bypass detection through spoofed client IP headers."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

IP_HEADERS = (
    "X-Forwarded-For",
    "X-Real-Ip",
    "X-Originating-Ip",
    "True-Client-Ip",
    "Cf-Connecting-Ip",
    "X-Client-Ip",
    "X-Cluster-Client-Ip",
    "Forwarded-For",
    "X-Forwarded",
    "Forwarded",
)
SPOOF_HEADERS = ("X-Originating-Ip", "True-Client-Ip", "X-Client-Ip", "X-Cluster-Client-Ip")

MAX_PROXY_CHAIN_LENGTH = 3
MAX_BYPASS_SCORE = 65

FAKE_IP = re.compile(
    r"^127\."
    r"|^0\.0\.0\.0$"
    r"|^0\."
    r"|^localhost$"
    r"|^::1$"
    r"|^::$"
    r"|^192\.168\."
    r"|^10\."
    r"|^172\.(1[6-9]|2\d|3[01])\."
    r"|^169\.254\."
    r"|^fc[0-9a-f]{2}:"
    r"|^fe80:"
    r"|^255\.255\.255\.255$"
    r"|^0{1,3}\.0{1,3}\.0{1,3}\.0{1,3}$",
    re.IGNORECASE,
)
PRIVATE_IP = re.compile(r"^(10\.|192\.168\.|172\.(1[6-9]|2\d|3[01])\.|127\.|fc|fd|fe80:)", re.IGNORECASE)
VIA_SUSPICIOUS_CHARS = re.compile(r"[<>\"';]")


def is_fake_ip(ip: str) -> bool:
    """Loopback, unspecified, private, link-local or broadcast addresses."""
    return FAKE_IP.search(ip.strip()) is not None


def is_private_ip(ip: str) -> bool:
    return PRIVATE_IP.search(ip.strip()) is not None


def is_same_subnet(first: str, second: str) -> bool:
    """Rough /16 comparison on dotted quads."""
    first_parts = first.strip().split(".")
    second_parts = second.strip().split(".")
    if len(first_parts) < 2 or len(second_parts) < 2:
        return False
    return first_parts[:2] == second_parts[:2]


class RateLimitBypassAnalyzer(Analyzer):
    name = "RateLimitBypass"
    categories = (15, 19)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        forwarded_for = request.header("X-Forwarded-For")
        if forwarded_for:
            ips = [ip.strip() for ip in forwarded_for.split(",")]

            fake = next((ip for ip in ips if is_fake_ip(ip)), None)
            if fake is not None:
                findings.append(f"X-Forwarded-For contains suspicious IP: {fake[:45]}")
                max_score = max(max_score, 50)

            if len(ips) > MAX_PROXY_CHAIN_LENGTH:
                findings.append(f"Excessive X-Forwarded-For chain ({len(ips)} IPs)")
                max_score = max(max_score, 45)

            private_count = sum(1 for ip in ips if is_private_ip(ip))
            if private_count >= 2:
                findings.append(f"Multiple private IPs in X-Forwarded-For chain ({private_count} private IPs)")
                max_score = max(max_score, 50)

        real_ip = request.header("X-Real-Ip")
        if real_ip:
            if is_fake_ip(real_ip):
                findings.append(f"X-Real-IP contains suspicious IP: {real_ip[:45]}")
                max_score = max(max_score, 50)

            if real_ip.strip() != request.ip and not is_same_subnet(real_ip, request.ip):
                findings.append(f"X-Real-IP ({real_ip[:45]}) differs significantly from connection IP")
                max_score = max(max_score, 45)

        for header_name in SPOOF_HEADERS:
            value = request.header(header_name)
            if value:
                findings.append(f"Uncommon IP header present: {header_name} = {value[:45]}")
                max_score = max(max_score, 40)

        cloudflare_ip = request.header("Cf-Connecting-Ip")
        if cloudflare_ip and not request.header("Cf-Ray"):
            findings.append(f"CF-Connecting-IP without CF-Ray header (likely spoofed): {cloudflare_ip[:45]}")
            max_score = max(max_score, 55)

        via = request.header("Via")
        if via:
            proxy_count = via.count(",") + 1
            if proxy_count > 3:
                findings.append(f"Unusual Via proxy chain ({proxy_count} proxies)")
                max_score = max(max_score, 40)
            if VIA_SUSPICIOUS_CHARS.search(via):
                findings.append("Suspicious characters in Via header")
                max_score = max(max_score, 45)

        ip_header_count = sum(1 for header_name in IP_HEADERS if request.has_header(header_name))
        if ip_header_count >= 4:
            findings.append(f"Excessive IP-related headers present ({ip_header_count} headers)")
            max_score = max(max_score, 60)

        return self._result(findings, min(max_score, MAX_BYPASS_SCORE), "Rate limit bypass attempt detected: ")
