"""Attack category taxonomy used by the reporting API."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

DEFAULT_SEVERITY = 5


@dataclass(frozen=True, slots=True)
class Category:
    id: int
    name: str
    description: str
    severity: int


def _table(*rows: tuple[int, str, str, int]) -> Mapping[int, Category]:
    return MappingProxyType({row[0]: Category(*row) for row in rows})


# 1-30 general security categories, 31-58 CMS specific
CATEGORIES: Mapping[int, Category] = _table(
    (1, "DNS Compromise", "DNS server compromised or manipulated", 3),
    (2, "DNS Poisoning", "DNS cache poisoning or DNS spoofing", 4),
    (3, "Fraud Orders", "Fraudulent order attempts", 5),
    (4, "DDoS Attack", "Distributed denial of service attack", 9),
    (5, "FTP Brute-Force", "FTP login brute force attack", 7),
    (6, "Ping of Death", "Ping of death or ICMP flood", 6),
    (7, "Phishing", "Phishing attempt or fraudulent redirect", 8),
    (8, "Fraud VoIP", "VoIP fraud or phone spam", 4),
    (9, "Open Proxy", "Abused open proxy server", 5),
    (10, "Web Spam", "Web spam or unsolicited content", 3),
    (11, "Email Spam", "Email spam delivery", 4),
    (12, "Blog Spam", "Blog comment spam", 3),
    (13, "VPN IP", "VPN or anonymization service", 2),
    (14, "Port Scan", "Port scanning or network reconnaissance", 5),
    (15, "Hacking", "General hacking attempt", 8),
    (16, "SQL Injection", "SQL injection attack on a database", 9),
    (17, "Spoofing", "IP or identity spoofing", 6),
    (18, "Brute-Force", "Brute force login attack", 8),
    (19, "Bad Web Bot", "Malicious bot or crawler", 4),
    (20, "Exploited Host", "Compromised host used as an attack vector", 7),
    (21, "Web App Attack", "Attack on a web application", 7),
    (22, "SSH Abuse", "SSH abuse or brute force", 7),
    (23, "IoT Targeted", "Targeted attack on an IoT device", 5),
    (24, "Cryptomining", "Unauthorized cryptomining", 6),
    (25, "Data Harvesting", "Automated data harvesting", 5),
    (26, "Malware Hosting", "Server distributing malware", 8),
    (27, "Command & Control", "Botnet command and control traffic", 9),
    (28, "Backdoor Access", "Attempt to install a backdoor", 9),
    (29, "Ransomware", "Ransomware attack or distribution", 10),
    (30, "Malware Upload", "Upload of malicious files", 9),
    (31, "WP Login Brute Force", "WordPress login brute force attack", 8),
    (32, "WP Admin Probe", "WordPress admin area reconnaissance", 6),
    (33, "WP XML-RPC Abuse", "WordPress XML-RPC interface abuse", 7),
    (34, "WP REST API Abuse", "WordPress REST API abuse", 6),
    (35, "WP Vulnerability Scan", "WordPress vulnerability scan", 7),
    (36, "WP Theme Exploit", "WordPress theme vulnerability exploited", 8),
    (37, "WP Core File Modification", "Attempt to modify WordPress core files", 9),
    (38, "WP Config Exposure", "WordPress configuration file access", 9),
    (39, "WP Database Exposure", "WordPress database export access", 8),
    (40, "WP Form Spam", "WordPress form spam", 3),
    (41, "WP Registration Spam", "WordPress registration spam", 4),
    (42, "WP Trackback Spam", "WordPress trackback or pingback spam", 4),
    (43, "WP File Upload Attack", "WordPress file upload attack", 9),
    (44, "Cross-Site Scripting", "Cross-site scripting attack", 8),
    (45, "Code Injection", "Code injection attack", 9),
    (46, "WP Core Tampering", "WordPress core file tampering", 9),
    (47, "Directory Traversal", "Directory traversal attack", 8),
    (48, "File Inclusion", "Local or remote file inclusion attack", 9),
    (49, "Scraping", "Automated web scraping", 3),
    (50, "Open Redirect", "Open redirect exploited", 6),
    (51, "Resource Exhaustion", "Server resource exhaustion", 7),
    (52, "Media Library Abuse", "Media library abuse or upload attack", 6),
    (53, "Search Spam", "Search spam or SEO spam injection", 4),
    (54, "WP Cron Abuse", "WordPress cron abuse", 5),
    (55, "User Enumeration", "User enumeration and discovery", 6),
    (56, "Version Fingerprinting", "Software version fingerprinting", 4),
    (57, "WP Plugin Exploit", "WordPress plugin vulnerability exploited", 8),
    (58, "Config File Exposure", "Configuration file access or leak", 9),
)


class CategoryRegistry:
    """Lookup helpers over the category table."""

    @staticmethod
    def get(category_id: int) -> Category | None:
        return CATEGORIES.get(category_id)

    @staticmethod
    def get_name(category_id: int) -> str:
        category = CATEGORIES.get(category_id)
        return category.name if category else f"Unknown ({category_id})"

    @staticmethod
    def get_description(category_id: int) -> str:
        category = CATEGORIES.get(category_id)
        return category.description if category else "Unknown category"

    @staticmethod
    def get_severity(category_id: int) -> int:
        category = CATEGORIES.get(category_id)
        return category.severity if category else DEFAULT_SEVERITY

    @staticmethod
    def exists(category_id: int) -> bool:
        return category_id in CATEGORIES

    @staticmethod
    def severity_class(severity: int) -> str:
        """Bucket a 1-10 severity into critical, high, medium or low."""
        if severity >= 8:
            return "critical"
        if severity >= 5:
            return "high"
        if severity >= 3:
            return "medium"
        return "low"

    @classmethod
    def category_severity_class(cls, category_id: int) -> str:
        return cls.severity_class(cls.get_severity(category_id))

    @staticmethod
    def parse_category_string(category_csv: str) -> list[int]:
        """Parse ``"16,45"`` into ids, skipping blanks and non-numeric parts."""
        ids = []
        for part in (category_csv or "").split(","):
            part = part.strip()
            if part.isdigit():
                ids.append(int(part))
        return ids

    @classmethod
    def describe(cls, categories: Iterable[int]) -> list[str]:
        return [cls.get_name(category_id) for category_id in categories]
