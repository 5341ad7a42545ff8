"""Known CVE exploit and webshell / command execution probe detection."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .. import pattern_library
from ..pattern_engine import bounded, rule_literal
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets

logger = logging.getLogger(__name__)

# (marker in rule literal, description, score); first marker found wins
CVE_RULES = (
    ("jndi", "Log4Shell JNDI lookup", 95),
    ("lower|upper", "Log4Shell obfuscated lookup", 95),
    ("env|sys", "Log4Shell environment lookup", 95),
    ("classloader", "Spring4Shell class loader manipulation", 90),
    ("think", "ThinkPHP remote code execution", 90),
    ("invokefunction", "ThinkPHP remote code execution", 90),
    ("eval-stdin", "PHPUnit eval-stdin remote code execution", 90),
    (":;", "Shellshock function definition", 90),
    ("runtime", "OGNL Runtime.exec injection", 80),
    ("%{", "OGNL expression injection", 80),
    ("wp/v2/users", "WordPress REST user listing", 80),
    ("routestring", "vBulletin widget remote code execution", 80),
    ("createpage", "Confluence OGNL injection", 80),
    ("-inf/", "Java web application internals access", 80),
    ("tmui", "F5 BIG-IP TMUI exploit", 80),
    ("hsqldb", "F5 BIG-IP TMUI exploit", 80),
    ("autodiscover", "Exchange ProxyShell probe", 80),
    ("mapi/nspi", "Exchange ProxyShell probe", 80),
    ("/ecp/", "Exchange ProxyLogon probe", 80),
)
DEFAULT_CVE = ("Known vulnerability exploit pattern", 80)

SHELL_RULES = (
    ("[?&]", "Command execution parameter", 70),
    ("c99shell", "Webshell signature", 85),
    ("r57shell", "Webshell signature", 85),
    ("b374k", "Webshell signature", 85),
    ("wso", "Webshell signature", 85),
    ("alfa", "Webshell signature", 85),
    ("weevely", "Webshell signature", 85),
    ("phpspy", "Webshell signature", 85),
    ("ani-", "Webshell signature", 85),
    ("/bin/", "Reverse shell command", 85),
    ("ncat", "Reverse shell command", 85),
    ("nc\\s+", "Reverse shell command", 85),
    ("python", "Reverse shell command", 85),
    ("perl", "Reverse shell command", 85),
    ("ruby", "Reverse shell command", 85),
    ("base64_decode", "Encoded payload execution", 80),
    ("file_put_contents", "File write function call", 80),
    ("fwrite", "File write function call", 80),
    ("move_uploaded_file", "File write function call", 80),
    ("`", "Backtick command execution", 80),
)
DEFAULT_SHELL = ("Dangerous function call", 80)


def classify_rule(literal: str, table, default):
    lowered = literal.lower()
    for marker, description, score in table:
        if marker in lowered:
            return description, score
    return default


class VulnerabilityProbeAnalyzer(Analyzer):
    """
    Matches the CVE and shell rule tables against every request surface.

    Each rule reports at most once, naming the first surface it matched.
    Values are tried raw and decoded.
    """

    name = "VulnerabilityProbe"
    categories = (21, 45)

    def __init__(self, normalizer=None):
        super().__init__(normalizer)
        self._rules = []
        for rule in pattern_library.cve_patterns():
            self._rules.append((rule, *classify_rule(rule_literal(rule), CVE_RULES, DEFAULT_CVE)))
        for rule in pattern_library.shell_patterns():
            self._rules.append((rule, *classify_rule(rule_literal(rule), SHELL_RULES, DEFAULT_SHELL)))

    def _targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))
        if request.body and not request.post_data:
            targets["request body"] = request.body
        for header_name, value in request.headers.items():
            if value:
                targets[f"header '{header_name}'"] = value
        return targets

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        expanded = []
        for label, value in self._targets(request).items():
            for variant in self.normalizer.variants(bounded(value)):
                expanded.append((label, variant))

        findings = []
        max_score = 0

        for rule, description, score in self._rules:
            for label, variant in expanded:
                if rule.search(variant):
                    finding = f"{description} in {label}"
                    if finding not in findings:
                        findings.append(finding)
                    max_score = max(max_score, score)
                    break

        if findings:
            logger.debug(f"Vulnerability probe rules matched: {len(findings)}")

        return self._result(findings, max_score, "Vulnerability probe detected: ")
