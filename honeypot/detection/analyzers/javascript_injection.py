"""Client-side JavaScript injection detection."""

from __future__ import annotations

import re
from typing import Dict, Optional

from ..pattern_engine import bounded
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer, param_targets


def _described(flags: int, *entries):
    return tuple((re.compile(pattern, flags), description) for pattern, description in entries)


DOM_XSS = _described(
    re.IGNORECASE,
    (r"document\s*\.\s*cookie", "document.cookie access"),
    (r"document\s*\.\s*write\s*\(", "document.write call"),
    (r"document\s*\.\s*writeln\s*\(", "document.write call"),
    (r"document\s*\.\s*domain", "document.domain access"),
    (r"document\s*\.\s*location", "document.location access"),
    (r"document\s*\.\s*URL", "DOM manipulation"),
    (r"document\s*\.\s*referrer", "DOM manipulation"),
    (r"document\s*\.\s*documentElement", "DOM manipulation"),
    (r"document\s*\.\s*createElement\s*\(", "DOM element creation"),
    (r"window\s*\.\s*location", "window.location manipulation"),
    (r"window\s*\.\s*open\s*\(", "window.open call"),
    (r"window\s*\.\s*eval\s*\(", "window.eval call"),
    (r"window\s*\.\s*execScript", "DOM manipulation"),
    (r"window\s*\.\s*name", "DOM manipulation"),
    (r"location\s*\.\s*href\s*=", "location.href redirect"),
    (r"location\s*\.\s*hash", "DOM manipulation"),
    (r"location\s*\.\s*search", "DOM manipulation"),
    (r"location\s*\.\s*replace\s*\(", "location.replace redirect"),
    (r"location\s*\.\s*assign\s*\(", "DOM manipulation"),
    (r"\.innerHTML\s*=", "innerHTML injection"),
    (r"\.outerHTML\s*=", "outerHTML injection"),
    (r"\.insertAdjacentHTML\s*\(", "insertAdjacentHTML injection"),
)

EVENT_HANDLER = re.compile(
    r"\bon(load|error|mouseover|mouseout|click|dblclick|focus|blur|submit|change|keyup|keydown|keypress"
    r"|mousedown|mouseup|mousemove|contextmenu|resize|scroll|unload|beforeunload|dragstart|dragend"
    r"|animationend|animationstart|transitionend|pointerdown|touchstart)\s*=",
    re.IGNORECASE,
)

JS_PROTOCOL = re.compile(
    r"javascript\s*:\s*(alert|confirm|prompt|eval|void|document|window|fetch|import|\()",
    re.IGNORECASE,
)

TEMPLATE_INJECTION = _described(
    re.IGNORECASE | re.DOTALL,
    (r"\{\{(?!\{).{0,256}?constructor.{0,256}?constructor", "constructor chain exploitation"),
    (r"\{\{(?!\{).{0,256}?constructor\s*\(\s*['\"][^'\"]{0,256}['\"][^)]{0,64}\)\s*\(\s*\)", "constructor chain exploitation"),
    (r"\{\{(?!\{).{0,256}?\.constructor\s*\(", "constructor chain exploitation"),
    (r"ng-(app|init|click|bind|include)\s*=", "Angular directive injection"),
    (r"v-(on|bind)\s*:", "Vue.js directive injection"),
    (r"v-(html|model)\s*=", "Vue.js directive injection"),
    (r"@(click|load)\s*=", "Vue.js directive injection"),
    (r"dangerouslySetInnerHTML", "React dangerouslySetInnerHTML"),
    (r"\$\{(?!\$\{).{0,256}?constructor", "constructor chain exploitation"),
)

NODEJS = _described(
    re.IGNORECASE,
    (r"require\s*\(\s*[\"']child_process[\"']\s*\)", "child_process import"),
    (r"require\s*\(\s*[\"'](fs|net|http|os)[\"']\s*\)", "module import attempt"),
    (r"process\s*\.\s*env", "process.env access"),
    (r"process\s*\.\s*exit", "process.exit call"),
    (r"process\s*\.\s*(mainModule|binding)", "Node.js code execution"),
    (r"Buffer\s*\.\s*(from\s*\(|alloc)", "Buffer manipulation"),
    (r"child_process", "child_process import"),
    (r"global\s*\.\s*process", "Node.js code execution"),
)

PROTOTYPE_POLLUTION = re.compile(
    r"__proto__"
    r"|constructor\s*\.\s*prototype"
    r"|constructor\s*\[\s*[\"']prototype[\"']\s*\]"
    r"|Object\s*\.\s*(assign\s*\(|defineProperty|setPrototypeOf)",
    re.IGNORECASE,
)

MIN_TARGET_LENGTH = 4


def _first_description(rules, variants) -> Optional[str]:
    for pattern, description in rules:
        if any(pattern.search(variant) for variant in variants):
            return description
    return None


class JavaScriptInjectionAnalyzer(Analyzer):
    """
    Client-side code injection across the URI, parameters, body and Referer.

    Covers DOM sinks, inline event handlers, ``javascript:`` URLs, front-end
    template injection, Node.js payloads and prototype pollution. Each value
    is checked raw and after entity and percent decoding.
    """

    name = "JavaScriptInjection"
    categories = (44, 45)

    def _targets(self, request: RequestView) -> Dict[str, str]:
        targets = {"URI": request.uri}
        targets.update(param_targets("query param", request.query_params))
        targets.update(param_targets("POST field", request.post_data))
        if request.body and not request.post_data:
            targets["request body"] = request.body
        if request.has_header("Referer"):
            targets["Referer header"] = request.header("Referer")
        return targets

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        findings = []
        max_score = 0

        for label, value in self._targets(request).items():
            if len(value) < MIN_TARGET_LENGTH:
                continue

            value = bounded(value)
            variants = (value, self.normalizer.entity_then_url(value))

            description = _first_description(DOM_XSS, variants)
            if description is not None:
                findings.append(f"DOM-based XSS payload in {label}: {description}")
                max_score = max(max_score, 75)

            if any(EVENT_HANDLER.search(variant) for variant in variants):
                findings.append(f"Event handler injection in {label}")
                max_score = max(max_score, 70)

            if any(JS_PROTOCOL.search(variant) for variant in variants):
                findings.append(f"JavaScript protocol handler in {label}")
                max_score = max(max_score, 80)

            description = _first_description(TEMPLATE_INJECTION, variants)
            if description is not None:
                findings.append(f"Template injection in {label}: {description}")
                max_score = max(max_score, 75)

            description = _first_description(NODEJS, variants)
            if description is not None:
                findings.append(f"Node.js payload in {label}: {description}")
                max_score = max(max_score, 80)

            if any(PROTOTYPE_POLLUTION.search(variant) for variant in variants):
                findings.append(f"Prototype pollution attempt in {label}")
                max_score = max(max_score, 70)

        if len(findings) >= 3:
            max_score = max(max_score, 85)

        return self._result(findings, max_score, "JavaScript injection detected: ")
