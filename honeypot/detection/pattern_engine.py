"""
Rule compilation and bounded matching for detection analysis.

Every rule in the pattern library is compiled through this module once at
import time. Compilation validates rule complexity so that no rule carries
the constructs that make a backtracking engine blow up, and matching caps
the length of every target so per-request work stays bounded.
"""

import logging
import re
from typing import Iterable, Optional, Tuple

from ..config import get_settings
from .exceptions import PatternCompilationError, RegexComplexityError

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 500
MAX_PATTERN_GROUPS = 20

# Constructs rejected before compilation
DANGEROUS_CONSTRUCTS = (
    re.compile(r'\(\?<?[=!][^)]*\)[+*]'),    # Lookaround with quantifier
    re.compile(r'\([^()]*[+*]\)[+*{]'),      # Quantified group holding a quantifier
    re.compile(r'\\[1-9]'),                  # Backreference
    re.compile(r'(?<!\\)\.[*+]'),             # Unbounded wildcard gap
)

_UNESCAPED_GROUP = re.compile(r'(?<!\\)\(')


def validate_regex_complexity(pattern: str) -> bool:
    """
    Validate regex complexity to prevent ReDoS attacks.

    Args:
        pattern: Regex pattern source to validate

    Returns:
        True if pattern complexity is acceptable
    """
    for dangerous in DANGEROUS_CONSTRUCTS:
        if dangerous.search(pattern):
            return False

    # Pattern length as a simple complexity heuristic
    if len(pattern) > MAX_PATTERN_LENGTH:
        return False

    if len(_UNESCAPED_GROUP.findall(pattern)) > MAX_PATTERN_GROUPS:
        return False

    return True


def compile_rule(pattern: str, flags: int = 0) -> re.Pattern:
    """
    Validate and compile a single rule.

    Args:
        pattern: Regex pattern source, flags may be given inline
        flags: Extra re flags

    Returns:
        Compiled pattern

    Raises:
        RegexComplexityError: If the rule is too complex
        PatternCompilationError: If the rule does not compile
    """
    if not validate_regex_complexity(pattern):
        raise RegexComplexityError(pattern, MAX_PATTERN_LENGTH)

    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise PatternCompilationError(pattern, str(e)) from e


def compile_rules(patterns: Iterable[str], flags: int = 0) -> Tuple[re.Pattern, ...]:
    """Compile an ordered rule set, failing on the first bad rule."""
    return tuple(compile_rule(pattern, flags) for pattern in patterns)


def bounded(text: str, limit: int = None) -> str:
    """Cap a target to the configured maximum length."""
    if not text:
        return ''
    if limit is None:
        limit = get_settings().MAX_TARGET_LENGTH
    return text[:limit]


def search(rule: re.Pattern, text: str, limit: int = None) -> Optional[re.Match]:
    """
    Search a length-capped target with a compiled rule.

    Args:
        rule: Compiled rule
        text: Target value
        limit: Optional length cap, defaults to MAX_TARGET_LENGTH

    Returns:
        Match object if found, None otherwise
    """
    if not text:
        return None
    return rule.search(bounded(text, limit))


def first_match(rules: Iterable[re.Pattern], text: str, limit: int = None) -> Optional[re.Pattern]:
    """Return the first rule that matches the target, or None."""
    if not text:
        return None
    target = bounded(text, limit)
    for rule in rules:
        if rule.search(target):
            return rule
    return None


def matches_any(rules: Iterable[re.Pattern], text: str, limit: int = None) -> bool:
    """True if any rule matches the target."""
    return first_match(rules, text, limit) is not None


def count_matches(rules: Iterable[re.Pattern], text: str, limit: int = None) -> int:
    """Number of distinct rules matching the target."""
    if not text:
        return 0
    target = bounded(text, limit)
    return sum(1 for rule in rules if rule.search(target))


_INLINE_FLAGS = re.compile(r'^\(\?[aiLmsux]+\)')
_ESCAPED_PUNCTUATION = re.compile(r'\\([^A-Za-z0-9])')
_COUNTED_REPEAT = re.compile(r'(?<!\\)\{\d+(,\d*)?\}')


def rule_literal(rule: re.Pattern) -> str:
    """
    Readable form of a rule source: inline flags and counted repeats dropped,
    punctuation unescaped.

    Used to classify rules by what they look for (``/etc/passwd``,
    ``127.0.0.``) rather than by how the regex escapes it.
    """
    source = _INLINE_FLAGS.sub('', rule.pattern)
    source = _COUNTED_REPEAT.sub('', source)
    return _ESCAPED_PUNCTUATION.sub(r'\1', source)
