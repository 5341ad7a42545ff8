"""
Honeypot Request Detection System

This package classifies every request that reaches a decoy web server. A
fixed set of independent analyzers inspects an immutable request view and
each one emits at most one scored, categorized finding. Features include:

- Iterative decode normalization (URL, plus-as-space, HTML entities)
- Precompiled, complexity-checked pattern tables
- Pluggable attempt counters (in-memory or Redis) for brute force tracking
- Fault isolation: a failing analyzer never hides the others' findings

Main Components:
- DetectionPipeline: Ordered analyzer registry and runner
- RequestView: Read-only request model handed to analyzers
- DetectionResult: Immutable categories, comment, score and analyzer name
- DecodeNormalizer: Encoding bypass prevention
- BotDetector: Visitor classification by user agent

Usage:
    from honeypot.detection import DetectionPipeline, RequestView

    pipeline = DetectionPipeline.create_default()
    results = pipeline.analyze(RequestView.build(method="GET", uri="/wp-config.php.bak"))

    # Reverse-proxy interface
    from honeypot.detection import analyze_forwarded_request
    results = await analyze_forwarded_request(metadata, body_bytes)
"""

from .pipeline import DEFAULT_ANALYZER_COUNT, DetectionPipeline, analyze_forwarded_request
from .request_view import RequestView
from .result import DetectionResult
from .categories import Category, CategoryRegistry
from .bot_detector import BotClassification, BotDetector
from .encoders import DecodeNormalizer, get_normalizer, normalize
from .counter_store import (
    AttemptCounter,
    InMemoryAttemptCounter,
    RedisAttemptCounter,
    build_counter_store
)
from .exceptions import (
    DetectionError,
    RegexComplexityError,
    PatternCompilationError,
    InvalidResultError,
    CounterStoreError
)

__version__ = "1.0.0"

__all__ = [
    # Pipeline
    'DetectionPipeline',
    'DEFAULT_ANALYZER_COUNT',
    'analyze_forwarded_request',

    # Request and result models
    'RequestView',
    'DetectionResult',
    'Category',
    'CategoryRegistry',

    # Classification
    'BotClassification',
    'BotDetector',

    # Content processing
    'DecodeNormalizer',
    'get_normalizer',
    'normalize',

    # Attempt counters
    'AttemptCounter',
    'InMemoryAttemptCounter',
    'RedisAttemptCounter',
    'build_counter_store',

    # Exceptions
    'DetectionError',
    'RegexComplexityError',
    'PatternCompilationError',
    'InvalidResultError',
    'CounterStoreError'
]
