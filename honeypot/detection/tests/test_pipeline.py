"""
Tests for the detection pipeline.
"""

import time
from typing import Optional
from unittest.mock import Mock

import pytest

from honeypot.config import Settings
from honeypot.detection.analyzers import (
    SqlInjectionAnalyzer,
    UserAgentAnalyzer,
    XssAnalyzer
)
from honeypot.detection.analyzers.base import Analyzer
from honeypot.detection.categories import CategoryRegistry
from honeypot.detection.counter_store import InMemoryAttemptCounter
from honeypot.detection.pipeline import (
    DEFAULT_ANALYZER_COUNT,
    DetectionPipeline,
    analyze_forwarded_request
)
from honeypot.detection.request_view import RequestView
from honeypot.detection.result import DetectionResult

CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

ATTACKS = [
    dict(uri="/products.php?id=1+UNION+SELECT+username,password+FROM+users"),
    dict(uri="/search?q=<script>alert(document.cookie)</script>"),
    dict(uri="/download.php?file=../../../../etc/passwd%00"),
    dict(uri="/fetch?url=http://169.254.169.254/latest/meta-data/"),
    dict(uri="/wp-config.php.bak", headers={"User-Agent": "sqlmap/1.7.2#stable (https://sqlmap.org)"}),
    dict(uri="/wp-login.php", method="POST", body="log=admin&pwd=admin",
         headers={"Content-Type": "application/x-www-form-urlencoded"}),
    dict(uri="/xmlrpc.php", method="POST", body="<methodCall><methodName>system.multicall</methodName></methodCall>"),
    dict(uri="/.git/config", method="TRACE", headers={"X-Forwarded-For": "127.0.0.1"}),
    dict(uri="/login?next=javascript:alert(1)&PHPSESSID=x", headers={"Cookie": "role=admin"}),
    dict(uri="/" + "a" * 5000 + "?" + "&".join(f"k{i}=(a+)+" for i in range(80))),
]

# Long runs of rule prefixes in the places analyzers look
HOSTILE = [
    dict(uri="/?q=" + "python+-c+" * 400),
    dict(uri="/?q=" + "%24%7B" * 2500),
    dict(uri="/contact", method="POST", headers={"Content-Type": "application/x-www-form-urlencoded"},
         body="&".join(f"f{i}=" + "{" * 16000 for i in range(3))),
    dict(uri="/api", method="POST", headers={"Content-Type": "application/json"}, body="{{" * 8000),
]
REQUEST_TIME_LIMIT = 5.0


def build(uri="/", method="GET", headers=None, **kwargs):
    """Request from a browser on example.com unless told otherwise."""
    merged = {"Host": "example.com", "User-Agent": CHROME}
    merged.update(headers or {})
    return RequestView.build(method=method, uri=uri, headers=merged, ip="203.0.113.10", **kwargs)


class ExplodingAnalyzer(Analyzer):
    name = "Exploding"
    categories = (15,)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        raise RuntimeError("boom")


class FixedAnalyzer(Analyzer):
    """Always reports the configured score."""

    categories = (15,)

    def __init__(self, name: str, score: int):
        super().__init__()
        self.name = name
        self.score = score

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        return DetectionResult.create(self.categories, f"{self.name} fired", self.score, self.name)


class TestDefaultPipeline:
    """Test the pre-loaded analyzer set."""

    def setup_method(self):
        """Set up test fixtures."""
        self.pipeline = DetectionPipeline.create_default(
            counter_store=InMemoryAttemptCounter(),
            settings=Settings(REDIS_URL=None),
        )

    def test_analyzer_set(self):
        """Test analyzer count, order and unique names."""
        names = [analyzer.name for analyzer in self.pipeline.analyzers]

        assert self.pipeline.analyzer_count == DEFAULT_ANALYZER_COUNT == 36
        assert len(set(names)) == len(names)
        assert names[0] == "SqlInjection"
        assert names[-1] == "JavaScriptInjection"

    def test_every_analyzer_has_known_categories(self):
        """Test that each analyzer declares only registered categories."""
        for analyzer in self.pipeline.analyzers:
            assert analyzer.categories
            assert all(CategoryRegistry.exists(category) for category in analyzer.categories)

    def test_clean_request(self):
        """Test that an ordinary page view produces no detections."""
        assert self.pipeline.analyze(build("/")) == []

    @pytest.mark.parametrize("attack", ATTACKS)
    def test_result_bounds(self, attack):
        """Test score range, category validity and comment length on attack traffic."""
        results = self.pipeline.analyze(build(**attack))

        assert results
        for result in results:
            assert 0 <= result.score <= 100
            assert result.categories
            assert all(CategoryRegistry.exists(category) for category in result.categories)
            assert len(result.comment) <= 255

    def test_results_in_registration_order(self):
        """Test that results follow analyzer order."""
        request = build(
            "/wp-config.php?id=1+UNION+SELECT+1",
            headers={"User-Agent": "sqlmap/1.7.2#stable (https://sqlmap.org)"},
        )
        order = [analyzer.name for analyzer in self.pipeline.analyzers]
        names = [result.analyzer_name for result in self.pipeline.analyze(request)]

        assert names == sorted(names, key=order.index)
        assert names[0] == "SqlInjection"
        assert "UserAgent" in names
        assert "ConfigAccess" in names

    @pytest.mark.asyncio
    async def test_concurrent_matches_sequential(self):
        """Test that the threaded fan-out returns the same results in the same order."""
        request = build("/search?q=<script>alert(1)</script>", headers={"User-Agent": "curl/8.4.0"})

        sequential = self.pipeline.analyze(request)
        concurrent = await self.pipeline.analyze_concurrently(request)

        assert concurrent == sequential

    @pytest.mark.parametrize("hostile", HOSTILE)
    def test_hostile_request_time_bounded(self, hostile):
        """Test that prefix floods are analyzed in bounded time."""
        request = build(**hostile)

        started = time.perf_counter()
        self.pipeline.analyze(request)
        elapsed = time.perf_counter() - started

        assert elapsed < REQUEST_TIME_LIMIT

    @pytest.mark.asyncio
    async def test_analyze_forwarded_request(self):
        """Test analysis from reverse proxy metadata."""
        metadata = {
            "method": "GET",
            "path": "/item.php",
            "query": "id=1' OR '1'='1",
            "headers": {"Host": "example.com", "User-Agent": "sqlmap/1.7.2#stable (https://sqlmap.org)"},
            "client_ip": "198.51.100.23",
        }
        results = await analyze_forwarded_request(metadata, pipeline=self.pipeline)
        names = [result.analyzer_name for result in results]

        assert "SqlInjection" in names
        assert "UserAgent" in names


class TestPipelineBehaviour:
    """Test registration and fault isolation."""

    def test_add_analyzer_is_chainable(self):
        """Test fluent registration."""
        pipeline = DetectionPipeline()

        returned = pipeline.add_analyzer(SqlInjectionAnalyzer()).add_analyzer(XssAnalyzer())

        assert returned is pipeline
        assert [analyzer.name for analyzer in pipeline.analyzers] == ["SqlInjection", "XSS"]
        assert repr(pipeline) == "<DetectionPipeline analyzers=2>"

    def test_empty_pipeline(self):
        """Test that a pipeline without analyzers reports nothing."""
        assert DetectionPipeline().analyze(build("/?id=1+UNION+SELECT+1")) == []

    def test_failing_analyzer_is_skipped(self):
        """Test that one failure does not stop the other analyzers."""
        on_error = Mock()
        exploding = ExplodingAnalyzer()
        pipeline = DetectionPipeline(
            [FixedAnalyzer("First", 40), exploding, FixedAnalyzer("Last", 60)],
            on_error=on_error,
        )

        results = pipeline.analyze(build())

        assert [result.analyzer_name for result in results] == ["First", "Last"]
        on_error.assert_called_once()
        failed, error = on_error.call_args[0]
        assert failed is exploding
        assert isinstance(error, RuntimeError)

    def test_failure_is_logged(self, caplog):
        """Test that failures are logged with the analyzer name."""
        pipeline = DetectionPipeline([ExplodingAnalyzer()])

        with caplog.at_level("ERROR", logger="honeypot.detection.pipeline"):
            assert pipeline.analyze(build()) == []

        assert "Analyzer Exploding failed" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrent_failure_isolation(self):
        """Test fault isolation in the threaded fan-out."""
        pipeline = DetectionPipeline([ExplodingAnalyzer(), FixedAnalyzer("Survivor", 10)])

        results = await pipeline.analyze_concurrently(build())

        assert [result.analyzer_name for result in results] == ["Survivor"]

    def test_results_not_merged(self):
        """Test that several analyzers may report the same request independently."""
        pipeline = DetectionPipeline([SqlInjectionAnalyzer(), UserAgentAnalyzer()])
        request = build("/?id=1+UNION+SELECT+1", headers={"User-Agent": "sqlmap/1.7.2#stable (https://sqlmap.org)"})

        results = pipeline.analyze(request)

        assert [result.analyzer_name for result in results] == ["SqlInjection", "UserAgent"]
