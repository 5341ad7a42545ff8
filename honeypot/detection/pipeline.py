"""Detection pipeline: runs every registered analyzer against one request."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from ..config import Settings, get_settings
from . import analyzers as builtin
from .analyzers.base import Analyzer
from .counter_store import AttemptCounter, build_counter_store
from .request_view import RequestView
from .result import DetectionResult

logger = logging.getLogger(__name__)

__all__ = ["DetectionPipeline", "DEFAULT_ANALYZER_COUNT", "analyze_forwarded_request"]

DEFAULT_ANALYZER_COUNT = 36

ErrorCallback = Callable[[Analyzer, Exception], None]


class DetectionPipeline:
    """
    Ordered collection of analyzers.

    Analyzers run in registration order. A failing analyzer is logged and
    skipped, and never prevents the others from running.
    """

    def __init__(self, analyzers: Optional[Iterable[Analyzer]] = None, on_error: Optional[ErrorCallback] = None):
        self._analyzers: List[Analyzer] = list(analyzers or [])
        self.on_error = on_error

    def add_analyzer(self, analyzer: Analyzer) -> "DetectionPipeline":
        self._analyzers.append(analyzer)
        return self

    @property
    def analyzers(self) -> Tuple[Analyzer, ...]:
        return tuple(self._analyzers)

    @property
    def analyzer_count(self) -> int:
        return len(self._analyzers)

    def _run_one(self, analyzer: Analyzer, request: RequestView) -> Optional[DetectionResult]:
        try:
            return analyzer.analyze(request)
        except Exception as e:
            logger.exception(f"Analyzer {analyzer.name} failed, skipping: {e}")
            if self.on_error is not None:
                self.on_error(analyzer, e)
            return None

    def analyze(self, request: RequestView) -> List[DetectionResult]:
        """
        Run all analyzers against a request.

        Args:
            request: Read-only request view

        Returns:
            Non-null results in registration order, without dedup or merging
        """
        results = []
        for analyzer in self._analyzers:
            result = self._run_one(analyzer, request)
            if result is not None:
                results.append(result)

        self._log_summary(request, results)
        return results

    async def analyze_concurrently(self, request: RequestView) -> List[DetectionResult]:
        """Fan the analyzers out to worker threads and gather results in registration order."""
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self._run_one, analyzer, request) for analyzer in self._analyzers)
        )
        results = [result for result in outcomes if result is not None]

        self._log_summary(request, results)
        return results

    def _log_summary(self, request: RequestView, results: List[DetectionResult]) -> None:
        if results:
            top = max(result.score for result in results)
            names = ", ".join(result.analyzer_name for result in results)
            logger.debug(f"{request.method} {request.path[:100]} from {request.ip}: {len(results)} detections (max score {top}): {names}")

    @classmethod
    def create_default(
        cls,
        counter_store: Optional[AttemptCounter] = None,
        settings: Optional[Settings] = None,
    ) -> "DetectionPipeline":
        """Pipeline pre-loaded with the full built-in analyzer set."""
        settings = settings or get_settings()
        if counter_store is None:
            counter_store = build_counter_store(settings)

        pipeline = cls()
        (
            pipeline
            .add_analyzer(builtin.SqlInjectionAnalyzer())
            .add_analyzer(builtin.XssAnalyzer())
            .add_analyzer(builtin.PathTraversalAnalyzer())
            .add_analyzer(builtin.HeaderAnomalyAnalyzer())
            .add_analyzer(builtin.SsrfAnalyzer())
            .add_analyzer(builtin.HttpVerbAnalyzer())
            .add_analyzer(builtin.UserAgentAnalyzer())
            .add_analyzer(builtin.PathScanningAnalyzer())
            .add_analyzer(builtin.ConfigAccessAnalyzer())
            .add_analyzer(builtin.PluginExploitAnalyzer())
            .add_analyzer(builtin.BruteForceAnalyzer(counter_store=counter_store, settings=settings))
            .add_analyzer(builtin.FormSpamAnalyzer())
            .add_analyzer(builtin.XmlRpcAnalyzer())
            .add_analyzer(builtin.CredentialStuffingAnalyzer())
            .add_analyzer(builtin.VulnerabilityProbeAnalyzer())
            .add_analyzer(builtin.ThemeExploitAnalyzer())
            .add_analyzer(builtin.UserEnumerationAnalyzer())
            .add_analyzer(builtin.FileUploadMalwareAnalyzer())
            .add_analyzer(builtin.AdminDirectoryScanningAnalyzer())
            .add_analyzer(builtin.ResourceExhaustionAnalyzer())
            .add_analyzer(builtin.WpCronAbuseAnalyzer())
            .add_analyzer(builtin.VersionFingerprintingAnalyzer())
            .add_analyzer(builtin.DatabaseBackupAccessAnalyzer())
            .add_analyzer(builtin.RegistrationHoneypotAnalyzer())
            .add_analyzer(builtin.SearchSpamAnalyzer())
            .add_analyzer(builtin.TrackbackPingbackSpamAnalyzer())
            .add_analyzer(builtin.MediaLibraryAbuseAnalyzer())
            .add_analyzer(builtin.WpCliAbuseAnalyzer())
            .add_analyzer(builtin.CoreFileModificationAnalyzer())
            .add_analyzer(builtin.AjaxEndpointAbuseAnalyzer())
            .add_analyzer(builtin.OpenRedirectAnalyzer())
            .add_analyzer(builtin.PasswordResetAbuseAnalyzer())
            .add_analyzer(builtin.SessionHijackingAnalyzer())
            .add_analyzer(builtin.UnicodeEncodingAttackAnalyzer())
            .add_analyzer(builtin.RateLimitBypassAnalyzer())
            .add_analyzer(builtin.JavaScriptInjectionAnalyzer())
        )

        logger.info(f"Detection pipeline ready with {pipeline.analyzer_count} analyzers")
        return pipeline

    def __repr__(self) -> str:
        return f"<DetectionPipeline analyzers={self.analyzer_count}>"


async def analyze_forwarded_request(
    metadata: Mapping[str, Any],
    body_bytes: bytes = b"",
    pipeline: Optional[DetectionPipeline] = None,
) -> List[DetectionResult]:
    """
    Analyze a request forwarded by the reverse proxy.

    The metadata carries ``method``, ``uri`` (or ``path`` and ``query``),
    ``headers``, ``content_type`` and ``client_ip``.
    """
    if pipeline is None:
        pipeline = DetectionPipeline.create_default()

    request = RequestView.from_forwarded(metadata, body_bytes)
    return await pipeline.analyze_concurrently(request)
