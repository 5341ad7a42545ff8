"""WordPress user enumeration detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

AUTHOR_PATH = re.compile(r"^/author/([^/]+)/?$", re.IGNORECASE)
REST_USERS = re.compile(r"/wp-json/wp/v2/users", re.IGNORECASE)
REST_ROUTE_USERS = re.compile(r"/wp/v2/users", re.IGNORECASE)
OEMBED = re.compile(r"/wp-json/oembed", re.IGNORECASE)


class UserEnumerationAnalyzer(Analyzer):
    """Author ID probing, author archives, REST user listing, user sitemaps and oEmbed."""

    name = "UserEnumeration"
    categories = (55, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path
        uri = request.uri
        findings = []
        max_score = 0

        author = request.query_param("author")
        if author is not None and author.isascii() and author.isdigit():
            findings.append(f"Author ID enumeration via query parameter (author={author})")
            max_score = max(max_score, 65)

        author_path = AUTHOR_PATH.match(path)
        if author_path:
            findings.append(f"Author archive access: /author/{author_path.group(1)[:50]}")
            max_score = max(max_score, 55)

        if REST_USERS.search(path):
            findings.append("WordPress REST API user enumeration (/wp-json/wp/v2/users)")
            max_score = max(max_score, 80)

        lowered = path.lower()
        if "wp-sitemap-users" in lowered or "author-sitemap" in lowered:
            findings.append("User enumeration via sitemap path")
            max_score = max(max_score, 65)

        rest_route = request.query_param("rest_route")
        if rest_route is not None and REST_ROUTE_USERS.search(rest_route):
            findings.append("WordPress REST API user enumeration via rest_route parameter")
            max_score = max(max_score, 80)

        if OEMBED.search(path):
            if "author" in uri.lower():
                findings.append("oEmbed author info probing")
                max_score = max(max_score, 60)
            else:
                findings.append("oEmbed endpoint access (potential author info leakage)")
                max_score = max(max_score, 55)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "User enumeration attempt: ",
            suffix=f" (path: {uri[:200]})",
        )
