"""Read-only request view handed to every analyzer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qsl, unquote, urlsplit

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

BINARY_CONTENT_TYPES = (
    "image/",
    "video/",
    "audio/",
    "application/pdf",
    "application/zip",
    "application/octet-stream",
)


def _title_case(name: str) -> str:
    return "-".join(part[:1].upper() + part[1:] for part in name.strip().lower().replace("_", "-").split("-"))


def _to_text(value: Union[str, bytes, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _normalize_headers(raw_headers: Any) -> dict[str, str]:
    if not isinstance(raw_headers, Mapping):
        return {}

    normalized: dict[str, str] = {}
    for key, value in raw_headers.items():
        if not key:
            continue
        normalized[_title_case(_to_text(key))] = _to_text(value)

    return normalized


def _split_uri(uri: str) -> tuple[str, str]:
    try:
        parsed = urlsplit(uri)
        return parsed.path, parsed.query
    except ValueError:
        # urlsplit rejects malformed netlocs such as an unclosed IPv6 bracket
        path, _, query = uri.partition("?")
        return path.split("#", 1)[0], query.split("#", 1)[0]


def _parse_pairs(raw: str) -> dict[str, str]:
    if not raw:
        return {}
    # Last value wins for repeated keys
    return dict(parse_qsl(raw, keep_blank_values=True, errors="replace"))


def _parse_cookies(raw: str) -> dict[str, str]:
    cookies: dict[str, str] = {}
    for chunk in raw.split(";"):
        name, sep, value = chunk.strip().partition("=")
        if not sep or not name:
            continue
        cookies[name] = unquote(value, errors="replace")
    return cookies


def _decode_body(body_bytes: bytes, content_type: str) -> str:
    if not body_bytes:
        return ""

    lowered = (content_type or "").lower()
    if any(marker in lowered for marker in BINARY_CONTENT_TYPES):
        return ""

    return body_bytes.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class RequestView:
    """
    Immutable view of one inbound request.

    Header keys are Title-Case (``X-Forwarded-For``); lookups through
    :meth:`header` are case-insensitive. Every value is untrusted.
    """

    method: str = "GET"
    uri: str = "/"
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    query_params: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    post_data: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    cookies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: str = ""
    ip: str = "0.0.0.0"

    @classmethod
    def build(
        cls,
        method: Optional[str] = "GET",
        uri: Optional[str] = "/",
        headers: Optional[Mapping[str, Any]] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        post_data: Optional[Mapping[str, Any]] = None,
        cookies: Optional[Mapping[str, Any]] = None,
        body: Union[str, bytes, None] = "",
        ip: Optional[str] = None,
    ) -> "RequestView":
        """
        Build a view from loose request parts.

        Query parameters are taken from the URI when not given, cookies from
        the ``Cookie`` header, and POST fields from a form-encoded body.
        """
        uri_text = _to_text(uri) or "/"
        normalized_headers = _normalize_headers(headers or {})
        body_text = _to_text(body)

        if query_params is None:
            query_params = _parse_pairs(_split_uri(uri_text)[1])

        if cookies is None:
            cookies = _parse_cookies(normalized_headers.get("Cookie", ""))

        if post_data is None:
            content_type = normalized_headers.get("Content-Type", "").lower()
            post_data = _parse_pairs(body_text) if FORM_CONTENT_TYPE in content_type else {}

        return cls(
            method=(_to_text(method) or "GET").upper(),
            uri=uri_text,
            headers=MappingProxyType(normalized_headers),
            query_params=MappingProxyType({_to_text(k): _to_text(v) for k, v in query_params.items()}),
            post_data=MappingProxyType({_to_text(k): _to_text(v) for k, v in post_data.items()}),
            cookies=MappingProxyType({_to_text(k): _to_text(v) for k, v in cookies.items()}),
            body=body_text,
            ip=_to_text(ip) or "0.0.0.0",
        )

    @classmethod
    def from_forwarded(cls, metadata: Mapping[str, Any], body_bytes: bytes = b"") -> "RequestView":
        """Build a view from reverse-proxy ``auth_request`` metadata and the raw body."""
        raw_uri = str(metadata.get("uri") or metadata.get("original_uri") or "")

        if not raw_uri:
            path = str(metadata.get("path") or "/")
            query = str(metadata.get("query") or "")
            raw_uri = f"{path}?{query}" if query else path

        headers = _normalize_headers(metadata.get("headers"))
        content_type = str(metadata.get("content_type") or headers.get("Content-Type", ""))
        if content_type and "Content-Type" not in headers:
            headers["Content-Type"] = content_type

        return cls.build(
            method=str(metadata.get("method") or "GET"),
            uri=raw_uri,
            headers=headers,
            body=_decode_body(body_bytes, content_type),
            ip=str(metadata.get("client_ip") or ""),
        )

    @property
    def path(self) -> str:
        """Path component of the URI, ``/`` when absent."""
        return _split_uri(self.uri)[0] or "/"

    @property
    def query_string(self) -> str:
        return _split_uri(self.uri)[1]

    def header(self, name: str, default: str = "") -> str:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key in self.headers)

    def query_param(self, name: str) -> Optional[str]:
        return self.query_params.get(name)

    def post_field(self, name: str) -> Optional[str]:
        return self.post_data.get(name)

    def cookie(self, name: str) -> Optional[str]:
        return self.cookies.get(name)

    @property
    def user_agent(self) -> str:
        return self.header("User-Agent")

    @property
    def content_type(self) -> str:
        return self.header("Content-Type")

    @property
    def is_post(self) -> bool:
        return self.method == "POST"

    @property
    def is_get(self) -> bool:
        return self.method == "GET"
