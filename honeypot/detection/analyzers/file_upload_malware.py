"""Malicious file upload detection for multipart POST requests."""

from __future__ import annotations

import re
from typing import List, Optional

from .. import pattern_library
from ..pattern_engine import bounded, matches_any
from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

FILENAME = re.compile(r"filename\*?=\"?([^\"\r\n;]+)\"?", re.IGNORECASE)
PART_CONTENT_TYPE = re.compile(r"^Content-Type:\s*image/", re.IGNORECASE | re.MULTILINE)
PHP_OPEN_TAG = re.compile(r"<\?(php|=)", re.IGNORECASE)

EXECUTABLE_EXTENSIONS = frozenset(
    ("php", "phtml", "phar", "php3", "php4", "php5", "php7", "pht", "asp", "aspx", "jsp", "cgi", "pl", "sh")
)
IMAGE_EXTENSIONS = frozenset(("jpg", "jpeg", "png", "gif", "bmp", "webp", "ico", "svg"))
SERVER_CONFIG_FILES = (".htaccess", ".user.ini")


def upload_filenames(body: str) -> List[str]:
    """File names declared by the Content-Disposition headers of a multipart body."""
    names = []
    for match in FILENAME.finditer(body):
        name = match.group(1).strip().replace("\\", "/").rsplit("/", 1)[-1]
        if name:
            names.append(name)
    return names


class FileUploadMalwareAnalyzer(Analyzer):
    name = "FileUploadMalware"
    categories = (43, 30)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        if not request.is_post:
            return None

        body = bounded(request.body)
        is_multipart = "multipart/form-data" in request.content_type.lower()
        filenames = upload_filenames(body)
        if not is_multipart and not filenames:
            return None

        findings = []
        max_score = 0
        image_upload = bool(PART_CONTENT_TYPE.search(body))

        for filename in filenames:
            lowered = filename.lower()
            extensions = lowered.split(".")[1:]

            if lowered in SERVER_CONFIG_FILES:
                findings.append(f"Server configuration file upload: {filename[:100]}")
                max_score = max(max_score, 90)
                continue

            if not extensions:
                continue

            if extensions[-1] in IMAGE_EXTENSIONS:
                image_upload = True

            if extensions[-1] in EXECUTABLE_EXTENSIONS:
                findings.append(f"Executable script upload: {filename[:100]}")
                max_score = max(max_score, 85)
            elif any(extension in EXECUTABLE_EXTENSIONS for extension in extensions[:-1]):
                findings.append(f"Double extension upload: {filename[:100]}")
                max_score = max(max_score, 80)

        if matches_any(pattern_library.shell_patterns(), body):
            findings.append("Webshell signature in upload body")
            max_score = max(max_score, 90)

        if image_upload and PHP_OPEN_TAG.search(body):
            findings.append("PHP code embedded in image upload")
            max_score = max(max_score, 85)

        return self._result(findings, max_score, "Malicious file upload attempt: ")
