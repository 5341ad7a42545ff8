"""Database backup and dump file access detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

BACKUP_EXTENSIONS = (".sql", ".sql.gz", ".sql.bz2", ".sql.zip", ".dump", ".dump.gz")
BACKUP_DIRECTORIES = ("/backup/", "/backups/", "/db/", "/database/", "/data/")
BACKUP_FILENAMES = (
    "backup.sql", "database.sql", "dump.sql", "db.sql",
    "wordpress.sql", "wp.sql", "site.sql", "mysql.sql",
)
ARCHIVE_EXTENSIONS = (".tar.gz", ".tar.bz2", ".zip", ".rar", ".7z")
DB_NAME_SEGMENTS = ("backup", "database", "dump", "mysql", "db", "sql", "data")

PMA_EXPORT = re.compile(r"(phpmyadmin|pma).{0,256}?export", re.IGNORECASE)
PMA_SQL_FILE = re.compile(r"(phpmyadmin|pma).{0,256}?\.sql", re.IGNORECASE)
DUMP_PATH = re.compile(r"/(db|database|sql)[_-]?(backup|dump|export)", re.IGNORECASE)


class DatabaseBackupAccessAnalyzer(Analyzer):
    name = "DatabaseBackupAccess"
    categories = (58, 15)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path.lower()
        uri = request.uri.lower()

        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        for extension in BACKUP_EXTENSIONS:
            if path.endswith(extension):
                findings.append(f"Database backup file extension: {extension}")
                max_score = max(max_score, 75)

        for directory in BACKUP_DIRECTORIES:
            if directory in path:
                findings.append(f"Backup directory access: {directory}")
                max_score = max(max_score, 65)

        for filename in BACKUP_FILENAMES:
            if filename in path:
                findings.append(f"Known backup filename: {filename}")
                max_score = max(max_score, 80)

        for extension in ARCHIVE_EXTENSIONS:
            if not path.endswith(extension):
                continue
            segment = next((segment for segment in DB_NAME_SEGMENTS if segment in path), None)
            if segment is not None:
                findings.append(f"Database archive file: {extension} with {segment}")
                max_score = max(max_score, 75)

        if PMA_EXPORT.search(uri):
            findings.append("phpMyAdmin export path detected")
            max_score = max(max_score, 85)

        if PMA_SQL_FILE.search(uri):
            findings.append("phpMyAdmin SQL file access")
            max_score = max(max_score, 80)

        if DUMP_PATH.search(path):
            findings.append("Database dump path pattern detected")
            max_score = max(max_score, 75)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Database backup access attempt: ",
            suffix=f" (path: {request.path[:200]})",
        )
