"""CMS core file access and modification detection."""

from __future__ import annotations

import re
from typing import Optional

from ..request_view import RequestView
from ..result import DetectionResult
from .base import Analyzer

WP_CORE_FILES = (
    "/wp-load.php",
    "/wp-settings.php",
    "/wp-blog-header.php",
    "/wp-config-sample.php",
    "/wp-cron.php",
    "/wp-links-opml.php",
    "/wp-mail.php",
    "/wp-activate.php",
)


def _rule(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


PLUGIN_EDITOR = _rule(r"/wp-admin/plugin-editor\.php")
THEME_EDITOR = _rule(r"/wp-admin/theme-editor\.php")
WP_UPDATE = _rule(r"/wp-admin/update\.php")
WP_UPDATE_CORE = _rule(r"/wp-admin/update-core\.php")
WP_ADMIN_INCLUDES = _rule(r"/wp-admin/includes/[^/]+\.php")
WP_INCLUDES_PHP = _rule(r"/wp-includes/[^/]+\.php")
WP_INCLUDES_ASSETS = _rule(r"/wp-includes/(js|css|images|fonts)/")
DRUPAL_MODULE_INSTALL = _rule(r"/admin/modules/install")
DRUPAL_UPDATE = _rule(r"/update\.php$")
DRUPAL_THEME_INSTALL = _rule(r"/admin/appearance/install")
JOOMLA_ADMIN_INDEX = _rule(r"/administrator/index\.php")
JOOMLA_ADMIN_INCLUDES = _rule(r"/administrator/includes/[^/]+\.php")


class CoreFileModificationAnalyzer(Analyzer):
    """
    Built-in editors, installers and updaters, and direct hits on core
    include files for WordPress, Drupal and Joomla.
    """

    name = "CoreFileModification"
    categories = (37, 46)

    def analyze(self, request: RequestView) -> Optional[DetectionResult]:
        path = request.path.lower()
        if path in ("", "/"):
            return None

        findings = []
        max_score = 0

        def flag(description: str, score: int) -> None:
            nonlocal max_score
            findings.append(description)
            max_score = max(max_score, score)

        if request.is_post:
            if PLUGIN_EDITOR.search(path):
                flag("POST to plugin editor (code injection attempt)", 80)
            if THEME_EDITOR.search(path):
                flag("POST to theme editor (code injection attempt)", 80)
            if WP_UPDATE.search(path):
                flag("POST to update.php (plugin/theme installation attempt)", 75)
            if WP_UPDATE_CORE.search(path):
                flag("POST to update-core.php (core update attempt)", 75)

        if request.is_get:
            if PLUGIN_EDITOR.search(path):
                flag("Plugin editor access probe", 60)
            if THEME_EDITOR.search(path):
                flag("Theme editor access probe", 60)

        core_file = next((core for core in WP_CORE_FILES if path.endswith(core)), None)
        if core_file is not None:
            flag(f"Direct access to core file: {core_file}", 65)

        if WP_ADMIN_INCLUDES.search(path):
            flag("Direct access to wp-admin/includes/ PHP file", 70)

        if WP_INCLUDES_PHP.search(path) and not WP_INCLUDES_ASSETS.search(path):
            flag("Direct access to wp-includes/ PHP file", 55)

        if request.is_post:
            if DRUPAL_MODULE_INSTALL.search(path):
                flag("Drupal module installation attempt", 75)
            if DRUPAL_UPDATE.search(path):
                flag("Drupal update.php POST (core update attempt)", 70)
            if DRUPAL_THEME_INSTALL.search(path):
                flag("Drupal theme installation attempt", 70)
        elif request.is_get and DRUPAL_UPDATE.search(path):
            flag("Drupal update.php access probe", 55)

        if request.is_post and JOOMLA_ADMIN_INDEX.search(path):
            option = request.post_data.get("option", "").lower()
            query_option = (request.query_param("option") or "").lower()
            if "com_installer" in (option, query_option):
                flag("Joomla extension installation attempt (com_installer)", 75)
            if "option=com_installer" in request.uri.lower():
                flag("Joomla com_installer access via URI", 75)

        if JOOMLA_ADMIN_INCLUDES.search(path):
            flag("Direct access to Joomla administrator includes", 65)

        unique = list(dict.fromkeys(findings))
        return self._result(
            unique,
            max_score,
            "Core file modification attempt: ",
            suffix=f" (path: {request.path[:200]})",
        )
