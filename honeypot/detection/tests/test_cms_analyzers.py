"""
Tests for CMS-specific analyzers: login abuse, XML-RPC, plugins, themes,
uploads, configuration and backup exposure, and spam endpoints.
"""

import base64
from unittest.mock import MagicMock

import pytest
import redis

from honeypot.config import Settings
from honeypot.detection.analyzers import (
    AdminDirectoryScanningAnalyzer,
    AjaxEndpointAbuseAnalyzer,
    BruteForceAnalyzer,
    ConfigAccessAnalyzer,
    CoreFileModificationAnalyzer,
    CredentialStuffingAnalyzer,
    DatabaseBackupAccessAnalyzer,
    FileUploadMalwareAnalyzer,
    FormSpamAnalyzer,
    MediaLibraryAbuseAnalyzer,
    PasswordResetAbuseAnalyzer,
    PluginExploitAnalyzer,
    RegistrationHoneypotAnalyzer,
    SearchSpamAnalyzer,
    ThemeExploitAnalyzer,
    TrackbackPingbackSpamAnalyzer,
    UserEnumerationAnalyzer,
    VersionFingerprintingAnalyzer,
    WpCliAbuseAnalyzer,
    WpCronAbuseAnalyzer,
    XmlRpcAnalyzer
)
from honeypot.detection.counter_store import InMemoryAttemptCounter, RedisAttemptCounter
from honeypot.detection.request_view import RequestView

CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
FORM = "application/x-www-form-urlencoded"


def build(uri="/", method="GET", headers=None, ip="203.0.113.10", **kwargs):
    """Request from a browser on example.com unless told otherwise."""
    merged = {"Host": "example.com", "User-Agent": CHROME}
    merged.update(headers or {})
    return RequestView.build(method=method, uri=uri, headers=merged, ip=ip, **kwargs)


def form_post(uri, body, headers=None, **kwargs):
    merged = {"Content-Type": FORM}
    merged.update(headers or {})
    return build(uri, method="POST", headers=merged, body=body, **kwargs)


class TestBruteForceAnalyzer:
    """Test login brute force detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.counter = InMemoryAttemptCounter()
        self.analyzer = BruteForceAnalyzer(counter_store=self.counter, settings=Settings())

    def test_common_credentials(self):
        """Test a login POST with default credentials."""
        result = self.analyzer.analyze(form_post("/wp-login.php", "log=admin&pwd=admin"))

        assert result is not None
        assert result.score == 80
        assert result.categories == (18, 31)
        assert "Common username attempted: admin" in result.comment

    def test_repeated_attempts(self):
        """Test that attempts above the threshold raise the score."""
        request = form_post("/wp-login.php", "log=jdoe&pwd=hunter2-xyz")

        scores = [self.analyzer.analyze(request).score for _ in range(4)]

        assert scores[:3] == [65, 65, 65]
        assert scores[3] == 85

    def test_attempts_counted_per_ip(self):
        """Test that other clients are not affected."""
        for _ in range(4):
            self.analyzer.analyze(form_post("/wp-login.php", "log=jdoe&pwd=x", ip="198.51.100.1"))

        result = self.analyzer.analyze(form_post("/wp-login.php", "log=jdoe&pwd=x", ip="198.51.100.2"))

        assert result.score == 65

    def test_counter_failure_degrades(self):
        """Test that a broken Redis store never raises into the analyzer."""
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = redis.ConnectionError("down")
        analyzer = BruteForceAnalyzer(counter_store=RedisAttemptCounter(client), settings=Settings())

        for _ in range(5):
            result = analyzer.analyze(form_post("/wp-login.php", "log=jdoe&pwd=x"))

        assert result.score == 65

    def test_login_page_view(self):
        """Test that a plain login page view is not reported."""
        assert self.analyzer.analyze(build("/wp-login.php")) is None

    def test_login_page_with_query(self):
        """Test a login page probe with parameters."""
        result = self.analyzer.analyze(build("/wp-login.php?redirect_to=%2Fwp-admin%2F"))

        assert result is not None
        assert result.score == 50

    @pytest.mark.parametrize("method", ["PUT", "HEAD", "DELETE", "OPTIONS"])
    def test_other_methods_ignored(self, method):
        """Test that only GET and POST reach the login checks."""
        assert self.analyzer.analyze(build("/wp-login.php?x=1", method=method)) is None

    def test_non_login_path(self):
        """Test that other paths are ignored."""
        assert self.analyzer.analyze(form_post("/contact", "name=a")) is None


class TestCredentialStuffingAnalyzer:
    """Test credential stuffing detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = CredentialStuffingAnalyzer()

    def test_default_pair_in_form(self):
        """Test a default username and password pair."""
        result = self.analyzer.analyze(form_post("/login", "username=admin&password=123456"))

        assert result is not None
        assert result.score == 90

    def test_json_credentials(self):
        """Test credentials in a JSON body."""
        request = build(
            "/api/login",
            method="POST",
            headers={"Content-Type": "application/json"},
            body='{"username": "root", "password": "password"}',
        )
        result = self.analyzer.analyze(request)

        assert result is not None
        assert result.score == 90
        assert "JSON credential stuffing" in result.comment

    def test_basic_auth_on_get(self):
        """Test default credentials in a Basic Authorization header."""
        token = base64.b64encode(b"admin:admin").decode()
        result = self.analyzer.analyze(build("/admin", headers={"Authorization": f"Basic {token}"}))

        assert result is not None
        assert result.score == 90
        assert result.comment == "Basic auth with default credentials: admin"

    def test_short_bearer_token(self):
        """Test a suspiciously short bearer token."""
        result = self.analyzer.analyze(build("/api/me", headers={"Authorization": "Bearer abc"}))

        assert result is not None
        assert result.score == 50

    def test_broken_json_ignored(self):
        """Test that an unparseable JSON body is not an error."""
        request = build("/api/login", method="POST", headers={"Content-Type": "application/json"}, body="{broken")

        assert self.analyzer.analyze(request) is None

    def test_plain_get(self):
        """Test that requests without credentials are ignored."""
        assert self.analyzer.analyze(build("/")) is None


class TestXmlRpcAnalyzer:
    """Test XML-RPC abuse detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = XmlRpcAnalyzer()

    def test_get_probe(self):
        """Test a GET probe of xmlrpc.php."""
        result = self.analyzer.analyze(build("/xmlrpc.php"))

        assert result is not None
        assert result.score == 40
        assert result.categories == (33,)

    def test_multicall_amplification(self):
        """Test a multicall payload."""
        body = (
            "<methodCall><methodName>system.multicall</methodName></methodCall>"
            "<methodCall><methodName>wp.getUsersBlogs</methodName></methodCall>"
        )
        result = self.analyzer.analyze(build("/xmlrpc.php", method="POST", headers={"Content-Type": "text/xml"}, body=body))

        assert result is not None
        assert result.score == 85

    def test_credential_brute_force(self):
        """Test wp.getUsersBlogs with a credential pair."""
        body = (
            "<methodCall><methodName>wp.getUsersBlogs</methodName>"
            "<params><string>admin</string><string>123456</string></params></methodCall>"
        )
        result = self.analyzer.analyze(build("/xmlrpc.php", method="POST", headers={"Content-Type": "text/xml"}, body=body))

        assert result is not None
        assert result.score == 90

    def test_other_paths_ignored(self):
        """Test that other paths are ignored."""
        assert self.analyzer.analyze(build("/xmlrpc.php.bak")) is None


class TestPathBasedAnalyzers:
    """Test analyzers that only look at the request path."""

    def test_wp_config_backup(self):
        """Test a wp-config backup download."""
        result = ConfigAccessAnalyzer().analyze(build("/wp-config.php.bak"))

        assert result is not None
        assert result.score == 90
        assert result.categories == (58, 15)
        assert "wp-config.php" in result.comment

    def test_dotenv(self):
        """Test an environment file download."""
        result = ConfigAccessAnalyzer().analyze(build("/.env"))

        assert result is not None
        assert result.score == 85

    def test_plugin_exploit(self):
        """Test a known vulnerable plugin path."""
        result = PluginExploitAnalyzer().analyze(build("/wp-content/plugins/revslider/temp/update_extract/shell.php"))

        assert result is not None
        assert result.score == 75
        assert "Revolution Slider exploit" in result.comment

    def test_php_in_uploads(self):
        """Test PHP execution in the uploads directory."""
        result = PluginExploitAnalyzer().analyze(build("/wp-content/uploads/2024/01/shell.php"))

        assert result is not None
        assert result.score == 85
        assert "PHP execution in uploads" in result.comment

    def test_plugin_readme(self):
        """Test plugin version probing through readme files."""
        result = PluginExploitAnalyzer().analyze(build("/wp-content/plugins/akismet/readme.txt"))

        assert result is not None
        assert result.score == 55

    def test_theme_php_execution(self):
        """Test a non-template PHP file in a theme."""
        result = ThemeExploitAnalyzer().analyze(build("/wp-content/themes/twentytwenty/shell.php"))

        assert result is not None
        assert result.score == 80

    def test_theme_stylesheet_with_referer(self):
        """Test that a stylesheet loaded by a page is not reported."""
        request = build(
            "/wp-content/themes/twentytwenty/style.css",
            headers={"Referer": "https://example.com/"},
        )

        assert ThemeExploitAnalyzer().analyze(request) is None

    def test_theme_stylesheet_without_referer(self):
        """Test version fingerprinting through style.css."""
        result = ThemeExploitAnalyzer().analyze(build("/wp-content/themes/twentytwenty/style.css"))

        assert result is not None
        assert result.score == 40

    def test_author_enumeration(self):
        """Test author ID probing."""
        result = UserEnumerationAnalyzer().analyze(build("/?author=1"))

        assert result is not None
        assert result.score == 65

    def test_rest_user_listing(self):
        """Test REST API user listing."""
        result = UserEnumerationAnalyzer().analyze(build("/wp-json/wp/v2/users"))

        assert result is not None
        assert result.score == 80

    def test_admin_install_probe(self):
        """Test a setup-config probe."""
        result = AdminDirectoryScanningAnalyzer().analyze(build("/wp-admin/setup-config.php"))

        assert result is not None
        assert result.score == 75

    def test_admin_ajax_without_action(self):
        """Test admin-ajax scanning."""
        result = AdminDirectoryScanningAnalyzer().analyze(build("/wp-admin/admin-ajax.php"))

        assert result is not None
        assert result.score == 50

    def test_readme_fingerprint(self):
        """Test readme.html version disclosure."""
        result = VersionFingerprintingAnalyzer().analyze(build("/readme.html"))

        assert result is not None
        assert result.score == 55

    def test_version_parameter_on_asset(self):
        """Test version parameter probing."""
        result = VersionFingerprintingAnalyzer().analyze(build("/wp-includes/js/jquery/jquery.js?ver=3.7.1"))

        assert result is not None
        assert result.score == 50

    def test_sql_backup(self):
        """Test a database dump download."""
        result = DatabaseBackupAccessAnalyzer().analyze(build("/backup.sql"))

        assert result is not None
        assert result.score == 80

    def test_backup_archive(self):
        """Test an archive in a backup directory."""
        result = DatabaseBackupAccessAnalyzer().analyze(build("/backups/site.tar.gz"))

        assert result is not None
        assert result.score == 75

    def test_uploads_listing(self):
        """Test upload directory listing."""
        result = MediaLibraryAbuseAnalyzer().analyze(build("/wp-content/uploads/"))

        assert result is not None
        assert result.score == 55

    def test_core_file_access(self):
        """Test direct core file access."""
        result = CoreFileModificationAnalyzer().analyze(build("/wp-load.php"))

        assert result is not None
        assert result.score == 65

    @pytest.mark.parametrize("analyzer_class", [
        ConfigAccessAnalyzer,
        PluginExploitAnalyzer,
        ThemeExploitAnalyzer,
        UserEnumerationAnalyzer,
        AdminDirectoryScanningAnalyzer,
        VersionFingerprintingAnalyzer,
        DatabaseBackupAccessAnalyzer,
        MediaLibraryAbuseAnalyzer,
        CoreFileModificationAnalyzer,
    ])
    def test_ordinary_pages(self, analyzer_class):
        """Test that ordinary pages are not flagged."""
        analyzer = analyzer_class()

        assert analyzer.analyze(build("/")) is None
        assert analyzer.analyze(build("/2024/05/hello-world/")) is None


class TestUploadAnalyzers:
    """Test file upload detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = FileUploadMalwareAnalyzer()

    def _upload(self, filename, content, part_type="image/jpeg"):
        body = (
            "------WebKitFormBoundary7MA4YWxk\r\n"
            f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
            f"Content-Type: {part_type}\r\n\r\n"
            f"{content}\r\n"
            "------WebKitFormBoundary7MA4YWxk--\r\n"
        )
        return build(
            "/wp-admin/async-upload.php",
            method="POST",
            headers={"Content-Type": "multipart/form-data; boundary=----WebKitFormBoundary7MA4YWxk"},
            body=body,
        )

    def test_php_in_image(self):
        """Test a double extension image carrying PHP."""
        result = self.analyzer.analyze(self._upload("shell.php.jpg", "<?php system($_GET['c']); ?>"))

        assert result is not None
        assert result.score == 90
        assert result.categories == (43, 30)
        assert "Double extension upload: shell.php.jpg" in result.comment

    def test_htaccess_upload(self):
        """Test a server configuration file upload."""
        result = self.analyzer.analyze(self._upload(".htaccess", "AddType application/x-httpd-php .jpg", "text/plain"))

        assert result is not None
        assert result.score == 90

    def test_plain_image(self):
        """Test that a real image upload is not flagged."""
        assert self.analyzer.analyze(self._upload("cat.jpg", "JFIF binary data")) is None

    def test_get_ignored(self):
        """Test that non-POST requests are ignored."""
        assert self.analyzer.analyze(build("/wp-admin/async-upload.php")) is None

    def test_media_upload_endpoint(self):
        """Test media endpoint abuse on the same request."""
        result = MediaLibraryAbuseAnalyzer().analyze(self._upload("cat.jpg", "JFIF"))

        assert result is not None
        assert result.score == 65


class TestAdminEndpointAnalyzers:
    """Test admin-ajax, cron and editor abuse."""

    def test_dangerous_ajax_action(self):
        """Test a known exploited AJAX action."""
        result = AjaxEndpointAbuseAnalyzer().analyze(build("/wp-admin/admin-ajax.php?action=revslider_show_image&img=x"))

        assert result is not None
        assert result.score == 75

    def test_sql_in_ajax_parameter(self):
        """Test SQL injection in an AJAX parameter."""
        result = AjaxEndpointAbuseAnalyzer().analyze(
            build("/wp-admin/admin-ajax.php?action=get_posts&id=1+UNION+SELECT+1")
        )

        assert result is not None
        assert result.score == 80
        assert 'SQL injection in AJAX parameter "id"' in result.comment

    def test_ajax_from_non_browser(self):
        """Test AJAX access from a bare HTTP client."""
        result = AjaxEndpointAbuseAnalyzer().analyze(
            build("/wp-admin/admin-ajax.php?action=load_more", headers={"User-Agent": "curl/8.4.0"})
        )

        assert result is not None
        assert result.score == 55

    def test_wp_cli_base64_code(self):
        """Test base64 encoded PHP in an admin-ajax POST."""
        payload = base64.b64encode(b"<?php eval(base64_decode($_POST['payload'])); ?>").decode()
        request = build("/wp-admin/admin-ajax.php", method="POST", post_data={"data": payload})
        result = WpCliAbuseAnalyzer().analyze(request)

        assert result is not None
        assert result.score == 85

    def test_wp_cli_serialized_object(self):
        """Test PHP object injection."""
        request = build("/wp-admin/admin-ajax.php", method="POST", post_data={"data": 'O:8:"stdClass":0:{}'})
        result = WpCliAbuseAnalyzer().analyze(request)

        assert result is not None
        assert result.score == 75

    def test_cron_from_script(self):
        """Test direct wp-cron access by a script."""
        result = WpCronAbuseAnalyzer().analyze(build("/wp-cron.php", headers={"User-Agent": "curl/8.4.0"}))

        assert result is not None
        assert result.score == 55

    def test_cron_from_browser(self):
        """Test direct wp-cron access by a browser."""
        result = WpCronAbuseAnalyzer().analyze(build("/wp-cron.php"))

        assert result is not None
        assert result.score == 40

    def test_rest_write(self):
        """Test a REST API write."""
        result = WpCronAbuseAnalyzer().analyze(build("/wp-json/wp/v2/posts", method="POST"))

        assert result is not None
        assert result.score == 60

    def test_theme_editor_post(self):
        """Test theme editor modification."""
        request = form_post("/wp-admin/theme-editor.php", "file=functions.php&newcontent=x")

        assert CoreFileModificationAnalyzer().analyze(request).score == 80
        assert ThemeExploitAnalyzer().analyze(request).score == 80


class TestSpamAnalyzers:
    """Test form, registration, search and trackback spam."""

    def test_form_spam(self):
        """Test a spam comment with several signals."""
        request = build(
            "/contact",
            method="POST",
            post_data={
                "name": "John",
                "email": "not-an-email",
                "message": "Buy viagra and cialis at our casino http://a.example http://b.example "
                           "http://c.example http://d.example",
                "hp_field": "gotcha",
            },
        )
        result = FormSpamAnalyzer().analyze(request)

        assert result is not None
        assert result.score == 80
        assert result.comment.startswith("Form spam detected (score: 80): ")
        assert result.categories == (40, 12, 10)

    def test_form_weak_signal_dropped(self):
        """Test that a single weak signal is not reported."""
        request = build("/contact", method="POST", post_data={"email": "bad"})

        assert FormSpamAnalyzer().analyze(request) is None

    def test_form_submitted_too_fast(self):
        """Test the submission timer with an injected clock."""
        analyzer = FormSpamAnalyzer(clock=lambda: 1001.0)
        request = build("/contact", method="POST", post_data={"_form_time": "1000", "message": "hello"})
        result = analyzer.analyze(request)

        assert result is not None
        assert result.score == 30

    def test_registration_disposable_email(self):
        """Test a registration from a disposable mailbox."""
        request = build(
            "/wp-login.php?action=register",
            method="POST",
            post_data={"user_login": "xkq8d93jd02kd8s2l", "user_email": "bob@mailinator.com"},
        )
        result = RegistrationHoneypotAnalyzer().analyze(request)

        assert result is not None
        assert result.score == 70
        assert "Disposable email domain: mailinator" in result.comment

    def test_registration_too_fast(self):
        """Test the registration timer with an injected clock."""
        analyzer = RegistrationHoneypotAnalyzer(clock=lambda: 5002.0)
        request = build(
            "/wp-signup.php",
            method="POST",
            post_data={"user_login": "jane", "user_email": "jane.doe@example.org", "timestamp": "5000"},
        )
        result = analyzer.analyze(request)

        assert result is not None
        assert result.score == 70

    def test_registration_get_ignored(self):
        """Test that registration page views are ignored."""
        assert RegistrationHoneypotAnalyzer().analyze(build("/wp-login.php?action=register")) is None

    def test_search_xss(self):
        """Test an XSS payload in site search."""
        result = SearchSpamAnalyzer().analyze(build("/?s=<script>alert(1)</script>"))

        assert result is not None
        assert result.score == 70
        assert result.comment.startswith("Search abuse detected (s=<script>")

    def test_search_spam_keywords(self):
        """Test spam keywords in site search."""
        result = SearchSpamAnalyzer().analyze(build("/?s=cheap+viagra+casino+poker"))

        assert result is not None
        assert result.score == 60

    def test_plain_search(self):
        """Test that an ordinary search is not flagged."""
        assert SearchSpamAnalyzer().analyze(build("/?s=opening+hours")) is None

    def test_trackback_spam(self):
        """Test a trackback carrying spam keywords."""
        request = form_post("/wp-trackback.php", "url=http%3A%2F%2Fspam.example&title=Cheap+viagra+and+casino")
        result = TrackbackPingbackSpamAnalyzer().analyze(request)

        assert result is not None
        assert result.score == 70


class TestPasswordResetAbuseAnalyzer:
    """Test password reset abuse detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = PasswordResetAbuseAnalyzer()

    def test_reset_request(self):
        """Test a plain reset request."""
        result = self.analyzer.analyze(build("/wp-login.php?action=lostpassword"))

        assert result is not None
        assert result.score == 50

    def test_host_poisoning(self):
        """Test a reset for a common account with a forwarded host."""
        request = form_post(
            "/wp-login.php?action=lostpassword",
            "user_login=admin",
            headers={"X-Forwarded-Host": "attacker.example"},
        )
        result = self.analyzer.analyze(request)

        assert result is not None
        assert result.score == 70
        assert "X-Forwarded-Host present in password reset" in result.comment

    def test_login_page_ignored(self):
        """Test that non-reset login traffic is ignored."""
        assert self.analyzer.analyze(build("/wp-login.php")) is None
