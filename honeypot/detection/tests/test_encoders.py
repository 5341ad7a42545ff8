"""
Tests for decode normalization.

These tests validate that nested percent and HTML entity encodings are
collapsed before pattern matching, and that decoding is bounded.
"""

import pytest
from honeypot.detection.encoders import (
    DecodeNormalizer,
    MAX_DECODE_ITERATIONS,
    get_normalizer,
    normalize
)


class TestDecodeNormalizer:
    """Test decode normalization functionality."""

    def setup_method(self):
        """Set up test fixtures."""
        self.normalizer = DecodeNormalizer()

    def test_plain_text_unchanged(self):
        """Test that plain text passes through untouched."""
        assert self.normalizer.normalize("Hello World") == "Hello World"
        assert self.normalizer.normalize("") == ""

    def test_url_encoding_normalization(self):
        """Test single and double URL encoding."""
        assert self.normalizer.normalize("alert%28%29") == "alert()"
        assert self.normalizer.normalize("alert%2528%2529") == "alert()"

    def test_html_entity_normalization(self):
        """Test named, numeric and hex entities."""
        expected = "<script>alert()</script>"

        assert self.normalizer.normalize("&lt;script&gt;alert()&lt;/script&gt;") == expected
        assert self.normalizer.normalize("&#60;script&#62;alert()&#60;/script&#62;") == expected
        assert self.normalizer.normalize("&#x3c;script&#x3e;alert()&#x3c;/script&#x3e;") == expected

    def test_combined_encoding_bypass(self):
        """Test URL encoded HTML entities."""
        content = "%26lt%3Bscript%26gt%3Balert()%26lt%3B/script%26gt%3B"

        assert self.normalizer.normalize(content) == "<script>alert()</script>"

    def test_decode_depth_is_bounded(self):
        """Test that decoding stops after the configured number of passes."""
        # Four levels of encoding for '<'
        content = "%25252525" + "3C"
        normalized = self.normalizer.normalize(content)

        assert normalized != "<"
        assert "%" in normalized

    def test_custom_depth(self):
        """Test a normalizer with a single decode pass."""
        shallow = DecodeNormalizer(max_decode_iterations=1)

        assert shallow.normalize("%253C") == "%3C"
        assert self.normalizer.normalize("%253C") == "<"

    @pytest.mark.parametrize("value", [
        "../../etc/passwd",
        "%2e%2e%2fetc%2fpasswd",
        "&lt;img src=x onerror=alert(1)&gt;",
        "union%20select%201,2,3",
        "plain",
    ])
    def test_normalization_is_idempotent(self, value):
        """Test that normalizing a normalized value changes nothing."""
        once = self.normalizer.normalize(value)

        assert self.normalizer.normalize(once) == once

    def test_url_decode_plus_as_space(self):
        """Test query-string style decoding."""
        assert self.normalizer.url_decode("union+select%201") == "union select 1"

    def test_url_decode_depth(self):
        """Test explicit decode depth."""
        assert self.normalizer.url_decode("%2527", depth=1) == "%27"
        assert self.normalizer.url_decode("%2527") == "'"

    def test_url_decode_leaves_entities(self):
        """Test that url_decode does not touch HTML entities."""
        assert self.normalizer.url_decode("&lt;b&gt;") == "&lt;b&gt;"

    def test_entity_then_url(self):
        """Test entity-first decoding."""
        assert self.normalizer.entity_then_url("&lt;script&gt;") == "<script>"
        assert self.normalizer.entity_then_url("java&#115;cript%3Aalert(1)") == "javascript:alert(1)"

    def test_entity_then_url_keeps_plus(self):
        """Test that entity-first decoding does not turn '+' into a space."""
        assert self.normalizer.entity_then_url("a+b") == "a+b"

    def test_malformed_input_never_raises(self):
        """Test that broken escapes are returned rather than raised."""
        assert self.normalizer.normalize("%zz%") == "%zz%"
        assert self.normalizer.normalize("&#xZZZ;") == "&#xZZZ;"

    def test_variants(self):
        """Test raw plus normalized variants."""
        assert self.normalizer.variants("") == []
        assert self.normalizer.variants("abc") == ["abc"]
        assert self.normalizer.variants("%41") == ["%41", "A"]


class TestModuleHelpers:
    """Test module level helpers."""

    def test_shared_normalizer(self):
        """Test that the shared normalizer is a singleton."""
        assert get_normalizer() is get_normalizer()
        assert get_normalizer().max_decode_iterations == MAX_DECODE_ITERATIONS

    def test_normalize_function(self):
        """Test the convenience function."""
        assert normalize("%3Cb%3E") == "<b>"
