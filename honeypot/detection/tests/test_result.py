"""
Tests for detection results and the category taxonomy.
"""

import dataclasses

import pytest

from honeypot.detection.categories import CATEGORIES, CategoryRegistry
from honeypot.detection.exceptions import InvalidResultError
from honeypot.detection.result import DetectionResult, clamp_score, truncate_comment


class TestDetectionResult:
    """Test result construction and normalization."""

    def test_basic_result(self):
        """Test a well formed result."""
        result = DetectionResult.create([16, 45], "SQL injection attempt detected", 90, "SqlInjection")

        assert result.categories == (16, 45)
        assert result.comment == "SQL injection attempt detected"
        assert result.score == 90
        assert result.analyzer_name == "SqlInjection"
        assert result.category_string == "16,45"

    @pytest.mark.parametrize("raw,expected", [(-10, 0), (0, 0), (55, 55), (100, 100), (250, 100)])
    def test_score_clamped(self, raw, expected):
        """Test that scores are clamped into 0-100."""
        result = DetectionResult.create([15], "x", raw, "Test")

        assert result.score == expected

    def test_empty_categories_rejected(self):
        """Test that at least one category is required."""
        with pytest.raises(InvalidResultError):
            DetectionResult.create([], "x", 50, "Test")

    def test_long_comment_truncated(self):
        """Test the comment length limit."""
        result = DetectionResult.create([15], "a" * 1000, 50, "Test")

        assert len(result.comment) == 255
        assert result.comment.endswith("...")

    def test_short_comment_kept(self):
        """Test that comments within the limit are not touched."""
        comment = "b" * 255
        result = DetectionResult.create([15], comment, 50, "Test")

        assert result.comment == comment

    def test_result_is_frozen(self):
        """Test immutability."""
        result = DetectionResult.create([15], "x", 50, "Test")

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.score = 10

    def test_to_dict(self):
        """Test dictionary export."""
        result = DetectionResult.create((58, 15), "Config", 90, "ConfigAccess")

        assert result.to_dict() == {
            "categories": [58, 15],
            "comment": "Config",
            "score": 90,
            "analyzer_name": "ConfigAccess",
        }

    def test_helpers(self):
        """Test module helpers."""
        assert clamp_score(101) == 100
        assert clamp_score(-1) == 0
        assert truncate_comment("abcdef", limit=5) == "ab..."
        assert truncate_comment("abc", limit=5) == "abc"


class TestCategoryRegistry:
    """Test category lookups."""

    def test_table_covers_all_ids(self):
        """Test that ids 1 to 58 are defined."""
        assert sorted(CATEGORIES) == list(range(1, 59))

    def test_lookups(self):
        """Test name, description and severity lookup."""
        assert CategoryRegistry.get_name(16) == "SQL Injection"
        assert CategoryRegistry.get_description(33) == "WordPress XML-RPC interface abuse"
        assert CategoryRegistry.get_severity(29) == 10
        assert CategoryRegistry.get(58).name == "Config File Exposure"
        assert CategoryRegistry.exists(1)

    def test_unknown_category(self):
        """Test fallbacks for unknown ids."""
        assert CategoryRegistry.get(999) is None
        assert CategoryRegistry.get_name(999) == "Unknown (999)"
        assert CategoryRegistry.get_description(999) == "Unknown category"
        assert CategoryRegistry.get_severity(999) == 5
        assert not CategoryRegistry.exists(0)

    @pytest.mark.parametrize("severity,expected", [
        (10, "critical"), (8, "critical"), (7, "high"), (5, "high"), (4, "medium"), (3, "medium"), (2, "low"),
    ])
    def test_severity_class(self, severity, expected):
        """Test severity bucketing."""
        assert CategoryRegistry.severity_class(severity) == expected

    def test_category_severity_class(self):
        """Test bucketing by category id."""
        assert CategoryRegistry.category_severity_class(16) == "critical"
        assert CategoryRegistry.category_severity_class(13) == "low"

    def test_parse_category_string(self):
        """Test parsing of comma-separated ids."""
        assert CategoryRegistry.parse_category_string("16, 45") == [16, 45]
        assert CategoryRegistry.parse_category_string("16,,abc,21") == [16, 21]
        assert CategoryRegistry.parse_category_string("") == []

    def test_describe(self):
        """Test name listing."""
        assert CategoryRegistry.describe([18, 31]) == ["Brute-Force", "WP Login Brute Force"]
