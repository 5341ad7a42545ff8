"""Immutable detection result produced by an analyzer."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from ..config import get_settings
from .exceptions import InvalidResultError

MIN_SCORE = 0
MAX_SCORE = 100
TRUNCATION_MARKER = "..."


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, int(score)))


def truncate_comment(comment: str, limit: int | None = None) -> str:
    if limit is None:
        limit = get_settings().COMMENT_MAX_LENGTH
    if len(comment) <= limit:
        return comment
    return comment[: limit - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """
    One analyzer's verdict on one request.

    Carries no reference back to the request, so it is safe to keep after
    the request view is gone.
    """

    categories: tuple[int, ...]
    comment: str
    score: int
    analyzer_name: str

    def __post_init__(self) -> None:
        categories = tuple(int(category) for category in self.categories)
        if not categories:
            raise InvalidResultError(f"{self.analyzer_name}: detection result needs at least one category")

        # Frozen dataclass: normalize fields in place
        object.__setattr__(self, "categories", categories)
        object.__setattr__(self, "score", clamp_score(self.score))
        object.__setattr__(self, "comment", truncate_comment(str(self.comment)))

    @classmethod
    def create(cls, categories: Iterable[int], comment: str, score: int, analyzer_name: str) -> "DetectionResult":
        return cls(tuple(categories), comment, score, analyzer_name)

    @property
    def category_string(self) -> str:
        """Categories as the comma-separated string the reporting API takes."""
        return ",".join(str(category) for category in self.categories)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["categories"] = list(self.categories)
        return data
