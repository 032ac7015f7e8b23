"""Shared data types for sanitizer results."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UrlVerdict:
    """Outcome of classifying a candidate URL."""

    url: Optional[str]
    classification: str
    matched_protocol: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.url is not None
