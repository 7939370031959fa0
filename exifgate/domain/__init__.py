"""Domain types: ignore rules and response metadata."""

from exifgate.domain.ignore_rules import IgnoreRules
from exifgate.domain.response_info import ResponseInfo, analyze_response, sniff_mime_type

__all__ = [
    "IgnoreRules",
    "ResponseInfo",
    "analyze_response",
    "sniff_mime_type",
]
