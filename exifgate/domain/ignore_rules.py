"""Module: ignore_rules.py.

Author: Michael Economou
Date: 2026-02-10

Immutable snapshot of the ignore configuration.

The gateway holds a single IgnoreRules reference and replaces it wholesale on
every update, so concurrent exchanges always see either the old or the new
rules, never a mix.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from exifgate.config import FIELD_SEPARATOR


def normalize_line_prefixes(lines: Iterable[str]) -> frozenset[str]:
    """Append the field separator to each configured tag name."""
    return frozenset(f"{line}{FIELD_SEPARATOR}" for line in lines)


@dataclass(frozen=True)
class IgnoreRules:
    """MIME types to skip and result-line prefixes to drop.

    Attributes:
        types_to_ignore: Exact MIME type strings
        line_prefixes: Tag names with the field separator already appended

    """

    types_to_ignore: frozenset[str] = field(default_factory=frozenset)
    line_prefixes: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, types: Iterable[str] = (), lines: Iterable[str] = ()) -> IgnoreRules:
        """Build rules from raw configured values (lines without separator)."""
        return cls(frozenset(types), normalize_line_prefixes(lines))

    def with_types(self, types: Iterable[str]) -> IgnoreRules:
        return replace(self, types_to_ignore=frozenset(types))

    def with_lines(self, lines: Iterable[str]) -> IgnoreRules:
        return replace(self, line_prefixes=normalize_line_prefixes(lines))

    def ignores_type(self, stated: str | None, inferred: str | None) -> bool:
        """True if either the stated or the inferred MIME type is ignored."""
        return stated in self.types_to_ignore or inferred in self.types_to_ignore

    def keeps_line(self, line: str) -> bool:
        """True unless the line starts with an ignored tag followed by the separator."""
        return not any(line.startswith(prefix) for prefix in self.line_prefixes)
