"""Built-in extraction patterns keyed by target type."""

from typing import Dict, Optional, Pattern
import regex as re

DEFAULT_PATTERNS: Dict[str, str] = {
    'Date': r'\d{4}-\d{1,2}-\d{1,2}|\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}',
    'Int': r'[-+]?\d+',
    'Double': r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?',
    'Decimal': r'[-+]?\d{1,3}(?:,\d{3})+(?:\.\d+)?|[-+]?\d+(?:\.\d+)?',
    'Bool': r'(?i)\b(?:true|false)\b',
    'Guid': (
        r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-'
        r'[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'
    ),
}


class PatternTable:
    """Overridable mapping from a type tag to a compiled pattern."""

    def __init__(self, patterns: Optional[Dict[str, str]] = None):
        self._patterns: Dict[str, Pattern] = {}
        for tag, pattern in (DEFAULT_PATTERNS if patterns is None else patterns).items():
            self.register(tag, pattern)

    def register(self, tag: str, pattern: str) -> None:
        """
        Register or replace the pattern for a type tag.

        Args:
            tag: Type tag such as 'Int' or 'Date'
            pattern: Regular expression source
        """
        self._patterns[tag] = re.compile(pattern)

    def get(self, tag: Optional[str]) -> Optional[Pattern]:
        if tag is None:
            return None
        return self._patterns.get(tag)

    def __contains__(self, tag: str) -> bool:
        return tag in self._patterns


# Global pattern table
default_patterns = PatternTable()


def register_pattern(tag: str, pattern: str) -> None:
    """Register a pattern in the global table."""
    default_patterns.register(tag, pattern)
