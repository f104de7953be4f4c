"""Type converters used by extraction, keyed by type tag."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional
import uuid
from dateutil import parser

from ..config.models import ExtractionConfig

Converter = Callable[[str, ExtractionConfig], Any]


def to_date(value: str, config: ExtractionConfig) -> datetime:
    """
    Parse a date, trying the configured formats before flexible parsing.

    Raises:
        ValueError: If the value cannot be parsed
    """
    text = value.strip()
    if config.date_formats:
        for fmt in config.date_formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        raise ValueError(
            f"'{text}' does not match any of the formats {config.date_formats}"
        )
    try:
        return parser.parse(text)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"'{text}' is not a valid date: {e}")


def to_int(value: str, config: ExtractionConfig) -> int:
    return int(value.strip().replace(',', ''))


def to_float(value: str, config: ExtractionConfig) -> float:
    return float(value.strip().replace(',', ''))


def to_decimal(value: str, config: ExtractionConfig) -> Decimal:
    text = value.strip().replace(',', '')
    try:
        result = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid decimal")
    if not result.is_finite():
        raise ValueError(f"'{value}' is not a finite decimal")
    return result


def to_bool(value: str, config: ExtractionConfig) -> bool:
    text = value.strip().lower()
    if text == 'true':
        return True
    if text == 'false':
        return False
    raise ValueError(f"'{value}' is not a valid boolean")


def to_guid(value: str, config: ExtractionConfig) -> uuid.UUID:
    return uuid.UUID(value.strip())


class ConverterRegistry:
    """Registry mapping type tags to converters."""

    def __init__(self):
        self._converters: Dict[str, Converter] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default converters."""
        self.register('Date', to_date)
        self.register('Int', to_int)
        self.register('Double', to_float)
        self.register('Decimal', to_decimal)
        self.register('Bool', to_bool)
        self.register('Guid', to_guid)

    def register(self, tag: str, converter: Converter) -> None:
        self._converters[tag] = converter

    def get(self, tag: Optional[str]) -> Optional[Converter]:
        if tag is None:
            return None
        return self._converters.get(tag)

    def accepts(
        self,
        tag: str,
        config: ExtractionConfig
    ) -> Callable[[str], bool]:
        """
        Build an acceptance check for a type tag.

        Args:
            tag: Type tag of the target type
            config: Extraction configuration passed to the converter

        Returns:
            Callable[[str], bool]: Whether a candidate converts cleanly

        Raises:
            ValueError: If no converter is registered for the tag
        """
        converter = self.get(tag)
        if converter is None:
            raise ValueError(f"Unknown converter type: {tag}")
        return acceptance_check(converter, config)


def acceptance_check(
    converter: Converter,
    config: ExtractionConfig
) -> Callable[[str], bool]:
    """Wrap a converter into a predicate that never raises."""
    def check(candidate: str) -> bool:
        try:
            converter(candidate, config)
        except Exception:
            return False
        return True
    return check


# Global registry instance
converters = ConverterRegistry()
