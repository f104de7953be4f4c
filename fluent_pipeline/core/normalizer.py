"""Normalization of addresses, phone numbers, names and free text."""

from typing import Any, Dict, Type
from abc import ABC, abstractmethod
import pandas as pd
import re

ADDRESS_ABBREVIATIONS: Dict[str, str] = {
    'st': 'Street',
    'ave': 'Avenue',
    'rd': 'Road',
    'blvd': 'Boulevard',
    'dr': 'Drive',
    'ln': 'Lane',
    'ct': 'Court',
    'pl': 'Place',
    'pkwy': 'Parkway',
    'hwy': 'Highway',
}

COMMON_WORDS = frozenset({
    'the', 'a', 'an', 'and', 'or', 'but', 'of', 'in', 'on', 'at', 'to', 'for'
})

_PUNCTUATION = re.compile(r'[^\w\s]|_')
_WHITESPACE = re.compile(r'\s+')
_NON_DIGIT = re.compile(r'\D')
_PHONE_EXTENSION = re.compile(
    r'\s*(?:extension|ext|x)\.?[\s:]*\d+\s*$', re.IGNORECASE
)
_NAME_TITLE = re.compile(
    r'^(?:Mr|Mrs|Ms|Miss|Dr|Doctor|Prof|Professor)\.?\s+', re.IGNORECASE
)


def _is_null(value: Any) -> bool:
    """Check if value is null/empty."""
    if isinstance(value, str):
        return not value
    return value is None or bool(pd.isna(value))


def normalize_address(
    address: Any,
    lowercase: bool = True,
    remove_common_words: bool = False
) -> str:
    """
    Normalize an address for comparison.

    The text is optionally lowercased, punctuation becomes whitespace,
    whitespace is collapsed, street type abbreviations are expanded per
    token and common words are optionally dropped. The result is a fixed
    point: normalizing it again returns it unchanged.

    Args:
        address: Address to normalize
        lowercase: Whether to lowercase the result
        remove_common_words: Whether to drop words such as 'The' or 'Of'

    Returns:
        str: Normalized address
    """
    if _is_null(address):
        return ''

    text = str(address)
    if lowercase:
        # case folding can emit combining marks; fold before stripping
        text = text.lower()
    text = _PUNCTUATION.sub(' ', text)
    words = text.split()
    words = [ADDRESS_ABBREVIATIONS.get(w.lower(), w) for w in words]

    if remove_common_words:
        words = [w for w in words if w.lower() not in COMMON_WORDS]

    text = ' '.join(words)
    if lowercase:
        text = text.lower()
    return text


def normalize_phone(phone: Any, remove_extensions: bool = True) -> str:
    """Reduce a phone number to its digits, dropping a trailing extension."""
    if _is_null(phone):
        return ''

    text = str(phone)
    if remove_extensions:
        text = _PHONE_EXTENSION.sub('', text)
    return _NON_DIGIT.sub('', text)


def normalize_name(
    name: Any,
    lowercase: bool = True,
    remove_titles: bool = False
) -> str:
    """
    Normalize a person's name.

    Args:
        name: Name to normalize
        lowercase: Whether to lowercase the result
        remove_titles: Whether to strip a leading title such as 'Dr.'

    Returns:
        str: Normalized name
    """
    if _is_null(name):
        return ''

    text = str(name)
    if remove_titles:
        text = _NAME_TITLE.sub('', text, count=1)

    text = _WHITESPACE.sub(' ', text).strip()
    if lowercase:
        text = text.lower()
    return text


def normalize_text(
    text: Any,
    lowercase: bool = True,
    remove_punctuation: bool = False,
    collapse_whitespace: bool = True,
    trim: bool = True
) -> str:
    """Generic normalization; each step applies only when enabled."""
    if _is_null(text):
        return ''

    text = str(text)
    if remove_punctuation:
        text = _PUNCTUATION.sub(' ', text)
    if collapse_whitespace:
        text = _WHITESPACE.sub(' ', text)
    if lowercase:
        text = text.lower()
    if trim:
        text = text.strip()
    return text


class BaseNormalizer(ABC):
    """Base class for normalizers."""

    @abstractmethod
    def process(self, value: Any) -> str:
        """Process a value into a canonical string."""
        pass


class AddressNormalizer(BaseNormalizer):
    """Expands street abbreviations and strips punctuation."""

    def __init__(self, lowercase: bool = True, remove_common_words: bool = False):
        self.lowercase = lowercase
        self.remove_common_words = remove_common_words

    def process(self, value: Any) -> str:
        return normalize_address(value, self.lowercase, self.remove_common_words)


class PhoneNormalizer(BaseNormalizer):
    """Keeps only the digits of a phone number."""

    def __init__(self, lowercase: bool = True, remove_extensions: bool = True):
        # digits carry no case; lowercase is ignored
        self.remove_extensions = remove_extensions

    def process(self, value: Any) -> str:
        return normalize_phone(value, self.remove_extensions)


class NameNormalizer(BaseNormalizer):
    """Collapses whitespace and optionally strips a leading title."""

    def __init__(self, lowercase: bool = True, remove_titles: bool = False):
        self.lowercase = lowercase
        self.remove_titles = remove_titles

    def process(self, value: Any) -> str:
        return normalize_name(value, self.lowercase, self.remove_titles)


class TextNormalizer(BaseNormalizer):
    """Generic configurable text normalization."""

    def __init__(
        self,
        lowercase: bool = True,
        remove_punctuation: bool = False,
        collapse_whitespace: bool = True,
        trim: bool = True
    ):
        self.lowercase = lowercase
        self.remove_punctuation = remove_punctuation
        self.collapse_whitespace = collapse_whitespace
        self.trim = trim

    def process(self, value: Any) -> str:
        return normalize_text(
            value,
            self.lowercase,
            self.remove_punctuation,
            self.collapse_whitespace,
            self.trim
        )


class NormalizerRegistry:
    """Registry for normalizer types."""

    def __init__(self):
        self._normalizers: Dict[str, Type[BaseNormalizer]] = {}
        self.generation = 0
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default normalizers."""
        self.register('address', AddressNormalizer)
        self.register('phone', PhoneNormalizer)
        self.register('name', NameNormalizer)
        self.register('text', TextNormalizer)

    def register(self, name: str, normalizer_class: Type[BaseNormalizer]) -> None:
        """
        Register a new normalizer type.

        Args:
            name: Name to register the normalizer under
            normalizer_class: Normalizer class to register
        """
        self._normalizers[name] = normalizer_class
        self.generation += 1

    def create(self, name: str, **kwargs: Any) -> BaseNormalizer:
        """
        Create a normalizer instance.

        Args:
            name: Name of the normalizer type
            **kwargs: Configuration parameters for the normalizer

        Returns:
            BaseNormalizer: Configured normalizer instance

        Raises:
            ValueError: If normalizer type not found
        """
        normalizer_class = self._normalizers.get(name)
        if not normalizer_class:
            raise ValueError(f"Unknown normalizer type: {name}")

        return normalizer_class(**kwargs)

    def __contains__(self, name: str) -> bool:
        return name in self._normalizers


# Global registry instance
registry = NormalizerRegistry()


def register_normalizer(name: str, normalizer_class: Type[BaseNormalizer]) -> None:
    """
    Register a new normalizer type globally.

    Args:
        name: Name to register the normalizer under
        normalizer_class: Normalizer class to register
    """
    registry.register(name, normalizer_class)
