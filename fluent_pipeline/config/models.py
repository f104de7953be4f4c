"""Configuration models for similarity matching and extraction."""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Pattern, Union
from enum import Enum


class SimilarityAlgorithm(str, Enum):
    """Built-in string similarity algorithms."""
    EDIT_DISTANCE = "edit_distance"
    JARO = "jaro"
    JARO_WINKLER = "jaro_winkler"


class FuzzyMode(str, Enum):
    """How similarity scoring takes part in regex candidate selection."""
    NONE = "none"
    FALLBACK = "fallback"
    PRIMARY = "primary"


class NormalizationKind(str, Enum):
    """Normalization applied to both sides of a comparison."""
    NONE = "none"
    ADDRESS = "address"
    PHONE = "phone"
    NAME = "name"


@dataclass(frozen=True)
class CustomSimilarity:
    """Caller-supplied similarity function replacing the built-in algorithms."""
    function: Callable[[str, str], float]

    def __call__(self, a: str, b: str) -> float:
        return self.function(a, b)


Algorithm = Union[SimilarityAlgorithm, CustomSimilarity]


def _coerce_algorithm(algorithm) -> Algorithm:
    if isinstance(algorithm, (SimilarityAlgorithm, CustomSimilarity)):
        return algorithm
    if isinstance(algorithm, str):
        try:
            return SimilarityAlgorithm(algorithm.lower())
        except ValueError:
            raise ValueError(f"Unknown similarity algorithm: {algorithm}")
    if callable(algorithm):
        return CustomSimilarity(algorithm)
    raise ValueError(f"Unknown similarity algorithm: {algorithm!r}")


@dataclass(frozen=True)
class SimilarityConfig:
    """Configuration for fuzzy comparisons."""
    algorithm: Algorithm = SimilarityAlgorithm.JARO_WINKLER
    similarity_threshold: float = 0.8
    case_sensitive: bool = False
    max_edit_distance: Optional[int] = None  # edit distance only
    normalize_address: bool = False
    normalize_phone: bool = False
    normalize_name: bool = False
    return_best_match: bool = False
    error_message: Optional[str] = None
    custom_similarity_function: Optional[Callable[[str, str], float]] = None

    def __post_init__(self):
        """Fold the custom function into the algorithm and check ranges."""
        algorithm = self.algorithm
        if self.custom_similarity_function is not None:
            algorithm = CustomSimilarity(self.custom_similarity_function)
        object.__setattr__(self, 'algorithm', _coerce_algorithm(algorithm))
        object.__setattr__(self, 'custom_similarity_function', None)

        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be within [0, 1], "
                f"got {self.similarity_threshold}"
            )
        if self.max_edit_distance is not None and self.max_edit_distance < 0:
            raise ValueError("max_edit_distance must not be negative")

    @property
    def uses_custom_function(self) -> bool:
        return isinstance(self.algorithm, CustomSimilarity)

    @property
    def normalization(self) -> NormalizationKind:
        """The normalization in effect; the first enabled toggle wins."""
        if self.normalize_address:
            return NormalizationKind.ADDRESS
        if self.normalize_phone:
            return NormalizationKind.PHONE
        if self.normalize_name:
            return NormalizationKind.NAME
        return NormalizationKind.NONE

    def with_threshold(self, threshold: float) -> 'SimilarityConfig':
        return replace(self, similarity_threshold=threshold)


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for extracting typed values from strings."""
    pattern: Optional[Union[str, Pattern]] = None
    group_index: int = 0  # 0 = whole match
    regex_flags: int = 0
    use_default_pattern: bool = False
    fuzzy_mode: FuzzyMode = FuzzyMode.NONE
    similarity: Optional[SimilarityConfig] = None
    reference: Optional[str] = None
    date_formats: Optional[List[str]] = None
    throw_on_failure: bool = False

    def __post_init__(self):
        if self.group_index < 0:
            raise ValueError(f"group_index must not be negative, got {self.group_index}")
        object.__setattr__(self, 'fuzzy_mode', FuzzyMode(self.fuzzy_mode))
        if isinstance(self.date_formats, str):
            object.__setattr__(self, 'date_formats', [self.date_formats])

    @property
    def fuzzy_enabled(self) -> bool:
        return self.fuzzy_mode != FuzzyMode.NONE and self.similarity is not None
