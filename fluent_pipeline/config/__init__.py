"""Configuration for similarity matching and extraction."""

from .models import (
    CustomSimilarity,
    ExtractionConfig,
    FuzzyMode,
    NormalizationKind,
    SimilarityAlgorithm,
    SimilarityConfig
)
from .patterns import PatternTable, default_patterns, register_pattern
