"""
Fluent Pipeline
===============

Extraction of typed values from raw strings and approximate comparison of
those values against reference data, for data-cleaning scenarios such as
matching invoices, OCR output or free-form user entry against structured
records.

Key Features:
- Edit distance, Jaro and Jaro-Winkler similarity
- Address, phone, name and generic text normalization
- Regex extraction with fuzzy selection among several candidates
- Typo correction and best-match lookup against reference lists
- Cross-validation of free text against fields of a structured record
- Errors accumulated on immutable result values instead of raised
"""

from .core.result import ErrorKind, ExtractionError, PipelineError, ResultValue
from .core.similarity import (
    edit_distance,
    find_best,
    jaro_similarity,
    jaro_winkler_similarity,
    edit_distance_similarity,
    similarity
)
from .core.normalizer import (
    normalize_address,
    normalize_name,
    normalize_phone,
    normalize_text,
    register_normalizer
)
from .core.extractor import (
    Extractor,
    extract,
    extract_bool,
    extract_date,
    extract_decimal,
    extract_double,
    extract_guid,
    extract_int
)
from .core.matcher import (
    FuzzyMatcher,
    correct_typos,
    fuzzy_contains,
    fuzzy_match,
    fuzzy_match_many
)
from .core.cross_validation import CrossValidationResult, CrossValidator, cross_validate
from .core.fields import FieldAccessor
from .core.batch import BatchMatch, cross_validate_many, match_many_batch

from .config.models import (
    CustomSimilarity,
    ExtractionConfig,
    FuzzyMode,
    NormalizationKind,
    SimilarityAlgorithm,
    SimilarityConfig
)
from .config.patterns import PatternTable, register_pattern

__version__ = "1.0.0"
