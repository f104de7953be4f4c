"""Fuzzy comparison of pipeline values against reference strings."""

from functools import lru_cache
from typing import Iterable, Optional, Tuple, Union
import logging

from .normalizer import registry as normalizer_registry
from .result import ErrorKind, PipelineError, ResultValue, ensure_result
from .similarity import edit_distance, find_best, score
from ..config.models import NormalizationKind, SimilarityAlgorithm, SimilarityConfig

logger = logging.getLogger(__name__)

MatchPair = Tuple[Optional[str], float]
StringInput = Union[str, ResultValue]


@lru_cache(maxsize=10000)
def _prepare_cached(
    text: str,
    kind: NormalizationKind,
    case_sensitive: bool,
    generation: int
) -> str:
    # generation changes whenever a normalizer is (re)registered
    if kind != NormalizationKind.NONE:
        normalizer = normalizer_registry.create(
            kind.value, lowercase=not case_sensitive
        )
        text = normalizer.process(text)
    if not case_sensitive:
        text = text.lower()
    return text


def prepare(text: Optional[str], config: SimilarityConfig) -> str:
    """
    Apply the configured normalization and case folding to a string.

    Args:
        text: String to prepare
        config: Similarity configuration

    Returns:
        str: Prepared string ('' for None)
    """
    if text is None:
        return ''
    return _prepare_cached(
        str(text),
        config.normalization,
        config.case_sensitive,
        normalizer_registry.generation
    )


class FuzzyMatcher:
    """
    Compares string pipeline values against references using a
    similarity configuration.

    Every operation accepts either a raw string or a ResultValue. Invalid
    inputs are passed through untouched and failures are recorded as errors
    rather than raised.
    """

    def __init__(self, config: Optional[SimilarityConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Similarity configuration (defaults to Jaro-Winkler at 0.8)
        """
        self.config = config or SimilarityConfig()
        self._initialize_logging()

    def _initialize_logging(self) -> None:
        """Setup logging configuration."""
        self.logger = logging.getLogger('fluent_pipeline')
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - %(message)s'
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)

    def _error(self, default_message: str, operation: str) -> PipelineError:
        return PipelineError(
            self.config.error_message or default_message,
            operation,
            ErrorKind.VALIDATION_FAILURE
        )

    def _score(self, value: str, reference: str) -> float:
        return score(value, reference, self.config)

    def normalize(
        self,
        value: StringInput,
        kind: Union[NormalizationKind, str]
    ) -> ResultValue:
        """
        Replace the payload with its normalized form.

        Args:
            value: String or ResultValue to normalize
            kind: Registered normalizer name ('address', 'phone', 'name', ...)

        Returns:
            ResultValue: Result holding the normalized string
        """
        result = ensure_result(value)
        if not result.is_valid:
            return result

        name = kind.value if isinstance(kind, NormalizationKind) else kind
        operation = f"normalize_{name}"
        try:
            normalizer = normalizer_registry.create(
                name, lowercase=not self.config.case_sensitive
            )
            return result.with_value(normalizer.process(result.value))
        except Exception as e:
            logger.warning(f"Error in {operation}: {e}")
            return result.with_error(
                f"Normalization error: {e}", operation, ErrorKind.CONFIGURATION_ERROR
            )

    def match(self, value: StringInput, reference: Optional[str]) -> ResultValue:
        """
        Check that a value is similar enough to one reference string.

        Args:
            value: String or ResultValue to validate
            reference: Reference string

        Returns:
            ResultValue: Same payload with updated validity
        """
        result = ensure_result(value)
        if not result.is_valid:
            return result

        try:
            source = prepare(result.value, self.config)
            target = prepare(reference, self.config)

            max_distance = self.config.max_edit_distance
            if (self.config.algorithm == SimilarityAlgorithm.EDIT_DISTANCE and
                    max_distance is not None):
                distance = edit_distance(source, target)
                if distance > max_distance:
                    return result.with_validation(False, self._error(
                        f"Fuzzy match failed: edit distance {distance} "
                        f"exceeds maximum {max_distance}",
                        "fuzzy_match"
                    ))

            similarity = self._score(source, target)
            is_valid = similarity >= self.config.similarity_threshold
            logger.debug(f"fuzzy_match {source!r} vs {target!r}: {similarity:.3f}")

            error = None if is_valid else self._error(
                f"Fuzzy match failed: similarity {similarity:.2f} below "
                f"threshold {self.config.similarity_threshold:.2f}",
                "fuzzy_match"
            )
            return result.with_validation(is_valid, error)

        except Exception as e:
            logger.warning(f"Error in fuzzy_match: {e}")
            return result.with_error(f"Fuzzy matching error: {e}", "fuzzy_match")

    def contains(self, value: StringInput, substring: Optional[str]) -> ResultValue:
        """
        Check that a value approximately contains a substring.

        A window of the substring's length slides across the value and the
        best window score is compared against the threshold.

        Args:
            value: String or ResultValue to search in
            substring: Text to look for

        Returns:
            ResultValue: Same payload with updated validity
        """
        result = ensure_result(value)
        if not result.is_valid:
            return result

        if not result.value or not substring:
            return result.with_validation(False, PipelineError(
                "Fuzzy contains failed: input or substring is null or empty",
                "fuzzy_contains",
                ErrorKind.INPUT_EMPTY
            ))

        try:
            source = prepare(result.value, self.config)
            target = prepare(substring, self.config)

            window_length = len(target)
            best_similarity = 0.0

            for i in range(len(source) - window_length + 1):
                window = source[i:i + window_length]
                best_similarity = max(best_similarity, self._score(window, target))
                if best_similarity >= 1.0:
                    break

            if window_length > len(source):
                best_similarity = max(best_similarity, self._score(source, target))

            is_valid = best_similarity >= self.config.similarity_threshold
            error = None if is_valid else self._error(
                f"Fuzzy contains failed: best similarity {best_similarity:.2f} "
                f"below threshold {self.config.similarity_threshold:.2f}",
                "fuzzy_contains"
            )
            return result.with_validation(is_valid, error)

        except Exception as e:
            logger.warning(f"Error in fuzzy_contains: {e}")
            return result.with_error(f"Fuzzy contains error: {e}", "fuzzy_contains")

    def _best_candidate(self, value: str, candidates: Iterable[str]) -> MatchPair:
        source = prepare(value, self.config)
        return find_best(
            candidates,
            lambda candidate: self._score(source, prepare(candidate, self.config))
        )

    def correct_typos(
        self,
        value: StringInput,
        correct_values: Optional[Iterable[str]]
    ) -> ResultValue:
        """
        Replace the payload with the closest known-correct value.

        The substituted value keeps the casing and punctuation of the entry
        in ``correct_values``. Without a close enough entry the payload is
        left unchanged, unless ``return_best_match`` is set.

        Args:
            value: String or ResultValue to correct
            correct_values: Known-correct spellings

        Returns:
            ResultValue: Corrected (or unchanged) result
        """
        result = ensure_result(value)
        if not result.is_valid:
            return result
        if not result.value or correct_values is None:
            return result

        try:
            best_match, best_similarity = self._best_candidate(
                result.value, correct_values
            )
        except Exception as e:
            logger.warning(f"Error in correct_typos: {e}")
            return result.with_error(f"Typo correction error: {e}", "correct_typos")

        if best_match is None:
            return result
        if (best_similarity >= self.config.similarity_threshold or
                self.config.return_best_match):
            logger.debug(
                f"correct_typos {result.value!r} -> {best_match!r} "
                f"({best_similarity:.3f})"
            )
            return result.with_value(best_match)
        return result

    def match_many(
        self,
        value: StringInput,
        reference_values: Optional[Iterable[str]]
    ) -> ResultValue:
        """
        Find the best matching reference value.

        Args:
            value: String or ResultValue to match
            reference_values: Candidate reference strings

        Returns:
            ResultValue: Result holding a ``(best_match, score)`` pair. When no
            candidate reaches the threshold the result is invalid but still
            carries the best pair found.
        """
        result = ensure_result(value)
        if not result.is_valid:
            return ResultValue(None, False, result.errors)

        if not result.value or reference_values is None:
            return ResultValue.invalid(
                "Input value or reference values are null or empty",
                "fuzzy_match_many",
                ErrorKind.INPUT_EMPTY,
                value=(None, 0.0),
                errors=result.errors
            )

        try:
            best_match, best_similarity = self._best_candidate(
                result.value, reference_values
            )
        except Exception as e:
            logger.warning(f"Error in fuzzy_match_many: {e}")
            return ResultValue.invalid(
                f"Fuzzy match many error: {e}",
                "fuzzy_match_many",
                errors=result.errors
            )

        pair = (best_match, best_similarity)
        is_valid = (best_match is not None and
                    best_similarity >= self.config.similarity_threshold)

        if not is_valid and not self.config.return_best_match:
            return ResultValue(pair, False, result.errors + (self._error(
                f"No match found: best similarity {best_similarity:.2f} below "
                f"threshold {self.config.similarity_threshold:.2f}",
                "fuzzy_match_many"
            ),))

        return ResultValue(pair, is_valid, result.errors)


def fuzzy_match(
    value: StringInput,
    reference: Optional[str],
    config: Optional[SimilarityConfig] = None
) -> ResultValue:
    return FuzzyMatcher(config).match(value, reference)


def fuzzy_contains(
    value: StringInput,
    substring: Optional[str],
    config: Optional[SimilarityConfig] = None
) -> ResultValue:
    return FuzzyMatcher(config).contains(value, substring)


def correct_typos(
    value: StringInput,
    correct_values: Optional[Iterable[str]],
    config: Optional[SimilarityConfig] = None
) -> ResultValue:
    return FuzzyMatcher(config).correct_typos(value, correct_values)


def fuzzy_match_many(
    value: StringInput,
    reference_values: Optional[Iterable[str]],
    config: Optional[SimilarityConfig] = None
) -> ResultValue:
    return FuzzyMatcher(config).match_many(value, reference_values)
