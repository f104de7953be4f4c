"""Regex-driven extraction of typed values, with fuzzy candidate selection."""

from typing import Any, Callable, List, Optional, Pattern, Tuple
import logging
import regex as re

from .converters import Converter, ConverterRegistry, acceptance_check, converters
from .matcher import prepare
from .result import ErrorKind, ExtractionError, PipelineError, ResultValue
from .similarity import find_best, score
from ..config.models import ExtractionConfig, FuzzyMode, SimilarityConfig
from ..config.patterns import PatternTable, default_patterns

logger = logging.getLogger(__name__)

OPERATION = "extract"

# Characters counted as clean in the extractability score
_CLEAN_PUNCTUATION = frozenset('-/.: ')


def extractability(candidate: str) -> float:
    """
    Score how cleanly a candidate is likely to convert.

    Longer candidates (up to 20 characters) and candidates made of
    alphanumerics and common separators score higher.
    """
    if not candidate:
        return 0.0
    length_score = min(1.0, len(candidate) / 20.0)
    clean = sum(1 for c in candidate if c.isalnum() or c in _CLEAN_PUNCTUATION)
    return length_score * 0.4 + (clean / len(candidate)) * 0.6


class _Failure(Exception):
    """Internal signal carrying a handled extraction failure."""

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.error = PipelineError(message, OPERATION, kind)


class Extractor:
    """
    Extracts typed values from strings.

    A pattern locates candidate substrings, fuzzy scoring optionally picks
    among several candidates, and a converter turns the winner into a value.
    """

    def __init__(
        self,
        patterns: Optional[PatternTable] = None,
        converter_registry: Optional[ConverterRegistry] = None
    ):
        """
        Initialize the extractor.

        Args:
            patterns: Default pattern table (global table if omitted)
            converter_registry: Type converters (global registry if omitted)
        """
        self.patterns = patterns or default_patterns
        self.converters = converter_registry or converters

    def _resolve_pattern(
        self,
        config: ExtractionConfig,
        type_tag: Optional[str]
    ) -> Optional[Pattern]:
        if config.pattern is not None:
            if isinstance(config.pattern, str):
                return re.compile(config.pattern, config.regex_flags)
            return config.pattern
        if config.use_default_pattern:
            return self.patterns.get(type_tag)
        return None

    def _scorer(
        self,
        config: ExtractionConfig,
        similarity: SimilarityConfig
    ) -> Callable[[str], float]:
        if config.reference is None:
            return extractability
        reference = prepare(config.reference, similarity)
        return lambda candidate: score(
            prepare(candidate, similarity), reference, similarity
        )

    def _select_candidate(
        self,
        candidates: List[str],
        config: ExtractionConfig,
        similarity: SimilarityConfig,
        validator: Callable[[str], bool]
    ) -> Tuple[Optional[str], float]:
        """Apply the find-best rule and the similarity threshold."""
        best_match, best_score = find_best(
            candidates, self._scorer(config, similarity), validator
        )
        if best_match is not None and best_score >= similarity.similarity_threshold:
            return best_match, best_score
        return None, best_score

    def _validator(
        self,
        converter: Converter,
        config: ExtractionConfig,
        type_tag: Optional[str]
    ) -> Callable[[str], bool]:
        if type_tag is not None and self.converters.get(type_tag) is not None:
            return self.converters.accepts(type_tag, config)
        return acceptance_check(converter, config)

    @staticmethod
    def _group(match, group_index: int) -> Optional[str]:
        if group_index > match.re.groups:
            raise _Failure(
                f"Group index {group_index} is out of range. "
                f"Found {match.re.groups + 1} groups.",
                ErrorKind.GROUP_OUT_OF_RANGE
            )
        return match.group(group_index)

    def _candidates(self, matches, group_index: int) -> List[str]:
        candidates = []
        for match in matches:
            if group_index <= match.re.groups:
                candidates.append(match.group(group_index))
        return candidates

    def _choose(
        self,
        matches,
        config: ExtractionConfig,
        converter: Converter,
        type_tag: Optional[str]
    ) -> str:
        """Pick the string to convert from the regex matches."""
        if len(matches) > 1 and config.fuzzy_enabled:
            candidates = self._candidates(matches, config.group_index)
            best_match, best_score = self._select_candidate(
                candidates,
                config,
                config.similarity,
                self._validator(converter, config, type_tag)
            )
            if best_match is not None:
                logger.debug(f"Fuzzy extraction picked {best_match!r} ({best_score:.3f})")
                return best_match
            if config.fuzzy_mode == FuzzyMode.PRIMARY:
                raise _Failure(
                    f"No candidate met similarity threshold "
                    f"{config.similarity.similarity_threshold:.2f} "
                    f"(best {best_score:.2f})",
                    ErrorKind.VALIDATION_FAILURE
                )

        return self._group(matches[0], config.group_index)

    def _recover(
        self,
        matches,
        failed: str,
        config: ExtractionConfig,
        converter: Converter
    ) -> Optional[Tuple[str, Any]]:
        """
        Retry conversion on the best remaining candidate after a failure.

        Candidates are scored against ``config.reference`` when one is set,
        otherwise by ``extractability``. Without an attached similarity
        config the default threshold of 0.8 applies, which no candidate
        shorter than about seven characters reaches by extractability alone;
        attach a SimilarityConfig with a lower threshold to recover short
        values.
        """
        candidates = [
            c for c in self._candidates(matches, config.group_index) if c != failed
        ]
        if not candidates:
            return None

        similarity = config.similarity or SimilarityConfig()
        best_match, _ = self._select_candidate(
            candidates, config, similarity, acceptance_check(converter, config)
        )
        if best_match is None:
            return None
        return best_match, converter(best_match, config)

    def _fail(self, error: PipelineError, config: ExtractionConfig) -> ResultValue:
        if config.throw_on_failure:
            raise ExtractionError(error)
        logger.debug(f"Extraction failed: {error.message}")
        return ResultValue(None, False, (error,))

    def extract(
        self,
        source: Optional[str],
        config: Optional[ExtractionConfig],
        converter: Converter,
        type_tag: Optional[str] = None
    ) -> ResultValue:
        """
        Extract a typed value from a string.

        Args:
            source: Text to extract from
            config: Extraction configuration
            converter: Function converting the chosen substring
            type_tag: Type tag used for the default pattern and acceptance check

        Returns:
            ResultValue: Valid result holding the converted value, or an
            invalid result with one error

        Raises:
            ExtractionError: On a handled failure when throw_on_failure is set
            Exception: The converter's own exception when throw_on_failure is set
        """
        config = config or ExtractionConfig()

        if not source:
            return self._fail(
                PipelineError("Source string is null or empty", OPERATION,
                              ErrorKind.INPUT_EMPTY),
                config
            )

        matches = []
        try:
            pattern = self._resolve_pattern(config, type_tag)
            if pattern is None:
                candidate = source
            else:
                matches = list(pattern.finditer(source))
                if not matches:
                    raise _Failure(
                        f"Regex pattern '{pattern.pattern}' did not match",
                        ErrorKind.NO_MATCH
                    )
                candidate = self._choose(matches, config, converter, type_tag)
        except _Failure as failure:
            return self._fail(failure.error, config)
        except Exception as e:
            logger.warning(f"Error preparing extraction: {e}")
            return self._fail(
                PipelineError(f"Extraction failed: {e}", OPERATION,
                              ErrorKind.CONFIGURATION_ERROR),
                config
            )

        try:
            return ResultValue(converter(candidate, config))
        except Exception as e:
            conversion_error = e

        if config.fuzzy_mode == FuzzyMode.FALLBACK and matches:
            try:
                recovered = self._recover(matches, candidate, config, converter)
            except Exception as e:
                logger.warning(f"Fuzzy recovery failed: {e}")
                recovered = None
            if recovered is not None:
                logger.debug(f"Fuzzy recovery converted {recovered[0]!r}")
                return ResultValue(recovered[1])

        if config.throw_on_failure:
            raise conversion_error
        return ResultValue(None, False, (PipelineError(
            f"Extraction failed: {conversion_error}",
            OPERATION,
            ErrorKind.CONVERSION_FAILURE
        ),))


# Global extractor instance
extractor = Extractor()


def extract(
    source: Optional[str],
    config: Optional[ExtractionConfig],
    converter: Converter,
    type_tag: Optional[str] = None
) -> ResultValue:
    """Extract a typed value with the global extractor."""
    return extractor.extract(source, config, converter, type_tag)


def _typed(type_tag: str):
    def extract_typed(
        source: Optional[str],
        config: Optional[ExtractionConfig] = None
    ) -> ResultValue:
        return extractor.extract(
            source, config, extractor.converters.get(type_tag), type_tag
        )
    extract_typed.__name__ = f"extract_{type_tag.lower()}"
    extract_typed.__doc__ = f"Extract a value of type {type_tag}."
    return extract_typed


extract_date = _typed('Date')
extract_int = _typed('Int')
extract_double = _typed('Double')
extract_decimal = _typed('Decimal')
extract_bool = _typed('Bool')
extract_guid = _typed('Guid')
