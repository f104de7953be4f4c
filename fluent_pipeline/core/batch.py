"""Element-wise batch versions of fuzzy matching and cross-validation."""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Mapping, NamedTuple, Optional, Union
import logging

from .cross_validation import CrossValidationResult, CrossValidator
from .matcher import FuzzyMatcher
from .result import ErrorKind, ResultValue, ensure_result
from ..config.models import SimilarityConfig

logger = logging.getLogger(__name__)

BatchInput = Union[Iterable[str], ResultValue]


class BatchMatch(NamedTuple):
    """Best reference match for one batch element."""
    source: str
    match: Optional[str]
    score: float


def _map_in_order(
    func: Callable[[Any], ResultValue],
    values: List[Any],
    max_workers: Optional[int]
) -> List[ResultValue]:
    """Apply func to every element, keeping input order."""
    if max_workers and max_workers > 1 and len(values) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(func, values))
    return [func(value) for value in values]


def _unwrap(values: BatchInput, operation: str):
    """Return (outer result, element list) or (failed result, None)."""
    outer = ensure_result(values)
    if not outer.is_valid:
        return ResultValue(None, False, outer.errors), None
    if outer.value is None:
        return ResultValue.invalid(
            "Input collection is null", operation,
            ErrorKind.INPUT_EMPTY, value=[], errors=outer.errors
        ), None
    return outer, list(outer.value)


def match_many_batch(
    values: BatchInput,
    reference_values: Optional[Iterable[str]],
    config: Optional[SimilarityConfig] = None,
    max_workers: Optional[int] = None
) -> ResultValue:
    """
    Find the best reference match for every element.

    Args:
        values: Strings (or a ResultValue wrapping them) to match
        reference_values: Candidate reference strings
        config: Similarity configuration
        max_workers: Thread count for parallel scoring (sequential if unset)

    Returns:
        ResultValue: List of per-element ResultValue[BatchMatch]; the
        aggregate keeps the validity of the input collection
    """
    outer, elements = _unwrap(values, "fuzzy_match_many_batch")
    if elements is None:
        return outer
    if reference_values is None:
        return ResultValue.invalid(
            "Reference values are null", "fuzzy_match_many_batch",
            ErrorKind.INPUT_EMPTY, value=[], errors=outer.errors
        )

    config = config or SimilarityConfig()
    matcher = FuzzyMatcher(config)
    references = list(reference_values)

    def match_one(value: str) -> ResultValue:
        result = matcher.match_many(value, references)
        best_match, best_score = result.value or (None, 0.0)
        if result.is_valid or (config.return_best_match and best_match is not None):
            return ResultValue(BatchMatch(value, best_match, best_score),
                               result.is_valid, result.errors)
        return ResultValue(BatchMatch(value, None, 0.0), False, result.errors)

    results = _map_in_order(match_one, elements, max_workers)
    logger.debug(
        f"Batch match: {sum(r.is_valid for r in results)}/{len(results)} matched"
    )
    return ResultValue(results, outer.is_valid, outer.errors)


def cross_validate_many(
    values: BatchInput,
    reference: Any,
    field_mappings: Optional[Mapping[str, str]],
    config: Optional[SimilarityConfig] = None,
    max_workers: Optional[int] = None
) -> ResultValue:
    """
    Cross-validate every element against the same reference record.

    Args:
        values: Strings (or a ResultValue wrapping them) to validate
        reference: Structured reference record
        field_mappings: Reference field name -> result key
        config: Similarity configuration
        max_workers: Thread count for parallel scoring (sequential if unset)

    Returns:
        ResultValue: List of per-element ResultValue[CrossValidationResult];
        valid only if every element is valid. Elements that fail before
        scoring carry an empty CrossValidationResult, elements scored below
        the threshold keep their scores
    """
    outer, elements = _unwrap(values, "cross_validate_many")
    if elements is None:
        return outer

    validator = CrossValidator(config)

    def validate_one(value: str) -> ResultValue:
        result = validator.validate(value, reference, field_mappings)
        if result.value is None:
            return result.with_value(CrossValidationResult())
        return result

    results = _map_in_order(validate_one, elements, max_workers)
    all_valid = all(r.is_valid for r in results)
    return ResultValue(results, all_valid and outer.is_valid, outer.errors)
