"""Cross-validation of unstructured text against structured reference records."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import logging

from .fields import accessor_for
from .matcher import StringInput, prepare
from .result import ErrorKind, PipelineError, ResultValue, ensure_result
from .similarity import score
from ..config.models import SimilarityConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossValidationResult:
    """Per-field similarity scores and their aggregate statistics."""
    field_scores: Dict[str, float] = field(default_factory=dict)
    field_matches: Dict[str, bool] = field(default_factory=dict)
    is_valid: bool = False
    min_similarity: float = 0.0
    max_similarity: float = 0.0
    average_similarity: float = 0.0
    best_matching_field: Optional[str] = None
    worst_matching_field: Optional[str] = None

    @classmethod
    def from_scores(
        cls,
        field_scores: Optional[Mapping[str, float]],
        threshold: float
    ) -> 'CrossValidationResult':
        """
        Build a result from a completed score map.

        Ties for best or worst field go to the field seen first.

        Args:
            field_scores: Similarity score per field
            threshold: Minimum score for a field to count as matched

        Returns:
            CrossValidationResult: Aggregated result; invalid when empty
        """
        scores = dict(field_scores or {})
        if not scores:
            return cls()

        matches = {name: value >= threshold for name, value in scores.items()}

        best_field = worst_field = None
        for name, value in scores.items():
            if best_field is None or value > scores[best_field]:
                best_field = name
            if worst_field is None or value < scores[worst_field]:
                worst_field = name

        values = list(scores.values())
        return cls(
            field_scores=scores,
            field_matches=matches,
            is_valid=all(matches.values()),
            min_similarity=min(values),
            max_similarity=max(values),
            average_similarity=sum(values) / len(values),
            best_matching_field=best_field,
            worst_matching_field=worst_field
        )

    def field_score(self, name: str) -> float:
        return self.field_scores.get(name, 0.0)

    def field_match(self, name: str) -> bool:
        return self.field_matches.get(name, False)


class CrossValidator:
    """Scores one string against several fields of a reference record."""

    def __init__(self, config: Optional[SimilarityConfig] = None):
        self.config = config or SimilarityConfig()

    def score_fields(
        self,
        text: str,
        reference: Any,
        field_mappings: Mapping[str, str]
    ) -> Dict[str, float]:
        """
        Score text against each mapped reference field.

        Args:
            text: Unstructured text
            reference: Structured record (mapping, Series, object or FieldAccessor)
            field_mappings: Reference field name -> result key

        Returns:
            Dict[str, float]: Score per result key; missing fields score 0.0
        """
        accessor = accessor_for(reference)
        source = prepare(text, self.config)
        scores: Dict[str, float] = {}

        for source_field, result_key in field_mappings.items():
            found, field_text = accessor.get_text(source_field)
            if not found:
                logger.debug(f"Reference field {source_field!r} not found")
                scores[result_key] = 0.0
                continue
            scores[result_key] = score(
                source, prepare(field_text, self.config), self.config
            )

        return scores

    def validate(
        self,
        value: StringInput,
        reference: Any,
        field_mappings: Optional[Mapping[str, str]]
    ) -> ResultValue:
        """
        Cross-validate a value against a structured reference.

        Args:
            value: String or ResultValue holding the unstructured text
            reference: Structured reference record
            field_mappings: Reference field name -> result key

        Returns:
            ResultValue: Result holding a CrossValidationResult
        """
        result = ensure_result(value)
        if not result.is_valid:
            return ResultValue(None, False, result.errors)

        if reference is None:
            return ResultValue.invalid(
                "Reference data is null", "cross_validate",
                ErrorKind.CONFIGURATION_ERROR, errors=result.errors
            )
        if not field_mappings:
            return ResultValue.invalid(
                "Field mappings are null or empty", "cross_validate",
                ErrorKind.CONFIGURATION_ERROR, errors=result.errors
            )

        try:
            scores = self.score_fields(result.value, reference, field_mappings)
        except Exception as e:
            logger.warning(f"Error in cross_validate: {e}")
            return ResultValue.invalid(
                f"Cross-validation error: {e}", "cross_validate",
                errors=result.errors
            )

        outcome = CrossValidationResult.from_scores(
            scores, self.config.similarity_threshold
        )
        if outcome.is_valid:
            return ResultValue(outcome, True, result.errors)

        error = PipelineError(
            self.config.error_message or (
                f"Cross-validation failed: {outcome.worst_matching_field} "
                f"similarity {outcome.min_similarity:.2f} below threshold"
            ),
            "cross_validate",
            ErrorKind.VALIDATION_FAILURE
        )
        return ResultValue(outcome, False, result.errors + (error,))


def cross_validate(
    value: StringInput,
    reference: Any,
    field_mappings: Optional[Mapping[str, str]],
    config: Optional[SimilarityConfig] = None
) -> ResultValue:
    return CrossValidator(config).validate(value, reference, field_mappings)
