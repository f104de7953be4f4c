"""Tests for ResultValue, PipelineError and the configuration models."""

import dataclasses
from datetime import datetime

import pytest

from fluent_pipeline.core.result import ErrorKind, PipelineError, ResultValue, ensure_result
from fluent_pipeline.config.models import (
    CustomSimilarity,
    ExtractionConfig,
    FuzzyMode,
    NormalizationKind,
    SimilarityAlgorithm,
    SimilarityConfig,
)


class TestPipelineError:
    """Tests for PipelineError."""

    def test_fields(self):
        error = PipelineError("bad input", "extract", ErrorKind.INPUT_EMPTY)
        assert error.message == "bad input"
        assert error.operation == "extract"
        assert error.kind == ErrorKind.INPUT_EMPTY
        assert isinstance(error.timestamp, datetime)

    def test_str_with_operation(self):
        error = PipelineError("bad input", "extract")
        assert str(error).endswith("] extract: bad input")

    def test_str_without_operation(self):
        assert str(PipelineError("bad input")).endswith("] bad input")

    def test_empty_message_rejected(self):
        with pytest.raises(ValueError):
            PipelineError("")

    def test_immutable(self):
        error = PipelineError("bad input")
        with pytest.raises(dataclasses.FrozenInstanceError):
            error.message = "changed"


class TestResultValue:
    """Tests for ResultValue."""

    def test_defaults(self):
        result = ResultValue.of(5)
        assert result.value == 5
        assert result.is_valid
        assert result.errors == ()

    def test_errors_become_tuple(self):
        result = ResultValue("x", False, [PipelineError("a")])
        assert isinstance(result.errors, tuple)

    def test_with_value_keeps_state(self):
        result = ResultValue("42", False, (PipelineError("a"),))
        converted = result.with_value(42)
        assert converted.value == 42
        assert not converted.is_valid
        assert converted.errors == result.errors
        assert result.value == "42"

    def test_with_validation_failure_appends(self):
        error = PipelineError("too small")
        result = ResultValue.of(1).with_validation(False, error)
        assert not result.is_valid
        assert result.errors == (error,)

    def test_with_validation_success_keeps_invalid(self):
        invalid = ResultValue(1, False, (PipelineError("a"),))
        result = invalid.with_validation(True, PipelineError("ignored"))
        assert not result.is_valid
        assert len(result.errors) == 1

    def test_with_error_accumulates_in_order(self):
        result = ResultValue.of("x").with_error("first").with_error("second", "stage")
        assert not result.is_valid
        assert result.error_messages == ("first", "second")
        assert result.errors[1].operation == "stage"

    def test_invalid_factory(self):
        prior = (PipelineError("earlier"),)
        result = ResultValue.invalid(
            "failed", "extract", ErrorKind.NO_MATCH, errors=prior
        )
        assert result.value is None
        assert not result.is_valid
        assert result.error_messages == ("earlier", "failed")
        assert result.errors[-1].kind == ErrorKind.NO_MATCH

    def test_validate(self):
        assert ResultValue.of(10).validate(lambda v: v > 5).is_valid

        failed = ResultValue.of(3).validate(lambda v: v > 5, "too small")
        assert not failed.is_valid
        assert failed.errors[0].kind == ErrorKind.VALIDATION_FAILURE
        assert failed.value == 3

    def test_validate_raising_predicate(self):
        result = ResultValue.of(None).validate(lambda v: v > 5)
        assert not result.is_valid
        assert result.error_messages[0].startswith("Validation error")

    def test_validate_skips_invalid(self):
        invalid = ResultValue(3, False)
        assert invalid.validate(lambda v: False) is invalid

    def test_immutable(self):
        result = ResultValue.of(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.value = 2

    def test_ensure_result(self):
        result = ResultValue.of("x")
        assert ensure_result(result) is result
        assert ensure_result("x") == ResultValue("x")


class TestSimilarityConfig:
    """Tests for SimilarityConfig."""

    def test_defaults(self):
        config = SimilarityConfig()
        assert config.algorithm == SimilarityAlgorithm.JARO_WINKLER
        assert config.similarity_threshold == 0.8
        assert not config.case_sensitive
        assert config.normalization == NormalizationKind.NONE
        assert not config.uses_custom_function

    def test_algorithm_from_string(self):
        assert SimilarityConfig(algorithm="Jaro").algorithm == SimilarityAlgorithm.JARO

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            SimilarityConfig(algorithm="soundex")

    def test_custom_function_overrides_algorithm(self):
        func = lambda a, b: 1.0
        config = SimilarityConfig(
            algorithm=SimilarityAlgorithm.JARO, custom_similarity_function=func
        )
        assert config.algorithm == CustomSimilarity(func)
        assert config.uses_custom_function
        assert config.custom_similarity_function is None

    def test_callable_algorithm(self):
        config = SimilarityConfig(algorithm=lambda a, b: 0.0)
        assert config.uses_custom_function

    def test_threshold_range(self):
        with pytest.raises(ValueError):
            SimilarityConfig(similarity_threshold=1.5)

    def test_negative_edit_distance(self):
        with pytest.raises(ValueError):
            SimilarityConfig(max_edit_distance=-1)

    def test_first_normalization_wins(self):
        config = SimilarityConfig(normalize_phone=True, normalize_name=True)
        assert config.normalization == NormalizationKind.PHONE
        config = SimilarityConfig(normalize_address=True, normalize_phone=True)
        assert config.normalization == NormalizationKind.ADDRESS

    def test_with_threshold(self):
        config = SimilarityConfig(custom_similarity_function=lambda a, b: 1.0)
        lowered = config.with_threshold(0.3)
        assert lowered.similarity_threshold == 0.3
        assert lowered.algorithm == config.algorithm


class TestExtractionConfig:
    """Tests for ExtractionConfig."""

    def test_defaults(self):
        config = ExtractionConfig()
        assert config.pattern is None
        assert config.group_index == 0
        assert config.fuzzy_mode == FuzzyMode.NONE
        assert not config.fuzzy_enabled

    def test_fuzzy_mode_from_string(self):
        assert ExtractionConfig(fuzzy_mode="primary").fuzzy_mode == FuzzyMode.PRIMARY

    def test_fuzzy_enabled_requires_similarity(self):
        assert not ExtractionConfig(fuzzy_mode=FuzzyMode.PRIMARY).fuzzy_enabled
        assert ExtractionConfig(
            fuzzy_mode=FuzzyMode.PRIMARY, similarity=SimilarityConfig()
        ).fuzzy_enabled

    def test_negative_group(self):
        with pytest.raises(ValueError):
            ExtractionConfig(group_index=-1)

    def test_single_date_format(self):
        assert ExtractionConfig(date_formats="%Y").date_formats == ["%Y"]
