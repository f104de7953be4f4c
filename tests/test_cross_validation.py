"""Tests for cross-validation against structured records."""

from types import SimpleNamespace

import pandas as pd
import pytest

from fluent_pipeline.core.cross_validation import (
    CrossValidationResult,
    CrossValidator,
    cross_validate,
)
from fluent_pipeline.core.fields import (
    AttributeAccessor,
    FieldAccessor,
    MappingAccessor,
    SeriesAccessor,
    accessor_for,
)
from fluent_pipeline.core.result import ErrorKind, PipelineError, ResultValue
from fluent_pipeline.config.models import SimilarityConfig


class TestCrossValidationResult:
    """Tests for score aggregation."""

    def test_aggregates(self):
        result = CrossValidationResult.from_scores(
            {"Name": 0.9, "Phone": 0.95, "Address": 0.5}, 0.8
        )
        assert not result.is_valid
        assert result.best_matching_field == "Phone"
        assert result.worst_matching_field == "Address"
        assert result.min_similarity == 0.5
        assert result.max_similarity == 0.95
        assert result.average_similarity == pytest.approx(0.7833, abs=1e-4)
        assert result.field_matches == {"Name": True, "Phone": True, "Address": False}

    def test_all_matched(self):
        result = CrossValidationResult.from_scores({"Name": 0.9, "Phone": 0.8}, 0.8)
        assert result.is_valid

    def test_ties_go_to_first_field(self):
        result = CrossValidationResult.from_scores({"a": 0.5, "b": 0.5}, 0.8)
        assert result.best_matching_field == "a"
        assert result.worst_matching_field == "a"

    def test_empty(self):
        result = CrossValidationResult.from_scores({}, 0.8)
        assert result == CrossValidationResult()
        assert not result.is_valid
        assert result.best_matching_field is None

    def test_lookups(self):
        result = CrossValidationResult.from_scores({"Name": 0.9}, 0.8)
        assert result.field_score("Name") == 0.9
        assert result.field_score("Missing") == 0.0
        assert result.field_match("Name")
        assert not result.field_match("Missing")


class TestFieldAccess:
    """Tests for reference field lookup."""

    def test_mapping_case_insensitive(self):
        accessor = accessor_for({"Name": "John"})
        assert isinstance(accessor, MappingAccessor)
        assert accessor.get_field("name") == (True, "John")
        assert accessor.get_field("email") == (False, None)

    def test_series(self):
        accessor = accessor_for(pd.Series({"Name": "John", "Age": 42}))
        assert isinstance(accessor, SeriesAccessor)
        assert accessor.get_text("AGE") == (True, "42")

    def test_object(self):
        accessor = accessor_for(SimpleNamespace(name="John"))
        assert isinstance(accessor, AttributeAccessor)
        assert accessor.get_text("Name") == (True, "John")

    def test_methods_are_not_fields(self):
        class Record:
            name = "John"

            def describe(self):
                return "record"

        assert accessor_for(Record()).get_field("describe") == (False, None)

    def test_null_values_project_to_empty(self):
        accessor = accessor_for({"A": None, "B": float("nan")})
        assert accessor.get_text("A") == (True, "")
        assert accessor.get_text("B") == (True, "")

    def test_custom_accessor_used_directly(self):
        class Fixed(FieldAccessor):
            def get_field(self, name):
                return True, "constant"

        accessor = Fixed()
        assert accessor_for(accessor) is accessor


class TestCrossValidate:
    """Tests for cross_validate."""

    def setup_method(self):
        self.reference = {"Name": "john smith", "City": "Boston"}
        self.validator = CrossValidator(SimilarityConfig())

    def test_matching_field(self):
        result = self.validator.validate(
            "John Smith", self.reference, {"name": "NameScore"}
        )
        assert result.is_valid
        assert result.value.field_score("NameScore") == 1.0
        assert result.value.best_matching_field == "NameScore"

    def test_failing_field(self):
        result = self.validator.validate(
            "John Smith", self.reference, {"Name": "NameScore", "City": "CityScore"}
        )
        assert not result.is_valid
        assert result.value.worst_matching_field == "CityScore"
        assert result.value.field_match("NameScore")
        assert not result.value.field_match("CityScore")
        message = result.error_messages[-1]
        assert message.startswith("Cross-validation failed: CityScore similarity")
        assert message.endswith("below threshold")

    def test_object_reference(self):
        reference = SimpleNamespace(name="John Smith", phone="555-123-4567")
        result = cross_validate("John Smith", reference, {"Name": "Name"})
        assert result.is_valid

    def test_series_reference(self):
        row = pd.DataFrame([{"Name": "John Smith"}]).iloc[0]
        assert cross_validate("john smith", row, {"Name": "Name"}).is_valid

    def test_missing_field_scores_zero(self):
        result = cross_validate("John", self.reference, {"Email": "EmailScore"})
        assert not result.is_valid
        assert result.value.field_score("EmailScore") == 0.0

    def test_null_field_scores_zero(self):
        result = cross_validate("John", {"Name": float("nan")}, {"Name": "Name"})
        assert result.value.field_score("Name") == 0.0

    def test_address_normalization(self):
        config = SimilarityConfig(normalize_address=True)
        result = cross_validate(
            "123 Main St.", {"Address": "123 Main Street"}, {"Address": "Address"}, config
        )
        assert result.is_valid
        assert result.value.field_score("Address") == 1.0

    def test_none_reference(self):
        result = cross_validate("John", None, {"Name": "Name"})
        assert not result.is_valid
        assert result.value is None
        assert result.errors[0].kind == ErrorKind.CONFIGURATION_ERROR

    def test_empty_mappings(self):
        for mappings in ({}, None):
            result = cross_validate("John", self.reference, mappings)
            assert not result.is_valid
            assert result.errors[0].kind == ErrorKind.CONFIGURATION_ERROR

    def test_invalid_input(self):
        invalid = ResultValue("John", False, (PipelineError("earlier"),))
        result = cross_validate(invalid, self.reference, {"Name": "Name"})
        assert result.value is None
        assert result.errors == invalid.errors

    def test_accessor_failure_recorded(self):
        class Broken(FieldAccessor):
            def get_field(self, name):
                raise RuntimeError("lookup failed")

        result = cross_validate("John", Broken(), {"Name": "Name"})
        assert not result.is_valid
        assert result.error_messages[0] == "Cross-validation error: lookup failed"
