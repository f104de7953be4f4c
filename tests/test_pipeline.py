"""End-to-end tests chaining extraction, validation and fuzzy checks."""

from decimal import Decimal

import pandas as pd

import fluent_pipeline as fp


class TestPipelineChaining:
    """Tests for chained pipeline stages."""

    def setup_method(self):
        self.names = ["Acme Corporation", "Globex Industries"]

    def test_extract_then_validate(self):
        config = fp.ExtractionConfig(pattern=r"\$([\d,]+\.\d{2})", group_index=1)
        result = fp.extract_decimal("Total: $1,299.00", config).validate(
            lambda amount: amount > 0, "Amount must be positive"
        )
        assert result.is_valid
        assert result.value == Decimal("1299.00")

    def test_failure_flows_through_later_stages(self):
        amount = fp.extract_int("Total: N/A", fp.ExtractionConfig(use_default_pattern=True))
        matched = fp.fuzzy_match(amount.with_value("N/A"), "N/A")
        corrected = fp.correct_typos(matched, ["N/A"])

        assert not corrected.is_valid
        assert corrected.errors == amount.errors
        assert corrected.errors[0].kind == fp.ErrorKind.NO_MATCH

    def test_invalid_value_skips_later_checks(self):
        config = fp.SimilarityConfig(similarity_threshold=0.95)
        result = fp.fuzzy_contains(
            fp.fuzzy_match("Initech", "Acme Corporation", config), "Globex"
        )
        assert not result.is_valid
        assert [e.operation for e in result.errors] == ["fuzzy_match"]

    def test_errors_accumulate(self):
        result = (
            fp.ResultValue.of("Initech")
            .with_error("first check failed", "check_a")
            .with_error("second check failed", "check_b")
        )
        assert [e.operation for e in result.errors] == ["check_a", "check_b"]

    def test_correct_then_cross_validate(self):
        customers = pd.DataFrame([
            {"Name": "Acme Corporation", "Address": "123 Main Street"},
        ])
        name = fp.correct_typos("Acme Corporatoin", self.names)
        assert name.value == "Acme Corporation"

        record = customers[customers["Name"] == name.value].iloc[0]
        check = fp.cross_validate(
            "123 Main St.", record, {"Address": "Address"},
            fp.SimilarityConfig(normalize_address=True)
        )
        assert check.is_valid

    def test_batch_over_dataframe_column(self):
        frame = pd.DataFrame({"customer": ["Acme Corp", "Globex Industrie"]})
        result = fp.match_many_batch(frame["customer"], self.names)
        matches = [element.value.match for element in result.value]
        assert matches == ["Acme Corporation", "Globex Industries"]
