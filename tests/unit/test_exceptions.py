"""Unit tests for the exception hierarchy.

Tests cover:
- Base exception attributes and message formatting
- Default error codes and components of every subclass
- Helper functions (wrap_exception, is_retryable, get_error_code)
"""

import pytest

from patloc.exceptions import (
    ConfigurationError,
    DataQualityError,
    ErrorCode,
    ExtractionError,
    FileSystemError,
    FirstFilingResolutionError,
    ImputationError,
    LoadError,
    PatlocError,
    TransformationError,
    ValidationError,
    get_error_code,
    is_retryable,
    wrap_exception,
)


pytestmark = pytest.mark.fast


class TestBaseException:
    """Tests for PatlocError."""

    def test_minimal(self):
        exc = PatlocError("Test error")

        assert exc.message == "Test error"
        assert exc.details == {}
        assert exc.retryable is False
        assert exc.status_code is None
        assert str(exc) == "Test error"

    def test_message_carries_context(self):
        exc = PatlocError(
            "Failed",
            component="transformer.candidate_pool",
            operation="build_candidate_pool",
            status_code=ErrorCode.TRANSFORMATION_FAILED,
        )

        assert "[component=transformer.candidate_pool]" in str(exc)
        assert "[operation=build_candidate_pool]" in str(exc)
        assert "[code=5003]" in str(exc)

    def test_to_dict(self):
        cause = KeyError("appln_id")
        exc = PatlocError(
            "Failed",
            component="x",
            details={"rows": 3},
            status_code=ErrorCode.EXTRACTION_FAILED,
            cause=cause,
        )

        data = exc.to_dict()

        assert data["error_type"] == "PatlocError"
        assert data["status_code"] == 5001
        assert data["details"] == {"rows": 3}
        assert data["cause"] == str(cause)


class TestHierarchy:
    """Tests for subclass defaults."""

    @pytest.mark.parametrize(
        "error_class,code",
        [
            (ExtractionError, ErrorCode.EXTRACTION_FAILED),
            (ValidationError, ErrorCode.VALIDATION_FAILED),
            (TransformationError, ErrorCode.TRANSFORMATION_FAILED),
            (LoadError, ErrorCode.LOADING_FAILED),
            (ConfigurationError, ErrorCode.CONFIG_VALIDATION_FAILED),
            (FileSystemError, ErrorCode.FILE_READ_FAILED),
            (FirstFilingResolutionError, ErrorCode.RESOLUTION_FAILED),
            (ImputationError, ErrorCode.IMPUTATION_FAILED),
            (DataQualityError, ErrorCode.QUALITY_THRESHOLD_NOT_MET),
        ],
    )
    def test_default_codes(self, error_class, code):
        exc = error_class("boom")

        assert isinstance(exc, PatlocError)
        assert exc.status_code == code

    def test_stage_errors_share_transformation_base(self):
        assert issubclass(FirstFilingResolutionError, TransformationError)
        assert issubclass(ImputationError, TransformationError)
        assert issubclass(DataQualityError, ValidationError)

    def test_status_code_can_be_overridden(self):
        exc = FileSystemError("missing", file_path="a.csv", status_code=ErrorCode.FILE_NOT_FOUND)

        assert exc.status_code == ErrorCode.FILE_NOT_FOUND
        assert exc.details["file_path"] == "a.csv"
        assert exc.component == "filesystem"

    def test_validation_error_is_never_retryable(self):
        exc = ValidationError("bad input", retryable=True)

        assert exc.retryable is False

    def test_configuration_error_records_key(self):
        exc = ConfigurationError("bad office", config_key="scope.jurisdictions")

        assert exc.details["config_key"] == "scope.jurisdictions"
        assert exc.component == "config"
        assert exc.retryable is False

    def test_imputation_error_records_rank(self):
        exc = ImputationError("tier failed", rank=3)

        assert exc.details["rank"] == 3
        assert exc.component == "transformer.attribute_resolver"

    def test_data_quality_error_records_threshold(self):
        exc = DataQualityError("duplicates", threshold=0, actual_value=4)

        assert exc.details == {"threshold": 0, "actual_value": 4}


class TestHelpers:
    """Tests for module-level helpers."""

    def test_wrap_exception(self):
        original = ValueError("not a date")

        wrapped = wrap_exception(original, ValidationError, component="extractor.patstat")

        assert isinstance(wrapped, ValidationError)
        assert wrapped.cause is original
        assert wrapped.message == "not a date"
        assert wrapped.component == "extractor.patstat"

    def test_wrap_exception_message_override(self):
        wrapped = wrap_exception(RuntimeError("x"), LoadError, message="write failed")

        assert wrapped.message == "write failed"

    def test_is_retryable(self):
        assert is_retryable(ExtractionError("io", retryable=True)) is True
        assert is_retryable(ExtractionError("io")) is False
        assert is_retryable(RuntimeError("plain")) is False

    def test_get_error_code(self):
        assert get_error_code(LoadError("x")) == 5004
        assert get_error_code(RuntimeError("plain")) is None
