"""Central exception hierarchy for the first-filing imputation pipeline.

All custom exceptions inherit from PatlocError.

Exception Hierarchy:
    PatlocError (base)
    ├── ExtractionError
    ├── ValidationError
    │   └── DataQualityError
    ├── TransformationError
    │   ├── FirstFilingResolutionError
    │   └── ImputationError
    ├── LoadError
    ├── ConfigurationError
    └── FileSystemError

Usage:
    from patloc.exceptions import ValidationError, wrap_exception

    try:
        tables = extractor.extract()
    except ValidationError as e:
        logger.error(f"Input tables rejected: {e.message}", extra=e.to_dict())
        raise

    # Wrap external exceptions
    try:
        conn.execute(query)
    except duckdb.Error as exc:
        raise wrap_exception(exc, ExtractionError, component="extractor.patstat")
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Error codes for programmatic handling.

    Categories:
        1xxx - Configuration errors
        2xxx - Data quality/validation errors
        4xxx - File I/O errors
        5xxx - Pipeline stage errors
    """

    # Configuration errors (1xxx)
    CONFIG_LOAD_FAILED = 1001
    CONFIG_VALIDATION_FAILED = 1002

    # Data quality errors (2xxx)
    VALIDATION_FAILED = 2001
    QUALITY_THRESHOLD_NOT_MET = 2002

    # File I/O errors (4xxx)
    FILE_NOT_FOUND = 4001
    FILE_READ_FAILED = 4002

    # Pipeline stage errors (5xxx)
    EXTRACTION_FAILED = 5001
    RESOLUTION_FAILED = 5002
    TRANSFORMATION_FAILED = 5003
    LOADING_FAILED = 5004
    IMPUTATION_FAILED = 5005


class PatlocError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        component: Pipeline component (e.g., "transformer.candidate_pool")
        operation: Operation being performed (e.g., "build_candidate_pool")
        details: Additional context as dictionary
        retryable: Whether operation can be retried
        status_code: Numeric error code from ErrorCode enum
        cause: Original exception if wrapping another error

    Example:
        raise PatlocError(
            "Failed to classify filings",
            component="transformer.first_filing",
            operation="classify_first_filings",
            details={"filings": 1000},
            status_code=ErrorCode.RESOLUTION_FAILED,
        )
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
        status_code: ErrorCode | None = None,
        cause: Exception | None = None,
    ):
        """Initialize pipeline error.

        Args:
            message: Human-readable error description
            component: Pipeline component that raised the error
            operation: Operation being performed when error occurred
            details: Additional context as key-value pairs
            retryable: Whether the operation can be retried
            status_code: Numeric error code for programmatic handling
            cause: Original exception if this wraps another error
        """
        self.message = message
        self.component = component or self.__class__.__module__
        self.operation = operation
        self.details = details or {}
        self.retryable = retryable
        self.status_code = status_code
        self.cause = cause

        parts = [message]
        if component:
            parts.append(f"[component={component}]")
        if operation:
            parts.append(f"[operation={operation}]")
        if status_code:
            parts.append(f"[code={status_code}]")

        super().__init__(" ".join(parts))

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with all exception attributes
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "operation": self.operation,
            "details": self.details,
            "retryable": self.retryable,
            "status_code": self.status_code.value if self.status_code else None,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================================
# PIPELINE STAGE EXCEPTIONS (Layer 1)
# ============================================================================


class ExtractionError(PatlocError):
    """Failed to read the bibliographic input tables.

    Example:
        raise ExtractionError(
            "Failed to read table tls201_appln",
            component="extractor.patstat",
            details={"table": "tls201_appln"}
        )
    """

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            message,
            status_code=kwargs.pop("status_code", ErrorCode.EXTRACTION_FAILED),
            **kwargs,
        )


class ValidationError(PatlocError):
    """Input data validation failed.

    Use this for missing tables or columns, malformed dates and similar
    upstream schema problems. Never retryable: the data must be fixed and the
    whole run restarted.
    """

    def __init__(self, message: str, **kwargs: Any):
        kwargs.pop("retryable", None)
        super().__init__(
            message,
            status_code=kwargs.pop("status_code", ErrorCode.VALIDATION_FAILED),
            retryable=False,
            **kwargs,
        )


class TransformationError(PatlocError):
    """A transformation stage failed."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            message,
            status_code=kwargs.pop("status_code", ErrorCode.TRANSFORMATION_FAILED),
            **kwargs,
        )


class LoadError(PatlocError):
    """Writing an output table failed.

    Example:
        raise LoadError(
            "Failed to replace table pf_inv_geoc",
            component="loader.duckdb",
            details={"rows": 1000}
        )
    """

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            message,
            status_code=kwargs.pop("status_code", ErrorCode.LOADING_FAILED),
            **kwargs,
        )


class ConfigurationError(PatlocError):
    """Configuration loading or validation failed.

    Not retryable as configuration issues must be fixed manually.

    Example:
        raise ConfigurationError(
            "Unknown jurisdiction code 'XX1'",
            config_key="scope.jurisdictions",
            details={"config_file": "config/base.yaml"}
        )
    """

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        component = kwargs.pop("component", "config")
        kwargs.pop("retryable", None)

        super().__init__(
            message,
            component=component,
            details=details,
            retryable=False,
            status_code=kwargs.pop("status_code", ErrorCode.CONFIG_VALIDATION_FAILED),
            **kwargs,
        )


class FileSystemError(PatlocError):
    """File system operation failed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        operation: str | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path

        component = kwargs.pop("component", "filesystem")

        super().__init__(
            message,
            component=component,
            operation=operation,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.FILE_READ_FAILED),
            **kwargs,
        )


# ============================================================================
# COMPONENT-SPECIFIC EXCEPTIONS (Layer 2)
# ============================================================================


class FirstFilingResolutionError(TransformationError):
    """Classifying filings or building the bridge table failed."""

    def __init__(self, message: str, **kwargs: Any):
        component = kwargs.pop("component", "transformer.first_filing")
        super().__init__(
            message,
            component=component,
            status_code=kwargs.pop("status_code", ErrorCode.RESOLUTION_FAILED),
            **kwargs,
        )


class ImputationError(TransformationError):
    """The attribute resolver could not run a pass."""

    def __init__(self, message: str, rank: int | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if rank is not None:
            details["rank"] = rank

        component = kwargs.pop("component", "transformer.attribute_resolver")

        super().__init__(
            message,
            component=component,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.IMPUTATION_FAILED),
            **kwargs,
        )


class DataQualityError(ValidationError):
    """An output invariant does not hold.

    Example:
        raise DataQualityError(
            "Duplicate output keys",
            threshold=0,
            actual_value=12,
            details={"table": "pf_inv_pers_ctry"}
        )
    """

    def __init__(
        self,
        message: str,
        threshold: float | None = None,
        actual_value: float | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if threshold is not None:
            details["threshold"] = threshold
        if actual_value is not None:
            details["actual_value"] = actual_value

        super().__init__(
            message,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.QUALITY_THRESHOLD_NOT_MET),
            **kwargs,
        )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def wrap_exception(
    original: Exception,
    error_class: type[PatlocError],
    message: str | None = None,
    **kwargs: Any,
) -> PatlocError:
    """Wrap a generic exception in a structured pipeline exception.

    Args:
        original: Original exception to wrap
        error_class: Pipeline exception class to use
        message: Override message (defaults to original message)
        **kwargs: Additional arguments for exception constructor

    Returns:
        Instance of error_class with original exception as cause
    """
    return error_class(message or str(original), cause=original, **kwargs)


def is_retryable(exc: Exception) -> bool:
    """Check if an exception is retryable."""
    if isinstance(exc, PatlocError):
        return exc.retryable
    return False


def get_error_code(exc: Exception) -> int | None:
    """Get error code from exception if available."""
    if isinstance(exc, PatlocError) and exc.status_code:
        return exc.status_code.value
    return None
