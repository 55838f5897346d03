"""Costeo AI error handling.

Custom exceptions and error codes for the estimation pipeline. Every error
carries the HTTP status the API answers with; the upstream oracle status is
recorded once, where the oracle call fails, and never re-derived later.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    INPUT_TOO_LARGE = "INPUT_TOO_LARGE"

    # Storage Errors
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"

    # Oracle (LLM) Errors
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"
    ORACLE_RATE_LIMITED = "ORACLE_RATE_LIMITED"
    ORACLE_UNAUTHORIZED = "ORACLE_UNAUTHORIZED"
    ORACLE_OUTPUT_MALFORMED = "ORACLE_OUTPUT_MALFORMED"
    ORACLE_CALL_FAILED = "ORACLE_CALL_FAILED"

    # Import Errors
    IMPORT_FAILED = "IMPORT_FAILED"


class CosteoError(Exception):
    """Base exception for Costeo AI errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
        http_status: Status code the API responds with
    """

    http_status = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None
    ):
        """Initialize CosteoError.

        Args:
            code: Error code from ErrorCode constants
            message: Human-readable error message
            details: Additional error context
            http_status: Overrides the class-level HTTP status
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(CosteoError):
    """Validation-specific error."""

    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class RecordNotFound(CosteoError):
    """A stored record does not exist."""

    http_status = 404

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            code=ErrorCode.RECORD_NOT_FOUND,
            message=f"{collection} record {record_id!r} not found",
            details={"collection": collection, "id": record_id}
        )
        self.collection = collection
        self.record_id = record_id


class InputTooLarge(CosteoError):
    """Source text is over the configured character ceiling."""

    http_status = 413

    def __init__(self, received_chars: int, max_chars: int):
        super().__init__(
            code=ErrorCode.INPUT_TOO_LARGE,
            message=(
                f"Source text has {received_chars} characters; "
                f"the maximum is {max_chars}"
            ),
            details={"received_chars": received_chars, "max_chars": max_chars}
        )
        self.received_chars = received_chars
        self.max_chars = max_chars


class OracleError(CosteoError):
    """Base class for failures of the text-generation oracle.

    Attributes:
        upstream_status: HTTP status reported by the oracle, if any
    """

    def __init__(
        self,
        code: str,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[Dict] = None
    ):
        details = dict(details or {})
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(code=code, message=message, details=details)
        self.upstream_status = upstream_status


class OracleUnavailable(OracleError):
    """The oracle is not configured (no credential)."""

    http_status = 503

    def __init__(self, message: str = "OPENAI_API_KEY is not configured on the server"):
        super().__init__(code=ErrorCode.ORACLE_UNAVAILABLE, message=message)


class OracleRateLimited(OracleError):
    """The oracle rejected the call for rate or quota reasons."""

    http_status = 429

    def __init__(self, message: str = "Oracle rate limit or quota exceeded", details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.ORACLE_RATE_LIMITED,
            message=message,
            upstream_status=429,
            details=details
        )


class OracleUnauthorized(OracleError):
    """The oracle rejected the configured credential."""

    http_status = 401

    def __init__(self, message: str = "Oracle credential was rejected", details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.ORACLE_UNAUTHORIZED,
            message=message,
            upstream_status=401,
            details=details
        )


class OracleOutputMalformed(OracleError):
    """The oracle answered with text that does not decode as a plan."""

    http_status = 502
    EXCERPT_CHARS = 500

    def __init__(self, raw_text: str, message: str = "Oracle did not return a decodable JSON object"):
        excerpt = (raw_text or "")[:self.EXCERPT_CHARS]
        super().__init__(
            code=ErrorCode.ORACLE_OUTPUT_MALFORMED,
            message=message,
            details={"raw_excerpt": excerpt, "raw_length": len(raw_text or "")}
        )
        self.excerpt = excerpt


class OracleCallFailed(OracleError):
    """Catch-all transport, timeout or upstream failure."""

    http_status = 500

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=ErrorCode.ORACLE_CALL_FAILED,
            message=message,
            upstream_status=upstream_status,
            details=details
        )
