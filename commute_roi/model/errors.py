"""Errors - Typed failures raised by the commute pipeline.

Every failure carries an HTTP-agnostic ReasonCode so a thin web layer
can map it to a status without inspecting exception types:
- ValidationError: bad input, rejected before any external call
- UpstreamNotFound: geocoder found no match (caller can fix the address)
- UpstreamFailure: routing or elevation providers unavailable after retries
"""

from enum import Enum


class ReasonCode(str, Enum):
    """Why a trip computation failed."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"

    @property
    def http_status(self) -> int:
        """Status code the web layer reports for this reason."""
        return 500 if self is ReasonCode.UPSTREAM else 400

    @property
    def is_client_error(self) -> bool:
        return self is not ReasonCode.UPSTREAM


class TripError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        reason: ReasonCode classifying the failure
        message: Human-readable description
    """

    reason: ReasonCode = ReasonCode.UPSTREAM

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Serialize as the error payload returned to callers."""
        return {"error": self.message, "reason": self.reason.value}


class ValidationError(TripError):
    """Malformed or inconsistent input."""

    reason = ReasonCode.VALIDATION


class VehicleNotFoundError(ValidationError):
    """A requested vehicle id is not in the vehicle list."""

    def __init__(self, vehicle_id: str) -> None:
        super().__init__(f"Vehicle not found: {vehicle_id}")
        self.vehicle_id = vehicle_id


class UpstreamNotFound(TripError):
    """An upstream lookup (geocoding) returned no match."""

    reason = ReasonCode.NOT_FOUND


class UpstreamFailure(TripError):
    """An upstream provider is unavailable or returned unusable data."""

    reason = ReasonCode.UPSTREAM


class ProfileMismatchError(UpstreamFailure):
    """Elevation profile is not index-aligned with its path.

    Raised after the elevation calls, so it reports ReasonCode.UPSTREAM.
    """

    def __init__(self, path_len: int, profile_len: int) -> None:
        super().__init__(
            f"Elevation profile has {profile_len} samples but path has {path_len} points"
        )
        self.path_len = path_len
        self.profile_len = profile_len


class ElevationProviderError(UpstreamFailure):
    """A single elevation provider failed or returned a malformed payload."""

    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(f"{provider} failed: {detail}")
        self.provider = provider
        self.detail = detail


class RetryExhaustedError(UpstreamFailure):
    """All retry attempts for a call were used up."""

    def __init__(self, attempts: int, last_error: Exception | None = None) -> None:
        detail = f": {last_error}" if last_error is not None else ""
        super().__init__(f"Max retries exceeded after {attempts} attempts{detail}")
        self.attempts = attempts
        self.last_error = last_error
