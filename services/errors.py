"""Exception hierarchy for SKU allocation and administration."""

from __future__ import annotations


class SkuError(Exception):
    """Base class for every failure scoped to a single SKU request."""

    status_code = 400


class ValidationError(SkuError):
    """The request is malformed or violates a SKU rule."""


class ResolutionError(ValidationError):
    """A category or brand reference cannot be turned into a prefix."""


class AllocationError(SkuError):
    status_code = 409


class AllocationExhaustedError(AllocationError):
    """Collision retries ran out. Safe to resubmit."""

    status_code = 503

    def __init__(self, attempts: int, last_candidate: str | None) -> None:
        self.attempts = attempts
        self.last_candidate = last_candidate
        super().__init__(
            f"Failed to generate unique SKU after {attempts} attempts "
            f"(last candidate: {last_candidate})"
        )


class SequenceExhaustedError(AllocationError):
    """The counter for a prefix pair has reached the format's capacity."""


class AdminError(SkuError):
    pass


class InvalidResetError(AdminError):
    pass


class SequenceNotFoundError(AdminError):
    status_code = 404


class NotFoundError(AdminError):
    status_code = 404


class BrandError(AdminError):
    status_code = 409
