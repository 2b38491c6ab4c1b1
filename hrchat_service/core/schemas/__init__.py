"""Shared API schemas."""

from hrchat_service.core.schemas.problem_details import (
    FieldError,
    ProblemDetails,
    ValidationProblemDetails,
)

__all__ = ["FieldError", "ProblemDetails", "ValidationProblemDetails"]
