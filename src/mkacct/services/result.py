"""ServiceResult and ServiceError — the tagged result of every pipeline stage.

INVARIANT: Stages never terminate the process. They return a
ServiceResult and the orchestrator maps ``error.code`` to an exit status.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Failure categories, each with its own exit status."""

    USAGE = "USAGE"
    DEPENDENCY = "DEPENDENCY"
    PRIVILEGE = "PRIVILEGE"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    VALIDATION = "VALIDATION"
    EXECUTION = "EXECUTION"


EXIT_STATUS: dict[ErrorCode, int] = {
    ErrorCode.USAGE: 1,
    ErrorCode.DEPENDENCY: 1,
    ErrorCode.PRIVILEGE: 1,
    ErrorCode.CONFIRMATION_REQUIRED: 1,
    ErrorCode.VALIDATION: 2,
    ErrorCode.EXECUTION: 3,
}


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``detail`` keys understood by the orchestrator:
    ``hints`` (list of corrective messages), ``show_usage`` (bool),
    ``exit_code`` (the failing command's own status).
    """

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for pipeline stages.

    Attributes:
        ok: Whether the stage succeeded.
        op: Name of the stage (e.g. ``"validate_username"``).
        data: Stage-specific payload on success.
        warnings: Non-fatal issues encountered during the stage.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        *,
        warnings: list[str] | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Build a failed result for *op*."""
        return cls(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail),
        )

    @property
    def exit_status(self) -> int:
        """Process exit status this result maps to (0 on success)."""
        if self.ok or self.error is None:
            return 0
        return EXIT_STATUS[self.error.code]
