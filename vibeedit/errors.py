"""Typed failures raised inside the edit pipeline."""

from __future__ import annotations


class VibeEditError(RuntimeError):
    """Base class for pipeline failures that carry a stable error code."""

    code = "internal"


class InvalidArgumentError(VibeEditError):
    """Required request fields are missing or malformed."""

    code = "invalid_argument"


class NotFoundError(VibeEditError):
    """A project index, edit, or matching section does not exist."""

    code = "not_found"


class FailedPreconditionError(VibeEditError):
    """Required external configuration is absent or a state transition is not allowed."""

    code = "failed_precondition"


class ClassificationError(VibeEditError):
    """The intent classifier could not produce a usable intent."""

    code = "classification_failure"


class GenerationError(VibeEditError):
    """The generation service failed after exhausting retries."""

    code = "generation_failure"


class ValidationFailure(VibeEditError):
    """A candidate document failed one or more blocking checks."""

    code = "validation_failure"


class PatchError(VibeEditError):
    """A unified diff does not cleanly apply to the document."""

    code = "patch_failure"

    def __init__(
        self,
        message: str,
        *,
        hunk_index: int | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.hunk_index = hunk_index
        self.line = line


__all__ = [
    "ClassificationError",
    "FailedPreconditionError",
    "GenerationError",
    "InvalidArgumentError",
    "NotFoundError",
    "PatchError",
    "ValidationFailure",
    "VibeEditError",
]
