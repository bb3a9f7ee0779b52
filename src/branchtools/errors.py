"""Failure contracts for branch tools.

Operations return plain values on success and raise ``BranchToolError`` on
expected validation, command, or environment failures. Programmer bugs raise
normal exceptions. The CLI is the only layer that turns these into console
output and exit codes.
"""

from __future__ import annotations

from typing import Literal

FailureCode = Literal[
    "validation_failed",
    "branch_exists",
    "external_command_failed",
    "spawn_failed",
    "unexpected_output",
]

EXIT_VALIDATION = 1
EXIT_COMMAND = 2
EXIT_ENVIRONMENT = 3


class BranchToolError(Exception):
    """Expected failure with a stable code and process exit status."""

    exit_code = EXIT_COMMAND

    def __init__(self, code: FailureCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ValidationFailedError(BranchToolError):
    """Input rejected before any subprocess call (already prefixed, malformed)."""

    exit_code = EXIT_VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__("validation_failed", message)


class BranchExistsError(BranchToolError):
    """Destination branch name is already taken."""

    exit_code = EXIT_COMMAND

    def __init__(self, message: str) -> None:
        super().__init__("branch_exists", message)


class ExternalCommandFailedError(BranchToolError):
    """External command exited non-zero.

    ``output`` holds the command's stderr verbatim, or ``None`` when the
    command failed silently.
    """

    exit_code = EXIT_COMMAND

    def __init__(self, message: str, *, output: str | None = None) -> None:
        super().__init__("external_command_failed", message)
        self.output = output


class SpawnFailedError(BranchToolError):
    """External command could not be started at all."""

    exit_code = EXIT_ENVIRONMENT

    def __init__(self, message: str) -> None:
        super().__init__("spawn_failed", message)


class TimestampParseError(BranchToolError):
    """Commit timestamp did not match the expected layout."""

    exit_code = EXIT_ENVIRONMENT

    def __init__(self, message: str) -> None:
        super().__init__("unexpected_output", message)
