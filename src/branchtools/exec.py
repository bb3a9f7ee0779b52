"""Subprocess helpers for running external commands."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from . import log
from .errors import SpawnFailedError


@dataclass(frozen=True)
class CommandRequest:
    """Typed command invocation request."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    input_text: str | None = None


@dataclass(frozen=True)
class CommandResult:
    """Typed command execution result."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class OutcomeKind(Enum):
    SUCCESS_WITH_TEXT = "success_with_text"
    SUCCESS_EMPTY = "success_empty"
    FAILURE_WITH_TEXT = "failure_with_text"
    FAILURE_EMPTY = "failure_empty"


@dataclass(frozen=True)
class CommandOutcome:
    """Classified result of one external command.

    Attributes:
        kind: One of the four outcome variants.
        returncode: Raw exit status of the process.
        text: Decoded stdout for successes, stderr for failures, or ``None``
            when the relevant stream was empty.

    Example:
        >>> classify(CommandResult(argv=("git",), returncode=0, stdout="", stderr=""))
        CommandOutcome(kind=<OutcomeKind.SUCCESS_EMPTY: 'success_empty'>, returncode=0, text=None)
    """

    kind: OutcomeKind
    returncode: int
    text: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.SUCCESS_WITH_TEXT, OutcomeKind.SUCCESS_EMPTY)


class CommandRunner(Protocol):
    """Runtime command-execution interface."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


class SubprocessCommandRunner:
    """Default command-runner adapter backed by subprocess."""

    def run(self, request: CommandRequest) -> CommandResult | None:
        run_kwargs: dict[str, object] = {
            "cwd": request.cwd,
            "capture_output": True,
            "check": False,
        }
        if request.input_text is not None:
            run_kwargs["input"] = request.input_text.encode("utf-8")
        try:
            completed = subprocess.run(list(request.argv), **run_kwargs)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SpawnFailedError(_spawn_failure_detail(request, exc)) from exc

        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
        )


def _decode(raw: object) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return raw
    return ""


_DEFAULT_COMMAND_RUNNER: CommandRunner = SubprocessCommandRunner()


def run_with_runner(
    request: CommandRequest, *, runner: CommandRunner | None = None
) -> CommandResult | None:
    """Execute a typed command request with the given runner."""
    active_runner = runner or _DEFAULT_COMMAND_RUNNER
    return active_runner.run(request)


def classify(result: CommandResult) -> CommandOutcome:
    """Classify a finished command into one of the four outcome variants.

    Exit status is inspected first; the stream that is carried depends on it.
    """
    if result.returncode != 0:
        if result.stderr:
            return CommandOutcome(OutcomeKind.FAILURE_WITH_TEXT, result.returncode, result.stderr)
        return CommandOutcome(OutcomeKind.FAILURE_EMPTY, result.returncode)
    if result.stdout:
        return CommandOutcome(OutcomeKind.SUCCESS_WITH_TEXT, result.returncode, result.stdout)
    return CommandOutcome(OutcomeKind.SUCCESS_EMPTY, result.returncode)


def _missing_command_detail(request: CommandRequest) -> str:
    argv = request.argv
    if not argv:
        return "missing required command"
    return f"missing required command: {argv[0]}"


def _spawn_failure_detail(request: CommandRequest, exc: OSError) -> str:
    command = request.argv[0] if request.argv else "command"
    reason = exc.strerror or str(exc)
    return f"cannot run {command}: {reason}"


def run_outcome(
    argv: list[str] | tuple[str, ...],
    *,
    cwd: Path | None = None,
    input_text: str | None = None,
    runner: CommandRunner | None = None,
) -> CommandOutcome:
    """Run a command once and return its classified outcome.

    Args:
        argv: Command and arguments to execute.
        cwd: Optional working directory.
        input_text: Optional text piped to the command's standard input.
        runner: Optional runner override.

    Returns:
        The ``CommandOutcome`` for the invocation.

    Raises:
        SpawnFailedError: The executable is missing or cannot be executed.
    """
    request = CommandRequest(argv=tuple(argv), cwd=cwd, input_text=input_text)
    log.debug(f"$ {' '.join(request.argv)}")
    result = run_with_runner(request, runner=runner)
    if result is None:
        raise SpawnFailedError(_missing_command_detail(request))
    outcome = classify(result)
    log.trace(f"  -> {outcome.kind.value} (exit {outcome.returncode})")
    return outcome
