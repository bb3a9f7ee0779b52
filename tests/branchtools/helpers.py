# ruff: noqa: E402

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from branchtools import exec as exec_util

Responder = Callable[[exec_util.CommandRequest], "exec_util.CommandResult | None"]


def ok(stdout: str = "") -> tuple[int, str, str]:
    return (0, stdout, "")


def fail(stderr: str = "", returncode: int = 1) -> tuple[int, str, str]:
    return (returncode, "", stderr)


class FakeRunner:
    """Command runner that answers from a script and records every request.

    ``script`` maps an argv prefix (tuple) to ``(returncode, stdout, stderr)``;
    the longest matching prefix wins. ``head -n 1`` is emulated on its input.
    """

    def __init__(self, script: dict[tuple[str, ...], tuple[int, str, str]] | None = None) -> None:
        self.script = dict(script or {})
        self.requests: list[exec_util.CommandRequest] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> list[tuple[str, ...]]:
        return [request.argv for request in self.requests]

    def run(self, request: exec_util.CommandRequest) -> exec_util.CommandResult | None:
        with self._lock:
            self.requests.append(request)
        if request.argv[:1] == ("head",):
            first = (request.input_text or "").splitlines(keepends=True)[:1]
            return exec_util.CommandResult(request.argv, 0, "".join(first), "")
        match: tuple[str, ...] | None = None
        for prefix in self.script:
            if request.argv[: len(prefix)] == prefix and (
                match is None or len(prefix) > len(match)
            ):
                match = prefix
        if match is None:
            raise AssertionError(f"unexpected command: {request.argv}")
        returncode, stdout, stderr = self.script[match]
        return exec_util.CommandResult(request.argv, returncode, stdout, stderr)


def branch_script(
    branches: dict[str, tuple[str, str]],
) -> dict[tuple[str, ...], tuple[int, str, str]]:
    """Script git show/log answers for ``{branch: (timestamp, author)}``."""
    script: dict[tuple[str, ...], tuple[int, str, str]] = {}
    for branch, (timestamp, author) in branches.items():
        script[("git", "show", "-s", '--format="%ci"', branch)] = ok(f'"{timestamp}"\n')
        script[("git", "log", "-1", "--format=%an", branch)] = ok(f"{author}\n")
    return script
