"""Branch rename and archive workflows.

Every workflow is an ordered plan of git steps. Pre-flight checks run first;
each step then runs only if the previous one succeeded. A failing step aborts
the plan without rolling back the steps already completed, so a failure
midway can leave the repository partially renamed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from . import exec as exec_util
from . import git, io, log
from .errors import BranchExistsError, ExternalCommandFailedError, ValidationFailedError

ARCHIVE_BASE = "archive"

R = TypeVar("R")


@dataclass(frozen=True)
class Step:
    """One named git invocation in a plan."""

    description: str
    args: tuple[str, ...]


@dataclass(frozen=True)
class RenameRequest:
    target: str
    base: str


@dataclass(frozen=True)
class RemoteRenameRequest:
    current_branch: str
    remote_target: str
    base: str


@dataclass(frozen=True)
class RenameOutcome:
    old_name: str
    new_name: str
    remote: str | None = None


def base_prefix(base: str) -> str:
    """Return the namespace prefix for ``base``.

    Example:
        >>> base_prefix("archive/")
        'archive/'
    """
    normalized = base.strip().strip("/")
    if not normalized:
        raise ValidationFailedError("base name must not be empty")
    return f"{normalized}/"


def has_prefix(name: str, prefix: str) -> bool:
    """Case-insensitive namespace check.

    Example:
        >>> has_prefix("Archive/old-work", "archive/")
        True
    """
    return name.lower().startswith(prefix.lower())


def split_remote_target(remote_target: str) -> tuple[str, str]:
    """Split ``<remote>/<branch>`` on the first separator.

    Example:
        >>> split_remote_target("origin/feature/x")
        ('origin', 'feature/x')
    """
    remote, sep, name = remote_target.partition("/")
    if not sep or not remote or not name:
        raise ValidationFailedError(
            f"Failed to find separator in branch name {remote_target!r}; "
            "expected <remote>/<branch>"
        )
    return remote, name


def run_plan(
    steps: list[Step],
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
    echo: Callable[[str], None] = io.say,
) -> None:
    """Run ``steps`` in order, stopping at the first failure.

    Raises:
        ExternalCommandFailedError: A step exited non-zero; ``output`` holds
            its stderr when there was any.
    """
    for index, step in enumerate(steps, start=1):
        log.debug(f"[{index}/{len(steps)}] {step.description}")
        outcome = git.run_git(list(step.args), git_path=git_path, runner=runner)
        if not outcome.ok:
            raise ExternalCommandFailedError(
                f"{step.description} failed", output=outcome.text
            )
        if outcome.text:
            echo(outcome.text.rstrip("\n"))


class RenameService(ABC, Generic[R]):
    """Validate, check the destination, then run a step plan.

    Subclasses describe the workflow; ``__call__`` fixes the order so that no
    subprocess runs before validation passes.
    """

    def __init__(
        self,
        *,
        git_path: str | None = None,
        runner: exec_util.CommandRunner | None = None,
        echo: Callable[[str], None] = io.say,
    ) -> None:
        self.git_path = git_path
        self.runner = runner
        self.echo = echo

    def __call__(self, request: R) -> RenameOutcome:
        outcome = self._validate(request)
        destination = self._destination_ref(outcome)
        if git.ref_exists(destination, git_path=self.git_path, runner=self.runner):
            raise BranchExistsError(f"A branch already exists with the name {outcome.new_name}")
        run_plan(
            self._plan(request, outcome),
            git_path=self.git_path,
            runner=self.runner,
            echo=self.echo,
        )
        return outcome

    @abstractmethod
    def _validate(self, request: R) -> RenameOutcome:
        """Check the request without side effects and compute the new name."""
        ...

    @abstractmethod
    def _destination_ref(self, outcome: RenameOutcome) -> str: ...

    @abstractmethod
    def _plan(self, request: R, outcome: RenameOutcome) -> list[Step]: ...


class LocalRenameService(RenameService[RenameRequest]):
    """Rename a local branch to ``<base>/<branch>``."""

    def _validate(self, request: RenameRequest) -> RenameOutcome:
        prefix = base_prefix(request.base)
        if has_prefix(request.target, prefix):
            if prefix == f"{ARCHIVE_BASE}/":
                raise ValidationFailedError("This branch is already archived")
            raise ValidationFailedError(
                f"The branch {request.target} already has the base {prefix}"
            )
        return RenameOutcome(old_name=request.target, new_name=f"{prefix}{request.target}")

    def _destination_ref(self, outcome: RenameOutcome) -> str:
        return f"refs/heads/{outcome.new_name}"

    def _plan(self, request: RenameRequest, outcome: RenameOutcome) -> list[Step]:
        return [
            Step("rename branch", ("branch", "-m", outcome.old_name, outcome.new_name)),
        ]


class RemoteRenameService(RenameService[RemoteRenameRequest]):
    """Move ``<remote>/<branch>`` to ``<remote>/<base>/<branch>``."""

    def _validate(self, request: RemoteRenameRequest) -> RenameOutcome:
        remote, name = split_remote_target(request.remote_target)
        prefix = base_prefix(request.base)
        if has_prefix(name, prefix):
            if prefix == f"{ARCHIVE_BASE}/":
                raise ValidationFailedError("This branch is already archived")
            raise ValidationFailedError("This branch already has this base")
        return RenameOutcome(old_name=name, new_name=f"{prefix}{name}", remote=remote)

    def _destination_ref(self, outcome: RenameOutcome) -> str:
        return f"refs/remotes/{outcome.remote}/{outcome.new_name}"

    def _plan(self, request: RemoteRenameRequest, outcome: RenameOutcome) -> list[Step]:
        remote = outcome.remote or ""
        new_name = outcome.new_name
        return [
            Step(
                "check out the original branch under its new name",
                ("checkout", "-b", new_name, request.remote_target),
            ),
            Step("push the renamed branch", ("push", remote, new_name)),
            Step("set upstream to the renamed branch", ("push", remote, "-u", new_name)),
            Step(
                "delete the original remote branch",
                ("push", remote, "--delete", outcome.old_name),
            ),
            Step("switch back to the current branch", ("checkout", request.current_branch)),
            Step("delete the local copy of the renamed branch", ("branch", "--delete", new_name)),
        ]


def append_to_base(
    target: str,
    base: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
    echo: Callable[[str], None] = io.say,
) -> RenameOutcome:
    """Rename local branch ``target`` to ``<base>/<target>``."""
    service = LocalRenameService(git_path=git_path, runner=runner, echo=echo)
    return service(RenameRequest(target=target, base=base))


def archive_branch(
    target: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
    echo: Callable[[str], None] = io.say,
) -> RenameOutcome:
    """Rename local branch ``target`` to ``archive/<target>``."""
    return append_to_base(target, ARCHIVE_BASE, git_path=git_path, runner=runner, echo=echo)


def append_to_base_remote(
    current_branch: str,
    remote_target: str,
    base: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
    echo: Callable[[str], None] = io.say,
) -> RenameOutcome:
    """Move a remote branch under ``<base>/`` and return to ``current_branch``."""
    service = RemoteRenameService(git_path=git_path, runner=runner, echo=echo)
    return service(
        RemoteRenameRequest(
            current_branch=current_branch, remote_target=remote_target, base=base
        )
    )


def archive_remote_branch(
    current_branch: str,
    remote_target: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
    echo: Callable[[str], None] = io.say,
) -> RenameOutcome:
    """Move a remote branch under ``archive/`` and return to ``current_branch``."""
    return append_to_base_remote(
        current_branch,
        remote_target,
        ARCHIVE_BASE,
        git_path=git_path,
        runner=runner,
        echo=echo,
    )
