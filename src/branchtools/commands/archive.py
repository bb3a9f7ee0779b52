"""Implementation for the archive commands."""

from .. import config, git, rename
from ..io import say


def archive_branch_cmd(args: object) -> None:
    """Rename a local branch onto ``archive/``.

    Args:
        args: CLI argument object with a ``target`` branch name.

    Example:
        $ git-archive-branch old-experiment
    """
    git.ensure_supported_platform()
    settings = config.load_config()
    outcome = rename.archive_branch(getattr(args, "target"), git_path=settings.git_path)
    say(f"Archived {outcome.old_name} as {outcome.new_name}")


def archive_remote_branch_cmd(args: object) -> None:
    """Archive a remote branch and return to the caller's branch.

    Args:
        args: CLI argument object with ``current_branch`` and
            ``remote_target`` (``<remote>/<branch>``).

    Example:
        $ git-archive-remote-branch main origin/old-experiment
    """
    git.ensure_supported_platform()
    settings = config.load_config()
    outcome = rename.archive_remote_branch(
        getattr(args, "current_branch"),
        getattr(args, "remote_target"),
        git_path=settings.git_path,
    )
    say(f"Archived {outcome.remote}/{outcome.old_name} as {outcome.remote}/{outcome.new_name}")
