"""Implementation for the append-to-base commands."""

from .. import config, git, rename
from ..io import say


def append_to_base_cmd(args: object) -> None:
    """Rename a local branch onto ``<base>/``."""
    git.ensure_supported_platform()
    settings = config.load_config()
    outcome = rename.append_to_base(
        getattr(args, "target"), getattr(args, "base"), git_path=settings.git_path
    )
    say(f"Renamed {outcome.old_name} to {outcome.new_name}")


def append_to_base_remote_cmd(args: object) -> None:
    """Move a remote branch onto ``<base>/`` and return to the caller's branch."""
    git.ensure_supported_platform()
    settings = config.load_config()
    outcome = rename.append_to_base_remote(
        getattr(args, "current_branch"),
        getattr(args, "remote_target"),
        getattr(args, "base"),
        git_path=settings.git_path,
    )
    say(f"Renamed {outcome.remote}/{outcome.old_name} to {outcome.remote}/{outcome.new_name}")
