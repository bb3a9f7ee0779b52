"""Implementation for the stale-branch report."""

from .. import config, git, stale
from ..io import say


def show_old_branches(args: object) -> None:
    """Report remote branches older than ``days``, grouped by author.

    Args:
        args: CLI argument object with ``branch``, ``days``, ``exclude`` and
            ``mode``.

    Example:
        $ git-show-old-branches -b main -d 90 -e origin/release/ not-merged
    """
    git.ensure_supported_platform()
    settings = config.load_config()
    branches = git.list_remote_branches(
        getattr(args, "branch"),
        git.MergeMode(getattr(args, "mode", git.MergeMode.MERGED)),
        git_path=settings.git_path,
    )
    report = stale.build_report(
        branches,
        days=getattr(args, "days"),
        exclusions=getattr(args, "exclude", None) or (),
        max_workers=settings.worker_limit(),
        git_path=settings.git_path,
    )
    for line in stale.render_report(report):
        say(line)
