"""Command implementations exposed by the branch tools CLI."""

from .append import append_to_base_cmd, append_to_base_remote_cmd
from .archive import archive_branch_cmd, archive_remote_branch_cmd
from .old_branches import show_old_branches

__all__ = [
    "append_to_base_cmd",
    "append_to_base_remote_cmd",
    "archive_branch_cmd",
    "archive_remote_branch_cmd",
    "show_old_branches",
]
