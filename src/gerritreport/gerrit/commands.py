# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Gerrit SSH command construction.

Each builder returns the argument list that follows ``gerrit`` on the SSH
command line. The SSH server joins the arguments with spaces and splits
them again on the remote side, so free-text values are shell-quoted here.

Usage:
    from gerritreport.gerrit.commands import build_query_command

    args = build_query_command("releng/tool", "status:open owner:self")
    # ['query', '--format=JSON', '--current-patch-set',
    #  'project:releng/tool', 'status:open owner:self']
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from typing import Final

from gerritreport.gerrit.models import Label

DEFAULT_FILTER: Final[str] = "status:open"

# Query options always requested for a review listing
QUERY_OPTIONS: Final[tuple[str, ...]] = (
    "--format=JSON",
    "--current-patch-set",
)


def build_query_command(
    project: str,
    filter: str | None = None,
    extra_options: str | None = None,
) -> list[str]:
    """
    Build the ``gerrit query`` arguments for a project listing.

    Args:
        project: The Gerrit project name.
        filter: Search operators; ``status:open`` when empty.
        extra_options: Additional query options, e.g. ``--all-approvals``.

    Returns:
        The argument list following ``gerrit``.

    Raises:
        ValueError: If project is empty.
    """
    if not project or not project.strip():
        raise ValueError("project is required")

    args = ["query", *QUERY_OPTIONS, f"project:{project.strip()}"]
    if extra_options and extra_options.strip():
        args.extend(shlex.split(extra_options))
    args.append(filter.strip() if filter and filter.strip() else DEFAULT_FILTER)
    return args


def _review_command(
    project: str,
    target: str,
    flags: Sequence[str],
    message: str | None = None,
) -> list[str]:
    if not target:
        raise ValueError("target revision or change is required")
    args = ["review", "--project", project, *flags]
    if message:
        args.extend(["--message", shlex.quote(message)])
    args.append(target)
    return args


def _score_flags(flag: str, label: Label, score: int) -> list[str]:
    if not label.in_range(score):
        raise ValueError(
            f"{label.full_name} score must be between "
            f"{label.rejected_threshold} and {label.approved_threshold}, "
            f"got {score}"
        )
    return [flag, str(score)]


def code_review_command(
    project: str,
    target: str,
    score: int,
    message: str | None = None,
    label: Label | None = None,
) -> list[str]:
    """Build ``gerrit review --code-review``."""
    label = label or Label(full_name="Code-Review", short_code="CR")
    flags = _score_flags("--code-review", label, score)
    return _review_command(project, target, flags, message)


def verify_command(
    project: str,
    target: str,
    score: int,
    message: str | None = None,
    label: Label | None = None,
) -> list[str]:
    """Build ``gerrit review --verified``."""
    label = label or Label(
        full_name="Verified",
        short_code="VR",
        rejected_threshold=-1,
        approved_threshold=1,
    )
    flags = _score_flags("--verified", label, score)
    return _review_command(project, target, flags, message)


def submit_command(
    project: str, target: str, message: str | None = None
) -> list[str]:
    """Build ``gerrit review --submit``."""
    return _review_command(project, target, ["--submit"], message)


def abandon_command(
    project: str, target: str, message: str | None = None
) -> list[str]:
    """Build ``gerrit review --abandon``."""
    return _review_command(project, target, ["--abandon"], message)


def publish_command(project: str, target: str) -> list[str]:
    """Build ``gerrit review --publish`` for a draft patchset."""
    return _review_command(project, target, ["--publish"])


def delete_draft_command(project: str, target: str) -> list[str]:
    """Build ``gerrit review --delete`` for a draft patchset."""
    return _review_command(project, target, ["--delete"])


def set_reviewers_command(
    project: str, change_id: str, reviewers: Sequence[str]
) -> list[str]:
    """
    Build ``gerrit set-reviewers`` adding one or more reviewers.

    Raises:
        ValueError: If no reviewer or change id is given.
    """
    reviewers = [r.strip() for r in reviewers if r and r.strip()]
    if not reviewers:
        raise ValueError("at least one reviewer is required")
    if not change_id:
        raise ValueError("change id is required")
    args = ["set-reviewers", "--project", project]
    for reviewer in reviewers:
        args.extend(["--add", shlex.quote(reviewer)])
    args.append(change_id)
    return args


__all__ = [
    "DEFAULT_FILTER",
    "QUERY_OPTIONS",
    "abandon_command",
    "build_query_command",
    "code_review_command",
    "delete_draft_command",
    "publish_command",
    "set_reviewers_command",
    "submit_command",
    "verify_command",
]
