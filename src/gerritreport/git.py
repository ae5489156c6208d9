# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""Git plumbing for uploading and downloading reviews."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from gerritreport.errors import GitError

log = logging.getLogger("gerritreport.git")


def run_git(args: Sequence[str]) -> str:
    """
    Run git and return its stripped stdout.

    Raises:
        GitError: If git is missing or exits non-zero.
    """
    argv = ["git", *args]
    log.debug("Running: %s", shlex.join(argv))
    try:
        result = subprocess.run(argv, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise GitError("git executable not found", command=argv) from exc
    if result.returncode != 0:
        raise GitError(
            f"git {args[0]} failed with exit status {result.returncode}",
            returncode=result.returncode,
            stderr=result.stderr,
            command=argv,
        )
    return result.stdout.strip()


def current_branch() -> str | None:
    """Get the checked out branch, None for a detached HEAD."""
    try:
        return run_git(["symbolic-ref", "--short", "-q", "HEAD"]) or None
    except GitError:
        return None


def upstream_branch(branch: str) -> str | None:
    """
    Get the remote branch a local branch merges into.

    Returns the short name (``main`` for ``refs/heads/main``), or None
    when the branch has no upstream configured.
    """
    try:
        merge = run_git(["config", "--get", f"branch.{branch}.merge"])
    except GitError:
        return None
    prefix = "refs/heads/"
    return merge[len(prefix):] if merge.startswith(prefix) else merge or None


def review_refspec(revision: str, branch: str, draft: bool = False) -> str:
    """Build the refspec that uploads a revision for review on a branch."""
    if not revision or not branch:
        raise ValueError("revision and branch are required")
    kind = "drafts" if draft else "for"
    return f"{revision}:refs/{kind}/{branch}"


def push_for_review(
    remote: str, revision: str, branch: str, draft: bool = False
) -> str:
    """Push a revision to Gerrit for review and return git's stdout."""
    refspec = review_refspec(revision, branch, draft)
    log.info("Pushing %s to %s", refspec, remote)
    return run_git(["push", "-v", remote, refspec])


def fetch_review(remote: str, ref: str) -> str:
    """
    Fetch a patchset ref and return the fetched commit.

    Args:
        remote: The git remote.
        ref: The patchset ref, e.g. ``refs/changes/45/12345/3``.
    """
    if not ref:
        raise ValueError("ref is required")
    run_git(["fetch", remote, ref])
    return run_git(["rev-parse", "FETCH_HEAD"])


__all__ = [
    "current_branch",
    "fetch_review",
    "push_for_review",
    "review_refspec",
    "run_git",
    "upstream_branch",
]
