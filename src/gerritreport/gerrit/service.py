# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Gerrit service layer for gerritreport.

This module ties the SSH runner, the query parser and the table renderer
together, and provides the review actions that operate on a single change:

- Generating a review report for a project
- Looking up a change by number
- Scoring, submitting, abandoning and publishing changes
- Adding reviewers
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from rich.text import Text

from gerritreport.errors import GerritServiceError
from gerritreport.gerrit import commands
from gerritreport.gerrit.models import ConnectionConfig, LabelSet, Review
from gerritreport.gerrit.parser import parse_reviews
from gerritreport.gerrit.ssh import GerritSsh
from gerritreport.report import ReviewIndex, render_text

log = logging.getLogger("gerritreport.gerrit.service")


def generate_report_text(
    project: str,
    filter: str | None,
    width: int,
    *,
    config: ConnectionConfig,
    labels: LabelSet | None = None,
    title: str | None = None,
    extra_options: str | None = None,
    now: float | None = None,
) -> Text:
    """Query a project's reviews and render them as a styled table."""
    raw = GerritSsh(config).query(project, filter, extra_options)
    reviews = list(parse_reviews(raw))
    log.debug("Query for %s returned %d reviews", project, len(reviews))
    return render_text(
        reviews, labels or LabelSet.default(), width, title=title, now=now
    )


def generate_report(
    project: str,
    filter: str | None,
    width: int,
    *,
    config: ConnectionConfig,
    labels: LabelSet | None = None,
    title: str | None = None,
    extra_options: str | None = None,
    now: float | None = None,
) -> str:
    """
    Query a project's reviews and render them as a table.

    Args:
        project: The Gerrit project name.
        filter: Search operators; ``status:open`` when empty.
        width: Available width in terminal cells.
        config: SSH connection settings.
        labels: Score columns; Code-Review and Verified by default.
        title: Optional title framing the table.
        extra_options: Additional ``gerrit query`` options.
        now: Reference time for ages.

    Returns:
        The rendered report.

    Raises:
        ConfigurationError: If no credentials are configured.
        ExecutionError: If the query fails.
    """
    return generate_report_text(
        project,
        filter,
        width,
        config=config,
        labels=labels,
        title=title,
        extra_options=extra_options,
        now=now,
    ).plain


async def generate_report_async(
    project: str,
    filter: str | None,
    width: int,
    **kwargs,
) -> str:
    """Run generate_report on a worker thread."""
    return await asyncio.to_thread(
        generate_report, project, filter, width, **kwargs
    )


class ReviewService:
    """
    High-level operations on the changes of one Gerrit project.

    Every method issues exactly one SSH command; nothing is cached.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        project: str,
        labels: LabelSet | None = None,
    ) -> None:
        """
        Initialize the review service.

        Args:
            config: SSH connection settings.
            project: The Gerrit project name.
            labels: Label configuration used to validate scores.
        """
        self.project = project
        self.labels = labels or LabelSet.default()
        self._ssh = GerritSsh(config)

        log.debug(
            "ReviewService initialized: project=%s, ssh=%r", project, self._ssh
        )

    def list_reviews(
        self, filter: str | None = None, extra_options: str | None = None
    ) -> list[Review]:
        """Query the project and return its reviews in Gerrit's order."""
        raw = self._ssh.query(self.project, filter, extra_options)
        return list(parse_reviews(raw))

    def get_review(self, number: int) -> Review:
        """
        Fetch a single change by number.

        Raises:
            GerritServiceError: If the change does not exist in the project.
        """
        index = ReviewIndex(self.list_reviews(f"change:{number}"))
        if number in index:
            return index[number]
        raise GerritServiceError(
            f"Change {number} not found in project {self.project}"
        )

    def _run(self, args: Sequence[str]) -> str:
        output = self._ssh.run(args)
        return output.decode("utf-8", errors="replace")

    def code_review(
        self, review: Review, score: int, message: str | None = None
    ) -> str:
        """Score the current patchset on Code-Review."""
        log.info("Code-Review %+d on %s", score, review.change_patchset)
        return self._run(
            commands.code_review_command(
                self.project,
                review.change_patchset,
                score,
                message,
                label=self.labels.get("Code-Review"),
            )
        )

    def verify(
        self, review: Review, score: int, message: str | None = None
    ) -> str:
        """Score the current patchset on Verified."""
        log.info("Verified %+d on %s", score, review.change_patchset)
        return self._run(
            commands.verify_command(
                self.project,
                review.change_patchset,
                score,
                message,
                label=self.labels.get("Verified"),
            )
        )

    def submit(self, review: Review, message: str | None = None) -> str:
        """Submit the current patchset."""
        log.info("Submitting %s", review.change_patchset)
        return self._run(
            commands.submit_command(self.project, review.change_patchset, message)
        )

    def abandon(self, review: Review, message: str | None = None) -> str:
        """Abandon the change."""
        log.info("Abandoning %s", review.change_patchset)
        return self._run(
            commands.abandon_command(
                self.project, review.change_patchset, message
            )
        )

    def publish(self, review: Review) -> str:
        """Publish a draft patchset."""
        if not review.is_draft:
            raise GerritServiceError(
                f"Change {review.number} has no draft patchset to publish"
            )
        return self._run(
            commands.publish_command(self.project, review.change_patchset)
        )

    def delete_draft(self, review: Review) -> str:
        """Delete a draft patchset."""
        if not review.is_draft:
            raise GerritServiceError(
                f"Change {review.number} has no draft patchset to delete"
            )
        return self._run(
            commands.delete_draft_command(self.project, review.change_patchset)
        )

    def add_reviewers(self, review: Review, reviewers: Sequence[str]) -> str:
        """Add reviewers to the change."""
        target = review.id or str(review.number)
        return self._run(
            commands.set_reviewers_command(self.project, target, reviewers)
        )


__all__ = [
    "ReviewService",
    "generate_report",
    "generate_report_async",
    "generate_report_text",
]
