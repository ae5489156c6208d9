# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Review table rendering.

Turns parsed reviews into a column-aligned text table sized for a given
terminal width. Optional columns are dropped as the width shrinks:

    width > 128   number, patchset, subject, branch, size, updated, owner, scores
    width > 108   number, patchset, subject, size, updated, owner, scores
    width > 94    number, patchset, subject, size, owner, scores
    width > 80    number, patchset, subject, owner, scores
    otherwise     number, patchset, subject, owner

All widths are measured in terminal cells, so wide characters count as two
columns. The renderer produces a ``rich.text.Text``; its ``plain`` value is
the report string and its spans carry the terminal styles.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from rich.cells import cell_len, get_character_cell_size
from rich.text import Text

from gerritreport.gerrit.models import Label, LabelSet, Review

ELLIPSIS: Final[str] = "…"
APPROVED_GLYPH: Final[str] = "✓"
REJECTED_GLYPH: Final[str] = "✗"
JUST_NOW: Final[str] = "just now"

# Fixed column widths, separating space included
NUMBER_WIDTH: Final[int] = 8
PATCHSET_WIDTH: Final[int] = 5
OWNER_WIDTH: Final[int] = 10
SCORE_WIDTH: Final[int] = 2
SIZE_WIDTH: Final[int] = 7
AGE_WIDTH: Final[int] = 12
BRANCH_WIDTH: Final[int] = 20

# Columns appear once the width exceeds these values
SCORES_MIN_WIDTH: Final[int] = 80
SIZE_MIN_WIDTH: Final[int] = 94
AGE_MIN_WIDTH: Final[int] = 108
BRANCH_MIN_WIDTH: Final[int] = 128

_MINUTE: Final[int] = 60
_HOUR: Final[int] = 60 * _MINUTE
_DAY: Final[int] = 24 * _HOUR
_MONTH: Final[int] = 30 * _DAY
_YEAR: Final[int] = 365 * _DAY
_YEAR_THRESHOLD: Final[float] = _YEAR * 1.018

_STYLE_TITLE = "bold underline"
_STYLE_HEADER = "bold"
_STYLE_NUMBER = "cyan"
_STYLE_SUBJECT = "green"
_STYLE_DRAFT = "red"
_STYLE_OWNER = "yellow"
_STYLE_DIM = "dim"
_STYLE_INSERTIONS = "green"
_STYLE_DELETIONS = "red"
_STYLE_APPROVED = "bold green"
_STYLE_REJECTED = "bold red"
_STYLE_POSITIVE = "green"
_STYLE_NEGATIVE = "red"


def truncate(text: str, max_cells: int) -> str:
    """
    Shorten text to fit in max_cells terminal cells.

    Text that already fits is returned unchanged; otherwise it is cut and
    ends with an ellipsis.
    """
    if cell_len(text) <= max_cells:
        return text
    if max_cells <= 0:
        return ""
    budget = max_cells - cell_len(ELLIPSIS)
    used = 0
    out: list[str] = []
    for char in text:
        size = get_character_cell_size(char)
        if used + size > budget:
            break
        out.append(char)
        used += size
    return "".join(out) + ELLIPSIS


def fit(text: str, cells: int, right: bool = False) -> str:
    """Truncate text to leave one separating space and pad it to cells."""
    text = truncate(text, cells - 1)
    padding = " " * max(0, cells - 1 - cell_len(text))
    body = padding + text if right else text + padding
    return body + " "


def format_age(seconds: float) -> str:
    """
    Describe an age in seconds with its largest whole unit.

    Values of one and two keep the singular unit name.
    """
    seconds = max(0, int(seconds))
    if seconds > _YEAR_THRESHOLD:
        value, unit = seconds // _YEAR, "year"
    elif seconds >= _MONTH:
        value, unit = seconds // _MONTH, "month"
    elif seconds >= _DAY:
        value, unit = seconds // _DAY, "day"
    elif seconds >= _HOUR:
        value, unit = seconds // _HOUR, "hour"
    elif seconds >= _MINUTE:
        value, unit = seconds // _MINUTE, "minute"
    else:
        return JUST_NOW
    return f"{value} {unit}s" if value > 2 else f"{value} {unit}"


def reduce_score(values: Iterable[int], label: Label) -> str:
    """
    Reduce all scores on one label to a single display cell.

    A score at or past the rejection threshold wins over everything, so
    one veto blocks approval. Otherwise a score at or past the approval
    threshold shows the approved glyph, and anything else shows the
    lowest score.
    """
    values = list(values)
    if not values:
        return " "
    lowest = min(values)
    if lowest <= label.rejected_threshold:
        return REJECTED_GLYPH
    if max(values) >= label.approved_threshold:
        return APPROVED_GLYPH
    if lowest > 0:
        return f"+{lowest}"
    return str(lowest)


def _score_style(cell: str) -> str | None:
    if cell == APPROVED_GLYPH:
        return _STYLE_APPROVED
    if cell == REJECTED_GLYPH:
        return _STYLE_REJECTED
    if cell.startswith("+"):
        return _STYLE_POSITIVE
    if cell.startswith("-"):
        return _STYLE_NEGATIVE
    return None


@dataclass(frozen=True)
class Layout:
    """Columns shown at one terminal width."""

    width: int
    show_scores: bool
    show_size: bool
    show_age: bool
    show_branch: bool
    label_count: int

    @classmethod
    def for_width(cls, width: int, label_count: int) -> Layout:
        return cls(
            width=width,
            show_scores=width > SCORES_MIN_WIDTH,
            show_size=width > SIZE_MIN_WIDTH,
            show_age=width > AGE_MIN_WIDTH,
            show_branch=width > BRANCH_MIN_WIDTH,
            label_count=label_count,
        )

    @property
    def fixed_width(self) -> int:
        total = NUMBER_WIDTH + PATCHSET_WIDTH + OWNER_WIDTH
        if self.show_scores:
            total += (SCORE_WIDTH + 1) * self.label_count
        if self.show_size:
            total += 2 * SIZE_WIDTH
        if self.show_age:
            total += AGE_WIDTH
        if self.show_branch:
            total += BRANCH_WIDTH
        return total

    @property
    def subject_width(self) -> int:
        return max(0, self.width - self.fixed_width - 1)

    @property
    def columns(self) -> list[str]:
        """Names of the columns shown, in display order."""
        names = ["number", "patchset", "subject"]
        if self.show_branch:
            names.append("branch")
        if self.show_size:
            names.extend(["insertions", "deletions"])
        if self.show_age:
            names.append("updated")
        names.append("owner")
        if self.show_scores:
            names.append("scores")
        return names


def _row(
    layout: Layout,
    number: tuple[str, str | None],
    patchset: tuple[str, str | None],
    subject: tuple[str, str | None],
    branch: tuple[str, str | None],
    insertions: tuple[str, str | None],
    deletions: tuple[str, str | None],
    updated: tuple[str, str | None],
    owner: tuple[str, str | None],
    scores: Sequence[tuple[str, str | None]],
) -> Text:
    line = Text()
    line.append(fit(number[0], NUMBER_WIDTH), number[1])
    line.append(fit(patchset[0], PATCHSET_WIDTH), patchset[1])
    subject_text = truncate(subject[0], layout.subject_width)
    line.append(subject_text, subject[1])
    line.append(" " * (layout.subject_width - cell_len(subject_text) + 1))
    if layout.show_branch:
        line.append(fit(branch[0], BRANCH_WIDTH), branch[1])
    if layout.show_size:
        line.append(fit(insertions[0], SIZE_WIDTH, right=True), insertions[1])
        line.append(fit(deletions[0], SIZE_WIDTH, right=True), deletions[1])
    if layout.show_age:
        line.append(fit(updated[0], AGE_WIDTH), updated[1])
    line.append(fit(owner[0], OWNER_WIDTH), owner[1])
    if layout.show_scores:
        for cell, style in scores:
            line.append(fit(cell, SCORE_WIDTH + 1, right=True), style)
    line.rstrip()
    return line


def _header(layout: Layout, labels: LabelSet) -> Text:
    line = _row(
        layout,
        number=("#", None),
        patchset=("PS", None),
        subject=("Subject", None),
        branch=("Branch", None),
        insertions=("+", None),
        deletions=("-", None),
        updated=("Updated", None),
        owner=("Owner", None),
        scores=[(label.short_code.rstrip(), None) for label in labels.labels],
    )
    line.stylize(_STYLE_HEADER)
    return line


def _review_row(
    layout: Layout, review: Review, labels: LabelSet, now: float
) -> Text:
    patchset = f"[{review.patchset_number}{'D' if review.is_draft else ''}]"
    scores = []
    for label in labels.labels:
        cell = reduce_score(review.approvals_for(label.full_name), label)
        scores.append((cell, _score_style(cell)))
    return _row(
        layout,
        number=(str(review.number), _STYLE_NUMBER),
        patchset=(patchset, _STYLE_DRAFT if review.is_draft else _STYLE_DIM),
        subject=(
            review.subject,
            _STYLE_DRAFT if review.is_draft else _STYLE_SUBJECT,
        ),
        branch=(review.branch, _STYLE_DIM),
        insertions=(f"+{review.size_insertions}", _STYLE_INSERTIONS),
        deletions=(f"-{review.size_deletions}", _STYLE_DELETIONS),
        updated=(format_age(review.age(now)), _STYLE_DIM),
        owner=(review.owner_name, _STYLE_OWNER),
        scores=scores,
    )


def render_text(
    reviews: Iterable[Review],
    labels: LabelSet,
    width: int,
    title: str | None = None,
    now: float | None = None,
) -> Text:
    """
    Render reviews as a styled table.

    Args:
        reviews: Reviews in display order.
        labels: Labels giving the score columns, in order.
        width: Available width in terminal cells.
        title: Optional title; when given the table is framed by the
            title line and a trailing blank line.
        now: Reference time for ages, defaults to the current time.

    Returns:
        The table as a rich Text, one line per row plus the header.
    """
    if now is None:
        now = time.time()
    layout = Layout.for_width(width, len(labels.labels))

    lines: list[Text] = []
    if title:
        lines.append(Text(truncate(title, width), style=_STYLE_TITLE))
    lines.append(_header(layout, labels))
    for review in reviews:
        lines.append(_review_row(layout, review, labels, now))
    if title:
        lines.append(Text())

    result = Text("\n").join(lines)
    result.append("\n")
    return result


def render_reviews(
    reviews: Iterable[Review],
    labels: LabelSet,
    width: int,
    title: str | None = None,
    now: float | None = None,
) -> str:
    """Render reviews as a plain text table; see render_text."""
    return render_text(reviews, labels, width, title=title, now=now).plain


class ReviewIndex(Mapping[int, Review]):
    """
    Maps rendered review numbers back to their records.

    Held by the presentation layer so that a command aimed at a row can
    find the review it describes.
    """

    def __init__(self, reviews: Iterable[Review] = ()) -> None:
        self._reviews: dict[int, Review] = {r.number: r for r in reviews}

    def __getitem__(self, number: int) -> Review:
        return self._reviews[number]

    def __iter__(self) -> Iterator[int]:
        return iter(self._reviews)

    def __len__(self) -> int:
        return len(self._reviews)


__all__ = [
    "APPROVED_GLYPH",
    "ELLIPSIS",
    "JUST_NOW",
    "REJECTED_GLYPH",
    "Layout",
    "ReviewIndex",
    "fit",
    "format_age",
    "reduce_score",
    "render_reviews",
    "render_text",
    "truncate",
]
