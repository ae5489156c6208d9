# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Gerrit data models for gerritreport.

This module defines immutable Pydantic models for reviews returned by the
Gerrit SSH query interface, the labels they are scored on, and the
connection settings used to reach the server.

These models provide:
- Type-safe representations of Gerrit query results
- An explicit, ordered label configuration for score columns
- Connection settings built once per invocation and never mutated
"""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SSH_PORT: Final[int] = 29418


class Approval(BaseModel):
    """One reviewer's score on one label for the current patchset."""

    model_config = ConfigDict(frozen=True)

    label_type: str = Field(..., description="Label name, e.g. Code-Review")
    value: int = Field(..., description="Signed score")
    by_name: str = Field("", description="Name of the reviewer")


class Review(BaseModel):
    """
    Represents one Gerrit change paired with its current patchset.

    Records are built by the parser for a single report and discarded
    afterwards.
    """

    model_config = ConfigDict(frozen=True)

    # Core identifiers
    number: int = Field(..., description="Gerrit change number")
    id: str = Field("", description="Gerrit Change-Id (I-prefixed)")
    project: str = Field("", description="Gerrit project name")

    # Content
    subject: str = Field(..., description="First line of commit message")
    branch: str = Field("", description="Target branch")
    status: str = Field("", description="Change status (NEW, MERGED, ...)")

    # Owner
    owner_name: str = Field(..., description="Change owner display name")
    owner_email: str | None = Field(None, description="Change owner email")

    # Current patchset
    patchset_number: int = Field(0, description="Current patchset number")
    revision: str = Field("", description="Current patchset commit SHA")
    ref: str = Field("", description="Current patchset ref")
    is_draft: bool = Field(False, description="Whether the patchset is a draft")
    size_insertions: int = Field(0, description="Lines inserted")
    size_deletions: int = Field(0, description="Lines deleted")
    approvals: tuple[Approval, ...] = Field(
        default_factory=tuple, description="Scores on the current patchset"
    )

    # Misc
    url: str = Field("", description="Web URL for the change")
    last_updated: int = Field(0, description="Last update, epoch seconds")

    @property
    def change_patchset(self) -> str:
        """The ``<change>,<patchset>`` form accepted by ``gerrit review``."""
        return f"{self.number},{self.patchset_number}"

    def age(self, now: float) -> int:
        """Seconds elapsed since the last update, never negative."""
        return max(0, int(now) - self.last_updated)

    def approvals_for(self, label_type: str) -> list[int]:
        """Get all score values given on a label."""
        return [a.value for a in self.approvals if a.label_type == label_type]


class Label(BaseModel):
    """
    A configured review dimension.

    The thresholds decide when a score cell collapses into the rejected
    or approved glyph.
    """

    model_config = ConfigDict(frozen=True)

    full_name: str
    short_code: str
    rejected_threshold: int = -2
    approved_threshold: int = 2

    @field_validator("short_code")
    @classmethod
    def _two_cells(cls, value: str) -> str:
        value = value.strip()
        if not value or len(value) > 2:
            raise ValueError(f"short code must be 1 or 2 characters: {value!r}")
        return value.ljust(2)

    def in_range(self, score: int) -> bool:
        """Check whether a score is valid for this label."""
        return self.rejected_threshold <= score <= self.approved_threshold


class LabelSet(BaseModel):
    """Ordered label configuration; order is the score-column order."""

    model_config = ConfigDict(frozen=True)

    labels: tuple[Label, ...] = ()

    def get(self, full_name: str) -> Label | None:
        """Find a label by its full name."""
        for label in self.labels:
            if label.full_name == full_name:
                return label
        return None

    @classmethod
    def default(cls) -> LabelSet:
        """Code-Review and Verified, as configured on a stock Gerrit."""
        return cls(
            labels=(
                Label(full_name="Code-Review", short_code="CR"),
                Label(
                    full_name="Verified",
                    short_code="VR",
                    rejected_threshold=-1,
                    approved_threshold=1,
                ),
            )
        )

    @classmethod
    def parse(cls, text: str) -> LabelSet:
        """
        Build a label set from its string form.

        The format is a comma separated list of
        ``Full-Name=CODE[:rejected:approved]`` entries, for example
        ``Code-Review=CR:-2:2,Verified=VR:-1:1``.

        Raises:
            ValueError: If an entry cannot be parsed.
        """
        labels: list[Label] = []
        for entry in text.split(","):
            entry = entry.strip()
            if not entry:
                continue
            name, sep, rest = entry.partition("=")
            if not sep or not name.strip():
                raise ValueError(f"Invalid label entry: {entry!r}")
            parts = rest.split(":")
            if len(parts) not in (1, 3):
                raise ValueError(f"Invalid label entry: {entry!r}")
            kwargs: dict[str, int] = {}
            if len(parts) == 3:
                try:
                    kwargs["rejected_threshold"] = int(parts[1])
                    kwargs["approved_threshold"] = int(parts[2])
                except ValueError as exc:
                    raise ValueError(
                        f"Invalid label thresholds in {entry!r}"
                    ) from exc
            labels.append(
                Label(full_name=name.strip(), short_code=parts[0], **kwargs)
            )
        if not labels:
            raise ValueError("No labels configured")
        return cls(labels=tuple(labels))


class ConnectionConfig(BaseModel):
    """SSH connection settings for a Gerrit server."""

    model_config = ConfigDict(frozen=True)

    host_and_user: str | None = Field(
        None, description="SSH destination, e.g. jdoe@gerrit.example.org"
    )
    port: int = Field(DEFAULT_SSH_PORT, description="Gerrit SSH port")
    ssh_command: str = Field("ssh", description="SSH client executable")
    timeout: float | None = Field(
        60.0, description="Seconds to wait for a command, None to wait forever"
    )

    @property
    def is_configured(self) -> bool:
        """Check if credentials are present."""
        return bool(self.host_and_user and self.host_and_user.strip())


__all__ = [
    "DEFAULT_SSH_PORT",
    "Approval",
    "ConnectionConfig",
    "Label",
    "LabelSet",
    "Review",
]
