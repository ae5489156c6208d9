# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""Exception hierarchy shared across gerritreport."""

from __future__ import annotations

from collections.abc import Sequence


class GerritReportError(Exception):
    """Base class for all gerritreport errors."""


class ConfigurationError(GerritReportError):
    """Raised when required connection settings are missing."""


class ExecutionError(GerritReportError):
    """Raised when an external command cannot be run or fails."""

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str | None = None,
        command: Sequence[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = list(command) if command is not None else None

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr and self.stderr.strip():
            return f"{base}: {self.stderr.strip()}"
        return base


class MalformedRecord(GerritReportError):
    """Raised for a query result object that is not a usable review."""


class GerritServiceError(GerritReportError):
    """Raised for service-level errors."""


class GitError(ExecutionError):
    """Raised when a git command fails."""


__all__ = [
    "ConfigurationError",
    "ExecutionError",
    "GerritReportError",
    "GerritServiceError",
    "GitError",
    "MalformedRecord",
]
