# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""List and act on Gerrit code reviews over the Gerrit SSH interface."""

from gerritreport.errors import (
    ConfigurationError,
    ExecutionError,
    GerritReportError,
    GerritServiceError,
    GitError,
    MalformedRecord,
)
from gerritreport.gerrit.service import generate_report

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExecutionError",
    "GerritReportError",
    "GerritServiceError",
    "GitError",
    "MalformedRecord",
    "__version__",
    "generate_report",
]
