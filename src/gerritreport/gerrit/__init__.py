# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Gerrit integration package for gerritreport.

This package talks to Gerrit through its SSH command interface.

Modules:
    models: Pydantic models for reviews, labels and connection settings
    commands: Argument builders for gerrit query and review commands
    ssh: Runs gerrit commands through the ssh client
    parser: Turns query JSON lines into Review records
    service: Report generation and review actions

Usage:
    from gerritreport.gerrit import ConnectionConfig, generate_report

    config = ConnectionConfig(host_and_user="jdoe@gerrit.example.org")
    print(generate_report("releng/tool", None, 120, config=config))
"""

from gerritreport.gerrit.commands import (
    DEFAULT_FILTER,
    abandon_command,
    build_query_command,
    code_review_command,
    delete_draft_command,
    publish_command,
    set_reviewers_command,
    submit_command,
    verify_command,
)
from gerritreport.gerrit.models import (
    DEFAULT_SSH_PORT,
    Approval,
    ConnectionConfig,
    Label,
    LabelSet,
    Review,
)
from gerritreport.gerrit.parser import parse_review, parse_reviews
from gerritreport.gerrit.service import (
    ReviewService,
    generate_report,
    generate_report_async,
    generate_report_text,
)
from gerritreport.gerrit.ssh import GerritSsh

__all__ = [
    # Commands
    "DEFAULT_FILTER",
    "abandon_command",
    "build_query_command",
    "code_review_command",
    "delete_draft_command",
    "publish_command",
    "set_reviewers_command",
    "submit_command",
    "verify_command",
    # Models
    "DEFAULT_SSH_PORT",
    "Approval",
    "ConnectionConfig",
    "Label",
    "LabelSet",
    "Review",
    # Parser
    "parse_review",
    "parse_reviews",
    # Service
    "ReviewService",
    "generate_report",
    "generate_report_async",
    "generate_report_text",
    # SSH
    "GerritSsh",
]
