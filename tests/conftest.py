# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""Shared fixtures for gerritreport tests."""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from gerritreport.gerrit.models import ConnectionConfig

NOW = 1_700_000_000


def make_change(
    number: int = 12345,
    subject: str = "Fix the frobnicator",
    owner: str | None = "Jane Doe",
    approvals: list[tuple[str, int]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Build a change object as emitted by gerrit query --format=JSON."""
    change: dict[str, Any] = {
        "project": "releng/tool",
        "branch": "master",
        "id": f"I{number:040d}",
        "number": number,
        "subject": subject,
        "owner": {"name": owner, "email": "jane@example.org", "username": "jdoe"},
        "url": f"https://gerrit.example.org/c/releng/tool/+/{number}",
        "lastUpdated": NOW - 3 * 86400,
        "open": True,
        "status": "NEW",
        "currentPatchSet": {
            "number": 3,
            "revision": "0123456789abcdef0123456789abcdef01234567",
            "ref": f"refs/changes/{number % 100:02d}/{number}/3",
            "isDraft": False,
            "approvals": [
                {"type": label, "value": str(value), "by": {"name": f"Reviewer {i}"}}
                for i, (label, value) in enumerate(approvals or [])
            ],
            "sizeInsertions": 10,
            "sizeDeletions": -4,
        },
    }
    if owner is None:
        del change["owner"]
    change.update(overrides)
    return change


def to_lines(*objects: dict[str, Any]) -> bytes:
    """Encode objects as Gerrit's newline-delimited JSON output."""
    return "".join(json.dumps(obj) + "\n" for obj in objects).encode("utf-8")


def completed(stdout: bytes = b"", returncode: int = 0, stderr: bytes = b""):
    """Mock a subprocess.CompletedProcess."""
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(host_and_user="jdoe@gerrit.example.org")


@pytest.fixture
def stats_line() -> dict[str, Any]:
    return {"type": "stats", "rowCount": 2, "runTimeMilliseconds": 7}
