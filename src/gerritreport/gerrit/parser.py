# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Parsing of ``gerrit query --format=JSON`` output.

Gerrit writes one JSON object per matching change, one per line, and
finishes with a statistics object such as
``{"type":"stats","rowCount":3,"runTimeMilliseconds":12}``. Objects that
do not describe a change are skipped rather than reported as errors.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from gerritreport.errors import MalformedRecord
from gerritreport.gerrit.models import Approval, Review

log = logging.getLogger("gerritreport.gerrit.parser")


def _as_int(value: Any, field: str, default: int | None = None) -> int:
    """Convert a numeric field; older Gerrit releases send strings."""
    if value is None or value == "":
        if default is None:
            raise MalformedRecord(f"missing field: {field}")
        return default
    if isinstance(value, bool):
        raise MalformedRecord(f"invalid integer for {field}: {value!r}")
    try:
        return int(value)
    except (OverflowError, TypeError, ValueError) as exc:
        raise MalformedRecord(f"invalid integer for {field}: {value!r}") from exc


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRecord(f"expected a string, got {value!r}")
    return value


def _is_true(value: Any) -> bool:
    return value is True or value == "true"


def _parse_approval(data: Any) -> Approval:
    if not isinstance(data, dict):
        raise MalformedRecord(f"approval is not an object: {data!r}")
    label_type = data.get("type")
    if not label_type:
        raise MalformedRecord("approval without type")
    by = data.get("by") or {}
    if not isinstance(by, dict):
        by = {}
    return Approval(
        label_type=str(label_type),
        value=_as_int(data.get("value"), "approval value"),
        by_name=_as_str(by.get("name") or by.get("username")),
    )


def _parse_approvals(items: list[Any], number: Any) -> tuple[Approval, ...]:
    approvals = []
    for item in items:
        try:
            approvals.append(_parse_approval(item))
        except MalformedRecord as exc:
            log.debug("Skipping approval on change %s: %s", number, exc)
    return tuple(approvals)


def parse_review(data: Any) -> Review:
    """
    Create a Review from one decoded query result object.

    Args:
        data: A JSON object from the query output.

    Returns:
        A Review instance.

    Raises:
        MalformedRecord: If the object lacks the change number, subject
            or owner name, or holds values of the wrong type.
    """
    if not isinstance(data, dict):
        raise MalformedRecord(f"not a JSON object: {type(data).__name__}")

    owner = data.get("owner") or {}
    if not isinstance(owner, dict):
        raise MalformedRecord("owner is not an object")

    if data.get("number") is None or not data.get("subject"):
        raise MalformedRecord("missing number or subject")
    if not owner.get("name"):
        raise MalformedRecord("missing owner name")

    patchset = data.get("currentPatchSet") or {}
    if not isinstance(patchset, dict):
        raise MalformedRecord("currentPatchSet is not an object")

    approvals_data = patchset.get("approvals") or []
    if not isinstance(approvals_data, list):
        raise MalformedRecord("approvals is not a list")

    try:
        return _build_review(data, owner, patchset, approvals_data)
    except ValidationError as exc:
        raise MalformedRecord(
            f"invalid change {data.get('number')!r}: {exc}"
        ) from exc


def _build_review(
    data: dict[str, Any],
    owner: dict[str, Any],
    patchset: dict[str, Any],
    approvals_data: list[Any],
) -> Review:
    return Review(
        number=_as_int(data.get("number"), "number"),
        id=_as_str(data.get("id")),
        project=_as_str(data.get("project")),
        subject=str(data["subject"]),
        branch=_as_str(data.get("branch")),
        status=_as_str(data.get("status")),
        owner_name=str(owner["name"]),
        owner_email=_as_optional_str(owner.get("email")),
        patchset_number=_as_int(patchset.get("number"), "patchset", 0),
        revision=_as_str(patchset.get("revision")),
        ref=_as_str(patchset.get("ref")),
        is_draft=_is_true(patchset.get("isDraft")),
        size_insertions=_as_int(
            patchset.get("sizeInsertions"), "sizeInsertions", 0
        ),
        size_deletions=abs(
            _as_int(patchset.get("sizeDeletions"), "sizeDeletions", 0)
        ),
        approvals=_parse_approvals(approvals_data, data.get("number")),
        url=_as_str(data.get("url")),
        last_updated=_as_int(data.get("lastUpdated"), "lastUpdated", 0),
    )


def parse_reviews(raw: bytes | str) -> Iterator[Review]:
    """
    Parse query output into reviews, in the order Gerrit returned them.

    Lines that are not JSON, and objects that are not complete changes
    (including the trailing statistics object), are skipped.

    Args:
        raw: The stdout of ``gerrit query --format=JSON``.

    Yields:
        Review instances.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            log.warning("Skipping undecodable query line %d: %s", lineno, exc)
            continue

        if isinstance(data, dict) and data.get("type") == "stats":
            log.debug(
                "Query stats: rowCount=%s runTimeMilliseconds=%s",
                data.get("rowCount"),
                data.get("runTimeMilliseconds"),
            )
            continue

        try:
            yield parse_review(data)
        except MalformedRecord as exc:
            log.debug("Skipping query line %d: %s", lineno, exc)


__all__ = ["parse_review", "parse_reviews"]
