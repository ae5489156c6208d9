# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Tests for the Gerrit query output parser.

This module tests conversion of ``gerrit query --format=JSON`` lines into
Review records, including skipping of incomplete objects.
"""

import json

import pytest
from conftest import NOW, make_change, to_lines

from gerritreport.errors import MalformedRecord
from gerritreport.gerrit.models import Approval
from gerritreport.gerrit.parser import parse_review, parse_reviews


class TestParseReview:
    """Tests for parse_review."""

    def test_all_fields(self):
        """Test that every field is taken from the source object."""
        data = make_change(
            approvals=[("Code-Review", 2), ("Verified", -1)],
        )

        review = parse_review(data)

        assert review.number == 12345
        assert review.subject == "Fix the frobnicator"
        assert review.branch == "master"
        assert review.project == "releng/tool"
        assert review.owner_name == "Jane Doe"
        assert review.owner_email == "jane@example.org"
        assert review.patchset_number == 3
        assert review.revision == "0123456789abcdef0123456789abcdef01234567"
        assert review.ref == "refs/changes/45/12345/3"
        assert review.last_updated == NOW - 3 * 86400
        assert review.size_insertions == 10
        assert review.size_deletions == 4
        assert review.is_draft is False
        assert review.url == "https://gerrit.example.org/c/releng/tool/+/12345"
        assert review.id == data["id"]
        assert review.status == "NEW"
        assert review.approvals == (
            Approval(label_type="Code-Review", value=2, by_name="Reviewer 0"),
            Approval(label_type="Verified", value=-1, by_name="Reviewer 1"),
        )

    def test_numbers_given_as_strings(self):
        """Test that older Gerrit string numbers become integers."""
        data = make_change(lastUpdated="1699999999")
        data["number"] = "777"
        data["currentPatchSet"]["number"] = "2"

        review = parse_review(data)

        assert review.number == 777
        assert review.patchset_number == 2
        assert review.last_updated == 1699999999

    def test_approvals_default_to_empty(self):
        """Test that a patchset without approvals has none."""
        data = make_change()
        del data["currentPatchSet"]["approvals"]

        assert parse_review(data).approvals == ()

    def test_missing_current_patchset(self):
        """Test defaults when the query did not include the patchset."""
        data = make_change()
        del data["currentPatchSet"]

        review = parse_review(data)

        assert review.patchset_number == 0
        assert review.approvals == ()
        assert review.size_insertions == 0
        assert review.is_draft is False

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            ("true", True),
            (False, False),
            ("false", False),
            ("yes", False),
            (1, False),
            (None, False),
        ],
    )
    def test_draft_only_when_literally_true(self, value, expected):
        """Test draft detection accepts only an explicit true."""
        data = make_change()
        data["currentPatchSet"]["isDraft"] = value

        assert parse_review(data).is_draft is expected

    def test_draft_absent(self):
        """Test that a missing isDraft is not a draft."""
        data = make_change()
        del data["currentPatchSet"]["isDraft"]

        assert parse_review(data).is_draft is False

    @pytest.mark.parametrize("field", ["number", "subject"])
    def test_missing_required_field(self, field):
        """Test that a change without number or subject is malformed."""
        data = make_change()
        del data[field]

        with pytest.raises(MalformedRecord):
            parse_review(data)

    def test_missing_owner_name(self):
        """Test that a change without an owner name is malformed."""
        with pytest.raises(MalformedRecord):
            parse_review(make_change(owner=None))

        data = make_change()
        del data["owner"]["name"]
        with pytest.raises(MalformedRecord):
            parse_review(data)

    def test_invalid_number(self):
        """Test that a non-numeric change number is malformed."""
        with pytest.raises(MalformedRecord):
            parse_review(make_change() | {"number": "abc"})

    def test_not_an_object(self):
        """Test that a JSON array is malformed."""
        with pytest.raises(MalformedRecord):
            parse_review([1, 2, 3])

    def test_non_string_owner_email(self):
        """Test that a wrongly typed owner email is malformed."""
        data = make_change()
        data["owner"]["email"] = 42

        with pytest.raises(MalformedRecord):
            parse_review(data)

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_number(self, value):
        """Test that infinite or NaN numbers are malformed."""
        with pytest.raises(MalformedRecord):
            parse_review(make_change() | {"number": value})

    def test_approver_not_an_object(self):
        """Test that a non-object approver leaves the name empty."""
        data = make_change(approvals=[("Code-Review", 1)])
        data["currentPatchSet"]["approvals"][0]["by"] = "jdoe"

        review = parse_review(data)

        assert review.approvals == (
            Approval(label_type="Code-Review", value=1, by_name=""),
        )

    def test_bad_approval_skipped(self):
        """Test that an incomplete approval is dropped and the change kept."""
        data = make_change(approvals=[("Code-Review", 2), ("Verified", 1)])
        del data["currentPatchSet"]["approvals"][0]["value"]
        data["currentPatchSet"]["approvals"].append("not an approval")

        review = parse_review(data)

        assert review.number == 12345
        assert review.approvals == (
            Approval(label_type="Verified", value=1, by_name="Reviewer 1"),
        )


class TestParseReviews:
    """Tests for parse_reviews."""

    def test_preserves_order(self, stats_line):
        """Test that reviews come back in Gerrit's order."""
        raw = to_lines(
            make_change(number=3), make_change(number=1), make_change(number=2)
        )

        assert [r.number for r in parse_reviews(raw)] == [3, 1, 2]

    def test_trailing_stats_object_excluded(self, stats_line):
        """Test that the trailing statistics object is not a review."""
        raw = to_lines(make_change(number=1), make_change(number=2), stats_line)

        reviews = list(parse_reviews(raw))

        assert [r.number for r in reviews] == [1, 2]

    def test_row_count_only_object_excluded(self):
        """Test that an object without change fields is skipped."""
        raw = to_lines(make_change(number=1), {"rowCount": 3})

        assert len(list(parse_reviews(raw))) == 1

    def test_invalid_json_line_skipped(self):
        """Test that undecodable lines are skipped."""
        raw = (
            to_lines(make_change(number=1))
            + b"this is not json\n"
            + to_lines(make_change(number=2))
        )

        assert [r.number for r in parse_reviews(raw)] == [1, 2]

    def test_wrongly_typed_objects_skipped(self):
        """Test that objects with badly typed fields do not stop the report."""
        bad_email = make_change(number=2)
        bad_email["owner"]["email"] = 42
        bad_approver = make_change(number=3, approvals=[("Code-Review", 1)])
        bad_approver["currentPatchSet"]["approvals"][0]["by"] = "jdoe"
        raw = to_lines(
            make_change(number=1),
            bad_email,
            make_change(number=4) | {"number": float("inf")},
            bad_approver,
        )

        assert [r.number for r in parse_reviews(raw)] == [1, 3]

    def test_blank_lines_ignored(self):
        """Test that blank lines are ignored."""
        raw = "\n\n" + json.dumps(make_change()) + "\n\n"

        assert len(list(parse_reviews(raw))) == 1

    def test_empty_output(self):
        """Test that empty output yields no reviews."""
        assert list(parse_reviews(b"")) == []

    def test_restartable(self):
        """Test that parsing the same input twice yields the same reviews."""
        raw = to_lines(make_change(number=1), make_change(number=2))

        assert list(parse_reviews(raw)) == list(parse_reviews(raw))

    def test_lazy(self):
        """Test that parse_reviews returns an iterator."""
        reviews = parse_reviews(to_lines(make_change()))

        assert next(reviews).number == 12345
        with pytest.raises(StopIteration):
            next(reviews)

    def test_non_ascii_subject(self):
        """Test that UTF-8 subjects survive decoding."""
        raw = to_lines(make_change(subject="Übersetzung für 日本語"))

        assert next(parse_reviews(raw)).subject == "Übersetzung für 日本語"
