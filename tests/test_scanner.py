#!/usr/bin/env python3
"""Tests for the byte-level scores scanner."""

import pytest

from tests.conftest import SAMPLE_BODY, make_body
from utils.scanner import (
    ExpectedBraceOrBracket,
    ExpectedCommaOrBracket,
    MissingArrayKey,
    MissingId,
    PeekDigitFailed,
    ScanError,
    Scanner,
    SkipFailed,
    UnbalancedBraces,
    UnexpectedCharacter,
    parse_uint,
    skip_to,
)
from utils.scores import Scores


def scan(body: bytes) -> Scores:
    scores = Scores()
    Scanner(body).scan(scores)
    return scores


def pairs(scores: Scores) -> list[tuple[bytes, int]]:
    return [(bytes(score.payload), score.id) for score in scores]


class TestScan:
    """Test suite for well-formed scores bodies."""

    def test_scan_sample_body(self, sample_body):
        """Own ids win over nested ids wherever they are declared."""
        scores = scan(sample_body)

        assert pairs(scores) == [
            (b'{"id": 123}', 123),
            (b'{"id":456, "user": {"id": 2}}', 456),
            (b'{"user": {"id":2}, "id": 789}', 789),
        ]

    def test_scan_empty_array(self):
        """Test that an empty array yields no scores."""
        assert len(scan(b'{"scores":[],"cursor":null}')) == 0

    def test_scan_empty_array_with_spaces_before_bracket(self):
        """Test that spaces between marker and bracket are skipped."""
        assert len(scan(b'{"scores":    []}')) == 0

    def test_scan_sorts_by_id(self):
        """Test that scores come out in ascending id order."""
        body = make_body(b'{"id":9}', b'{"id":3}', b'{"id":6}')

        assert [score.id for score in scan(body)] == [3, 6, 9]

    def test_scan_ignores_cursor_fields(self):
        """Test that the API cursor object outside the array is not scanned."""
        scores = scan(SAMPLE_BODY)

        assert 2 not in scores
        assert len(scores) == 3

    def test_scan_duplicate_ids_keep_first(self):
        """Test that the first score with an id is kept unchanged."""
        body = make_body(b'{"id":1,"pp":10}', b'{"id":1,"pp":20}')

        scores = scan(body)

        assert pairs(scores) == [(b'{"id":1,"pp":10}', 1)]

    def test_scan_marker_not_at_start(self):
        """Test that the array may follow other top-level fields."""
        body = b'{"total":2,"meta":{"id":5},"scores":[{"id":7}]}'

        assert pairs(scan(body)) == [(b'{"id":7}', 7)]

    def test_scan_id_with_leading_spaces(self):
        """Test that spaces before the id digits are skipped."""
        assert [s.id for s in scan(make_body(b'{"id":    42}'))] == [42]

    def test_scan_large_id(self):
        """Test ids beyond 32 bits."""
        body = make_body(b'{"id":18446744073709551615}')

        assert [s.id for s in scan(body)] == [18446744073709551615]

    def test_scan_preserves_utf8_content(self):
        """Test that non-ASCII content is forwarded byte for byte."""
        element = '{"id":1,"user":{"username":"Ærøskøbing ✓"}}'.encode("utf-8")

        assert pairs(scan(make_body(element))) == [(element, 1)]

    def test_scan_payload_is_zero_copy(self, sample_body):
        """Test that payloads are views into the original body."""
        scores = scan(sample_body)

        for score in scores:
            assert isinstance(score.payload, memoryview)
            assert score.payload.obj is sample_body

    def test_scan_is_idempotent(self, sample_body):
        """Test that scanning the same body twice gives identical results."""
        assert pairs(scan(sample_body)) == pairs(scan(sample_body))

    def test_scan_nested_arrays_inside_score(self):
        """Test that brackets inside a score do not end the array."""
        element = b'{"mods":["HD","DT"],"id":5,"stats":[{"n":1},{"n":2}]}'

        assert pairs(scan(make_body(element))) == [(element, 5)]

    @pytest.mark.parametrize("element,expected_id", [
        (b'{"a":{"b":{"c":{"id":1}}},"id":2}', 2),
        (b'{"id":3,"a":{"b":{"id":4,"c":{"id":5}}}}', 3),
        (b'{"a":{"id":6},"b":{"c":{"id":7}},"id":8,"d":{"id":9}}', 8),
        (b'{"a":{"b":{"id":10}},"c":{"id":11},"e":{"f":{"g":{"id":12}}},"id":13}', 13),
    ])
    def test_scan_deep_nesting(self, element, expected_id):
        """Test that only the element's own id is used at any nesting depth."""
        assert pairs(scan(make_body(element))) == [(element, expected_id)]

    def test_scan_nested_key_name_ending_in_id(self):
        """Test that keys like "user_id" are not mistaken for the id field."""
        element = b'{"user_id":77,"id":1}'

        assert [s.id for s in scan(make_body(element))] == [1]


class TestScanErrors:
    """Test suite for malformed scores bodies."""

    def test_missing_array_key(self):
        """Test that a body without the array marker is rejected up front."""
        body = b'{"results":[{"id":1}]}'

        with pytest.raises(MissingArrayKey) as exc_info:
            scan(body)

        assert exc_info.value.data == body

    def test_missing_id(self):
        """Test that an id found only in a nested object is not accepted."""
        body = make_body(b'{"user":{"id":2},"pp":1.5}')

        with pytest.raises(MissingId):
            scan(body)

    def test_missing_id_keeps_earlier_scores(self):
        """Test that scores inserted before the failure stay in the collection."""
        body = make_body(b'{"id":1}', b'{"user":{"id":2}}')
        scores = Scores()

        with pytest.raises(MissingId):
            Scanner(body).scan(scores)

        assert scores.ids() == [1]

    @pytest.mark.parametrize("separator", [b";", b" ", b"}", b"x"])
    def test_bad_separator(self, separator):
        """Test that only a comma or closing bracket may follow a score."""
        body = b'{"scores":[{"id":1}' + separator + b'{"id":2}]}'

        with pytest.raises(ExpectedCommaOrBracket):
            scan(body)

    @pytest.mark.parametrize("body", [
        b'{"scores":[{"id":1}, 5],"other":[{"id":9}]}',
        b'{"scores":[{"id":1},"x"],"other":[{"id":9}]}',
        b'{"scores":[{"id":1},]}',
        b'{"scores":[{"id":1},   ',
    ])
    def test_non_object_after_comma(self, body):
        """Test that every array entry must be an object."""
        scores = Scores()

        with pytest.raises(ExpectedBraceOrBracket):
            Scanner(body).scan(scores)

        assert 9 not in scores

    def test_spaces_after_comma(self):
        """Test that spaces between a comma and the next score are allowed."""
        body = b'{"scores":[{"id":1},    {"id":2}]}'

        assert [s.id for s in scan(body)] == [1, 2]

    def test_truncated_after_score(self):
        """Test that a body ending right after a score is rejected."""
        with pytest.raises(ExpectedCommaOrBracket):
            scan(b'{"scores":[{"id":1}')

    def test_unbalanced_braces(self):
        """Test that a body ending inside a score is rejected."""
        with pytest.raises(UnbalancedBraces):
            scan(b'{"scores":[{"id":1,"user":{"id":2}')

    def test_unexpected_character_before_bracket(self):
        """Test that only spaces may precede the opening bracket."""
        with pytest.raises(UnexpectedCharacter) as exc_info:
            scan(b'{"scores":null}')

        assert exc_info.value.position == len(b'{"scores":')

    def test_skip_failed_at_end_of_input(self):
        """Test that a body ending after the marker is rejected."""
        with pytest.raises(SkipFailed):
            scan(b'{"scores":   ')

    @pytest.mark.parametrize("body", [
        b'{"scores":[1,2]}',
        b'{"scores":[ {"id":1}]}',
        b'{"scores":[',
    ])
    def test_expected_brace_or_bracket(self, body):
        """Test the byte right after the opening bracket."""
        with pytest.raises(ExpectedBraceOrBracket):
            scan(body)

    @pytest.mark.parametrize("element", [
        b'{"id":null}',
        b'{"id":"123"}',
        b'{"id":-1}',
        b'{"id":    }',
    ])
    def test_id_without_digits(self, element):
        """Test that a non-numeric id value is rejected."""
        with pytest.raises(PeekDigitFailed):
            scan(make_body(element))

    def test_errors_carry_full_body(self):
        """Test that structural errors are annotated with the whole input."""
        body = make_body(b'{"id":1}', b'{"nope":true}')

        with pytest.raises(ScanError) as exc_info:
            scan(body)

        assert exc_info.value.data == body
        assert exc_info.value.position is not None
        assert "at byte" in str(exc_info.value)


class TestHelpers:
    """Test suite for the whitespace and digit helpers."""

    def test_skip_to_returns_offset(self):
        assert skip_to(b"   [", 0, lambda byte: byte == ord("[")) == 3

    def test_skip_to_only_skips_spaces(self):
        """Test that tabs and newlines are not treated as skippable."""
        with pytest.raises(UnexpectedCharacter):
            skip_to(b"\n[", 0, lambda byte: byte == ord("["))

    def test_skip_to_respects_end(self):
        with pytest.raises(SkipFailed):
            skip_to(b"   [", 0, lambda byte: byte == ord("["), end=2)

    @pytest.mark.parametrize("data,expected", [
        (b"0", 0),
        (b"123", 123),
        (b"  456,", 456),
        (b"789}", 789),
        (b"0012", 12),
    ])
    def test_parse_uint(self, data, expected):
        assert parse_uint(data, 0) == expected

    def test_parse_uint_stops_at_end(self):
        """Test that digits past `end` are not consumed."""
        assert parse_uint(b"12345", 0, 3) == 123

    def test_parse_uint_chains_skip_error(self):
        with pytest.raises(PeekDigitFailed) as exc_info:
            parse_uint(b"  x", 0)

        assert isinstance(exc_info.value.__cause__, UnexpectedCharacter)
        assert exc_info.value.position == 2
