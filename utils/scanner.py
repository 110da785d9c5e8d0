"""
Scores Scanner - Verbatim Extraction of the `scores` Array

Scans the raw body of a scores API response of the form:

    {
        "scores": [{ ... }, ...],
        "cursor": {"id": number},
        "cursor_string": "..."
    }

and fills a `Scores` collection with one Score per array element, each holding
the element's exact bytes and its own `id`. The API's `cursor` fields are
ignored on purpose: they carry the *newest* id, while pagination wants the
oldest one, which callers derive from the scanned scores instead.

The body is never fully parsed. Only brace positions are visited; the `id`
lookup is restricted to the spans of an element that sit at its own top level,
so ids of nested objects (e.g. `"user": {"id": 2}`) are never picked up,
whether they appear before or after the element's own id.

Usage:
    from utils.scanner import Scanner, ScanError
    from utils.scores import Scores

    scores = Scores()
    try:
        Scanner(body).scan(scores)
    except ScanError as e:
        logger.error("Malformed body", extra={"position": e.position})
"""

import logging
import re
from typing import Callable, Optional

from utils.scores import Score, Scores

logger = logging.getLogger(__name__)

ARRAY_KEY = b'"scores":'
ID_KEY = b'"id":'

SPACE = ord(" ")
COMMA = ord(",")
OPEN_BRACE = ord("{")
OPEN_BRACKET = ord("[")
CLOSE_BRACKET = ord("]")

_BRACES = re.compile(rb"[{}]")


class ScanError(Exception):
    """Base class for malformed scores bodies.

    Attributes:
        position: Offset of the offending byte, if known
        data: The full input buffer, attached before the error leaves the scanner
    """

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.data: Optional[bytes] = None

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at byte {self.position})"


class MissingArrayKey(ScanError):
    pass


class SkipFailed(ScanError):
    pass


class UnexpectedCharacter(ScanError):
    pass


class ExpectedBraceOrBracket(ScanError):
    pass


class MissingId(ScanError):
    pass


class ExpectedCommaOrBracket(ScanError):
    pass


class PeekDigitFailed(ScanError):
    pass


class UnbalancedBraces(ScanError):
    pass


def _is_digit(byte: int) -> bool:
    return 0x30 <= byte <= 0x39


def skip_to(data: bytes, start: int, until: Callable[[int], bool], end: Optional[int] = None) -> int:
    """Skip ASCII spaces and return the offset of the first byte matching `until`.

    Raises:
        UnexpectedCharacter: A non-space byte does not match `until`
        SkipFailed: `end` is reached first
    """
    end = len(data) if end is None else end

    for idx in range(start, end):
        byte = data[idx]
        if byte == SPACE:
            continue
        if until(byte):
            return idx
        raise UnexpectedCharacter(f"Unexpected character `{chr(byte)}`", position=idx)

    raise SkipFailed("`until` condition never met", position=end)


def parse_uint(data: bytes, start: int, end: Optional[int] = None) -> int:
    """Parse the run of ASCII digits following optional spaces.

    Raises:
        PeekDigitFailed: No digit follows the spaces
    """
    end = len(data) if end is None else end

    try:
        idx = skip_to(data, start, _is_digit, end)
    except (SkipFailed, UnexpectedCharacter) as e:
        raise PeekDigitFailed("Failed to skip until digit", position=e.position) from e

    value = 0
    while idx < end and _is_digit(data[idx]):
        value = value * 10 + (data[idx] & 0xF)
        idx += 1

    return value


class Scanner:
    """Forward-only scanner over one immutable response body."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.idx = 0

    def scan(self, scores: Scores) -> None:
        """Insert every element of the `scores` array into `scores`.

        Elements inserted before a failure stay in the collection; the raised
        error is what tells the caller the body was rejected.

        Raises:
            ScanError: If the body is malformed, with `data` set to the full body
        """
        start = self.data.find(ARRAY_KEY)

        if start == -1:
            error = MissingArrayKey("Missing scores")
            error.data = self.data
            raise error

        self.idx = start + len(ARRAY_KEY)

        try:
            self._scan_scores(scores)
        except ScanError as e:
            e.data = self.data
            logger.debug(
                "Failed to scan scores",
                extra={
                    "error": str(e),
                    "position": e.position,
                    "body_size": len(self.data),
                },
            )
            raise

    def _scan_scores(self, scores: Scores) -> None:
        data = self.data
        size = len(data)

        self.idx = skip_to(data, self.idx, lambda byte: byte == OPEN_BRACKET) + 1

        first = data[self.idx] if self.idx < size else None

        if first == CLOSE_BRACKET:
            self.idx += 1
            return
        if first != OPEN_BRACE:
            raise ExpectedBraceOrBracket("Expected opening brace or closing bracket", position=self.idx)

        view = memoryview(data)

        depth = 1
        element_start = checkpoint = self.idx
        score_id: Optional[int] = None

        # The first opening brace is consumed above
        for match in _BRACES.finditer(data, self.idx + 1):
            pos = match.start()
            prev_depth = depth
            depth = prev_depth + 1 if data[pos] == OPEN_BRACE else prev_depth - 1

            if depth < 0:
                raise UnexpectedCharacter("Unexpected character `}`", position=pos)

            if score_id is None and prev_depth == 1:
                score_id = self._find_id(checkpoint, pos)

            if depth == 1:
                if prev_depth == 0:
                    element_start = pos
                checkpoint = pos
            elif depth == 0:
                if score_id is None:
                    raise MissingId(
                        f"Missing id within bytes {data[element_start:pos + 1]!r}",
                        position=element_start,
                    )

                scores.insert(Score(id=score_id, payload=view[element_start:pos + 1]))
                score_id = None

                following = data[pos + 1] if pos + 1 < size else None

                if following == COMMA:
                    # Every entry of the array must be an object
                    try:
                        skip_to(data, pos + 2, lambda byte: byte == OPEN_BRACE)
                    except (SkipFailed, UnexpectedCharacter) as e:
                        raise ExpectedBraceOrBracket(
                            "Expected opening brace after comma", position=e.position
                        ) from e
                    continue
                if following == CLOSE_BRACKET:
                    self.idx = pos + 2
                    return
                raise ExpectedCommaOrBracket("Expected comma or closing bracket", position=pos + 1)

        raise UnbalancedBraces("Reached end of input inside the scores array", position=size)

    def _find_id(self, start: int, end: int) -> Optional[int]:
        """Look for the id field within one top-level span of an element."""
        idx = self.data.find(ID_KEY, start, end)

        if idx == -1:
            return None

        return parse_uint(self.data, idx + len(ID_KEY), end)
