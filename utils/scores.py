"""
Score Entities - Verbatim Score Payloads and Ordered Score Sets

A Score is one element of the API's `scores` array, kept as the exact byte
range it occupied in the response body plus its numeric id. Identity and
ordering are defined by the id only, so a Score built with `Score.only_id()`
can be used to look up or bound a `Scores` collection.

Usage:
    from utils.scores import Score, Scores

    scores = Scores()
    Scanner(body).scan(scores)

    oldest = scores.oldest()
    for score in scores:
        await publisher.publish_raw(channel, score.as_message())
"""

from bisect import bisect_left, insort
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


def _empty_payload() -> memoryview:
    return memoryview(b"")


@dataclass(frozen=True, order=True)
class Score:
    """One scanned score.

    Attributes:
        id: Identifier taken from the score's own top-level scope
        payload: Zero-copy view over the original response body, spanning the
            score's opening brace to its matching closing brace
    """

    id: int
    payload: memoryview = field(default_factory=_empty_payload, compare=False, repr=False)

    @classmethod
    def only_id(cls, id: int) -> "Score":
        """Build a payload-less Score usable as a comparison key."""
        return cls(id=id)

    def as_message(self) -> memoryview:
        """Binary message wrapping the original bytes unchanged."""
        return self.payload


class Scores:
    """Ascending, unique-by-id set of Score.

    Inserting a Score whose id is already present keeps the stored Score and
    discards the new one.
    """

    def __init__(self) -> None:
        self._ids: list[int] = []
        self._by_id: dict[int, Score] = {}

    def insert(self, score: Score) -> bool:
        """Store `score` unless its id is already present.

        Returns:
            True if the score was stored, False if it was discarded
        """
        if score.id in self._by_id:
            return False

        insort(self._ids, score.id)
        self._by_id[score.id] = score
        return True

    def get(self, id: int) -> Optional[Score]:
        return self._by_id.get(id)

    def remove(self, id: int) -> Score:
        """Remove and return the score with `id`.

        Raises:
            KeyError: If no score with `id` is stored
        """
        score = self._by_id.pop(id)
        del self._ids[bisect_left(self._ids, id)]
        return score

    def discard(self, id: int) -> None:
        if id in self._by_id:
            self.remove(id)

    def pop_oldest(self) -> Score:
        """Remove and return the score with the smallest id.

        Raises:
            IndexError: If the collection is empty
        """
        if not self._ids:
            raise IndexError("pop from empty Scores")
        return self._by_id.pop(self._ids.pop(0))

    def clear(self) -> None:
        self._ids.clear()
        self._by_id.clear()

    def oldest(self) -> Optional[Score]:
        return self._by_id[self._ids[0]] if self._ids else None

    def newest(self) -> Optional[Score]:
        return self._by_id[self._ids[-1]] if self._ids else None

    def ids(self) -> list[int]:
        return list(self._ids)

    def __contains__(self, item: Union[Score, int]) -> bool:
        key = item.id if isinstance(item, Score) else item
        return key in self._by_id

    def __iter__(self) -> Iterator[Score]:
        return (self._by_id[id] for id in list(self._ids) if id in self._by_id)

    def __reversed__(self) -> Iterator[Score]:
        return (self._by_id[id] for id in reversed(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"Scores(ids={self._ids!r})"
