from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from arhiva_dosare.errors import ImportValidationError

"""Sequence Validator.

An import batch replaces the inventory's numbering, so on its own it must be
exactly 1..N: no duplicates, starting at 1, no gaps. The checks run in that
order and only against the batch; persisted records are not consulted.

Manual single-record addition instead requires the next number after the
current maximum (``validate_next_sequence``).
"""

__all__ = [
    "DuplicateSequenceNumber",
    "SequenceDoesNotStartAtOne",
    "SequenceGap",
    "SequenceNotNext",
    "EmptyImport",
    "validate_batch_sequence",
    "validate_next_sequence",
]


class EmptyImport(ImportValidationError):
    error_type = "EMPTY_IMPORT"

    def __init__(self) -> None:
        super().__init__("no case records found below the header row")


class DuplicateSequenceNumber(ImportValidationError):
    error_type = "DUPLICATE_SEQUENCE_NUMBER"

    def __init__(self, duplicates: list[int]) -> None:
        self.duplicates = duplicates
        listed = ", ".join(str(d) for d in duplicates)
        super().__init__(f"Nr. crt values appear more than once: {listed}")


class SequenceDoesNotStartAtOne(ImportValidationError):
    error_type = "SEQUENCE_DOES_NOT_START_AT_ONE"

    def __init__(self, minimum: int) -> None:
        self.minimum = minimum
        super().__init__(f"Nr. crt numbering must start at 1, the smallest value is {minimum}")


class SequenceGap(ImportValidationError):
    error_type = "SEQUENCE_GAP"

    def __init__(self, current: int, next_: int) -> None:
        self.current = current
        self.next = next_
        super().__init__(f"Nr. crt numbering has a gap: {current} is followed by {next_}")


class SequenceNotNext(ImportValidationError):
    error_type = "SEQUENCE_NOT_NEXT"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Nr. crt must be {expected} (next after the last record), got {actual}")


def validate_batch_sequence(numbers: Iterable[int]) -> None:
    """Check that ``numbers`` is exactly {1, ..., N}.

    Raises
    ------
    EmptyImport: no numbers at all
    DuplicateSequenceNumber: every value seen more than once, ascending
    SequenceDoesNotStartAtOne: minimum != 1
    SequenceGap: first (current, next) pair differing by more than 1
    """
    values = list(numbers)
    if not values:
        raise EmptyImport()

    counts = Counter(values)
    duplicates = sorted(n for n, c in counts.items() if c > 1)
    if duplicates:
        raise DuplicateSequenceNumber(duplicates)

    ordered = sorted(values)
    if ordered[0] != 1:
        raise SequenceDoesNotStartAtOne(ordered[0])

    for current, nxt in zip(ordered, ordered[1:]):
        if nxt - current != 1:
            raise SequenceGap(current, nxt)


def validate_next_sequence(existing: Iterable[int], candidate: int) -> None:
    """Require ``candidate == max(existing) + 1`` (1 for an empty inventory)."""
    expected = max(existing, default=0) + 1
    if candidate != expected:
        raise SequenceNotNext(expected, candidate)
