"""Exception types raised by faiquery.

Every exception derives from :class:`FaidxError` and from the builtin
exception a Python caller would normally catch for the same situation,
so ``except KeyError`` around a lookup keeps working.
"""

from __future__ import annotations


class FaidxError(Exception):
    """Base class for all faiquery errors."""


class MalformedIndexLineError(FaidxError, ValueError):
    """An index line could not be parsed into a :class:`~faiquery.SequenceRecord`.

    Parameters
    ----------
    line_number : int
        1-based line number within the index source.
    reason : str
        Human readable description of the problem.
    """

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f'Malformed index line {line_number}: {reason}')


class DuplicateSequenceNameError(FaidxError, ValueError):
    """The same sequence name appears more than once in an index."""

    def __init__(self, name: str, line_number: int | None = None) -> None:
        self.name = name
        self.line_number = line_number
        where = f' (line {line_number})' if line_number is not None else ''
        super().__init__(f'Duplicate sequence name {name!r} in index{where}')


class SequenceNotFoundError(FaidxError, KeyError):
    """A query referenced a sequence name absent from the index."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f'No entry found for {self.name!r}'


class InvalidRangeError(FaidxError, ValueError):
    """``start`` is negative or greater than ``end``."""

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f'Invalid interval [{start}, {end}): start must be non-negative '
            'and not greater than end'
        )


class RangeOutOfBoundsError(FaidxError, IndexError):
    """A coordinate lies beyond the sequence length declared in the index."""

    def __init__(self, end: int, length: int) -> None:
        self.end = end
        self.length = length
        super().__init__(
            f'Position {end} is beyond the sequence length {length}'
        )


class FastaIOError(FaidxError, OSError):
    """The FASTA or index file could not be opened or memory-mapped."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'Cannot open {path!r}: {reason}')

    def __str__(self) -> str:
        return f'Cannot open {self.path!r}: {self.reason}'


class UnexpectedEndOfFileError(FaidxError, EOFError):
    """The index points past the end of the mapped FASTA file.

    Raised when a record's physical extent, computed from its index entry,
    exceeds the size of the file the index is paired with.
    """

    def __init__(self, name: str, required: int, available: int) -> None:
        self.name = name
        self.required = required
        self.available = available
        super().__init__(
            f'Index entry {name!r} needs {required} bytes but the FASTA file '
            f'is only {available} bytes long; index and FASTA are inconsistent'
        )
