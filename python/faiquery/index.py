"""FAI index parsing and lookup.

An FAI index has one line per sequence with five tab-separated columns::

    name    length    offset    line_bases    line_width

``offset`` is the byte position of the first base (just past the header
line), ``line_bases`` the number of bases on each full line and
``line_width`` the number of bytes on each full line including its line
terminator.

Examples
--------
>>> from faiquery.index import FastaIndex
>>> index = FastaIndex.from_lines(['chr1\\t112\\t6\\t28\\t29\\n'])
>>> index.lookup('chr1').line_width
29
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
from typing import IO, Iterable, Iterator, Optional, Union

from faiquery.errors import (
    DuplicateSequenceNameError,
    FastaIOError,
    MalformedIndexLineError,
    SequenceNotFoundError,
)

_log = logging.getLogger(__name__)

_N_FIELDS = 5
_UINT_RE = re.compile(r'[0-9]+')


@dataclass(frozen=True)
class SequenceRecord:
    """Layout of one sequence inside an indexed FASTA file.

    Parameters
    ----------
    name : str
        Sequence identifier (first column of the index).
    length : int
        Total number of bases in the sequence.
    offset : int
        Byte offset of the first base in the FASTA file.
    line_bases : int
        Bases on each full line.
    line_width : int
        Bytes on each full line, line terminator included.

    Raises
    ------
    ValueError
        If a field is negative, ``line_width`` is smaller than
        ``line_bases``, or ``line_bases`` is 0 for a non-empty sequence.
    """

    name: str
    length: int
    offset: int
    line_bases: int
    line_width: int

    def __post_init__(self) -> None:
        for label in ('length', 'offset', 'line_bases', 'line_width'):
            if getattr(self, label) < 0:
                raise ValueError(
                    f'{label} must be non-negative, got {getattr(self, label)}'
                )
        if self.line_width < self.line_bases:
            raise ValueError(
                f'line_width ({self.line_width}) is smaller than '
                f'line_bases ({self.line_bases})'
            )
        if self.line_bases == 0 and self.length > 0:
            raise ValueError(
                f'line_bases is 0 for a sequence of length {self.length}'
            )

    @property
    def terminator_width(self) -> int:
        """Number of line-terminator bytes at the end of each full line."""
        return self.line_width - self.line_bases

    @property
    def data_extent(self) -> int:
        """Return the number of bytes spanned by the sequence data.

        The final line may be shorter than ``line_bases`` and may lack a
        terminator, so it is counted by its bases only.  A length that is
        an exact multiple of ``line_bases`` means the final line is full.

        Returns
        -------
        int
            Bytes from :attr:`offset` up to and including the last base.
        """
        if self.length == 0:
            return 0
        full_lines, remainder = divmod(self.length, self.line_bases)
        if remainder:
            return full_lines * self.line_width + remainder
        return (full_lines - 1) * self.line_width + self.line_bases

    def physical_offset(self, pos: int) -> int:
        """Translate a 0-based base position into an absolute byte offset.

        Parameters
        ----------
        pos : int
            Logical base position within the sequence.

        Returns
        -------
        int
            Byte offset of that base in the FASTA file.
        """
        line, column = divmod(pos, self.line_bases)
        return self.offset + line * self.line_width + column

    def to_line(self) -> str:
        """Serialise the record as an FAI line (no trailing newline)."""
        return '\t'.join(
            str(v)
            for v in [
                self.name,
                self.length,
                self.offset,
                self.line_bases,
                self.line_width,
            ]
        )


def _parse_uint(value: str, label: str, line_number: int) -> int:
    if not _UINT_RE.fullmatch(value):
        raise MalformedIndexLineError(
            line_number,
            f'{label} must be a non-negative integer, got {value!r}',
        )
    return int(value)


def _parse_line(line: Union[str, bytes], line_number: int) -> SequenceRecord:
    """Parse one FAI line into a :class:`SequenceRecord`.

    Raises
    ------
    MalformedIndexLineError
        If the line is blank, does not have five fields, or carries
        numbers that break the layout invariants.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode('ascii')
        except UnicodeDecodeError as exc:
            raise MalformedIndexLineError(line_number, f'not ASCII: {exc}') from exc
    text = line.rstrip('\r\n')
    if not text.strip():
        raise MalformedIndexLineError(line_number, 'blank line')
    fields = text.split('\t') if '\t' in text else text.split()
    if len(fields) != _N_FIELDS:
        raise MalformedIndexLineError(
            line_number,
            f'expected {_N_FIELDS} fields, found {len(fields)}: {text!r}',
        )
    name = fields[0]
    if not name or name != name.strip():
        raise MalformedIndexLineError(line_number, f'invalid sequence name {name!r}')
    length = _parse_uint(fields[1], 'length', line_number)
    offset = _parse_uint(fields[2], 'offset', line_number)
    line_bases = _parse_uint(fields[3], 'line_bases', line_number)
    line_width = _parse_uint(fields[4], 'line_width', line_number)
    try:
        return SequenceRecord(name, length, offset, line_bases, line_width)
    except ValueError as exc:
        raise MalformedIndexLineError(line_number, str(exc)) from None


class FastaIndex:
    """In-memory FAI index: sequence name to :class:`SequenceRecord`.

    Records keep the order in which they were read.  The index is built
    once and treated as read-only by :class:`~faiquery.IndexedFasta`.

    Loading is fail-fast: the first malformed line or repeated name
    aborts the whole load.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SequenceRecord] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_lines(cls, lines: Iterable[Union[str, bytes]]) -> 'FastaIndex':
        """Build an index from FAI text lines.

        Parameters
        ----------
        lines : iterable of str or bytes
            One FAI record per item; trailing line terminators are ignored.

        Returns
        -------
        FastaIndex
            The populated index.  No lines gives an empty index.

        Raises
        ------
        MalformedIndexLineError
            If any line cannot be parsed.
        DuplicateSequenceNameError
            If a sequence name appears twice.
        """
        index = cls()
        for line_number, line in enumerate(lines, start=1):
            record = _parse_line(line, line_number)
            if record.name in index._entries:
                raise DuplicateSequenceNameError(record.name, line_number)
            index._entries[record.name] = record
        return index

    @classmethod
    def from_reader(cls, handle: IO) -> 'FastaIndex':
        """Build an index from an open text or binary file handle."""
        return cls.from_lines(handle)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'FastaIndex':
        """Read an FAI index file from disk.

        Parameters
        ----------
        path : str, bytes or Path
            Path to the ``.fai`` file.

        Returns
        -------
        FastaIndex
            The populated index.

        Raises
        ------
        FastaIOError
            If the file cannot be opened.
        """
        path = Path(os.fsdecode(path))
        try:
            handle = path.open('rb')
        except OSError as exc:
            raise FastaIOError(str(path), exc.strerror or str(exc)) from exc
        with handle:
            index = cls.from_reader(handle)
        _log.debug('Loaded %d index records from %s', len(index), path)
        return index

    @classmethod
    def load(
        cls, source: Union[str, Path, Iterable[Union[str, bytes]]]
    ) -> 'FastaIndex':
        """Build an index from a path or from an iterable of lines.

        Parameters
        ----------
        source : str, bytes, Path or iterable of str/bytes
            A filesystem path to an FAI file, or the FAI lines themselves.

        Returns
        -------
        FastaIndex
            The populated index.
        """
        if isinstance(source, (str, bytes, os.PathLike)):
            return cls.from_path(source)
        return cls.from_lines(source)

    def insert(self, record: SequenceRecord) -> None:
        """Add a record to the index.

        Raises
        ------
        DuplicateSequenceNameError
            If a record with the same name is already present.
        """
        if record.name in self._entries:
            raise DuplicateSequenceNameError(record.name)
        self._entries[record.name] = record

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[SequenceRecord]:
        """Return the record for ``name``, or ``None`` if absent."""
        return self._entries.get(name)

    def lookup(self, name: str) -> SequenceRecord:
        """Return the record for ``name``.

        Raises
        ------
        SequenceNotFoundError
            If ``name`` is not in the index.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise SequenceNotFoundError(name) from None

    def names(self) -> list[str]:
        """Return the sequence names in index order."""
        return list(self._entries)

    def records(self) -> list[SequenceRecord]:
        """Return the records in index order."""
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[SequenceRecord]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return f'FastaIndex({len(self)} records)'
