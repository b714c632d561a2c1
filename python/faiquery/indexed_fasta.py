"""Interval queries against a memory-mapped, FAI-indexed FASTA file.

:class:`IndexedFasta` maps the FASTA file read-only and answers
``(name, start, end)`` queries in 0-based half-open coordinates.

The default :meth:`IndexedFasta.query` copies the requested bases into a
single scratch buffer owned by the instance, dropping line terminators,
and returns a :class:`memoryview` onto it.  That view stays valid only
until the next query on the same instance, which releases it::

    seq = faidx.query('chr1', 0, 10)
    bytes(seq)                         # b'ACCTACGATC'
    other = faidx.query('chr2', 0, 10)
    seq[0]                             # ValueError: released memoryview

Use :meth:`IndexedFasta.fetch` to get an owned :class:`bytes` copy, or
:meth:`IndexedFasta.query_raw` for a zero-copy view of the mapped file
with line terminators left in place.

An instance is not safe to share between threads: run one instance per
thread or serialise access externally.
"""

from __future__ import annotations

import logging
import mmap
from pathlib import Path
from typing import Iterator, Optional, Union

from faiquery.errors import (
    FastaIOError,
    InvalidRangeError,
    RangeOutOfBoundsError,
    UnexpectedEndOfFileError,
)
from faiquery.index import FastaIndex, SequenceRecord

_log = logging.getLogger(__name__)


class IndexedFasta:
    """A FASTA file opened for random access through its FAI index.

    Parameters
    ----------
    index : FastaIndex or str or Path
        A loaded :class:`~faiquery.FastaIndex`, or the path of an FAI
        file to load.
    path : str or Path
        Path to the FASTA file described by ``index``.
    validate : bool, optional
        If ``True``, check every record's extent against the file size
        when opening instead of lazily on each query.  Default ``False``.
    initial_capacity : int, optional
        Bytes to pre-allocate for the scratch buffer.  Default ``0``.

    Raises
    ------
    FastaIOError
        If the FASTA file cannot be opened or mapped.
    UnexpectedEndOfFileError
        If ``validate`` is set and the index points past the end of the file.

    Examples
    --------
    >>> from faiquery import FastaIndex, IndexedFasta
    >>> index = FastaIndex.from_path('example.fa.fai')
    >>> with IndexedFasta(index, 'example.fa') as faidx:
    ...     bytes(faidx.query('chr1', 0, 10))
    b'ACCTACGATC'
    """

    def __init__(
        self,
        index: Union[FastaIndex, str, Path],
        path: Union[str, Path],
        *,
        validate: bool = False,
        initial_capacity: int = 0,
    ) -> None:
        if not isinstance(index, FastaIndex):
            index = FastaIndex.load(index)
        self._index = index
        self._path = str(path)
        self._mmap: Optional[mmap.mmap] = None
        self._data = self._map_file(self._path)
        self._buffer = bytearray(initial_capacity)
        self._view: Optional[memoryview] = None
        self._closed = False
        _log.debug(
            'Opened %s (%d bytes) with %d indexed sequences',
            self._path,
            len(self._data),
            len(self._index),
        )
        if validate:
            try:
                self.validate()
            except UnexpectedEndOfFileError:
                self.close()
                raise

    @classmethod
    def open(
        cls,
        index: Union[FastaIndex, str, Path],
        path: Union[str, Path],
        **kwargs,
    ) -> 'IndexedFasta':
        """Open ``path`` for querying; keyword arguments as for the constructor."""
        return cls(index, path, **kwargs)

    def _map_file(self, path: str) -> memoryview:
        try:
            with open(path, 'rb') as handle:
                try:
                    self._mmap = mmap.mmap(
                        handle.fileno(), 0, access=mmap.ACCESS_READ
                    )
                except ValueError:
                    # mmap refuses zero-length files
                    if Path(path).stat().st_size != 0:
                        raise
                    return memoryview(b'')
        except (OSError, ValueError) as exc:
            reason = getattr(exc, 'strerror', None) or str(exc)
            raise FastaIOError(path, reason) from exc
        return memoryview(self._mmap)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def index(self) -> FastaIndex:
        """The :class:`~faiquery.FastaIndex` used to resolve names."""
        return self._index

    @property
    def path(self) -> str:
        """Path of the mapped FASTA file."""
        return self._path

    @property
    def size(self) -> int:
        """Size of the mapped FASTA file in bytes."""
        self._check_open()
        return len(self._data)

    @property
    def closed(self) -> bool:
        """``True`` once :meth:`close` has been called."""
        return self._closed

    def names(self) -> list[str]:
        """Return the indexed sequence names in index order."""
        return self._index.names()

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        state = 'closed' if self._closed else f'{len(self._index)} sequences'
        return f'IndexedFasta({self._path!r}, {state})'

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check that every indexed record fits inside the mapped file.

        Raises
        ------
        UnexpectedEndOfFileError
            For the first record whose data extends past the end of file.
        """
        self._check_open()
        for record in self._index:
            self._require(record, 0, record.length)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError('I/O operation on closed IndexedFasta')

    def _resolve(
        self, name: str, start: int, end: int, bounded: bool
    ) -> tuple[SequenceRecord, int]:
        """Look up ``name`` and check ``[start, end)`` against its length.

        Returns the record and the effective end, which is clamped to
        the sequence length when ``bounded`` is ``False``.
        """
        record = self._index.lookup(name)
        if start < 0 or start > end:
            raise InvalidRangeError(start, end)
        if end > record.length:
            if bounded:
                raise RangeOutOfBoundsError(end, record.length)
            if start > record.length:
                raise RangeOutOfBoundsError(start, record.length)
            end = record.length
        return record, end

    def _require(self, record: SequenceRecord, start: int, end: int) -> None:
        """Raise if the bytes holding bases ``[start, end)`` are not all mapped."""
        if start == end:
            return
        if end == record.length:
            required = record.offset + record.data_extent
        else:
            required = record.physical_offset(end - 1) + 1
        if required > len(self._data):
            raise UnexpectedEndOfFileError(record.name, required, len(self._data))

    # ------------------------------------------------------------------
    # Dewrapping
    # ------------------------------------------------------------------

    @staticmethod
    def _runs(
        record: SequenceRecord, start: int, end: int
    ) -> Iterator[tuple[int, int]]:
        """Yield ``(byte_offset, n_bases)`` for each line touched by ``[start, end)``.

        Runs are produced in increasing logical order.  Without line
        terminators the whole interval is one contiguous run.
        """
        if start == end:
            return
        if record.terminator_width == 0:
            yield record.physical_offset(start), end - start
            return
        bases = record.line_bases
        pos = start
        while pos < end:
            line_end = min(end, (pos // bases + 1) * bases)
            yield record.physical_offset(pos), line_end - pos
            pos = line_end

    def _release_view(self) -> None:
        if self._view is None:
            return
        try:
            self._view.release()
        except BufferError:
            _log.warning(
                'Previous query result from %s is still exported and will be '
                'overwritten; copy it with bytes() or use fetch() to keep it',
                self._path,
            )
        self._view = None

    def _fill(self, record: SequenceRecord, start: int, end: int) -> memoryview:
        self._release_view()
        size = end - start
        if size > len(self._buffer):
            capacity = max(size, 2 * len(self._buffer))
            _log.debug('Growing scratch buffer to %d bytes', capacity)
            # outstanding exports block resizing in place
            self._buffer = bytearray(capacity)
        with memoryview(self._buffer) as out:
            written = 0
            for src, n in self._runs(record, start, end):
                out[written : written + n] = self._data[src : src + n]
                written += n
            view = out[:size]
        self._view = view
        return view

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query(self, name: str, start: int, end: int) -> memoryview:
        """Return bases ``[start, end)`` of ``name`` with line terminators removed.

        The result is a view onto the instance's scratch buffer.  It is
        released by the next call to :meth:`query` or
        :meth:`query_unbounded`; copy it with ``bytes()`` to keep it.

        Parameters
        ----------
        name : str
            Sequence name as listed in the index.
        start : int
            0-based start position (inclusive).
        end : int
            0-based end position (exclusive).  ``start == end`` gives an
            empty result.

        Returns
        -------
        memoryview
            ``end - start`` bytes of sequence.

        Raises
        ------
        SequenceNotFoundError
            If ``name`` is not in the index.
        InvalidRangeError
            If ``start`` is negative or greater than ``end``.
        RangeOutOfBoundsError
            If ``end`` is greater than the sequence length.
        UnexpectedEndOfFileError
            If the index points past the end of the FASTA file.
        """
        self._check_open()
        record, end = self._resolve(name, start, end, bounded=True)
        self._require(record, start, end)
        return self._fill(record, start, end)

    def query_unbounded(self, name: str, start: int, end: int) -> memoryview:
        """Like :meth:`query`, but an ``end`` past the sequence is truncated.

        ``start`` must still lie within the sequence.

        Raises
        ------
        RangeOutOfBoundsError
            If ``start`` is greater than the sequence length.
        """
        self._check_open()
        record, end = self._resolve(name, start, end, bounded=False)
        self._require(record, start, end)
        return self._fill(record, start, end)

    def fetch(self, name: str, start: int, end: int) -> bytes:
        """Return bases ``[start, end)`` of ``name`` as an owned copy.

        Does not touch the scratch buffer, so a view previously returned
        by :meth:`query` stays valid.
        """
        self._check_open()
        record, end = self._resolve(name, start, end, bounded=True)
        self._require(record, start, end)
        return b''.join(
            self._data[src : src + n] for src, n in self._runs(record, start, end)
        )

    def _raw(self, record: SequenceRecord, start: int, end: int) -> memoryview:
        if start == end:
            return self._data[0:0]
        self._require(record, start, end)
        first = record.physical_offset(start)
        last = record.physical_offset(end - 1) + 1
        return self._data[first:last]

    def query_raw(self, name: str, start: int, end: int) -> memoryview:
        """Return the mapped bytes holding bases ``[start, end)``, terminators included.

        No copy is made: the view points straight into the mapped file,
        from the first requested base to the last.  It must be released
        (or dropped) before :meth:`close`.

        Examples
        --------
        >>> bytes(faidx.query_raw('chr1', 20, 30))
        b'AGCTAGCT\\nCA'
        """
        self._check_open()
        record, end = self._resolve(name, start, end, bounded=True)
        return self._raw(record, start, end)

    def query_raw_unbounded(self, name: str, start: int, end: int) -> memoryview:
        """Like :meth:`query_raw`, but an ``end`` past the sequence is truncated."""
        self._check_open()
        record, end = self._resolve(name, start, end, bounded=False)
        return self._raw(record, start, end)

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the scratch view and unmap the FASTA file.

        Calling ``close`` more than once is harmless.

        Raises
        ------
        BufferError
            If views returned by :meth:`query_raw` are still alive.
        """
        if self._closed:
            return
        self._release_view()
        self._data.release()
        self._closed = True
        _log.debug('Closed %s', self._path)
        if self._mmap is not None:
            mapping, self._mmap = self._mmap, None
            mapping.close()

    def __enter__(self) -> 'IndexedFasta':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
