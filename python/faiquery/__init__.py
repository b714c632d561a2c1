"""
faiquery: fast interval queries on FAI-indexed FASTA files.

The FASTA file is memory-mapped read-only and located through its
``.fai`` index, so arbitrarily large references can be queried without
loading them into memory.

This package provides:
- :class:`FastaIndex` for parsing and looking up FAI index records
- :class:`IndexedFasta` for ``(name, start, end)`` queries with line
  terminators removed, backed by a reusable scratch buffer
- zero-copy access to the raw mapped bytes via
  :meth:`IndexedFasta.query_raw`

Examples
--------
Given ``example.fa``::

    >chr1
    ACCTACGATCGACTGATCGTAGCTAGCT
    CATCGATCGTACGGACGATCGATCGGTT
    CACACCGGGCATGACTGATCGGGGGCCC
    ACGTGTGTGCAGCGCGCGGCGCGCGCGG
    >chr2
    TTTTGATCGATCGGCGGGCGCGCGCGGC
    CAGATTCGGGCGCGATTATATATTAGCT
    CGACGGCGACTCGAGCTACACGTCGGGC
    GCGAGCGGGACGCGCGGCGCGCGCGGCC
    AAAAAAATTTTTATATATTATTACGCGC
    CGACTCAGTCGACTGGGGGCGCGCGCGC
    AAACCACA

and its index ``example.fa.fai``::

    chr1	112	6	28	29
    chr2	176	128	28	29

>>> from faiquery import FastaIndex, IndexedFasta
>>> index = FastaIndex.from_path("example.fa.fai")
>>> faidx = IndexedFasta(index, "example.fa")
>>> bytes(faidx.query("chr1", 0, 10))
b'ACCTACGATC'
>>> bytes(faidx.query("chr2", 0, 10))
b'TTTTGATCGA'
>>> len(faidx.query("chr1", 0, 40))
40
>>> bytes(faidx.query_raw("chr1", 20, 30))
b'AGCTAGCT\\nCA'
"""

from faiquery.errors import (  # noqa: F401
    DuplicateSequenceNameError,
    FaidxError,
    FastaIOError,
    InvalidRangeError,
    MalformedIndexLineError,
    RangeOutOfBoundsError,
    SequenceNotFoundError,
    UnexpectedEndOfFileError,
)
from faiquery.index import FastaIndex, SequenceRecord  # noqa: F401
from faiquery.indexed_fasta import IndexedFasta  # noqa: F401

__version__ = '0.1.0'
__all__ = [
    'FastaIndex',
    'SequenceRecord',
    'IndexedFasta',
    'FaidxError',
    'MalformedIndexLineError',
    'DuplicateSequenceNameError',
    'SequenceNotFoundError',
    'InvalidRangeError',
    'RangeOutOfBoundsError',
    'FastaIOError',
    'UnexpectedEndOfFileError',
]
