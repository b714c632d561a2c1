"""Pytest configuration and shared fixtures."""

import pytest

from faiquery import FastaIndex, IndexedFasta
from tests.test_data import (
    CRLF_FAI,
    CRLF_FASTA,
    FAI_CONTENT,
    FASTA_CONTENT,
    SHORT_FAI,
    SHORT_FASTA,
)


@pytest.fixture
def fasta_file(tmp_path):
    """Write the example FASTA file and return its path."""
    path = tmp_path / 'example.fa'
    path.write_text(FASTA_CONTENT)
    return str(path)


@pytest.fixture
def fai_file(tmp_path):
    """Write the example FAI index and return its path."""
    path = tmp_path / 'example.fa.fai'
    path.write_text(FAI_CONTENT)
    return str(path)


@pytest.fixture
def faidx(fasta_file, fai_file):
    """An open IndexedFasta over the example files."""
    index = FastaIndex.from_path(fai_file)
    with IndexedFasta(index, fasta_file) as handle:
        yield handle


def _open_bytes(tmp_path, name, content, fai):
    path = tmp_path / name
    path.write_bytes(content)
    return IndexedFasta(FastaIndex.from_lines(fai.splitlines()), str(path))


@pytest.fixture
def short_faidx(tmp_path):
    """IndexedFasta over a 20-base record whose last line has no terminator."""
    handle = _open_bytes(tmp_path, 'short.fa', SHORT_FASTA, SHORT_FAI)
    yield handle
    handle.close()


@pytest.fixture
def crlf_faidx(tmp_path):
    """IndexedFasta over a FASTA file with CRLF line endings."""
    handle = _open_bytes(tmp_path, 'crlf.fa', CRLF_FASTA, CRLF_FAI)
    yield handle
    handle.close()
