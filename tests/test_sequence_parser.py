import io

import pytest

from countog_data_structures import CountogConfig
from countog_errors import (FormatDetectionError, InvariantViolationError,
                            StructuralReadError)
from countog_sequence_parser import FASTA, FASTQ, assemble_sequence, detect_format


def assemble(data: bytes, **kwargs):
    return assemble_sequence(io.BytesIO(data), CountogConfig(**kwargs))


def test_detect_format():
    assert detect_format(b">chr1") == FASTA
    assert detect_format(b"@read1") == FASTQ
    with pytest.raises(FormatDetectionError):
        detect_format(b"ACGT")


def test_fasta_single_scaffold():
    seq = assemble(b">seq1\nACGTACGT\n")
    assert seq.buffer.tobytes() == b"nacgtacgt"
    assert seq.length == 9
    assert seq.bases == 8
    assert seq.scaffolds == 1
    assert seq.file_format == FASTA
    assert not seq.truncated


def test_fasta_scaffolds_are_separated():
    seq = assemble(b">a\nAC\n>b\nGT\n")
    assert seq.buffer.tobytes() == b"nacngt"
    assert seq.scaffolds == 2


def test_fasta_drops_non_alphabetic_and_keeps_other_letters():
    seq = assemble(b">a\nAC GT*\r\nNNrY\n")
    assert seq.buffer.tobytes() == b"nacgtNNrY"
    assert seq.bases == 8


def test_leading_blank_lines_are_skipped():
    seq = assemble(b"\n\n>a\nAC\n")
    assert seq.buffer.tobytes() == b"nac"


def test_fastq_record():
    seq = assemble(b"@r1\nACGT\n+\nIIII\n")
    assert seq.buffer.tobytes() == b"nacgt"
    assert seq.file_format == FASTQ


def test_fastq_low_quality_bases_become_n():
    seq = assemble(b"@r1\nACGT\n+\nI#I#\n")
    assert seq.buffer.tobytes() == b"nangn"


def test_fastq_all_low_quality_record():
    seq = assemble(b"@r1\nACGT\n+\n####\n@r2\nGGCC\n+\nIIII\n")
    assert seq.buffer.tobytes() == b"nnnnnnggcc"
    assert seq.scaffolds == 2
    assert seq.bases == 8


def test_fastq_min_quality_threshold():
    # '5' decodes to 20 with the default offset
    assert assemble(b"@r1\nAC\n+\n55\n", min_qscore=20).buffer.tobytes() == b"nac"
    assert assemble(b"@r1\nAC\n+\n55\n", min_qscore=21).buffer.tobytes() == b"nnn"


def test_fastq_length_mismatch():
    with pytest.raises(InvariantViolationError):
        assemble(b"@r1\nACGT\n+\nIII\n")


def test_fastq_missing_plus_line():
    with pytest.raises(InvariantViolationError):
        assemble(b"@r1\nACGT\nIIII\n@r2\n")


@pytest.mark.parametrize(
    "data",
    [b"@r1\n", b"@r1\nACGT\n", b"@r1\nACGT\n+\n"],
)
def test_fastq_truncated_record(data):
    with pytest.raises(StructuralReadError):
        assemble(data)


def test_unknown_format():
    with pytest.raises(FormatDetectionError):
        assemble(b"ACGT\n")


def test_empty_input():
    with pytest.raises(StructuralReadError):
        assemble(b"")


def test_fasta_capacity_stops_ingestion():
    seq = assemble(b">a\nACGT\n>b\nGG\n", size_genome=5)
    assert seq.buffer.tobytes() == b"nacgt"
    assert seq.truncated


def test_fastq_capacity_stops_ingestion():
    seq = assemble(b"@r1\nACGT\n+\nIIII\n@r2\nACGT\n+\nIIII\n", size_genome=7)
    assert seq.buffer.tobytes() == b"nacgtn"
    assert seq.truncated
    assert seq.bases == 4


def test_buffer_is_read_only():
    seq = assemble(b">a\nACGT\n")
    assert not seq.buffer.flags.writeable
