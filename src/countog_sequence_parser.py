import logging
from typing import BinaryIO, Optional

import numpy as np

from countog_base_mapping import (SEPARATOR, create_alpha_mask, create_base_map,
                                  create_phred_quality_map, map_fasta_line,
                                  map_fastq_bases)
from countog_data_structures import AssembledSequence, CountogConfig
from countog_errors import (FormatDetectionError, InvariantViolationError,
                            ResourceAllocationError, StructuralReadError)

logger = logging.getLogger(__name__)

FASTA = "fasta"
FASTQ = "fastq"


def _next_line(stream: BinaryIO) -> Optional[bytes]:
    line = stream.readline()
    if not line:
        return None
    return line.rstrip(b"\r\n")


def detect_format(line: bytes) -> str:
    """Return FASTA or FASTQ from the first line of the input."""
    if line.startswith(b">"):
        return FASTA
    if line.startswith(b"@"):
        return FASTQ
    raise FormatDetectionError(
        f"neither FASTA nor FASTQ: first line starts with {line[:1].decode('latin-1')!r}"
    )


class SequenceAssembler:
    """
    Builds one flat nucleotide buffer from a FASTA or FASTQ stream.

    Every FASTA header and every FASTQ record adds one separator n so that no
    oligomer is counted across two scaffolds. Ingestion stops quietly when the
    next piece would not fit into size_genome bytes.
    """

    def __init__(self, config: CountogConfig):
        self.capacity = config.size_genome
        self.min_quality = config.min_qscore
        self.base_map = create_base_map()
        self.alpha_mask = create_alpha_mask()
        self.phred_map = create_phred_quality_map(config.phred_offset)

        self._buffer = bytearray()
        self.bases = 0
        self.scaffolds = 0
        self.truncated = False

    def _has_room(self, size: int) -> bool:
        return len(self._buffer) + size <= self.capacity

    def _append(self, data: bytes):
        try:
            self._buffer.extend(data)
        except MemoryError as e:
            raise ResourceAllocationError(
                f"cannot grow sequence buffer beyond {len(self._buffer):,} bytes"
            ) from e

    def _append_separator(self) -> bool:
        if not self._has_room(1):
            return False
        self._append(bytes([SEPARATOR]))
        self.scaffolds += 1
        return True

    def _stop(self):
        self.truncated = True
        logger.warning(
            f"Sequence capacity of {self.capacity:,} bytes reached after "
            f"{self.scaffolds:,} scaffolds, ignoring the rest of the input"
        )

    def assemble(self, stream: BinaryIO) -> AssembledSequence:
        first_line = _next_line(stream)
        while first_line is not None and not first_line.strip():
            first_line = _next_line(stream)
        if first_line is None:
            raise StructuralReadError("cannot read the first line of the input")

        file_format = detect_format(first_line)
        logger.info(f"Detected {file_format.upper()} input")

        if file_format == FASTA:
            self._read_fasta(stream, first_line)
        else:
            self._read_fastq(stream, first_line)

        return self._finish(file_format)

    def _read_fasta(self, stream: BinaryIO, line: Optional[bytes]):
        while line is not None:
            if line.startswith(b">"):
                if not self._append_separator():
                    self._stop()
                    break
            elif line:
                mapped = map_fasta_line(line, self.base_map, self.alpha_mask)
                if not self._has_room(len(mapped)):
                    self._stop()
                    break
                self._append(mapped.tobytes())
                self.bases += len(mapped)
            line = _next_line(stream)

    def _read_fastq(self, stream: BinaryIO, header: Optional[bytes]):
        while header is not None:
            if not header.strip():  # Blank line between records
                header = _next_line(stream)
                continue

            record = self.scaffolds + 1
            if not header.startswith(b"@"):
                raise InvariantViolationError(
                    f"FASTQ record {record} does not start with '@': {header[:80]!r}"
                )

            sequence = _next_line(stream)
            if sequence is None:
                raise StructuralReadError(f"missing sequence line in FASTQ record {record}")
            separator = _next_line(stream)
            if separator is None:
                raise StructuralReadError(f"missing '+' line in FASTQ record {record}")
            if not separator.startswith(b"+"):
                raise InvariantViolationError(
                    f"FASTQ record {record} has no '+' separator line: {separator[:80]!r}"
                )
            quality = _next_line(stream)
            if quality is None:
                raise StructuralReadError(f"missing quality line in FASTQ record {record}")

            if len(sequence) != len(quality):
                raise InvariantViolationError(
                    f"FASTQ record {record} has {len(sequence)} bases "
                    f"but {len(quality)} quality scores"
                )

            if not self._append_separator():
                self._stop()
                break
            if not self._has_room(len(sequence)):
                self._stop()
                break

            if sequence:
                mapped = map_fastq_bases(
                    sequence, quality, self.base_map, self.phred_map, self.min_quality
                )
                self._append(mapped.tobytes())
                self.bases += len(mapped)

            header = _next_line(stream)

    def _finish(self, file_format: str) -> AssembledSequence:
        length = len(self._buffer)
        if length:
            buffer = np.frombuffer(self._buffer, dtype=np.uint8)
        else:
            buffer = np.zeros(0, dtype=np.uint8)
        # Counting only reads the buffer from here on
        buffer.flags.writeable = False

        logger.info(
            f"Assembled {length:,} bytes ({self.bases:,} bases) "
            f"from {self.scaffolds:,} {file_format.upper()} scaffolds"
        )
        return AssembledSequence(
            buffer=buffer,
            length=length,
            bases=self.bases,
            scaffolds=self.scaffolds,
            file_format=file_format,
            truncated=self.truncated,
        )


def assemble_sequence(stream: BinaryIO, config: CountogConfig) -> AssembledSequence:
    """Read a FASTA or FASTQ stream positioned at its start into one sequence buffer."""
    return SequenceAssembler(config).assemble(stream)
