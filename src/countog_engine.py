import logging
import sys
from typing import BinaryIO, Iterator, Optional, TextIO

import numpy as np

from countog_complement import ComplementCache
from countog_data_structures import AssembledSequence, CountogConfig
from countog_errors import InputOpenError
from countog_normalizer import (format_header, format_row,
                                merge_complementary_counts, normalize_counts)
from countog_sequence_parser import assemble_sequence
from countog_window_counter import WindowedCounter
from countog_writer import write_header, write_rows

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 1000


class CountingEngine:
    """
    Owns the sequence buffer, counters and complement table for one run and
    turns them into normalized oligo count rows.
    """

    def __init__(self, config: CountogConfig, sequence: AssembledSequence):
        self.config = config.validate()
        self.sequence = sequence
        self.complements = ComplementCache(config.oligo)
        self.counter = WindowedCounter(
            sequence,
            oligo=config.oligo,
            size_shift=config.size_shift,
            size_counting=config.size_counting,
            size_oligo=config.size_oligo,
        )

    @classmethod
    def from_stream(cls, config: CountogConfig, stream: BinaryIO) -> "CountingEngine":
        config.validate()
        return cls(config, assemble_sequence(stream, config))

    @classmethod
    def from_path(cls, config: CountogConfig, path: str) -> "CountingEngine":
        """Read the input file ("-" for stdin) and build the engine from it."""
        if path == "-":
            return cls.from_stream(config, sys.stdin.buffer)
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise InputOpenError(f"cannot open input {path}: {e.strerror}") from e
        with stream:
            return cls.from_stream(config, stream)

    @property
    def width(self) -> int:
        """Number of values in each row, without the label column."""
        if self.config.reduce:
            forward, _ = self.complements.pairs()
            return len(forward)
        return self.config.size_oligo

    def header_line(self) -> Optional[str]:
        if not self.config.header:
            return None
        return format_header(self.config.oligo, labelled=self.config.label is not None)

    def next_values(self) -> np.ndarray:
        """Count the next sampling window and return its normalized values."""
        counts = self.counter.count_row()
        if self.config.reduce:
            forward, reverse = self.complements.pairs()
            counts = merge_complementary_counts(counts, forward, reverse)
        return normalize_counts(counts)

    def next_row(self) -> str:
        return format_row(self.next_values(), self.config.label)

    def rows(self) -> Iterator[str]:
        for _ in range(self.config.size_data):
            yield self.next_row()

    def run(self, outfile: TextIO) -> int:
        """Write the optional header and every configured row. Returns rows written."""
        header = self.header_line()
        if header is not None:
            write_header(outfile, header)

        logger.info(
            f"Writing {self.config.size_data:,} rows of {self.width:,} values "
            f"({self.config.size_counting:,} {self.config.oligo}-mers per row)"
        )
        written = write_rows(outfile, self.rows(), progress_every=PROGRESS_EVERY, logger=logger)
        logger.info(f"Total rows written: {written:,}")
        return written
