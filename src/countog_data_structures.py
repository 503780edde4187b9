from dataclasses import dataclass
from typing import Optional

import numpy as np

NUCLEOTIDES = 4
DEFAULT_OLIGO = 8
DEFAULT_SIZE_DATA = 20000
DEFAULT_SIZE_COUNTING = 100000
DEFAULT_SIZE_SHIFT = 20000
DEFAULT_SIZE_GENOME = 4294967296  # 2^32 bases
DEFAULT_MIN_QSCORE = 16
DEFAULT_PHRED_OFFSET = 33
MAX_OLIGO = 15  # 4^15 int64 counters is already 8 GiB


@dataclass
class CountogConfig:
    oligo: int = DEFAULT_OLIGO
    size_data: int = DEFAULT_SIZE_DATA
    size_counting: int = DEFAULT_SIZE_COUNTING
    size_shift: int = DEFAULT_SIZE_SHIFT
    size_genome: int = DEFAULT_SIZE_GENOME
    min_qscore: int = DEFAULT_MIN_QSCORE
    phred_offset: int = DEFAULT_PHRED_OFFSET
    reduce: bool = False
    header: bool = False
    label: Optional[str] = None

    @property
    def size_oligo(self) -> int:
        """Number of distinct oligomers, 4^k."""
        return NUCLEOTIDES**self.oligo

    def validate(self):
        """Raise ValueError for option values the engine cannot run with."""
        if not 1 <= self.oligo <= MAX_OLIGO:
            raise ValueError(f"oligo size must be between 1 and {MAX_OLIGO}, got {self.oligo}")
        if self.size_data < 0:
            raise ValueError(f"number of rows must be >= 0, got {self.size_data}")
        if self.size_counting < 0:
            raise ValueError(f"counts per row must be >= 0, got {self.size_counting}")
        if self.size_shift < 1:
            raise ValueError(f"shift size must be >= 1, got {self.size_shift}")
        if self.size_genome < 1:
            raise ValueError(f"genome size must be >= 1, got {self.size_genome}")
        if self.label is not None and ("\t" in self.label or "\n" in self.label):
            raise ValueError("label must not contain tabs or newlines")
        return self


@dataclass
class AssembledSequence:
    buffer: np.ndarray
    length: int
    bases: int
    scaffolds: int
    file_format: str
    truncated: bool = False


@dataclass
class ScanState:
    """
    Position of the sampling scan, persisted between rows.
    pass_start/pass_found track the current pass so a buffer with no
    countable oligomer can be detected instead of scanned forever.
    """

    cursor: int = 0
    epoch: int = 0
    pass_start: int = 0
    pass_found: int = 0

    def to_array(self) -> np.ndarray:
        return np.array(
            [self.cursor, self.epoch, self.pass_start, self.pass_found], dtype=np.int64
        )

    def update_from(self, state: np.ndarray):
        self.cursor = int(state[0])
        self.epoch = int(state[1])
        self.pass_start = int(state[2])
        self.pass_found = int(state[3])
