import logging
from typing import Optional, Tuple

import numpy as np
from numba import njit

from countog_data_structures import NUCLEOTIDES
from countog_errors import InvariantViolationError, ResourceAllocationError

logger = logging.getLogger(__name__)

NOT_COMPUTED = -1


def compute_complement(index: int, oligo: int) -> int:
    """Reverse the digit order and swap T<->A (0<->2), C<->G (1<->3)."""
    fwd = index
    rev = 0
    for _ in range(oligo):
        digit = fwd % NUCLEOTIDES
        fwd //= NUCLEOTIDES
        rev = rev * NUCLEOTIDES + (digit + 2) % NUCLEOTIDES
    return rev


def compute_all_complements(oligo: int) -> np.ndarray:
    """Vectorized compute_complement over the whole index space."""
    fwd = np.arange(NUCLEOTIDES**oligo, dtype=np.int64)
    rev = np.zeros_like(fwd)
    for _ in range(oligo):
        rev = rev * NUCLEOTIDES + (fwd % NUCLEOTIDES + 2) % NUCLEOTIDES
        fwd //= NUCLEOTIDES
    return rev


@njit
def pair_complements(complementary):
    """
    Walk the index space in ascending order and pair every oligo with its
    complement, skipping indices already consumed by an earlier pair.

    WARNING: This function is JIT-compiled with @njit. Do not use Python objects,
    lists, dicts, or advanced numpy operations. Only basic numpy arrays and operations are supported

    Returns: (forward, reverse, num_pairs); only the first num_pairs entries are filled
    """
    size = complementary.shape[0]
    consumed = np.zeros(size, dtype=np.bool_)
    forward = np.empty(size, dtype=np.int64)
    reverse = np.empty(size, dtype=np.int64)
    j = 0
    for i in range(size):
        if consumed[i]:
            continue
        c = complementary[i]
        forward[j] = i
        reverse[j] = c
        consumed[i] = True
        consumed[c] = True
        j += 1
    return forward, reverse, j


class ComplementCache:
    """
    Lazily filled table from oligo index to the index of its reverse complement.
    Entries never change once computed, so the table lives for the whole run.
    """

    def __init__(self, oligo: int):
        self.oligo = oligo
        self.size = NUCLEOTIDES**oligo
        try:
            self.table = np.full(self.size, NOT_COMPUTED, dtype=np.int64)
        except MemoryError as e:
            raise ResourceAllocationError(
                f"cannot allocate complement table for {self.size:,} oligos"
            ) from e
        self._pairs: Optional[Tuple[np.ndarray, np.ndarray]] = None

    def complement_of(self, index: int) -> int:
        cached = self.table[index]
        if cached != NOT_COMPUTED:
            return int(cached)
        rev = compute_complement(index, self.oligo)
        self.table[index] = rev
        return rev

    def fill(self) -> np.ndarray:
        missing = self.table == NOT_COMPUTED
        if np.any(missing):
            self.table[missing] = compute_all_complements(self.oligo)[missing]
        return self.table

    def validate(self):
        """Every entry must be in range and map back to its own index."""
        table = self.fill()
        if np.any((table < 0) | (table >= self.size)):
            raise InvariantViolationError("complement table holds an out-of-range index")
        if np.any(table[table] != np.arange(self.size)):
            bad = int(np.flatnonzero(table[table] != np.arange(self.size))[0])
            raise InvariantViolationError(
                f"complement of complement of oligo {bad} is {int(table[table[bad]])}"
            )

    def pairs(self) -> Tuple[np.ndarray, np.ndarray]:
        """Unordered complementary pairs (forward, reverse), palindromes paired with themselves."""
        if self._pairs is None:
            self.validate()
            forward, reverse, num_pairs = pair_complements(self.table)
            self._pairs = (forward[:num_pairs].copy(), reverse[:num_pairs].copy())
            logger.debug(
                f"Paired {self.size:,} oligos into {num_pairs:,} complementary groups"
            )
        return self._pairs

    def palindromes(self) -> np.ndarray:
        table = self.fill()
        return np.flatnonzero(table == np.arange(self.size))
