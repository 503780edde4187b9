import logging

import numpy as np
from numba import njit

from countog_data_structures import AssembledSequence, ScanState
from countog_errors import ResourceAllocationError
from countog_oligo_indexing import TERMINATOR, encode_oligo

logger = logging.getLogger(__name__)


@njit
def increment_counter(buffer, length, oligo, shift, counter, state, upto):
    """
    Count up to `upto` oligos starting at the saved cursor.

    On reaching the end of the buffer the scan jumps to the start of the next
    shift epoch (epoch * shift), wrapping to epoch 0 once that start lies past
    the filled length. A pass that started at position 0 and found nothing means
    the buffer holds no countable oligo and the row ends early.

    WARNING: This function is JIT-compiled with @njit. Do not use Python objects,
    lists, dicts, or advanced numpy operations. Only basic numpy arrays and operations are supported

    state: int64 array [cursor, epoch, pass_start, pass_found], updated in place
    Returns: number of oligos counted
    """
    cursor = state[0]
    epoch = state[1]
    pass_start = state[2]
    pass_found = state[3]
    found = 0

    while found < upto:
        index, matched = encode_oligo(buffer, length, cursor, oligo)
        if index >= 0:
            counter[index] += 1
            found += 1
            pass_found += 1
            cursor += 1
        elif index == TERMINATOR:
            if pass_start == 0 and pass_found == 0:
                break
            epoch += 1
            if epoch * shift >= length:
                epoch = 0
            cursor = epoch * shift
            pass_start = cursor
            pass_found = 0
        else:
            # Every window starting before the bad byte contains it
            cursor += matched + 1

    state[0] = cursor
    state[1] = epoch
    state[2] = pass_start
    state[3] = pass_found
    return found


class WindowedCounter:
    """Per-row oligo counts sampled from a read-only sequence buffer."""

    def __init__(self, sequence: AssembledSequence, oligo: int, size_shift: int,
                 size_counting: int, size_oligo: int):
        self.sequence = sequence
        self.oligo = oligo
        self.size_counting = size_counting
        self.state = ScanState()

        if sequence.bases < size_shift:
            logger.info(
                f"Sequence of {sequence.bases:,} bases is shorter than the shift size "
                f"{size_shift:,}, sampling with a shift of 1"
            )
            size_shift = 1
        self.size_shift = size_shift

        try:
            self.counter = np.zeros(size_oligo, dtype=np.int64)
        except MemoryError as e:
            raise ResourceAllocationError(
                f"cannot allocate counters for {size_oligo:,} oligos"
            ) from e
        self._state_array = self.state.to_array()

    def reset_counter(self):
        self.counter.fill(0)

    def count_row(self) -> np.ndarray:
        """Reset the counters and fill them from the next sampling window."""
        self.reset_counter()
        found = increment_counter(
            self.sequence.buffer,
            self.sequence.length,
            self.oligo,
            self.size_shift,
            self.counter,
            self._state_array,
            self.size_counting,
        )
        self.state.update_from(self._state_array)
        if found < self.size_counting:
            logger.debug(
                f"Row ended after {found:,} of {self.size_counting:,} oligos, "
                f"no countable oligo left in the sequence"
            )
        return self.counter
