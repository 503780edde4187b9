from typing import List, Optional, Union

import numpy as np
from numba import njit

from countog_data_structures import NUCLEOTIDES

TERMINATOR = -1  # End of the filled buffer reached
UNREPRESENTABLE = -2  # Byte other than t/c/a/g reached

BASE_T = 116
BASE_C = 99
BASE_A = 97
BASE_G = 103

DIGIT_LETTERS = "TCAG"


@njit
def encode_oligo(buffer, length, start, oligo):
    """
    Encode the oligo bytes starting at buffer[start] as a base-4 index
    (t=0, c=1, a=2, g=3, position 0 least significant).

    WARNING: This function is JIT-compiled with @njit. Do not use Python objects,
    lists, dicts, or advanced numpy operations. Only basic numpy arrays and operations are supported

    Returns: (index, matched) where index is TERMINATOR or UNREPRESENTABLE when
    the scan stopped early and matched is the number of valid bases before the stop
    """
    index = 0
    weight = 1
    for i in range(oligo):
        pos = start + i
        if pos >= length:
            return TERMINATOR, i
        b = buffer[pos]
        if b == BASE_T:
            digit = 0
        elif b == BASE_C:
            digit = 1
        elif b == BASE_A:
            digit = 2
        elif b == BASE_G:
            digit = 3
        else:
            return UNREPRESENTABLE, i
        index += digit * weight
        weight *= NUCLEOTIDES
    return index, oligo


def encode(window: Union[str, bytes]) -> Optional[int]:
    """Index of a lowercase t/c/a/g window, or None if it is not representable."""
    if isinstance(window, str):
        window = window.encode("ascii")
    if not window:
        return None
    buffer = np.frombuffer(window, dtype=np.uint8)
    index, _ = encode_oligo(buffer, len(buffer), 0, len(buffer))
    if index < 0:
        return None
    return int(index)


def decode_label(index: int, oligo: int) -> str:
    """Render an oligo index as its letter sequence, least significant digit first."""
    letters = []
    fwd = index
    for _ in range(oligo):
        letters.append(DIGIT_LETTERS[fwd % NUCLEOTIDES])
        fwd //= NUCLEOTIDES
    return "".join(letters)


def oligo_labels(oligo: int) -> List[str]:
    return [decode_label(i, oligo) for i in range(NUCLEOTIDES**oligo)]
