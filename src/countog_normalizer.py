import logging
from typing import Optional, Sequence

import numpy as np

from countog_oligo_indexing import oligo_labels

logger = logging.getLogger(__name__)

HEADER_LABEL = "DATA"


def normalize_counts(counts: np.ndarray) -> np.ndarray:
    """
    Scale counts by their maximum so the largest becomes 1.0.
    A row without any count (maximum 0) normalizes to all zeros.
    """
    maximum = counts.max() if counts.size else 0
    if maximum <= 0:
        logger.debug("Row holds no counts, emitting zeros")
        return np.zeros(counts.shape, dtype=np.float32)
    return counts.astype(np.float32) / np.float32(maximum)


def merge_complementary_counts(counts: np.ndarray, forward: np.ndarray,
                               reverse: np.ndarray) -> np.ndarray:
    """
    Sum each oligo with its reverse complement.
    A palindromic oligo is its own pair and therefore contributes twice its count.
    """
    return counts[forward] + counts[reverse]


def format_values(values: np.ndarray) -> str:
    return "\t".join([f"{v:.4f}" for v in values.tolist()])


def format_row(values: np.ndarray, label: Optional[str] = None) -> str:
    row = format_values(values)
    if label is not None:
        return f"{label}\t{row}"
    return row


def format_header(oligo: int, labelled: bool = False, labels: Optional[Sequence[str]] = None) -> str:
    """Header line listing every oligo label in index order."""
    if labels is None:
        labels = oligo_labels(oligo)
    columns = "\t".join(labels)
    if labelled:
        return f"{HEADER_LABEL}\t{columns}"
    return columns
