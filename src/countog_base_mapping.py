import numpy as np

SEPARATOR = np.uint8(ord("n"))


def create_base_map():
    """
    Create lookup table mapping input bytes to buffer bytes.
    Uppercase T/C/A/G become lowercase confirmed bases, every other byte is kept verbatim.
    Returns: np.ndarray of shape (256,) with uint8 values
    """
    base_map = np.arange(256, dtype=np.uint8)
    for base in b"TCAG":
        base_map[base] = ord(chr(base).lower())
    return base_map


def create_alpha_mask():
    """Boolean table of ASCII letters, used to drop non-alphabetic bytes from FASTA lines."""
    alpha_mask = np.zeros(256, dtype=bool)
    alpha_mask[ord("A") : ord("Z") + 1] = True
    alpha_mask[ord("a") : ord("z") + 1] = True
    return alpha_mask


def create_phred_quality_map(phred_offset=33):
    """Create mapping from ASCII quality characters to numeric quality scores (unclipped)"""
    return np.arange(256, dtype=np.int16) - phred_offset


def map_fasta_line(line: bytes, base_map: np.ndarray, alpha_mask: np.ndarray) -> np.ndarray:
    data = np.frombuffer(line, dtype=np.uint8)
    return base_map[data[alpha_mask[data]]]


def map_fastq_bases(sequence: bytes, quality: bytes, base_map: np.ndarray,
                    phred_map: np.ndarray, min_quality: int) -> np.ndarray:
    """
    Map FASTQ bases and mask those whose quality is below min_quality with n.
    Sequence and quality must have the same length.
    """
    seq_array = np.frombuffer(sequence, dtype=np.uint8)
    qual_array = np.frombuffer(quality, dtype=np.uint8)

    mapped = base_map[seq_array]
    low_quality_mask = phred_map[qual_array] < min_quality
    mapped[low_quality_mask] = SEPARATOR
    return mapped
