from typing import Iterable, TextIO


def write_header(outfile: TextIO, header: str):
    outfile.write(header)
    outfile.write("\n")


def write_rows(outfile: TextIO, rows: Iterable[str], progress_every: int = 0, logger=None) -> int:
    """
    Write rows to a text sink, one per line.
    Returns: number of rows written
    """
    written = 0
    for row in rows:
        outfile.write(row)
        outfile.write("\n")
        written += 1
        if logger is not None and progress_every and written % progress_every == 0:
            logger.info(f"Written {written:,} rows...")
    return written
