class CountogError(Exception):
    """Base class for fatal conversion errors. exit_code is the process status the CLI uses."""

    exit_code = 1


class InputOpenError(CountogError):
    exit_code = 2


class FormatDetectionError(CountogError):
    """First line is neither a FASTA (>) nor a FASTQ (@) header."""

    exit_code = 3


class StructuralReadError(CountogError):
    """An expected line or record is missing, e.g. a truncated FASTQ record."""

    exit_code = 4


class InvariantViolationError(CountogError):
    exit_code = 5


class ResourceAllocationError(CountogError):
    exit_code = 6
