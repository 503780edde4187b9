import argparse
import cProfile
import logging
import pstats
import sys
import time
from io import StringIO

from countog_data_structures import (DEFAULT_MIN_QSCORE, DEFAULT_OLIGO,
                                     DEFAULT_PHRED_OFFSET, DEFAULT_SIZE_COUNTING,
                                     DEFAULT_SIZE_DATA, DEFAULT_SIZE_GENOME,
                                     DEFAULT_SIZE_SHIFT, CountogConfig)
from countog_engine import CountingEngine
from countog_errors import CountogError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Count oligonucleotides in a FASTA or FASTQ file and print "
        "normalized counts (0 to 1) as training data.",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    # Positional Arguments
    parser.add_argument(
        "input_path",
        metavar="FILE",
        help="Path of .fasta or .fastq file ('-' for stdin)",
    )

    # Counting Group
    count_group = parser.add_argument_group("COUNTING")
    count_group.add_argument(
        "-o",
        "--oligo",
        type=int,
        metavar="INT",
        default=DEFAULT_OLIGO,
        help=f"Size of oligonucleotide in nt [{DEFAULT_OLIGO}]",
    )
    count_group.add_argument(
        "-c",
        "--counts",
        type=int,
        metavar="INT",
        default=DEFAULT_SIZE_COUNTING,
        help=f"Number of counted oligos for one row [{DEFAULT_SIZE_COUNTING}]",
    )
    count_group.add_argument(
        "-t",
        "--rows",
        type=int,
        metavar="INT",
        default=DEFAULT_SIZE_DATA,
        help=f"Number of rows to print [{DEFAULT_SIZE_DATA}]",
    )
    count_group.add_argument(
        "-s",
        "--shift",
        type=int,
        metavar="INT",
        default=DEFAULT_SIZE_SHIFT,
        help=f"Size of shift in bp for the next round [{DEFAULT_SIZE_SHIFT}]",
    )
    count_group.add_argument(
        "-r",
        "--reverse",
        action="store_true",
        help="Merge complementary oligonucleotides",
    )

    # Input Group
    input_group = parser.add_argument_group("INPUT")
    input_group.add_argument(
        "-g",
        "--genome_size",
        type=int,
        metavar="INT",
        default=DEFAULT_SIZE_GENOME,
        help=f"Maximum genome size in bytes [{DEFAULT_SIZE_GENOME}]",
    )
    input_group.add_argument(
        "-q",
        "--min_qual",
        type=int,
        metavar="INT",
        default=DEFAULT_MIN_QSCORE,
        help=f"Minimum quality score for FASTQ bases [{DEFAULT_MIN_QSCORE}]",
    )
    input_group.add_argument(
        "--phred_off",
        type=int,
        metavar="INT",
        default=DEFAULT_PHRED_OFFSET,
        help=f"Phred quality offset [{DEFAULT_PHRED_OFFSET}]",
    )

    # Output Group
    output_group = parser.add_argument_group("OUTPUT FORMAT")
    output_group.add_argument(
        "-d",
        "--header",
        action="store_true",
        help="Print the header line",
    )
    output_group.add_argument(
        "-l",
        "--label",
        type=str,
        metavar="STR",
        default=None,
        help="Label prepended to every row of training data [null]",
    )
    output_group.add_argument(
        "--output",
        type=str,
        metavar="FILE",
        default="-",
        help="Output file path ('-' for stdout) [-]",
    )

    # Performance Group
    perf_group = parser.add_argument_group("LOGGING & PROFILING")
    perf_group.add_argument(
        "--verbose",
        type=int,
        metavar="INT",
        default=0,
        choices=[0, 1],
        help="Enable verbose logging (0/1) [0]",
    )
    perf_group.add_argument(
        "--profile",
        type=int,
        metavar="INT",
        default=0,
        choices=[0, 1],
        help="Enable cProfile profiling (0/1) [0]",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> CountogConfig:
    return CountogConfig(
        oligo=args.oligo,
        size_data=args.rows,
        size_counting=args.counts,
        size_shift=args.shift,
        size_genome=args.genome_size,
        min_qscore=args.min_qual,
        phred_offset=args.phred_off,
        reduce=args.reverse,
        header=args.header,
        label=args.label,
    )


def count_oligos(input_path: str, output_path: str, config: CountogConfig) -> int:
    """Assemble the input sequence and write all rows. Returns rows written."""
    logger.info(f"Reading sequences from {input_path}...")
    engine = CountingEngine.from_path(config, input_path)

    if output_path == "-":
        written = engine.run(sys.stdout)
        sys.stdout.flush()
    else:
        with open(output_path, "w") as outfile:
            written = engine.run(outfile)
        logger.info(f"Saved counts to {output_path}")
    return written


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose == 1:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.INFO)

    try:
        config = config_from_args(args).validate()
    except ValueError as e:
        logger.error(f"Invalid option: {e}")
        return 1

    start_time = time.perf_counter()

    profiler = None
    if args.profile == 1:
        profiler = cProfile.Profile()
        profiler.enable()
        logger.info("Profiling enabled...")

    try:
        count_oligos(args.input_path, args.output, config)
    except CountogError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return e.exit_code
    finally:
        if profiler is not None:
            profiler.disable()
            s = StringIO()
            ps = pstats.Stats(profiler, stream=s).sort_stats("cumulative")
            ps.print_stats(20)
            logger.info("Profiling Results:\n" + s.getvalue())

    end_time = time.perf_counter()
    logger.info(f"Counting completed in {end_time - start_time:.4f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
