"""
Command-line driver: read a distance table on stdin, build the NJ tree and
print it.

    philo            edge list, one "a,b,length" line per edge
    philo -m         extended distance matrix (internal nodes included)
    philo -n [-o X]  rooted Newick tree, optionally with outlier X
    philo -h         usage

The log level is taken from the PHILO_LOG_LEVEL environment variable.
"""

import argparse
import io
import logging
import os
import sys

from typing import IO, List, Optional

from .errors import InvalidArguments, PhiloError
from .matrix import emit_distance_matrix
from .newick import emit_newick_format
from .nj_core import build_taxonomy
from .nj_parser import read_distance_data


logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PHILO_LOG_LEVEL"


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises InvalidArguments instead of exiting."""

    def error(self, message):
        raise InvalidArguments(message)


def make_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="philo",
        add_help=False,
        description="Build a neighbor-joining tree from a CSV distance matrix "
                    "read on standard input.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-m", dest="matrix", action="store_true",
                      help="print the distance matrix extended with internal nodes")
    mode.add_argument("-n", dest="newick", action="store_true",
                      help="print the tree in Newick format")
    parser.add_argument("-o", dest="outlier", metavar="NAME",
                        help="taxon to use as the outlier in Newick mode")
    parser.add_argument("-h", dest="help", action="store_true",
                        help="show this help message and exit")
    return parser


def parse_args(argv: Optional[List[str]] = None,
               parser: Optional[ArgumentParser] = None) -> argparse.Namespace:
    parser = parser or make_parser()
    args = parser.parse_args(argv)
    if args.help:
        if args.matrix or args.newick or args.outlier is not None:
            raise InvalidArguments("-h takes no other arguments")
        return args
    if args.outlier is not None and not args.newick:
        raise InvalidArguments("-o is only valid together with -n")
    return args


def configure_logging():
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s: %(message)s",
    )


def run_mode(args: argparse.Namespace, stdin: IO[str], stdout: IO[str]):
    """Read, build and print according to ``args``."""
    table = read_distance_data(stdin)

    if args.matrix:
        build_taxonomy(table)
        emit_distance_matrix(table, stdout)
    elif args.newick:
        # stdout stays empty if the outlier is unknown
        view = build_taxonomy(table)
        buffer = io.StringIO()
        emit_newick_format(view, buffer, args.outlier)
        stdout.write(buffer.getvalue())
    else:
        build_taxonomy(table, stdout)


def main(argv: Optional[List[str]] = None,
         stdin: Optional[IO[str]] = None,
         stdout: Optional[IO[str]] = None) -> int:
    """Run the program; returns the process exit status."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    parser = make_parser()
    try:
        args = parse_args(argv, parser)
    except InvalidArguments as exc:
        parser.print_usage(sys.stderr)
        logger.error(f"{exc}")
        return 1

    if args.help:
        parser.print_help(stdout)
        return 0

    try:
        run_mode(args, stdin, stdout)
    except PhiloError as exc:
        logger.error(f"{exc}")
        return 1
    return 0


def run():
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
