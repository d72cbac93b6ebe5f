"""
Reader for the comma-separated distance table consumed by the NJ core.

Format
------
Lines end with a newline (the last one may not).  A line starting with
'#' is a comment.  The first non-comment line is the header: an empty field
followed by the N taxon names.  The next N non-comment lines are data rows:
the taxon name, which must match the header name in the same position,
followed by N distances.  Anything after the last data row is ignored.

    # three taxa
    ,A,B,C
    A,0,3,4
    B,3,0,5
    C,4,5,0

Distances are unsigned decimals (``12``, ``0.75``).  The matrix must be
symmetric with a zero diagonal.

A data row whose name itself starts with '#' (the synthesized nodes of a
matrix written by ``philo.matrix``) is read as data, not as a comment, when
its first field is the name expected at that row.
"""

import logging
import re
import numpy as np

from typing import IO, Iterable, Iterator, List, Tuple

from .config import DEFAULT_LIMITS, Limits
from .errors import (
    AsymmetricMatrix,
    FieldTooLong,
    InvalidNumber,
    MalformedHeader,
    NonZeroDiagonal,
    RowFieldCountMismatch,
    TaxonNameMismatch,
    TooManyTaxa,
    TruncatedInput,
)
from .taxa import TaxonTable


logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[0-9]+(\.[0-9]+)?")


# ----------------------------------------------------------------------
# 1. Tokenizer: lines -> fields
# ----------------------------------------------------------------------

def iter_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` with the trailing newline removed."""
    for lineno, line in enumerate(lines, start=1):
        if line.endswith("\n"):
            line = line[:-1]
        yield lineno, line


def split_fields(line: str, lineno: int, limits: Limits = DEFAULT_LIMITS) -> List[str]:
    """
    Split one non-comment line on commas.

    Fields longer than ``limits.input_max`` raise FieldTooLong.
    """
    fields = line.split(",")
    for col, field in enumerate(fields):
        if len(field) > limits.input_max:
            raise FieldTooLong(
                f"line {lineno}: field {col + 1} has {len(field)} characters, "
                f"limit is {limits.input_max}"
            )
    return fields


def parse_distance(field: str, lineno: int, col: int) -> float:
    """Convert one distance field, raising InvalidNumber if malformed."""
    if _NUMBER.fullmatch(field) is None:
        raise InvalidNumber(
            f"line {lineno}: field {col + 1} is not a valid distance: {field!r}"
        )
    return float(field)


# ----------------------------------------------------------------------
# 2. Header and data rows
# ----------------------------------------------------------------------

def _check_header(fields: List[str], lineno: int, limits: Limits) -> List[str]:
    if fields[0] != "":
        raise MalformedHeader(
            f"line {lineno}: header must start with an empty field, got {fields[0]!r}"
        )
    names = fields[1:]
    if not names:
        raise MalformedHeader(f"line {lineno}: header declares no taxa")
    if len(names) > limits.max_taxa:
        raise TooManyTaxa(
            f"line {lineno}: {len(names)} taxa declared, limit is {limits.max_taxa}"
        )
    # names the build will give to internal nodes
    reserved = {f"#{k}" for k in range(len(names), 2 * len(names) - 2)}
    seen = set()
    for col, name in enumerate(names, start=1):
        if name == "":
            raise MalformedHeader(f"line {lineno}: taxon name {col} is empty")
        if name in seen:
            raise MalformedHeader(f"line {lineno}: duplicate taxon name {name!r}")
        if name in reserved:
            raise MalformedHeader(
                f"line {lineno}: taxon name {name!r} is reserved for an internal node"
            )
        seen.add(name)
    return names


def _parse_row(fields: List[str], expected: str, n: int, lineno: int) -> List[float]:
    if fields[0] != expected:
        raise TaxonNameMismatch(
            f"line {lineno}: expected taxon {expected!r}, got {fields[0]!r}"
        )
    if len(fields) - 1 != n:
        raise RowFieldCountMismatch(
            f"line {lineno}: expected {n} distances for {expected!r}, "
            f"got {len(fields) - 1}"
        )
    return [parse_distance(f, lineno, col)
            for col, f in enumerate(fields[1:], start=1)]


def _check_matrix(D: np.ndarray, names: List[str]):
    n = len(names)
    for i in range(n):
        for j in range(n):
            if i == j and D[i, j] != 0.0:
                raise NonZeroDiagonal(
                    f"distance from {names[i]!r} to itself is {D[i, j]}, not 0"
                )
            if D[i, j] != D[j, i]:
                raise AsymmetricMatrix(
                    f"distance {names[i]!r} -> {names[j]!r} is {D[i, j]} but "
                    f"{names[j]!r} -> {names[i]!r} is {D[j, i]}"
                )


# ----------------------------------------------------------------------
# 3. Entry point
# ----------------------------------------------------------------------

def read_distance_data(stream: IO[str], limits: Limits = DEFAULT_LIMITS) -> TaxonTable:
    """
    Read a distance table from ``stream``.

    Parameters
    ----------
    stream : text stream or iterable of lines
        Input in the format described in the module docstring.
    limits : Limits
        Field length, taxon count and node capacity limits.

    Returns
    -------
    table : TaxonTable
        Leaves named after the header, matrix filled from the data rows,
        active set equal to the identity on [0, N).

    Raises
    ------
    PhiloError
        The subclass names the first rule the input breaks.
    """
    names: List[str] = []
    rows: List[List[float]] = []
    header_seen = False
    lineno = 0

    for lineno, line in iter_lines(stream):
        if not header_seen:
            if line.startswith("#"):
                continue
            names = _check_header(split_fields(line, lineno, limits), lineno, limits)
            header_seen = True
            continue

        expected = names[len(rows)]
        if line.startswith("#") and line.split(",", 1)[0] != expected:
            continue
        fields = split_fields(line, lineno, limits)
        rows.append(_parse_row(fields, expected, len(names), lineno))
        if len(rows) == len(names):
            break

    if not header_seen:
        raise TruncatedInput("input ended before the header line")
    if len(rows) < len(names):
        raise TruncatedInput(
            f"input ended after line {lineno}: "
            f"{len(rows)} of {len(names)} data rows read"
        )

    D = np.array(rows, dtype=float)
    _check_matrix(D, names)

    logger.debug(f"Read {len(names)} taxa: {', '.join(names)}")
    return TaxonTable(names, D, limits)


__all__ = [
    "iter_lines",
    "split_fields",
    "parse_distance",
    "read_distance_data",
]
