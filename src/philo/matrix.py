from typing import IO

from .nj_core import format_distance
from .taxa import TaxonTable


def format_distance_matrix(table: TaxonTable) -> str:
    """
    CSV text of the full distance matrix, synthesized nodes included.

    Same layout as the parser input: a header row with an empty first
    field and every node name, then one row per node with its name and its
    distances to all nodes (2 decimals).
    """
    names = table.names
    D = table.distances
    lines = ["," + ",".join(names)]
    for i, name in enumerate(names):
        lines.append(name + "," + ",".join(format_distance(d) for d in D[i]))
    return "\n".join(lines) + "\n"


def emit_distance_matrix(table: TaxonTable, out: IO[str]):
    out.write(format_distance_matrix(table))


__all__ = [
    "format_distance_matrix",
    "emit_distance_matrix",
]
