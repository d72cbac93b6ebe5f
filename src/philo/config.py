"""
Capacity limits for the distance parser and the tree builder.

The limits bound the size of one build: the longest input field, the
number of taxa on the header line and the total number of nodes (taxa plus
synthesized internal nodes) the node arena may hold.
"""

from dataclasses import dataclass


INPUT_MAX = 100
MAX_TAXA = 100
MAX_NODES = 2 * MAX_TAXA - 2


@dataclass(frozen=True)
class Limits:
    input_max: int = INPUT_MAX   # characters per field
    max_taxa: int = MAX_TAXA     # taxa on the header line
    max_nodes: int = MAX_NODES   # leaves + internal nodes

    def __post_init__(self):
        if self.input_max < 1:
            raise ValueError("input_max must be positive")
        if self.max_taxa < 1:
            raise ValueError("max_taxa must be positive")
        if self.max_nodes < self.max_taxa:
            raise ValueError("max_nodes must be at least max_taxa")


DEFAULT_LIMITS = Limits()


__all__ = [
    "INPUT_MAX",
    "MAX_TAXA",
    "MAX_NODES",
    "Limits",
    "DEFAULT_LIMITS",
]
