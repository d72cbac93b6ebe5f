"""
philo
=====

Neighbor-joining reconstruction of phylogenetic trees from a CSV matrix of
pairwise distances.

Main entry points
-----------------
read_distance_data : parse a distance table into a TaxonTable
build_taxonomy : run neighbor joining, returning a TreeView
emit_newick_format : write the tree as rooted Newick
emit_distance_matrix : write the matrix extended with internal nodes

Examples
--------
>>> import io
>>> from philo import read_distance_data, build_taxonomy
>>> table = read_distance_data(io.StringIO(",A,B\\nA,0,5\\nB,5,0\\n"))
>>> [e.format() for e in build_taxonomy(table).edges]
['0,1,5.00']
"""

__version__ = "0.1.0"

from .config import Limits, DEFAULT_LIMITS, INPUT_MAX, MAX_TAXA, MAX_NODES
from .errors import (
    PhiloError,
    FieldTooLong,
    MalformedHeader,
    TooManyTaxa,
    TaxonNameMismatch,
    InvalidNumber,
    RowFieldCountMismatch,
    NonZeroDiagonal,
    AsymmetricMatrix,
    TruncatedInput,
    NodeCapacityExceeded,
    OutlierNotFound,
    InvalidArguments,
)
from .taxa import NO_NEIGHBOR, Node, TaxonTable, ActiveSet
from .nj_parser import read_distance_data
from .nj_core import TreeNode, Edge, TreeView, build_taxonomy
from .adapter import select_outlier, root_at_outlier
from .newick import to_newick, emit_newick_format
from .matrix import emit_distance_matrix, format_distance_matrix

__all__ = [
    "__version__",
    "Limits",
    "DEFAULT_LIMITS",
    "INPUT_MAX",
    "MAX_TAXA",
    "MAX_NODES",
    "PhiloError",
    "FieldTooLong",
    "MalformedHeader",
    "TooManyTaxa",
    "TaxonNameMismatch",
    "InvalidNumber",
    "RowFieldCountMismatch",
    "NonZeroDiagonal",
    "AsymmetricMatrix",
    "TruncatedInput",
    "NodeCapacityExceeded",
    "OutlierNotFound",
    "InvalidArguments",
    "NO_NEIGHBOR",
    "Node",
    "TaxonTable",
    "ActiveSet",
    "read_distance_data",
    "TreeNode",
    "Edge",
    "TreeView",
    "build_taxonomy",
    "select_outlier",
    "root_at_outlier",
    "to_newick",
    "emit_newick_format",
    "emit_distance_matrix",
    "format_distance_matrix",
]
