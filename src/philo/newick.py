import logging

from typing import IO, Optional

from .adapter import root_at_outlier, select_outlier
from .nj_core import TreeNode, TreeView, format_distance


logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# TreeNode -> Newick
# ----------------------------------------------------------------------

def to_newick(node: TreeNode) -> str:
    """
    Convert a rooted TreeNode tree to a Newick string.

    Every node but the root is written as ``name:length`` with the length
    rounded to 2 decimals; the root carries its name only.
    """

    def _label(n: TreeNode) -> str:
        return n.name if n.name is not None else ""

    def _rec(n: TreeNode) -> str:
        if n.is_leaf():
            return f"{_label(n)}:{format_distance(n.length)}"
        inner = ",".join(_rec(ch) for ch in n.children)
        return f"({inner}){_label(n)}:{format_distance(n.length)}"

    if node.is_leaf():
        return _label(node) + ";"
    inner = ",".join(_rec(ch) for ch in node.children)
    return f"({inner}){_label(node)};"


def emit_newick_format(view: TreeView, out: IO[str],
                       outlier_name: Optional[str] = None) -> str:
    """
    Write the tree in ``view`` to ``out`` as one rooted Newick line.

    Parameters
    ----------
    view : TreeView
        Result of ``build_taxonomy``.
    out : text stream
        Destination; receives the Newick string and a newline.
    outlier_name : str, optional
        Leaf to use as the outlier.  By default the leaf farthest (in
        total input distance) from all other leaves.

    Returns
    -------
    newick : str
        The string written, without the newline.

    Raises
    ------
    OutlierNotFound
        If ``outlier_name`` names no leaf.  Nothing is written.
    """
    outlier = select_outlier(view, outlier_name)
    newick = to_newick(root_at_outlier(view, outlier))
    logger.debug(f"Newick tree rooted next to outlier {view.table[outlier].name}")
    out.write(newick + "\n")
    return newick


__all__ = [
    "to_newick",
    "emit_newick_format",
]
