"""
Adapter: unrooted NJ TreeView -> rooted TreeNode

Neighbor joining builds an unrooted tree.  To write it as Newick one leaf
is chosen as the outlier; the outlier's only neighbor becomes the root and
every other edge is oriented away from it.  The outlier itself is left out
of the rooted tree.

Intended usage:
    view = build_taxonomy(table)
    root = root_at_outlier(view, select_outlier(view))
"""

import logging
import numpy as np

from typing import Dict, Optional

from .errors import OutlierNotFound
from .nj_core import TreeNode, TreeView


logger = logging.getLogger(__name__)


def leaf_distance_sums(view: TreeView) -> np.ndarray:
    """Sum of input distances from each leaf to all other leaves."""
    n = view.num_taxa
    return view.table.distances[:n, :n].sum(axis=1)


def select_outlier(view: TreeView, name: Optional[str] = None) -> int:
    """
    Leaf id to exclude from the rooted tree.

    With ``name``, the leaf of that name (OutlierNotFound if there is none).
    Otherwise the leaf with the greatest total distance to the other
    leaves; the lowest id wins ties.
    """
    if name is not None:
        for leaf in view.leaves():
            if leaf.name == name:
                return leaf.id
        raise OutlierNotFound(f"no taxon named {name!r}")

    sums = leaf_distance_sums(view)
    outlier = int(np.argmax(sums))
    logger.debug(
        f"Outlier {view.table[outlier].name} (total distance {sums[outlier]:.4f})"
    )
    return outlier


def build_parent_map(view: TreeView, root: int, exclude: int) -> Dict[int, int]:
    """Return a dict child -> parent (root maps to None), skipping ``exclude``."""
    parent: Dict[int, int] = {root: None}
    stack = [root]
    while stack:
        node = stack.pop()
        for nb in view.neighbors(node):
            if nb == exclude or nb in parent:
                continue
            parent[nb] = node
            stack.append(nb)
    return parent


def root_at_outlier(view: TreeView, outlier: int) -> TreeNode:
    """
    Rooted TreeNode hanging from the outlier's neighbor.

    Children keep the neighbor-slot order of their parent.  A single-taxon
    tree has no neighbor to root at and is returned as that one leaf.
    """
    table = view.table
    linked = view.neighbors(outlier)
    if not linked:
        return TreeNode(name=table[outlier].name, length=0.0)
    root_id = linked[0]

    parent = build_parent_map(view, root_id, outlier)

    def _build(node_id: int, length: float) -> TreeNode:
        node = TreeNode(name=table[node_id].name, length=length)
        for nb in view.neighbors(node_id):
            if parent.get(nb) == node_id:
                node.add_child(_build(nb, view.edge_length(node_id, nb)))
        return node

    return _build(root_id, 0.0)


__all__ = [
    "leaf_distance_sums",
    "select_outlier",
    "build_parent_map",
    "root_at_outlier",
]
