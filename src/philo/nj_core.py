import logging
import numpy as np

from dataclasses import dataclass, field
from typing import IO, Dict, List, NamedTuple, Optional, Tuple

from .taxa import ActiveSet, Node, TaxonTable


logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# 1. Minimal tree structure: TreeNode
# ----------------------------------------------------------------------

class TreeNode:
    """
    Minimal rooted tree node, used when the NJ tree is written as Newick.

    name   : taxon or internal node name
    length : branch length to parent (root usually 0)
    children : list of child nodes (empty for leaves)
    """

    __slots__ = ("name", "length", "children")

    def __init__(self, name: Optional[str] = None, length: float = 0.0):
        self.name: Optional[str] = name
        self.length: float = float(length)
        self.children: List["TreeNode"] = []

    def is_leaf(self) -> bool:
        return not self.children

    def add_child(self, child: "TreeNode"):
        self.children.append(child)


# ----------------------------------------------------------------------
# 2. Build result: edges and the unrooted tree
# ----------------------------------------------------------------------

def format_distance(value: float) -> str:
    """Distance rounded to 2 decimals; tiny negatives print as 0.00."""
    text = f"{value:.2f}"
    return "0.00" if text == "-0.00" else text


class Edge(NamedTuple):
    a: int
    b: int
    length: float

    def format(self) -> str:
        return f"{self.a},{self.b},{format_distance(self.length)}"


@dataclass
class TreeView:
    """
    Unrooted tree produced by ``build_taxonomy``.

    Adjacency lives in the neighbor slots of ``table.nodes``; branch
    lengths are the lengths of the recorded edges.
    """

    table: TaxonTable
    edges: List[Edge] = field(default_factory=list)

    @property
    def num_taxa(self) -> int:
        return self.table.num_taxa

    def leaves(self) -> List[Node]:
        return self.table.leaves()

    def neighbors(self, node_id: int) -> List[int]:
        return self.table[node_id].linked()

    def edge_length(self, a: int, b: int) -> float:
        for edge in self.edges:
            if (edge.a, edge.b) in ((a, b), (b, a)):
                return edge.length
        raise KeyError((a, b))

    def distances_from(self, source: int) -> Dict[int, float]:
        """Path length from ``source`` to every node of the tree."""
        lengths = {}
        for edge in self.edges:
            lengths[(edge.a, edge.b)] = edge.length
            lengths[(edge.b, edge.a)] = edge.length

        depth: Dict[int, float] = {source: 0.0}
        stack = [source]
        while stack:
            node = stack.pop()
            d = depth[node]
            for nb in self.neighbors(node):
                if nb not in depth:
                    depth[nb] = d + lengths[(node, nb)]
                    stack.append(nb)
        return depth

    def path_length(self, a: int, b: int) -> float:
        return self.distances_from(a)[b]


# ----------------------------------------------------------------------
# 3. NJ core algorithm on a TaxonTable
# ----------------------------------------------------------------------

@dataclass
class BuildContext:
    """State owned by one tree construction."""

    table: TaxonTable
    out: Optional[IO[str]] = None
    view: Optional[TreeView] = None

    def __post_init__(self):
        if self.view is None:
            self.view = TreeView(self.table)

    @property
    def active(self) -> ActiveSet:
        return self.table.active

    def emit(self, a: int, b: int, length: float):
        edge = Edge(a, b, float(length))
        self.view.edges.append(edge)
        if self.out is not None:
            self.out.write(edge.format() + "\n")


def row_sums(ctx: BuildContext) -> Tuple[np.ndarray, np.ndarray]:
    """Active ids (in slot order) and S(i) = sum of D(i, j) over active j."""
    ids = np.array(ctx.active.ids(), dtype=int)
    D = ctx.table.distances
    return ids, D[np.ix_(ids, ids)].sum(axis=1)


def select_pair(ctx: BuildContext, ids: np.ndarray, S: np.ndarray) -> Tuple[int, int]:
    """
    Slot pair (i, j), i < j, minimizing Q(i,j) = (M-2)*D(i,j) - S(i) - S(j).

    np.argmin returns the first minimum in row-major order, which is the
    first pair of the ascending slot enumeration; later pairs only win
    with a strictly smaller Q.
    """
    m = len(ids)
    D = ctx.table.distances[np.ix_(ids, ids)]
    Q = (m - 2) * D - S[:, None] - S[None, :]
    Q[np.tril_indices(m)] = np.inf
    i, j = divmod(int(np.argmin(Q)), m)
    return i, j


def join_pair(ctx: BuildContext, ids: np.ndarray, S: np.ndarray,
              i: int, j: int) -> Tuple[Node, float]:
    """
    Join the active nodes in slots i and j into a new internal node.

    Returns the new node and the branch length from the second joined node
    to it.
    """
    table = ctx.table
    m = len(ids)
    f, g = int(ids[i]), int(ids[j])
    d_fg = table.distance(f, g)

    # new internal node u
    u = table.add_node()

    # branch lengths from f and g to u
    branch_f = d_fg / 2.0 + (S[i] - S[j]) / (2.0 * (m - 2))
    branch_g = d_fg - branch_f
    ctx.emit(f, u.id, branch_f)
    ctx.emit(g, u.id, branch_g)

    # attach f and g below u
    u.neighbors[1] = f
    u.neighbors[2] = g
    table[f].neighbors[0] = u.id
    table[g].neighbors[0] = u.id

    # distances from u to the remaining active nodes
    D = table.distances
    others = np.array([k for k in ids if k != f and k != g], dtype=int)
    if others.size:
        d_u = 0.5 * (D[f, others] + D[g, others] - d_fg)
        D[u.id, others] = d_u
        D[others, u.id] = d_u
    D[u.id, u.id] = 0.0
    table.set_distance(u.id, f, branch_f)
    table.set_distance(u.id, g, branch_g)

    ctx.active.join(f, g, u.id)

    logger.debug(
        f"Joined {table[f].name} and {table[g].name} into {u.name} "
        f"({branch_f:.4f}, {branch_g:.4f}); {len(ctx.active)} active"
    )
    return u, branch_g


def link_last_pair(ctx: BuildContext, u: Node, g: int, branch_g: float):
    """
    Connect the two nodes left active after the last join.

    ``u`` is the node made by that join and ``g`` the second node it joined.
    The closing edge is D(k, g) - branch(g, u), k being the other survivor.
    """
    table = ctx.table
    a0, a1 = ctx.active[0], ctx.active[1]
    table[a0].neighbors[0] = a1
    table[a1].neighbors[0] = a0

    k = a1 if a0 == u.id else a0
    last = table.distance(k, g) - branch_g
    ctx.emit(a1, a0, last)
    ctx.active.clear()


def build_taxonomy(table: TaxonTable, out: Optional[IO[str]] = None) -> TreeView:
    """
    Reconstruct the unrooted NJ tree for a freshly parsed TaxonTable.

    Parameters
    ----------
    table : TaxonTable
        Table returned by ``read_distance_data``.  Internal nodes are
        appended to it and its matrix gains their rows and columns.
    out : text stream, optional
        If given, every edge is written to it as "a,b,length" (node ids,
        length with 2 decimals) as soon as it is created.

    Returns
    -------
    view : TreeView
        Adjacency (in the table's node slots) and the recorded edges.
        For N >= 3 there are N - 2 internal nodes and 2 * (N - 2) + 1 edges.

    Raises
    ------
    NodeCapacityExceeded
        If the tree would need more nodes than ``table.limits.max_nodes``;
        raised before the table is modified.
    """
    n = table.num_taxa
    if len(table.active) != n or table.num_all_nodes != n:
        raise ValueError("table has already been used for a build")

    ctx = BuildContext(table, out)

    if n == 1:
        return ctx.view

    if n == 2:
        a, b = ctx.active[0], ctx.active[n - 1]
        table[a].neighbors[0] = b
        table[b].neighbors[0] = a
        ctx.emit(a, b, table.distance(a, b))
        return ctx.view

    table.check_capacity(n - 2)

    # Main loop: N - 2 joins, the last one also closes the tree
    for _ in range(n - 2):
        ids, S = row_sums(ctx)
        i, j = select_pair(ctx, ids, S)
        g = int(ids[j])
        u, branch_g = join_pair(ctx, ids, S, i, j)
        if len(ctx.active) == 2:
            link_last_pair(ctx, u, g, branch_g)

    logger.debug(
        f"Built tree on {n} taxa: {table.num_all_nodes} nodes, "
        f"{len(ctx.view.edges)} edges"
    )
    return ctx.view


__all__ = [
    "TreeNode",
    "format_distance",
    "Edge",
    "TreeView",
    "BuildContext",
    "build_taxonomy",
]
