import logging
import numpy as np

from typing import Iterator, List, Sequence

from .config import DEFAULT_LIMITS, Limits
from .errors import NodeCapacityExceeded


logger = logging.getLogger(__name__)

NO_NEIGHBOR = -1


# ----------------------------------------------------------------------
# 1. Node arena entry
# ----------------------------------------------------------------------

class Node:
    """
    Entry of the node arena.

    id        : index of the node in the arena and in the distance matrix
    name      : taxon name for leaves, "#<id>" for synthesized nodes
    neighbors : three slots of node ids, NO_NEIGHBOR when unset.
                Slot 0 links a node to the node it was joined into (or,
                for the last two active nodes, to each other); slots 1
                and 2 hold the pair an internal node was made from.
    """

    __slots__ = ("id", "name", "neighbors")

    def __init__(self, id: int, name: str):
        self.id: int = id
        self.name: str = name
        self.neighbors: List[int] = [NO_NEIGHBOR] * 3

    def degree(self) -> int:
        return sum(1 for n in self.neighbors if n != NO_NEIGHBOR)

    def linked(self) -> List[int]:
        """Populated neighbor ids in slot order."""
        return [n for n in self.neighbors if n != NO_NEIGHBOR]

    def __repr__(self):
        return f"Node({self.id}, {self.name!r}, neighbors={self.neighbors})"


# ----------------------------------------------------------------------
# 2. TaxonTable: names, nodes and the growable distance matrix
# ----------------------------------------------------------------------

class TaxonTable:
    """
    Registry of taxa and synthesized nodes with their distance matrix.

    The first ``num_taxa`` nodes are the leaves read from the input; every
    node appended afterwards is an internal node.  The matrix is a numpy
    float64 array that only grows, up to ``limits.max_nodes`` rows.

    Parameters
    ----------
    names : sequence of str
        Taxon names, one per leaf.
    distances : array-like (n x n)
        Leaf distance matrix.
    limits : Limits
        Capacity limits for this table.
    """

    def __init__(self, names: Sequence[str], distances,
                 limits: Limits = DEFAULT_LIMITS):
        D = np.asarray(distances, dtype=float)
        n = len(names)
        if D.shape != (n, n):
            raise ValueError("distances must be a square matrix matching names")

        self.limits = limits
        self.num_taxa: int = n
        self.nodes: List[Node] = [Node(i, str(name)) for i, name in enumerate(names)]

        # an unrooted binary tree on n >= 2 leaves has 2n - 2 nodes
        capacity = min(max(n, 2 * n - 2), limits.max_nodes)
        self._distances = np.zeros((max(capacity, n), max(capacity, n)), dtype=float)
        self._distances[:n, :n] = D
        self.active = ActiveSet(n)

    # -- counts -----------------------------------------------------------

    @property
    def num_all_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_active_nodes(self) -> int:
        return len(self.active)

    @property
    def names(self) -> List[str]:
        return [node.name for node in self.nodes]

    @property
    def distances(self) -> np.ndarray:
        """View of the matrix restricted to the nodes created so far."""
        n = self.num_all_nodes
        return self._distances[:n, :n]

    def is_leaf(self, node_id: int) -> bool:
        return node_id < self.num_taxa

    def leaves(self) -> List[Node]:
        return self.nodes[:self.num_taxa]

    def __getitem__(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def __len__(self) -> int:
        return self.num_all_nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    # -- matrix access ----------------------------------------------------

    def distance(self, i: int, j: int) -> float:
        return float(self._distances[i, j])

    def set_distance(self, i: int, j: int, value: float):
        """Write ``value`` to both D[i][j] and D[j][i]."""
        self._distances[i, j] = value
        self._distances[j, i] = value

    def index_of(self, name: str) -> int:
        for node in self.nodes:
            if node.name == name:
                return node.id
        raise KeyError(name)

    # -- growth -----------------------------------------------------------

    def check_capacity(self, extra: int):
        """Raise NodeCapacityExceeded if ``extra`` more nodes do not fit."""
        needed = self.num_all_nodes + extra
        if needed > self.limits.max_nodes:
            raise NodeCapacityExceeded(
                f"building the tree needs {needed} nodes, "
                f"limit is {self.limits.max_nodes}"
            )

    def add_node(self) -> Node:
        """
        Append an internal node named "#<id>" with a zeroed matrix row and
        column, growing the matrix if needed.
        """
        self.check_capacity(1)
        node_id = self.num_all_nodes
        size = self._distances.shape[0]
        if node_id >= size:
            new_size = min(max(2 * size, node_id + 1), self.limits.max_nodes)
            grown = np.zeros((new_size, new_size), dtype=float)
            grown[:size, :size] = self._distances
            self._distances = grown
            logger.debug(f"Distance matrix grown to {new_size} x {new_size}")

        node = Node(node_id, f"#{node_id}")
        self.nodes.append(node)
        self._distances[node_id, :] = 0.0
        self._distances[:, node_id] = 0.0
        return node


# ----------------------------------------------------------------------
# 3. ActiveSet: compacting slot -> node id map
# ----------------------------------------------------------------------

class ActiveSet:
    """
    Node ids not yet joined into an internal node.

    Ids live in compact slots ``0 .. len(self) - 1``.  Joining replaces a
    pair with the new node by swap-with-last compaction (see ``join``), so
    slot order after a join is not sorted and must not be re-sorted: the
    Q-criterion tie-break depends on it.
    """

    def __init__(self, n: int):
        self._slots: List[int] = list(range(n))
        self._count: int = n

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, slot: int) -> int:
        if not 0 <= slot < self._count:
            raise IndexError(slot)
        return self._slots[slot]

    def __iter__(self) -> Iterator[int]:
        return iter(self._slots[:self._count])

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._slots[:self._count]

    def ids(self) -> List[int]:
        return self._slots[:self._count]

    def slot_of(self, node_id: int) -> int:
        for slot in range(self._count):
            if self._slots[slot] == node_id:
                return slot
        raise KeyError(node_id)

    def join(self, f: int, g: int, u: int):
        """
        Replace active nodes ``f`` and ``g`` with ``u``.

        f's slot takes ``u``; g's slot takes the id in the last slot; the
        active count then drops by one.
        """
        slot_f = self.slot_of(f)
        slot_g = self.slot_of(g)
        self._slots[slot_f] = u
        self._slots[slot_g] = self._slots[self._count - 1]
        self._count -= 1

    def clear(self):
        self._count = 0

    def __repr__(self):
        return f"ActiveSet({self.ids()})"


__all__ = [
    "NO_NEIGHBOR",
    "Node",
    "TaxonTable",
    "ActiveSet",
]
