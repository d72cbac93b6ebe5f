import io
import unittest
import numpy as np

from itertools import combinations

from Bio import Phylo

from philo.adapter import build_parent_map, root_at_outlier, select_outlier
from philo.errors import OutlierNotFound
from philo.newick import emit_newick_format, to_newick
from philo.nj_core import TreeNode, build_taxonomy
from philo.taxa import TaxonTable

WIKI_LABELS = ["a", "b", "c", "d", "e"]
WIKI_D = np.array([
    [0, 5, 9, 9, 8],
    [5, 0, 10, 10, 9],
    [9, 10, 0, 8, 7],
    [9, 10, 8, 0, 3],
    [8, 9, 7, 3, 0],
], dtype=float)

FOUR_LABELS = ["A", "B", "C", "D"]
FOUR_D = np.array([
    [0, 3, 7, 9],
    [3, 0, 6, 8],
    [7, 6, 0, 4],
    [9, 8, 4, 0],
], dtype=float)


def build(D, labels):
    return build_taxonomy(TaxonTable(labels, D))


def brute_force_outlier(D):
    """Leaf with the largest summed distance, lowest index on ties."""
    n = len(D)
    sums = [0.0] * n
    for i, j in combinations(range(n), 2):
        sums[i] += D[i][j]
        sums[j] += D[i][j]
    best = 0
    for i in range(1, n):
        if sums[i] > sums[best]:
            best = i
    return best


class TestOutlierSelection(unittest.TestCase):

    def test_matches_brute_force(self):
        for D, labels in [(WIKI_D, WIKI_LABELS), (FOUR_D, FOUR_LABELS)]:
            with self.subTest(labels=labels):
                view = build(D, labels)
                self.assertEqual(select_outlier(view), brute_force_outlier(D))

    def test_four_taxa_outlier(self):
        # sums: A=19 B=17 C=17 D=21
        self.assertEqual(select_outlier(build(FOUR_D, FOUR_LABELS)), 3)

    def test_ties_pick_lowest_id(self):
        # b and c both sum to 34
        self.assertEqual(select_outlier(build(WIKI_D, WIKI_LABELS)), 1)

    def test_named_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        self.assertEqual(select_outlier(view, "d"), 3)

    def test_unknown_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        with self.assertRaises(OutlierNotFound):
            select_outlier(view, "zebra")

    def test_internal_node_is_not_an_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        with self.assertRaises(OutlierNotFound):
            select_outlier(view, "#5")


class TestRooting(unittest.TestCase):

    def test_root_is_outlier_neighbor(self):
        view = build(WIKI_D, WIKI_LABELS)
        root = root_at_outlier(view, 1)
        self.assertEqual(root.name, "#5")
        self.assertEqual([ch.name for ch in root.children], ["#6", "a"])

    def test_parent_map_excludes_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        parent = build_parent_map(view, 5, 1)
        self.assertNotIn(1, parent)
        self.assertIsNone(parent[5])
        self.assertEqual(parent[7], 6)
        self.assertEqual(len(parent), view.table.num_all_nodes - 1)


class TestNewick(unittest.TestCase):

    def emit(self, view, name=None):
        out = io.StringIO()
        newick = emit_newick_format(view, out, name)
        self.assertEqual(out.getvalue(), newick + "\n")
        return newick

    def test_default_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        self.assertEqual(
            self.emit(view),
            "(((d:2.00,e:1.00)#7:2.00,c:4.00)#6:3.00,a:2.00)#5;",
        )

    def test_explicit_outlier(self):
        view = build(WIKI_D, WIKI_LABELS)
        self.assertEqual(
            self.emit(view, "a"),
            "(((d:2.00,e:1.00)#7:2.00,c:4.00)#6:3.00,b:3.00)#5;",
        )
        self.assertEqual(
            self.emit(view, "e"),
            "(d:2.00,((a:2.00,b:3.00)#5:3.00,c:4.00)#6:2.00)#7;",
        )

    def test_unknown_outlier_writes_nothing(self):
        view = build(WIKI_D, WIKI_LABELS)
        out = io.StringIO()
        with self.assertRaises(OutlierNotFound):
            emit_newick_format(view, out, "zebra")
        self.assertEqual(out.getvalue(), "")

    def test_parsed_tree_keeps_distances(self):
        view = build(WIKI_D, WIKI_LABELS)
        newick = self.emit(view)
        tree = Phylo.read(io.StringIO(newick), "newick")
        names = sorted(t.name for t in tree.get_terminals())
        self.assertEqual(names, ["a", "c", "d", "e"])
        for i, j in combinations([0, 2, 3, 4], 2):
            self.assertAlmostEqual(
                tree.distance(WIKI_LABELS[i], WIKI_LABELS[j]), WIKI_D[i, j]
            )

    def test_small_trees(self):
        self.assertEqual(self.emit(build(np.zeros((1, 1)), ["A"])), "A;")
        two = build(np.array([[0, 5], [5, 0]], float), ["A", "B"])
        self.assertEqual(self.emit(two), "B;")
        self.assertEqual(self.emit(two, "B"), "A;")

    def test_to_newick(self):
        root = TreeNode("R")
        inner = TreeNode("X", 1.5)
        inner.add_child(TreeNode("A", 0.25))
        inner.add_child(TreeNode("B", 0.5))
        root.add_child(inner)
        root.add_child(TreeNode("C", 2.0))
        self.assertEqual(to_newick(root), "((A:0.25,B:0.50)X:1.50,C:2.00)R;")


if __name__ == "__main__":
    unittest.main()
