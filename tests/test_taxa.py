import unittest
import numpy as np

from philo.config import DEFAULT_LIMITS, Limits
from philo.errors import NodeCapacityExceeded
from philo.taxa import NO_NEIGHBOR, ActiveSet, Node, TaxonTable


class TestActiveSet(unittest.TestCase):

    def test_starts_as_identity(self):
        active = ActiveSet(4)
        self.assertEqual(len(active), 4)
        self.assertEqual(active.ids(), [0, 1, 2, 3])
        self.assertEqual([active[i] for i in range(4)], [0, 1, 2, 3])

    def test_join_swaps_with_last(self):
        active = ActiveSet(5)
        active.join(0, 1, 5)
        self.assertEqual(active.ids(), [5, 4, 2, 3])
        active.join(5, 2, 6)
        self.assertEqual(active.ids(), [6, 4, 3])
        active.join(6, 4, 7)
        self.assertEqual(active.ids(), [7, 3])

    def test_join_with_last_slot(self):
        active = ActiveSet(3)
        active.join(0, 2, 3)
        self.assertEqual(active.ids(), [3, 1])

    def test_membership_and_lookup(self):
        active = ActiveSet(3)
        active.join(1, 2, 3)
        self.assertIn(3, active)
        self.assertNotIn(2, active)
        self.assertEqual(active.slot_of(3), 1)
        with self.assertRaises(KeyError):
            active.slot_of(2)
        with self.assertRaises(IndexError):
            active[2]

    def test_clear(self):
        active = ActiveSet(2)
        active.clear()
        self.assertEqual(len(active), 0)
        self.assertEqual(list(active), [])


class TestTaxonTable(unittest.TestCase):

    def setUp(self):
        self.D = np.array([[0, 3, 4], [3, 0, 5], [4, 5, 0]], float)
        self.table = TaxonTable(["A", "B", "C"], self.D)

    def test_initial_state(self):
        table = self.table
        self.assertEqual(table.num_taxa, 3)
        self.assertEqual(table.num_all_nodes, 3)
        self.assertEqual(table.num_active_nodes, 3)
        self.assertEqual(table.names, ["A", "B", "C"])
        np.testing.assert_array_equal(table.distances, self.D)
        for node in table:
            self.assertEqual(node.neighbors, [NO_NEIGHBOR] * 3)
            self.assertEqual(node.degree(), 0)
        self.assertIs(table.limits, DEFAULT_LIMITS)

    def test_add_node(self):
        node = self.table.add_node()
        self.assertEqual(node.id, 3)
        self.assertEqual(node.name, "#3")
        self.assertEqual(self.table.num_all_nodes, 4)
        self.assertEqual(self.table.distances.shape, (4, 4))
        np.testing.assert_array_equal(self.table.distances[3], np.zeros(4))
        self.assertFalse(self.table.is_leaf(3))
        self.assertTrue(self.table.is_leaf(2))

    def test_matrix_grows(self):
        table = TaxonTable(["A", "B"], [[0, 1], [1, 0]])
        for _ in range(3):
            table.add_node()
        self.assertEqual(table.distances.shape, (5, 5))
        np.testing.assert_array_equal(table.distances[:2, :2], [[0, 1], [1, 0]])

    def test_set_distance_is_symmetric(self):
        node = self.table.add_node()
        self.table.set_distance(node.id, 0, 2.5)
        self.assertEqual(self.table.distance(0, node.id), 2.5)
        self.assertEqual(self.table.distance(node.id, 0), 2.5)

    def test_capacity(self):
        table = TaxonTable(["A", "B"], [[0, 1], [1, 0]],
                           Limits(input_max=10, max_taxa=2, max_nodes=3))
        table.add_node()
        with self.assertRaises(NodeCapacityExceeded):
            table.add_node()
        self.assertEqual(table.num_all_nodes, 3)

    def test_index_of(self):
        self.assertEqual(self.table.index_of("C"), 2)
        with self.assertRaises(KeyError):
            self.table.index_of("Z")

    def test_shape_mismatch(self):
        with self.assertRaises(ValueError):
            TaxonTable(["A"], self.D)


class TestNode(unittest.TestCase):

    def test_linked_skips_empty_slots(self):
        node = Node(4, "#4")
        node.neighbors[1] = 0
        node.neighbors[2] = 2
        self.assertEqual(node.linked(), [0, 2])
        self.assertEqual(node.degree(), 2)


class TestLimits(unittest.TestCase):

    def test_defaults(self):
        self.assertEqual(DEFAULT_LIMITS.max_nodes, 2 * DEFAULT_LIMITS.max_taxa - 2)

    def test_rejects_inconsistent_limits(self):
        with self.assertRaises(ValueError):
            Limits(max_taxa=10, max_nodes=5)
        with self.assertRaises(ValueError):
            Limits(input_max=0)


if __name__ == "__main__":
    unittest.main()
