#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
test_binary_node.py
-------------------

Unit tests for the `BinaryNode` link primitives used by the AVL tree:
attach / detach, cached heights, balance factor and property updates.
"""

import unittest

from avl_tree import BinaryNode, InvalidArgument


class TestBinaryNode(unittest.TestCase):
    # ------------------------------------------------------------------
    #  Construction
    # ------------------------------------------------------------------
    def test_new_node_is_a_detached_leaf(self):
        node = BinaryNode(5, {"label": "five"})

        self.assertEqual(node.value, 5)
        self.assertEqual(node.properties, {"label": "five"})
        self.assertIsNone(node.parent)
        self.assertIsNone(node.left)
        self.assertIsNone(node.right)
        self.assertTrue(node.is_leaf())
        self.assertEqual(node.height, 1)
        self.assertEqual(node.balance(), 0)

    def test_properties_are_copied(self):
        props = {"a": 1}
        node = BinaryNode(1, props)
        node.properties["a"] = 2
        self.assertEqual(props, {"a": 1})

    def test_value_is_read_only(self):
        node = BinaryNode(1)
        with self.assertRaises(AttributeError):
            node.value = 2

    # ------------------------------------------------------------------
    #  Attach / detach
    # ------------------------------------------------------------------
    def test_attach_sets_parent_and_height(self):
        parent = BinaryNode(5)
        left = BinaryNode(3)
        right = BinaryNode(8)

        parent.attach_left(left)
        self.assertIs(parent.left, left)
        self.assertIs(left.parent, parent)
        self.assertEqual(parent.height, 2)
        self.assertEqual(parent.balance(), 1)
        self.assertFalse(parent.is_leaf())

        parent.attach_right(right)
        self.assertIs(parent.right, right)
        self.assertIs(right.parent, parent)
        self.assertEqual(parent.balance(), 0)

    def test_attach_none_clears_slot(self):
        parent = BinaryNode(5)
        parent.attach_right(BinaryNode(8))
        parent.attach_right(None)
        self.assertIsNone(parent.right)
        self.assertEqual(parent.height, 1)

    def test_detach_clears_both_links(self):
        parent = BinaryNode(5)
        left = BinaryNode(3)
        right = BinaryNode(8)
        parent.attach_left(left)
        parent.attach_right(right)

        self.assertIs(parent.detach_left(), left)
        self.assertIsNone(parent.left)
        self.assertIsNone(left.parent)
        self.assertEqual(parent.balance(), -1)

        self.assertIs(parent.detach_right(), right)
        self.assertIsNone(right.parent)
        self.assertTrue(parent.is_leaf())
        self.assertEqual(parent.height, 1)

    def test_detach_empty_slot_returns_none(self):
        node = BinaryNode(1)
        self.assertIsNone(node.detach_left())
        self.assertIsNone(node.detach_right())

    def test_balance_of_deeper_subtree(self):
        root = BinaryNode(10)
        child = BinaryNode(5)
        grandchild = BinaryNode(2)
        # Build bottom-up so every cached height is fresh.
        child.attach_left(grandchild)
        root.attach_left(child)

        self.assertEqual(child.height, 2)
        self.assertEqual(root.height, 3)
        self.assertEqual(root.balance(), 2)

    # ------------------------------------------------------------------
    #  Payload updates
    # ------------------------------------------------------------------
    def test_update_merges_properties(self):
        node = BinaryNode(1, {"a": 1, "b": 2})
        node.update({"b": 3, "c": 4})
        self.assertEqual(node.properties, {"a": 1, "b": 3, "c": 4})
        self.assertEqual(node.value, 1)

    def test_update_value_key_replaces_value(self):
        node = BinaryNode(1, {"a": 1})
        node.update({"value": 9, "b": 2})
        self.assertEqual(node.value, 9)
        self.assertEqual(node.properties, {"a": 1, "b": 2})
        self.assertNotIn("value", node.properties)

    def test_update_rejects_invalid_value(self):
        node = BinaryNode(1, {"a": 1})
        with self.assertRaises(InvalidArgument):
            node.update({"value": None, "a": 2})
        self.assertEqual(node.value, 1)
        self.assertEqual(node.properties, {"a": 1})

    def test_value_key_is_not_a_property(self):
        node = BinaryNode(3, {"value": 99, "a": 1})
        self.assertEqual(node.value, 3)
        self.assertEqual(node.properties, {"a": 1})

    def test_repr(self):
        self.assertEqual(repr(BinaryNode("x")), "<BinaryNode 'x' h=1>")


if __name__ == "__main__":
    unittest.main(verbosity=2)
