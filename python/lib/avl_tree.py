#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
avl_tree.py
-----------

A height-balanced (AVL) binary search tree whose nodes carry a comparable
*value* plus an arbitrary mapping of *properties*.  Nodes are handed out to
callers and stay usable as handles: lookups return nodes, and deletion takes
a node that was previously located with ``find``, ``find_range`` or a
traversal.

Features
~~~~~~~~
* `tree.insert(value, properties)`  – O(log n), duplicates allowed (routed right)
* `tree.merge(mapping)`, `AVLTree.from_array(mapping)` – bulk insertion
* `tree.find(value)`, `tree.has(value)`, `value in tree`
* `tree.find_range(start, end)` – nodes with start <= value <= end, ascending
* `tree.sort()`, iteration (`for node in tree:`) – nodes in ascending order
* `tree.min()`, `tree.max()`, `tree.successor(node)`, `tree.predecessor(node)`
* `tree.delete(node)` – leaf, one-child and two-child (value swap) removal
* `tree.validate()` – sanity-check that the BST / AVL invariants hold

Values must be numbers or strings, and every value stored in one tree must be
of the same kind.  Heights are cached on the nodes and refreshed whenever a
child link changes, so ``balance()`` is O(1).

Typical usage
~~~~~~~~~~~~~
>>> from avl_tree import AVLTree
>>> tree = AVLTree.from_array({5: {"name": "five"}, 3: {}, 8: {}, 1: {}})
>>> [node.value for node in tree.sort()]
[1, 3, 5, 8]
>>> tree.find(5).properties["name"]
'five'
>>> [node.value for node in tree.find_range(2, 6)]
[3, 5]
>>> tree.delete(tree.find(3))
>>> tree.size()
3
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import (
    Any,
    Dict,
    Generator,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

logger = logging.getLogger(__name__)

Value = Union[Real, str]
Properties = Dict[str, Any]


# ----------------------------------------------------------------------
#  Errors
# ----------------------------------------------------------------------
class InvalidArgument(ValueError):
    """A value of the wrong type was passed, or a range was inverted."""


class NotFound(KeyError):
    """The given node is not part of the tree."""


def _kind_of(value: Any) -> str:
    """Return ``"number"`` or ``"string"``; raise InvalidArgument otherwise."""
    if isinstance(value, str):
        return "string"
    if isinstance(value, Real) and not isinstance(value, bool):
        if isinstance(value, float) and math.isnan(value):
            raise InvalidArgument("Value must not be NaN.")
        return "number"
    raise InvalidArgument(
        f"Value must be a string or numeric type, {type(value).__name__} found."
    )


# ----------------------------------------------------------------------
#  Node
# ----------------------------------------------------------------------
class BinaryNode:
    """
    A tree vertex holding a value, its properties and links to its parent and
    children.

    The child links are the owning edges; ``parent`` is only a back-reference
    and is kept equal to the inverse of whichever child link points at this
    node.  ``height`` counts nodes on the longest downward path, so a leaf has
    height 1 and a missing child counts as 0.
    """

    __slots__ = ("_value", "properties", "_parent", "_left", "_right", "_height")

    def __init__(self, value: Value, properties: Optional[Mapping[str, Any]] = None) -> None:
        self._value = value
        # "value" is reserved for the ordering key.
        self.properties: Properties = {
            key: item for key, item in (properties or {}).items() if key != "value"
        }
        self._parent: Optional[BinaryNode] = None
        self._left: Optional[BinaryNode] = None
        self._right: Optional[BinaryNode] = None
        self._height = 1

    @property
    def value(self) -> Value:
        return self._value

    @property
    def parent(self) -> Optional[BinaryNode]:
        return self._parent

    @property
    def left(self) -> Optional[BinaryNode]:
        return self._left

    @property
    def right(self) -> Optional[BinaryNode]:
        return self._right

    @property
    def height(self) -> int:
        return self._height

    # ------------------------------------------------------------------
    #   Link maintenance
    # ------------------------------------------------------------------
    def set_parent(self, node: Optional[BinaryNode]) -> None:
        """Set the parent back-reference only; the parent's child links are untouched."""
        self._parent = node

    def attach_left(self, node: Optional[BinaryNode]) -> None:
        """
        Make *node* the left child and point its parent link here.  Whatever
        was in the left slot before is simply dropped from this node.
        """
        self._left = node
        if node is not None:
            node._parent = self
        self.refresh_height()

    def attach_right(self, node: Optional[BinaryNode]) -> None:
        """Mirror of ``attach_left``."""
        self._right = node
        if node is not None:
            node._parent = self
        self.refresh_height()

    def detach_left(self) -> Optional[BinaryNode]:
        """Unlink and return the left child, clearing its parent link."""
        child = self._left
        if child is not None:
            child._parent = None
        self._left = None
        self.refresh_height()
        return child

    def detach_right(self) -> Optional[BinaryNode]:
        """Unlink and return the right child, clearing its parent link."""
        child = self._right
        if child is not None:
            child._parent = None
        self._right = None
        self.refresh_height()
        return child

    def refresh_height(self) -> None:
        """Recompute the cached height from the children's cached heights."""
        left = self._left._height if self._left is not None else 0
        right = self._right._height if self._right is not None else 0
        self._height = 1 + max(left, right)

    # ------------------------------------------------------------------
    #   Queries / payload
    # ------------------------------------------------------------------
    def is_leaf(self) -> bool:
        return self._left is None and self._right is None

    def balance(self) -> int:
        """Height of the left subtree minus height of the right subtree."""
        left = self._left._height if self._left is not None else 0
        right = self._right._height if self._right is not None else 0
        return left - right

    def update(self, properties: Mapping[str, Any]) -> None:
        """
        Merge *properties* into this node's properties, overwriting existing
        keys.  A ``"value"`` key is not stored as a property: it replaces the
        node's value instead.  The tree uses this to move a successor's
        content into place.
        """
        properties = dict(properties)
        if "value" in properties:
            value = properties.pop("value")
            _kind_of(value)
            self._value = value
        self.properties.update(properties)

    def __repr__(self) -> str:
        return f"<BinaryNode {self._value!r} h={self._height}>"


# ----------------------------------------------------------------------
#  Tree
# ----------------------------------------------------------------------
class AVLTree:
    """
    An AVL tree of :class:`BinaryNode` objects ordered by ``node.value``.

    Parameters
    ----------
    items : mapping or iterable of (value, properties), optional
        Inserted one by one, in iteration order.
    check_membership : bool, default ``True``
        When true, ``delete``, ``successor`` and ``predecessor`` first verify
        that the node they are given is reachable from the root (O(h)) and
        raise :class:`NotFound` otherwise.  Turn it off only if callers
        guarantee membership themselves.
    """

    __slots__ = ("_root", "_size", "_kind", "_check_membership")

    def __init__(
        self,
        items: Optional[Union[Mapping[Value, Any], Iterable[Tuple[Value, Any]]]] = None,
        *,
        check_membership: bool = True,
    ) -> None:
        self._root: Optional[BinaryNode] = None
        self._size: int = 0
        self._kind: Optional[str] = None
        self._check_membership = check_membership

        if items is not None:
            self.merge(items)

    @classmethod
    def from_array(cls, values: Mapping[Value, Any], **kwargs: Any) -> "AVLTree":
        """Build a tree from an ordered mapping of value -> properties. O(n log n)"""
        return cls(values, **kwargs)

    # ------------------------------------------------------------------
    #   Basic container protocol
    # ------------------------------------------------------------------
    @property
    def root(self) -> Optional[BinaryNode]:
        return self._root

    def size(self) -> int:
        return self._size

    def count(self) -> int:
        """Alias of ``size()``."""
        return self._size

    def is_empty(self) -> bool:
        return self._root is None

    def height(self) -> int:
        return self._root.height if self._root is not None else 0

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._root is not None

    def __contains__(self, value: object) -> bool:
        return self.has(value)  # type: ignore[arg-type]

    def __iter__(self) -> Generator[BinaryNode, None, None]:
        """Yield nodes in ascending value order (iterative in-order traversal)."""
        stack: List[BinaryNode] = []
        current = self._root
        while stack or current is not None:
            while current is not None:
                stack.append(current)
                current = current.left
            current = stack.pop()
            yield current
            current = current.right

    def __repr__(self) -> str:
        values = ", ".join(repr(node.value) for node in self)
        return f"AVLTree([{values}])"

    # ------------------------------------------------------------------
    #   Validation helpers (internal)
    # ------------------------------------------------------------------
    def _check_value(self, value: Any) -> str:
        kind = _kind_of(value)
        if self._kind is not None and kind != self._kind:
            raise InvalidArgument(
                f"Tree holds {self._kind} values, cannot use {type(value).__name__} {value!r}."
            )
        return kind

    def _contains_node(self, node: BinaryNode) -> bool:
        top = node
        while top.parent is not None:
            top = top.parent
        return top is self._root and self._root is not None

    def _require_member(self, node: BinaryNode) -> None:
        if self._check_membership and not self._contains_node(node):
            raise NotFound(f"Node {node!r} is not part of this tree")

    # ------------------------------------------------------------------
    #   Insertion
    # ------------------------------------------------------------------
    def insert(self, value: Value, properties: Optional[Mapping[str, Any]] = None) -> BinaryNode:
        """
        Insert a new node and rebalance. O(log n)

        Equal values go to the right, so inserting a value twice creates two
        nodes; ``find`` returns whichever it meets first on the way down.
        """
        kind = self._check_value(value)
        node = BinaryNode(value, properties)

        if self._root is None:
            self._root = node
            self._kind = kind
        else:
            parent = self._root
            while True:
                if parent.value > value:
                    if parent.left is None:
                        parent.attach_left(node)
                        break
                    parent = parent.left
                else:
                    if parent.right is None:
                        parent.attach_right(node)
                        break
                    parent = parent.right

            self._rebalance(parent)

        self._size += 1
        return node

    def merge(
        self, values: Union[Mapping[Value, Any], Iterable[Tuple[Value, Any]]]
    ) -> "AVLTree":
        """
        Insert every ``value -> properties`` pair, in order.  Existing values
        are not overwritten; each pair becomes its own node.
        """
        pairs = values.items() if isinstance(values, Mapping) else values
        for value, properties in pairs:
            self.insert(value, properties)
        return self

    # ------------------------------------------------------------------
    #   Search
    # ------------------------------------------------------------------
    def find(self, value: Value) -> Optional[BinaryNode]:
        """Return the first node holding *value* on the search path, or ``None``. O(log n)"""
        self._check_value(value)
        current = self._root
        while current is not None:
            if current.value == value:
                return current
            elif current.value > value:
                current = current.left
            else:
                current = current.right
        return None

    def has(self, value: Value) -> bool:
        return self.find(value) is not None

    def find_range(self, start: Value, end: Value) -> List[BinaryNode]:
        """
        Return the nodes with ``start <= value <= end`` in ascending order.

        Subtrees that cannot hold a qualifying value are skipped: the walk
        only goes left of nodes above *start* and right of nodes below *end*.
        """
        if self._check_value(start) != self._check_value(end):
            raise InvalidArgument("Start and end values must be of the same kind.")
        if start > end:
            raise InvalidArgument("Start value must be less than or equal to end value.")

        path: List[BinaryNode] = []
        stack: List[BinaryNode] = []
        current = self._root
        while stack or current is not None:
            while current is not None:
                stack.append(current)
                current = current.left if current.value > start else None
            current = stack.pop()
            if start <= current.value <= end:
                path.append(current)
            current = current.right if current.value < end else None
        return path

    def sort(self) -> Optional[List[BinaryNode]]:
        """Return all nodes sorted by value, or ``None`` if the tree is empty. O(n)"""
        if self._root is None:
            return None
        return list(self)

    # ------------------------------------------------------------------
    #   Minimum / maximum / neighbours
    # ------------------------------------------------------------------
    @staticmethod
    def _leftmost(node: BinaryNode) -> BinaryNode:
        while node.left is not None:
            node = node.left
        return node

    @staticmethod
    def _rightmost(node: BinaryNode) -> BinaryNode:
        while node.right is not None:
            node = node.right
        return node

    def min(self) -> Optional[BinaryNode]:
        """Return the node with the smallest value, or ``None`` if empty. O(log n)"""
        if self._root is None:
            return None
        return self._leftmost(self._root)

    def max(self) -> Optional[BinaryNode]:
        """Return the node with the largest value, or ``None`` if empty. O(log n)"""
        if self._root is None:
            return None
        return self._rightmost(self._root)

    def successor(self, node: BinaryNode) -> Optional[BinaryNode]:
        """
        Return the in-order successor of *node*, or ``None`` if it is the max.

        Without a right subtree the successor is found by walking down from
        the root by value and remembering the last node where the walk turned
        left.  With duplicate values this can pick the wrong copy.
        """
        self._require_member(node)
        if node.right is not None:
            return self._leftmost(node.right)

        successor = None
        current = self._root
        while current is not None:
            if node.value < current.value:
                successor = current
                current = current.left
            elif node.value > current.value:
                current = current.right
            else:
                break
        return successor

    def predecessor(self, node: BinaryNode) -> Optional[BinaryNode]:
        """Mirror of ``successor``; ``None`` if *node* is the min."""
        self._require_member(node)
        if node.left is not None:
            return self._rightmost(node.left)

        predecessor = None
        current = self._root
        while current is not None:
            if node.value > current.value:
                predecessor = current
                current = current.right
            elif node.value < current.value:
                current = current.left
            else:
                break
        return predecessor

    # ------------------------------------------------------------------
    #   Deletion
    # ------------------------------------------------------------------
    def delete(self, node: BinaryNode) -> None:
        """
        Remove *node* from the tree and rebalance. O(log n)

        A node with two children is not unlinked: its successor is removed
        instead and the successor's value and properties are copied into
        *node*.  Handles held on that successor are stale afterwards, and
        *node* itself now reports the successor's value.
        """
        self._require_member(node)
        self._remove(node)
        self._size -= 1
        if self._root is None:
            self._kind = None

    def _remove(self, node: BinaryNode) -> None:
        if node.left is not None and node.right is not None:
            successor = self._leftmost(node.right)
            logger.debug("delete %r: two children, swapping in %r", node.value, successor.value)
            # The successor has no left child, so this recursion is one level deep.
            self._remove(successor)
            node.properties.clear()
            node.update({**successor.properties, "value": successor.value})
            return

        child = node.left if node.left is not None else node.right
        parent = node.parent
        logger.debug("delete %r: %s", node.value, "leaf" if child is None else "one child")

        if parent is None:
            self._root = child
            if child is not None:
                child.set_parent(None)
        elif parent.left is node:
            if child is None:
                parent.detach_left()
            else:
                parent.attach_left(child)
        else:
            if child is None:
                parent.detach_right()
            else:
                parent.attach_right(child)

        node.set_parent(None)
        node._left = node._right = None
        node.refresh_height()

        self._rebalance(parent)

    # ------------------------------------------------------------------
    #   Rebalancing / rotations
    # ------------------------------------------------------------------
    def _rebalance(self, node: Optional[BinaryNode]) -> None:
        """Walk from *node* up to the root, refreshing heights and rotating where needed. O(h)"""
        while node is not None:
            node.refresh_height()
            balance = node.balance()

            if balance > 1 and node.left.balance() >= 0:  # type: ignore[union-attr]
                self._rotate_right(node)
            elif balance < -1 and node.right.balance() <= 0:  # type: ignore[union-attr]
                self._rotate_left(node)
            elif balance > 1:
                self._rotate_left(node.left)  # type: ignore[arg-type]
                self._rotate_right(node)
            elif balance < -1:
                self._rotate_right(node.right)  # type: ignore[arg-type]
                self._rotate_left(node)

            node = node.parent

    def _replace_child(self, old: BinaryNode, new: BinaryNode, parent: Optional[BinaryNode]) -> None:
        """Hang *new* where *old* used to hang under *parent* (or at the root)."""
        if parent is None:
            self._root = new
            new.set_parent(None)
        elif parent.left is old:
            parent.attach_left(new)
        else:
            parent.attach_right(new)

    def _rotate_left(self, x: BinaryNode) -> None:
        """
        Left-rotate the subtree rooted at *x*. O(1)

              x                         y
             / \\     rotate left      / \\
           T1   y    ----------->     x   T3
               / \\                   / \\
             T2  T3                T1  T2
        """
        y = x.right
        if y is None:
            raise RuntimeError("rotate_left called on a node without a right child")
        logger.debug("rotate left at %r", x.value)
        parent = x.parent
        x.attach_right(y.left)
        y.attach_left(x)
        self._replace_child(x, y, parent)

    def _rotate_right(self, x: BinaryNode) -> None:
        """
        Right-rotate the subtree rooted at *x*. O(1)

                x                      y
               / \\   rotate right     / \\
              y   T3  ----------->  T1   x
             / \\                        / \\
           T1  T2                     T2  T3
        """
        y = x.left
        if y is None:
            raise RuntimeError("rotate_right called on a node without a left child")
        logger.debug("rotate right at %r", x.value)
        parent = x.parent
        x.attach_left(y.right)
        y.attach_right(x)
        self._replace_child(x, y, parent)

    # ------------------------------------------------------------------
    #   Validation/checking utilities – useful for debugging
    # ------------------------------------------------------------------
    def validate(self) -> None:
        """
        Verify the ordering, balance, cached heights, parent links and size.
        Raises ``AssertionError`` with a descriptive message if something is broken.
        """

        def dfs(node: BinaryNode) -> Tuple[int, int, Any, Any]:
            """Return ``(height, count, min_value, max_value)`` of the subtree."""
            height_l = height_r = 0
            count = 1
            low = high = node.value

            if node.left is not None:
                assert node.left.parent is node, f"Broken parent link under {node.value!r}"
                height_l, count_l, low, max_l = dfs(node.left)
                assert max_l <= node.value, f"BST order violated left of {node.value!r}"
                count += count_l
            if node.right is not None:
                assert node.right.parent is node, f"Broken parent link under {node.value!r}"
                height_r, count_r, min_r, high = dfs(node.right)
                assert node.value <= min_r, f"BST order violated right of {node.value!r}"
                count += count_r

            assert abs(height_l - height_r) <= 1, f"Node {node.value!r} is out of balance"
            height = 1 + max(height_l, height_r)
            assert node.height == height, f"Stale height on {node.value!r}"
            return height, count, low, high

        if self._root is None:
            assert self._size == 0, "Empty tree reports a non-zero size"
            return

        assert self._root.parent is None, "Root has a parent"
        _, count, _, _ = dfs(self._root)
        assert count == self._size, f"Size is {self._size} but {count} nodes are reachable"
